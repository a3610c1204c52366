"""A timer that runs callbacks when their deadlines pass, kept in a min-heap."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timedelta

TIMER_FORMAT = "%Y-%m-%d %H:%M:%S"

log = logging.getLogger(__name__)


def _seconds(expire) -> float:
    if isinstance(expire, timedelta):
        return expire.total_seconds()
    return float(expire)


class TimerData:
    """One scheduled callback; returned by :meth:`Timer.add`."""

    __slots__ = ("key", "fn", "index", "_deadline", "_expire")

    def __init__(self, fn: Callable[[], object] | None, seconds: float, key: str = "") -> None:
        self.key = key
        self.fn = fn
        self.index = -1
        self._schedule(seconds)

    def _schedule(self, seconds: float) -> None:
        self._deadline = time.monotonic() + seconds
        self._expire = datetime.now() + timedelta(seconds=seconds)

    def delay(self) -> timedelta:
        """Time left until the deadline (negative once it has passed)."""
        return timedelta(seconds=self._deadline - time.monotonic())

    def expire_string(self) -> str:
        """The deadline as local wall-clock time."""
        return self._expire.strftime(TIMER_FORMAT)


class Timer:
    """Runs callbacks on a background thread when their deadlines pass.

    ``num`` is the expected number of timers.
    """

    def __init__(self, num: int) -> None:
        self._num = num
        self._timers: list[TimerData] = []
        self._cond = threading.Condition()
        self._closed = False
        self._thread = threading.Thread(target=self._run, name="imkit-timer", daemon=True)
        self._thread.start()

    def __len__(self) -> int:
        with self._cond:
            return len(self._timers)

    def __enter__(self) -> Timer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def add(self, expire, fn: Callable[[], object] | None) -> TimerData:
        """Schedule ``fn`` to run after ``expire`` (a timedelta or seconds)."""
        td = TimerData(fn, _seconds(expire))
        with self._cond:
            self._push(td)
        return td

    def delete(self, td: TimerData) -> None:
        """Cancel ``td``; harmless if it has already fired or been removed."""
        with self._cond:
            self._remove(td)
            td.fn = None
            self._cond.notify()

    def set(self, td: TimerData, expire) -> None:
        """Move ``td``'s deadline to ``expire`` from now, rescheduling it."""
        with self._cond:
            self._remove(td)
            td._schedule(_seconds(expire))
            self._push(td)

    def close(self) -> None:
        """Stop the background thread; pending callbacks are not run."""
        with self._cond:
            self._closed = True
            self._cond.notify()
        if threading.current_thread() is not self._thread:
            self._thread.join()

    def _push(self, td: TimerData) -> None:
        td.index = len(self._timers)
        self._timers.append(td)
        self._up(td.index)
        if td.index == 0:
            self._cond.notify()
        log.debug("timer: push item key: %s, expire: %s, index: %d", td.key, td.expire_string(), td.index)

    def _remove(self, td: TimerData) -> None:
        i = td.index
        last = len(self._timers) - 1
        if i < 0 or i > last or self._timers[i] is not td:
            log.debug("timer: item already removed, index %d, last %d", i, last)
            return
        if i != last:
            self._swap(i, last)
            self._down(i, last)
            self._up(i)
        self._timers.pop().index = -1
        log.debug("timer: remove item key: %s, expire: %s", td.key, td.expire_string())

    def _run(self) -> None:
        with self._cond:
            while not self._closed:
                if not self._timers:
                    self._cond.wait()
                    continue
                td = self._timers[0]
                wait = td._deadline - time.monotonic()
                if wait > 0:
                    self._cond.wait(wait)
                    continue
                fn = td.fn
                self._remove(td)
                self._cond.release()
                try:
                    if fn is None:
                        log.warning("expire timer no fn")
                    else:
                        fn()
                except Exception:
                    log.exception("timer callback for key %r failed", td.key)
                finally:
                    self._cond.acquire()

    def _less(self, i: int, j: int) -> bool:
        return self._timers[i]._deadline < self._timers[j]._deadline

    def _swap(self, i: int, j: int) -> None:
        timers = self._timers
        timers[i], timers[j] = timers[j], timers[i]
        timers[i].index = i
        timers[j].index = j

    def _up(self, j: int) -> None:
        while j > 0:
            i = (j - 1) // 2
            if not self._less(j, i):
                break
            self._swap(i, j)
            j = i

    def _down(self, i: int, n: int) -> None:
        while True:
            left = 2 * i + 1
            if left >= n:
                break
            j = left
            right = left + 1
            if right < n and not self._less(left, right):
                j = right
            if not self._less(j, i):
                break
            self._swap(i, j)
            i = j