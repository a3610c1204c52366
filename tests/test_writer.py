import pytest

from imkit.writer import Writer


def test_writer_source_case():
    w = Writer(64)
    assert len(w) == 0
    assert w.size() == 64
    b = b"hello"
    w.write(b)
    assert w.buffer() == b
    w.peek(len(b))
    assert len(w) == 10
    w.reset()
    for _ in range(1024):
        w.write(b)
    assert len(w) == 5 * 1024
    assert w.buffer() == b * 1024
    w.reset()
    assert len(w) == 0
    assert w.buffer() == b""


def test_exact_fit_still_grows():
    w = Writer(4)
    w.write(b"abcd")
    assert w.size() == 12
    assert w.buffer() == b"abcd"


def test_peek_fills_in_place():
    w = Writer(16)
    w.write(b"ab")
    view = w.peek(2)
    view[:] = b"xy"
    assert w.buffer() == b"abxy"


def test_growth_keeps_existing_data():
    w = Writer(2)
    w.write(b"a")
    w.write(b"bcdefg")
    assert w.buffer() == b"abcdefg"
    assert w.size() >= 7


def test_negative_peek_rejected():
    w = Writer(8)
    with pytest.raises(ValueError):
        w.peek(-1)