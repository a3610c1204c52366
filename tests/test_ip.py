import socket
from types import SimpleNamespace
from unittest import mock

from imkit.ip import internal_ip


def _addr(family, address):
    return SimpleNamespace(family=family, address=address, netmask=None, broadcast=None, ptp=None)


def _stat(isup):
    return SimpleNamespace(isup=isup, duplex=0, speed=0, mtu=1500)


def _run(addrs, stats):
    with mock.patch("psutil.net_if_addrs", return_value=addrs), mock.patch(
        "psutil.net_if_stats", return_value=stats
    ):
        return internal_ip()


def test_returns_first_usable_ipv4():
    addrs = {
        "lo": [_addr(socket.AF_INET, "127.0.0.1")],
        "eth0": [_addr(socket.AF_INET6, "fe80::1"), _addr(socket.AF_INET, "10.0.0.5")],
    }
    stats = {"lo": _stat(True), "eth0": _stat(True)}
    assert _run(addrs, stats) == "10.0.0.5"


def test_skips_down_interfaces():
    addrs = {
        "eth0": [_addr(socket.AF_INET, "10.0.0.5")],
        "eth1": [_addr(socket.AF_INET, "192.168.1.9")],
    }
    stats = {"eth0": _stat(False), "eth1": _stat(True)}
    assert _run(addrs, stats) == "192.168.1.9"


def test_skips_lo_prefixed_and_loopback_addresses():
    addrs = {
        "lo0": [_addr(socket.AF_INET, "10.1.1.1")],
        "eth9": [_addr(socket.AF_INET, "127.0.0.2")],
    }
    stats = {"lo0": _stat(True), "eth9": _stat(True)}
    assert _run(addrs, stats) == ""


def test_no_interfaces():
    assert _run({}, {}) == ""


def test_listing_error_gives_empty():
    with mock.patch("psutil.net_if_addrs", side_effect=OSError("boom")):
        assert internal_ip() == ""