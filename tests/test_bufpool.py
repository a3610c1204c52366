from imkit.bufpool import Buffer, Pool


def test_get_beyond_initial_capacity_grows():
    p = Pool(2, 10)
    buffers = [p.get() for _ in range(3)]
    for b in buffers:
        assert len(b.bytes()) == 10
    assert len({id(b) for b in buffers}) == 3


def test_put_then_get_returns_same_buffer():
    p = Pool(2, 10)
    b = p.get()
    p.put(b)
    assert p.get() is b


def test_buffers_do_not_share_storage():
    p = Pool(2, 4)
    a = p.get()
    b = p.get()
    a.bytes()[:] = b"abcd"
    assert bytes(b.bytes()) == b"\x00\x00\x00\x00"
    assert bytes(a.bytes()) == b"abcd"


def test_buffer_bytes_is_writable_in_place():
    b = Buffer(3)
    b.bytes()[1] = 7
    assert bytes(b.bytes()) == b"\x00\x07\x00"


def test_invalid_num_rejected():
    try:
        Pool(0, 10)
    except ValueError as exc:
        assert "at least one" in str(exc)
    else:
        raise AssertionError("expected ValueError")