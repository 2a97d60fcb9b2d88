import pytest

from pktbench.payload import consume_data, fill_data, get_u64, produce_data, put_u64


@pytest.mark.parametrize("size", [1, 2, 14, 22, 255, 256, 1000])
def test_produced_data_verifies(size):
    data = produce_data(size)
    assert len(data) == size
    assert consume_data(data)


def test_single_byte_is_zero():
    assert produce_data(1) == b"\x00"


def test_data_body_is_counting_sequence():
    data = produce_data(50)
    assert data[:-1] == bytes(range(49))


def test_corrupted_data_fails():
    data = bytearray(produce_data(30))
    data[5] ^= 0x01
    assert not consume_data(data)


def test_empty_data_is_valid():
    assert consume_data(b"")


def test_produce_zero_size_rejected():
    with pytest.raises(ValueError):
        produce_data(0)


def test_fill_data_at_offset():
    buf = bytearray(40)
    fill_data(buf, 8, 20)
    assert buf[:8] == bytearray(8)
    assert buf[28:] == bytearray(12)
    assert buf[8:28] == produce_data(20)
    assert consume_data(memoryview(buf)[8:28])


def test_fill_data_out_of_range():
    with pytest.raises(ValueError):
        fill_data(bytearray(10), 5, 6)


def test_put_u64_is_big_endian():
    buf = bytearray(8)
    put_u64(buf, 0, 1)
    assert buf == b"\x00" * 7 + b"\x01"


@pytest.mark.parametrize("value", [0, 1, 0x0102030405060708, (1 << 64) - 1])
def test_u64_round_trip(value):
    buf = bytearray(20)
    put_u64(buf, 5, value)
    assert get_u64(buf, 5) == value
    assert buf[:5] == bytearray(5)


def test_put_u64_rejects_large_value():
    with pytest.raises(ValueError):
        put_u64(bytearray(8), 0, 1 << 64)


def test_put_u64_rejects_short_buffer():
    with pytest.raises(ValueError):
        put_u64(bytearray(10), 3, 7)


def test_get_u64_rejects_short_data():
    with pytest.raises(ValueError):
        get_u64(b"\x00" * 7, 0)