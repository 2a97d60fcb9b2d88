"""Dummy payload generation, verification and big-endian timestamp fields."""

import struct

_U64 = struct.Struct(">Q")


def produce_data(size):
    """Return ``size`` bytes of dummy data whose byte sum is zero modulo 256.

    The bytes are 0, 1, 2, ... and the last one is the checksum.
    """
    if size < 1:
        raise ValueError("dummy data needs at least one byte for the checksum")
    body = bytes(i & 0xFF for i in range(size - 1))
    return body + bytes([(-sum(body)) & 0xFF])


def fill_data(buffer, offset, size):
    """Write ``size`` bytes of dummy data into ``buffer`` starting at ``offset``."""
    if offset < 0 or offset + size > len(buffer):
        raise ValueError(
            f"cannot write {size} bytes at offset {offset} into a buffer of {len(buffer)}"
        )
    buffer[offset:offset + size] = produce_data(size)


def consume_data(data):
    """Touch every byte of ``data`` and tell whether its checksum holds."""
    return sum(memoryview(data).cast("B")) & 0xFF == 0


def put_u64(buffer, offset, value):
    """Store ``value`` as a big-endian unsigned 64-bit integer at ``offset``."""
    if not 0 <= value < 1 << 64:
        raise ValueError(f"value {value} does not fit in 64 bits")
    if offset < 0 or offset + _U64.size > len(buffer):
        raise ValueError(f"no room for a 64-bit value at offset {offset}")
    _U64.pack_into(buffer, offset, value)


def get_u64(data, offset):
    """Read a big-endian unsigned 64-bit integer from ``data`` at ``offset``."""
    if offset < 0 or offset + _U64.size > len(data):
        raise ValueError(f"no 64-bit value at offset {offset}")
    return _U64.unpack_from(data, offset)[0]