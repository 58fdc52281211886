"""Bit field extraction from byte buffers.

Two bit-numbering conventions are supported:

- Motorola (big-endian): within each byte bit 7 comes first in stream order
  and numbering descends to bit 0 before moving on to the next byte. A start
  bit is converted to a position in a physical MSB-first stream and the field
  is read forward from there.
- Intel (little-endian): the buffer is a flat LSB-first stream and the start
  bit is used as the stream position directly.

Both variants check the requested span against the buffer before touching it,
so a caller never receives a partially read value.
"""

from __future__ import annotations

from typing import Union

from elpis_decoder.errors import OutOfRangeError, SeekFailedError

Buffer = Union[bytes, bytearray, memoryview]

# Widest field the decoder represents. Wider signals are skipped upstream.
MAX_SIGNAL_BITS = 127


def _check_span(data: Buffer, position: int, length: int, start: int) -> None:
    total_bits = len(data) * 8
    if position < 0 or position > total_bits:
        raise SeekFailedError(f"Could not seek to position {start}")
    if length < 0 or position + length > total_bits:
        raise OutOfRangeError(
            f"Cannot read {length} bits from position {start} "
            f"({total_bits} bits available)"
        )


def _mask(length: int) -> int:
    return (1 << length) - 1


def read_msb_first(data: Buffer, position: int, length: int) -> int:
    """Read ``length`` bits from stream ``position``, MSB of each byte first.

    The first bit read becomes the most significant bit of the result.
    """
    _check_span(data, position, length, position)
    if length == 0:
        return 0

    first = position // 8
    last = (position + length - 1) // 8
    chunk = int.from_bytes(data[first : last + 1], byteorder="big")
    trailing = (last + 1) * 8 - (position + length)
    return (chunk >> trailing) & _mask(length)


def read_lsb_first(data: Buffer, position: int, length: int) -> int:
    """Read ``length`` bits from stream ``position``, LSB of each byte first.

    The first bit read becomes the least significant bit of the result.
    """
    _check_span(data, position, length, position)
    if length == 0:
        return 0

    first = position // 8
    last = (position + length - 1) // 8
    chunk = int.from_bytes(data[first : last + 1], byteorder="little")
    return (chunk >> (position - first * 8)) & _mask(length)


def motorola_stream_position(start: int) -> int:
    """Convert a Motorola start bit to its position in an MSB-first stream."""
    byte_index, bit_in_byte = divmod(start, 8)
    return byte_index * 8 + (7 - bit_in_byte)


def read_bits_motorola(data: Buffer, start: int, length: int) -> int:
    """Read a big-endian (Motorola) bit field."""
    if start < 0:
        raise SeekFailedError(f"Could not seek to position {start}")
    position = motorola_stream_position(start)
    _check_span(data, position, length, start)
    return read_msb_first(data, position, length)


def read_bits_intel(data: Buffer, start: int, length: int) -> int:
    """Read a little-endian (Intel) bit field."""
    _check_span(data, start, length, start)
    return read_lsb_first(data, start, length)
