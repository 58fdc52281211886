"""Bit reader, signal decoder and frame parser."""

from elpis_decoder.codec.bits import read_bits_intel, read_bits_motorola
from elpis_decoder.codec.frame import FrameParser
from elpis_decoder.codec.signal import decode_signal, decode_signals

__all__ = [
    "read_bits_intel",
    "read_bits_motorola",
    "FrameParser",
    "decode_signal",
    "decode_signals",
]
