"""Decoded output surface handed to host collaborators."""

from elpis_decoder.output.jsonl import JsonlWriter
from elpis_decoder.output.types import (
    DecodedMessage,
    DecodedSignal,
    DecodeResult,
    Diagnostic,
    ParserState,
)

__all__ = [
    "JsonlWriter",
    "DecodedMessage",
    "DecodedSignal",
    "DecodeResult",
    "Diagnostic",
    "ParserState",
]
