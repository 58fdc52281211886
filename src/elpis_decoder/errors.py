"""Exception hierarchy for schema loading, framing and bit extraction."""

from __future__ import annotations

from typing import Optional


class ElpisError(Exception):
    """Base class for all decoder errors."""


# -----------------------------
# Schema
# -----------------------------
class SchemaError(ElpisError):
    """The schema could not be turned into a registry."""


class SchemaUnreadableError(SchemaError):
    """The schema source could not be opened or read."""


class SchemaMalformedError(SchemaError):
    """The schema source does not have the expected shape."""


# -----------------------------
# Framing
# -----------------------------
class FrameError(ElpisError):
    """Structural violation in the wire framing. Stops the current buffer."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (at byte {offset})")
        self.offset = offset


class InvalidIdError(FrameError):
    """Sub-message identifier is negative."""


class InvalidLengthError(FrameError):
    """Declared payload length is negative or larger than the bytes left."""


class TruncatedHeaderError(FrameError):
    """Fewer than a full header's worth of bytes remain."""


# -----------------------------
# Bit extraction
# -----------------------------
class BitReadError(ElpisError):
    """A bit field could not be read from the buffer."""


class OutOfRangeError(BitReadError):
    """The requested span runs past the end of the buffer."""


class SeekFailedError(BitReadError):
    """The starting bit position cannot be reached."""


class SignalDecodeError(ElpisError):
    """A single signal failed to decode. Sibling signals are unaffected."""


class ReadFailedError(SignalDecodeError):
    def __init__(self, signal_name: str, cause: Optional[BitReadError]) -> None:
        super().__init__(f"Could not read signal {signal_name}: {cause}")
        self.signal_name = signal_name
        self.cause = cause
