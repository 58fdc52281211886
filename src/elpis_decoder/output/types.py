from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Literal, Optional, Union

from elpis_decoder.errors import FrameError


# -----------------------------
# Constants
# -----------------------------
HEADER_SIZE = 8                 # int32 id + int32 payload length
UNKNOWN_MESSAGE_NAME = "unknown"

SignalValue = Union[int, float]
Severity = Literal["INFO", "WARN", "ERROR"]


class ParserState(Enum):
    # Terminal states of one decode; scanning is the parser loop itself
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Diagnostic:

    # Recoverable problem found while decoding. Never stops the buffer.
    # kind: read_failed | too_wide | float_width | length_mismatch | frame_error

    kind: str
    message: str
    severity: Severity = "WARN"
    signal: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "severity": self.severity,
            "signal": self.signal,
            "details": self.details,
        }


@dataclass(frozen=True, slots=True)
class DecodedSignal:

    # One extracted signal.
    #  - "raw" is the unsigned bit pattern as read from the payload
    #  - "value" is the schema-converted value (sign/float, scale, offset, clamp)
    #  - byte_offset/byte_length is a containing span for highlighting, not
    #    necessarily the exact bytes touched

    name: str
    raw: int
    byte_offset: int
    byte_length: int
    value: SignalValue
    label: Optional[str] = None
    unit: Optional[str] = None

    @property
    def kv(self) -> str:
        """Filterable ``name=raw`` text."""
        return f"{self.name}={self.raw}"

    @property
    def text(self) -> str:
        return f"{self.name}: {self.raw} ({self.raw:#x})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "raw": self.raw,
            "value": self.value,
            "label": self.label,
            "unit": self.unit,
            "byte_offset": self.byte_offset,
            "byte_length": self.byte_length,
        }


@dataclass(frozen=True, slots=True)
class DecodedMessage:

    # One sub-message as located by the frame parser.
    # "offset" is the position of its header within the buffer.

    message_id: int
    name: str
    offset: int
    payload: bytes
    is_known: bool
    signals: tuple[DecodedSignal, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def payload_offset(self) -> int:
        return self.offset + HEADER_SIZE

    @property
    def payload_length(self) -> int:
        return len(self.payload)

    @property
    def frame_length(self) -> int:
        return HEADER_SIZE + len(self.payload)

    def get(self, signal_name: str) -> Optional[DecodedSignal]:
        """Get a decoded signal by name."""
        for signal in self.signals:
            if signal.name == signal_name:
                return signal
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_id": self.message_id,
            "name": self.name,
            "is_known": self.is_known,
            "offset": self.offset,
            "payload_offset": self.payload_offset,
            "payload_length": self.payload_length,
            "payload_hex": self.payload.hex(),
            "signals": [s.to_dict() for s in self.signals],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def __repr__(self) -> str:
        sig_str = ", ".join(s.kv for s in self.signals)
        return f"{self.name}[{self.message_id:#x}]@{self.offset}: {sig_str}"


@dataclass(frozen=True, slots=True)
class DecodeResult:

    # Everything decoded from one buffer. On a framing failure "messages"
    # still holds every sub-message decoded before the fault.

    messages: tuple[DecodedMessage, ...]
    state: ParserState
    error: Optional[FrameError] = None

    @property
    def ok(self) -> bool:
        return self.state is ParserState.DONE

    @property
    def summary(self) -> str:
        """Distinct message names in the buffer, sorted descending."""
        names = {m.name for m in self.messages if m.is_known}
        return " / ".join(sorted(names, reverse=True))

    def diagnostics(self) -> Iterator[Diagnostic]:
        for message in self.messages:
            yield from message.diagnostics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "error": str(self.error) if self.error is not None else None,
            "summary": self.summary,
            "messages": [m.to_dict() for m in self.messages],
        }
