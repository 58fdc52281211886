"""Message and signal definitions loaded from a schema."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union


class ByteOrder(Enum):
    """Bit numbering convention of a signal."""

    BIG_ENDIAN = "big"  # Motorola
    LITTLE_ENDIAN = "little"  # Intel


@dataclass(frozen=True)
class OpaqueMultiplexerIds:
    """Multiplexer ids in a shape the decoder does not interpret.

    Kept as given so a caller doing multiplex-aware filtering can still see it.
    """

    raw: Any


# A single selector value, a set of them, an uninterpreted value, or absent.
MultiplexerIds = Union[int, frozenset, OpaqueMultiplexerIds, None]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_multiplexer_ids(value: Any) -> MultiplexerIds:
    if value is None:
        return None
    if _is_int(value):
        return value
    if isinstance(value, (list, tuple)) and all(_is_int(v) for v in value):
        return frozenset(value)
    return OpaqueMultiplexerIds(value)


# -----------------------------
# Field readers for schema dicts
# -----------------------------
def _opt_int(d: Mapping[str, Any], key: str) -> Optional[int]:
    value = d.get(key)
    if value is None:
        return None
    if not _is_int(value):
        raise ValueError(f"'{key}' must be an integer, got {value!r}")
    return value


def _req_int(d: Mapping[str, Any], key: str) -> int:
    if key not in d:
        raise ValueError(f"missing required field '{key}'")
    value = _opt_int(d, key)
    if value is None:
        raise ValueError(f"'{key}' must be an integer, got null")
    return value


def _opt_float(d: Mapping[str, Any], key: str) -> Optional[float]:
    value = d.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number, got {value!r}")
    return value


def _opt_bool(d: Mapping[str, Any], key: str) -> Optional[bool]:
    value = d.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be a boolean, got {value!r}")
    return value


def _opt_str(d: Mapping[str, Any], key: str) -> Optional[str]:
    value = d.get(key)
    if value is None:
        return None
    # Numeric spn/default values are common in exported schemas
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"'{key}' must be a string, got {value!r}")


def _req_str(d: Mapping[str, Any], key: str) -> str:
    value = d.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{key}' must be a non-empty string, got {value!r}")
    return value


def _opt_choices(d: Mapping[str, Any]) -> Optional[Dict[str, int]]:
    value = d.get("choices")
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError(f"'choices' must be an object, got {type(value).__name__}")
    for label, raw in value.items():
        if not _is_int(raw):
            raise ValueError(f"choice {label!r} must map to an integer, got {raw!r}")
    return dict(value)


@dataclass(frozen=True)
class SignalDefinition:
    """One named bit field within a message payload.

    ``start`` may be omitted, in which case it defaults to the first bit of
    the first byte in the signal's own numbering: bit 7 for Motorola and bit 0
    for Intel. A ``length`` of zero declares a signal that carries no data.
    """

    name: str
    length: int
    start: Optional[int] = None
    is_big_endian: bool = True
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    offset: float = 0
    scale: Optional[float] = None
    is_signed: Optional[bool] = None
    is_float: Optional[bool] = None
    choices: Optional[Mapping[str, int]] = None
    is_multiplexer: Optional[bool] = None
    multiplexer_signal: Optional[str] = None
    multiplexer_ids: MultiplexerIds = None
    spn: Optional[str] = None
    unit: Optional[str] = None
    comment: Optional[str] = None
    default: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("signal name must be a non-empty string")
        if self.length < 0:
            raise ValueError(f"signal {self.name}: length must be >= 0, got {self.length}")
        if self.start is not None and self.start < 0:
            raise ValueError(f"signal {self.name}: start must be >= 0, got {self.start}")
        if self.choices is not None:
            object.__setattr__(self, "choices", MappingProxyType(dict(self.choices)))

    @property
    def byte_order(self) -> ByteOrder:
        return ByteOrder.BIG_ENDIAN if self.is_big_endian else ByteOrder.LITTLE_ENDIAN

    @property
    def effective_start(self) -> int:
        """Start bit, falling back to the start of the first byte."""
        if self.start is not None:
            return self.start
        return 7 if self.is_big_endian else 0

    @property
    def lower_bound(self) -> float:
        return 0 if self.minimum is None else self.minimum

    @property
    def upper_bound(self) -> float:
        return sys.float_info.max if self.maximum is None else self.maximum

    @property
    def has_limits(self) -> bool:
        """True when the schema set at least one usable clamping bound.

        Only the bounds actually supplied are applied. When both are given
        they must form a non-empty range; min == max == 0 means unbounded.
        """
        if self.minimum is None and self.maximum is None:
            return False
        if self.minimum is not None and self.maximum is not None:
            return self.minimum < self.maximum
        return True

    def choice_label(self, value: int) -> Optional[str]:
        """Return the enumeration label for a raw value, if any."""
        if not self.choices:
            return None
        for label, raw in self.choices.items():
            if raw == value:
                return label
        return None

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "SignalDefinition":
        if not isinstance(d, dict):
            raise ValueError(f"signal must be an object, got {type(d).__name__}")
        is_big_endian = _opt_bool(d, "is_big_endian")
        offset = _opt_float(d, "offset")
        return SignalDefinition(
            name=_req_str(d, "name"),
            length=_req_int(d, "length"),
            start=_opt_int(d, "start"),
            is_big_endian=True if is_big_endian is None else is_big_endian,
            minimum=_opt_float(d, "minimum"),
            maximum=_opt_float(d, "maximum"),
            offset=0 if offset is None else offset,
            scale=_opt_float(d, "scale"),
            is_signed=_opt_bool(d, "is_signed"),
            is_float=_opt_bool(d, "is_float"),
            choices=_opt_choices(d),
            is_multiplexer=_opt_bool(d, "is_multiplexer"),
            multiplexer_signal=_opt_str(d, "multiplexer_signal"),
            multiplexer_ids=parse_multiplexer_ids(d.get("multiplexer_ids")),
            spn=_opt_str(d, "spn"),
            unit=_opt_str(d, "unit"),
            comment=_opt_str(d, "comment"),
            default=_opt_str(d, "default"),
        )


@dataclass(frozen=True)
class MessageDefinition:
    """Schema entry for one sub-message identifier.

    ``length`` is the declared payload size in bytes. The wire header's own
    length field is what the frame parser trusts.
    """

    name: str
    id: int
    length: int
    signals: tuple[SignalDefinition, ...] = field(default_factory=tuple)
    comment: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("message name must be a non-empty string")
        if self.id < 0:
            raise ValueError(f"message {self.name}: id must be >= 0, got {self.id}")
        object.__setattr__(self, "signals", tuple(self.signals))

        seen: set[str] = set()
        for signal in self.signals:
            if signal.name in seen:
                raise ValueError(f"message {self.name}: duplicate signal name {signal.name!r}")
            seen.add(signal.name)

    def get_signal(self, name: str) -> Optional[SignalDefinition]:
        """Get a signal by name."""
        for signal in self.signals:
            if signal.name == name:
                return signal
        return None

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "MessageDefinition":
        if not isinstance(d, dict):
            raise ValueError(f"message must be an object, got {type(d).__name__}")
        name = _req_str(d, "name")
        raw_signals = d.get("signals")
        if not isinstance(raw_signals, list):
            raise ValueError(f"message {name}: 'signals' must be an array")

        signals = []
        for idx, raw in enumerate(raw_signals):
            try:
                signals.append(SignalDefinition.from_dict(raw))
            except ValueError as e:
                raise ValueError(f"message {name}, signal #{idx}: {e}") from e

        try:
            message_id = _req_int(d, "id")
            length = _req_int(d, "length")
            comment = _opt_str(d, "comment")
        except ValueError as e:
            raise ValueError(f"message {name}: {e}") from e

        return MessageDefinition(
            name=name,
            id=message_id,
            length=length,
            signals=tuple(signals),
            comment=comment,
        )
