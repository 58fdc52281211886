"""Signal decoding: bit extraction plus schema-driven value conversion."""

from __future__ import annotations

import logging
import struct
from typing import Optional

from elpis_decoder.codec.bits import Buffer, MAX_SIGNAL_BITS, read_bits_intel, read_bits_motorola
from elpis_decoder.errors import BitReadError, ReadFailedError
from elpis_decoder.output.types import DecodedSignal, Diagnostic, SignalValue
from elpis_decoder.schema.definitions import MessageDefinition, SignalDefinition

logger = logging.getLogger(__name__)

_FLOAT_FORMATS = {32: ">f", 64: ">d"}


def signal_span(signal: SignalDefinition) -> tuple[int, int]:
    """Byte offset and byte length containing the signal, for highlighting."""
    return signal.effective_start // 8, (signal.length + 7) // 8


def read_raw(signal: SignalDefinition, payload: Buffer) -> int:
    """Extract the unsigned bit pattern of a signal from its payload."""
    reader = read_bits_motorola if signal.is_big_endian else read_bits_intel
    try:
        return reader(payload, signal.effective_start, signal.length)
    except BitReadError as e:
        raise ReadFailedError(signal.name, e) from e


def to_physical(
    signal: SignalDefinition,
    raw: int,
    diagnostics: Optional[list[Diagnostic]] = None,
) -> SignalValue:
    """Convert a raw bit pattern to its physical value.

    Applies float or two's complement reinterpretation, then
    ``value * scale + offset``, then clamps to whichever bounds the
    schema supplied.
    """
    value: SignalValue = raw

    if signal.is_float:
        fmt = _FLOAT_FORMATS.get(signal.length)
        if fmt is None:
            message = f"Signal {signal.name}: float of {signal.length} bits is not supported"
            logger.warning(message)
            if diagnostics is not None:
                diagnostics.append(Diagnostic("float_width", message, signal=signal.name))
        else:
            value = struct.unpack(fmt, raw.to_bytes(signal.length // 8, "big"))[0]
    elif signal.is_signed and raw >> (signal.length - 1):
        value = raw - (1 << signal.length)

    scale = 1 if signal.scale is None else signal.scale
    if scale != 1 or signal.offset != 0:
        value = value * scale + signal.offset

    if signal.has_limits:
        if signal.minimum is not None:
            value = max(value, signal.minimum)
        if signal.maximum is not None:
            value = min(value, signal.maximum)

    return value


def decode_signal(
    signal: SignalDefinition,
    payload: Buffer,
    diagnostics: Optional[list[Diagnostic]] = None,
) -> Optional[DecodedSignal]:
    """Decode one signal from a payload.

    Returns None when the signal is skipped: zero-length signals silently,
    signals wider than the working integer with a warning. Raises
    ReadFailedError when the field does not fit in the payload.
    """
    if signal.length == 0:
        return None

    if signal.length > MAX_SIGNAL_BITS:
        message = f"Signal {signal.name} is too large to fit in {MAX_SIGNAL_BITS + 1} bits"
        logger.warning(message)
        if diagnostics is not None:
            diagnostics.append(
                Diagnostic("too_wide", message, signal=signal.name, details={"length": signal.length})
            )
        return None

    byte_offset, byte_length = signal_span(signal)
    raw = read_raw(signal, payload)

    return DecodedSignal(
        name=signal.name,
        raw=raw,
        byte_offset=byte_offset,
        byte_length=byte_length,
        value=to_physical(signal, raw, diagnostics),
        label=signal.choice_label(raw),
        unit=signal.unit,
    )


def decode_signals(
    definition: MessageDefinition,
    payload: Buffer,
) -> tuple[tuple[DecodedSignal, ...], tuple[Diagnostic, ...]]:
    """Decode every signal of a message, in schema order.

    A signal that fails to read is reported as a diagnostic and skipped;
    the remaining signals are still decoded.
    """
    signals: list[DecodedSignal] = []
    diagnostics: list[Diagnostic] = []

    for signal in definition.signals:
        try:
            decoded = decode_signal(signal, payload, diagnostics)
        except ReadFailedError as e:
            logger.warning(f"{definition.name}: {e}")
            diagnostics.append(
                Diagnostic(
                    "read_failed",
                    str(e),
                    signal=e.signal_name,
                    details={
                        "cause": type(e.cause).__name__,
                        "start": signal.effective_start,
                        "length": signal.length,
                        "payload_length": len(payload),
                    },
                )
            )
            continue
        if decoded is not None:
            signals.append(decoded)

    return tuple(signals), tuple(diagnostics)
