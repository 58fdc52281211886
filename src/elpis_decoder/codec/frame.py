"""Frame parser for length-framed sub-messages.

Wire layout, repeated until the buffer is exhausted (all big-endian)::

    int32  message_id        must be >= 0
    int32  payload_length    must be >= 0 and <= bytes remaining
    bytes  payload[payload_length]

A structural fault in a header stops the whole buffer: without a trustworthy
length there is no way to find the next sub-message boundary.
"""

from __future__ import annotations

import logging
import struct
from typing import Iterable, Iterator

from elpis_decoder.codec.bits import Buffer
from elpis_decoder.codec.signal import decode_signals
from elpis_decoder.errors import (
    FrameError,
    InvalidIdError,
    InvalidLengthError,
    TruncatedHeaderError,
)
from elpis_decoder.output.types import (
    HEADER_SIZE,
    UNKNOWN_MESSAGE_NAME,
    DecodedMessage,
    DecodeResult,
    Diagnostic,
    ParserState,
)
from elpis_decoder.schema.registry import SchemaRegistry

logger = logging.getLogger(__name__)

_HEADER = struct.Struct(">ii")


class FrameParser:
    """Splits a transport payload into sub-messages and decodes their signals.

    The parser holds no per-buffer state, so one instance can decode any
    number of buffers, from any number of threads, against a shared registry.
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def iter_messages(self, data: Buffer) -> Iterator[DecodedMessage]:
        """Yield sub-messages in order.

        Raises FrameError at the first structural violation, after every
        earlier sub-message has been yielded.
        """
        total = len(data)
        cursor = 0

        while cursor < total:
            remaining = total - cursor
            if remaining < HEADER_SIZE:
                raise TruncatedHeaderError(
                    f"Only {remaining} bytes left for a {HEADER_SIZE}-byte header", cursor
                )

            message_id, payload_length = _HEADER.unpack_from(data, cursor)
            if message_id < 0:
                raise InvalidIdError(f"Invalid packet ID {message_id}", cursor)

            available = remaining - HEADER_SIZE
            if payload_length < 0 or payload_length > available:
                raise InvalidLengthError(
                    f"Invalid payload length {payload_length} ({available} bytes remain)", cursor
                )

            start = cursor + HEADER_SIZE
            payload = bytes(data[start : start + payload_length])
            yield self._decode_message(message_id, cursor, payload)

            cursor = start + payload_length

    def decode(self, data: Buffer) -> DecodeResult:
        """Decode one buffer.

        Framing errors are returned on the result rather than raised; all
        sub-messages decoded before the fault are kept.
        """
        messages: list[DecodedMessage] = []
        try:
            for message in self.iter_messages(data):
                messages.append(message)
        except FrameError as e:
            logger.warning(f"Stopped decoding buffer after {len(messages)} sub-messages: {e}")
            return DecodeResult(tuple(messages), ParserState.FAILED, e)

        return DecodeResult(tuple(messages), ParserState.DONE)

    def decode_batch(self, buffers: Iterable[Buffer]) -> list[DecodeResult]:
        """Decode several independent buffers."""
        return [self.decode(data) for data in buffers]

    def _decode_message(self, message_id: int, offset: int, payload: bytes) -> DecodedMessage:
        definition = self._registry.lookup(message_id)

        if definition is None:
            logger.debug(f"No definition for message id {message_id:#x} at byte {offset}")
            return DecodedMessage(
                message_id=message_id,
                name=UNKNOWN_MESSAGE_NAME,
                offset=offset,
                payload=payload,
                is_known=False,
            )

        signals, diagnostics = decode_signals(definition, payload)

        if definition.length != len(payload):
            diagnostics += (
                Diagnostic(
                    "length_mismatch",
                    f"{definition.name}: schema declares {definition.length} bytes, "
                    f"header carries {len(payload)}",
                    severity="INFO",
                    details={"declared": definition.length, "wire": len(payload)},
                ),
            )

        return DecodedMessage(
            message_id=message_id,
            name=definition.name,
            offset=offset,
            payload=payload,
            is_known=True,
            signals=signals,
            diagnostics=diagnostics,
        )
