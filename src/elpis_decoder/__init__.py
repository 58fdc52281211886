"""ELPIS decoder - schema-driven decoding of length-framed telemetry sub-messages."""

__version__ = "0.1.0"

from elpis_decoder.codec.frame import FrameParser
from elpis_decoder.output.types import DecodedMessage, DecodedSignal, DecodeResult, ParserState
from elpis_decoder.schema.definitions import MessageDefinition, SignalDefinition
from elpis_decoder.schema.registry import SchemaRegistry

__all__ = [
    "FrameParser",
    "DecodedMessage",
    "DecodedSignal",
    "DecodeResult",
    "ParserState",
    "MessageDefinition",
    "SignalDefinition",
    "SchemaRegistry",
]
