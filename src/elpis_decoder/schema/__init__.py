"""Schema definitions and registry."""

from elpis_decoder.schema.definitions import (
    ByteOrder,
    MessageDefinition,
    OpaqueMultiplexerIds,
    SignalDefinition,
)
from elpis_decoder.schema.registry import SchemaRegistry

__all__ = [
    "ByteOrder",
    "MessageDefinition",
    "OpaqueMultiplexerIds",
    "SignalDefinition",
    "SchemaRegistry",
]
