"""Read-only registry of message definitions keyed by identifier."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Optional, TextIO, Union

from elpis_decoder.errors import SchemaMalformedError, SchemaUnreadableError
from elpis_decoder.schema.definitions import MessageDefinition

logger = logging.getLogger(__name__)

SchemaSource = Union[str, Path, TextIO]


class SchemaRegistry:
    """Maps sub-message identifiers to their definitions.

    Built once and never mutated afterwards, so a single instance can be
    shared by any number of concurrent decodes without locking. When the
    source declares the same id twice the later definition wins.
    """

    def __init__(self, messages: Iterable[MessageDefinition] = ()) -> None:
        by_id: dict[int, MessageDefinition] = {}
        for message in messages:
            if message.id in by_id:
                logger.debug(
                    f"Duplicate message id {message.id:#x}: "
                    f"{message.name!r} replaces {by_id[message.id].name!r}"
                )
            by_id[message.id] = message
        self._messages = MappingProxyType(by_id)

    @classmethod
    def load(cls, source: SchemaSource) -> "SchemaRegistry":
        """Load a registry from a JSON schema file path or open text stream."""
        label = getattr(source, "name", None) or str(source)
        try:
            if isinstance(source, (str, Path)):
                text = Path(source).read_text(encoding="utf-8")
            else:
                text = source.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Could not open schema {label}: {e}")
            raise SchemaUnreadableError(f"Could not open file {label}") from e

        registry = cls.from_json(text, label=label)
        logger.info(f"Loaded {registry.count()} message definitions from {label}")
        return registry

    @classmethod
    def from_json(cls, text: str, label: str = "<string>") -> "SchemaRegistry":
        try:
            document = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            logger.error(f"Could not parse schema {label}: {e}")
            raise SchemaMalformedError(f"Could not parse JSON file {label}: {e}") from e
        return cls.from_list(document, label=label)

    @classmethod
    def from_list(cls, document: Any, label: str = "<data>") -> "SchemaRegistry":
        """Build a registry from an already parsed array of message objects."""
        if not isinstance(document, list):
            logger.error(f"Schema {label} is not an array of message definitions")
            raise SchemaMalformedError(
                f"{label}: expected an array of message definitions, "
                f"got {type(document).__name__}"
            )

        messages = []
        for idx, entry in enumerate(document):
            try:
                messages.append(MessageDefinition.from_dict(entry))
            except ValueError as e:
                logger.error(f"Invalid message #{idx} in {label}: {e}")
                raise SchemaMalformedError(f"{label}: message #{idx}: {e}") from e
        return cls(messages)

    def lookup(self, message_id: int) -> Optional[MessageDefinition]:
        """Find a message definition by id. Unknown ids return None."""
        return self._messages.get(message_id)

    def count(self) -> int:
        """Number of distinct message ids."""
        return len(self._messages)

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(self._messages)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._messages

    def __iter__(self) -> Iterator[MessageDefinition]:
        for message_id in sorted(self._messages):
            yield self._messages[message_id]
