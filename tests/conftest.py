"""Shared fixtures for decoder tests."""

from __future__ import annotations

import os

import pytest
from hypothesis import settings

from elpis_decoder.schema.definitions import MessageDefinition, SignalDefinition
from elpis_decoder.schema.registry import SchemaRegistry

# Hypothesis profiles, selected with HYPOTHESIS_PROFILE
settings.register_profile("default", max_examples=200, deadline=None)
settings.register_profile("ci", max_examples=1000, deadline=None)
settings.register_profile("dev", max_examples=20, deadline=None)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


@pytest.fixture
def engine_message() -> MessageDefinition:
    return MessageDefinition(
        name="EngineStatus",
        id=0x100,
        length=4,
        signals=(
            SignalDefinition(name="RPM", start=7, length=16, scale=0.25, unit="rpm"),
            SignalDefinition(name="Temp", start=23, length=8, offset=-40, unit="degC"),
            SignalDefinition(
                name="Gear",
                start=24,
                length=3,
                is_big_endian=False,
                choices={"PARK": 0, "DRIVE": 1, "REVERSE": 2},
            ),
        ),
    )


@pytest.fixture
def door_message() -> MessageDefinition:
    return MessageDefinition(
        name="DoorState",
        id=0x200,
        length=1,
        signals=(SignalDefinition(name="DriverOpen", start=0, length=1, is_big_endian=False),),
    )


@pytest.fixture
def registry(engine_message: MessageDefinition, door_message: MessageDefinition) -> SchemaRegistry:
    return SchemaRegistry([engine_message, door_message])
