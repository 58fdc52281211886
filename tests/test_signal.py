"""Tests for signal decoding and value conversion."""

import logging
import struct

import pytest

from elpis_decoder.codec.signal import decode_signal, decode_signals, signal_span, to_physical
from elpis_decoder.errors import OutOfRangeError, ReadFailedError, SeekFailedError
from elpis_decoder.schema.definitions import MessageDefinition, SignalDefinition


class TestDecodeSignal:
    """Tests for decode_signal."""

    def test_motorola_default_start(self) -> None:
        """Test that a Motorola signal without start reads from the first byte."""
        signal = SignalDefinition(name="Counter", length=8)

        decoded = decode_signal(signal, b"\xab\xcd")

        assert decoded is not None
        assert decoded.raw == 0xAB
        assert decoded.value == 0xAB

    def test_intel_default_start(self) -> None:
        signal = SignalDefinition(name="Nibble", length=4, is_big_endian=False)

        decoded = decode_signal(signal, b"\xab\xcd")

        assert decoded is not None
        assert decoded.raw == 0xB

    @pytest.mark.parametrize("start", [None, 0, 7, 500])
    def test_zero_length_skipped(self, start) -> None:
        """Test zero-length signals are skipped without error wherever they start."""
        diagnostics: list = []
        signal = SignalDefinition(name="Reserved", length=0, start=start)

        assert decode_signal(signal, b"", diagnostics) is None
        assert diagnostics == []

    @pytest.mark.parametrize("length", [128, 129, 512])
    def test_too_wide_skipped_with_warning(self, length: int, caplog: pytest.LogCaptureFixture) -> None:
        diagnostics: list = []
        signal = SignalDefinition(name="Blob", length=length)

        with caplog.at_level(logging.WARNING):
            assert decode_signal(signal, bytes(80), diagnostics) is None

        assert len(diagnostics) == 1
        assert diagnostics[0].kind == "too_wide"
        assert diagnostics[0].signal == "Blob"
        assert "Blob is too large" in caplog.text

    def test_widest_supported_signal(self) -> None:
        signal = SignalDefinition(name="Wide", length=127, is_big_endian=False)

        decoded = decode_signal(signal, bytes([0xFF] * 16))

        assert decoded is not None
        assert decoded.raw == (1 << 127) - 1
        assert decoded.byte_length == 16

    def test_byte_span(self) -> None:
        signal = SignalDefinition(name="Field", start=12, length=12, is_big_endian=False)

        decoded = decode_signal(signal, bytes.fromhex("12345678"))

        assert decoded is not None
        assert (decoded.byte_offset, decoded.byte_length) == (1, 2)
        assert signal_span(signal) == (1, 2)

    def test_span_of_defaulted_start(self) -> None:
        assert signal_span(SignalDefinition(name="a", length=9)) == (0, 2)

    def test_read_failure_raises(self) -> None:
        signal = SignalDefinition(name="Speed", start=0, length=16, is_big_endian=False)

        with pytest.raises(ReadFailedError) as excinfo:
            decode_signal(signal, b"\x01")

        assert excinfo.value.signal_name == "Speed"
        assert isinstance(excinfo.value.cause, OutOfRangeError)
        assert "Could not read signal Speed" in str(excinfo.value)

    def test_read_failure_on_empty_payload(self) -> None:
        signal = SignalDefinition(name="Flag", length=1)

        with pytest.raises(ReadFailedError) as excinfo:
            decode_signal(signal, b"")

        assert isinstance(excinfo.value.cause, SeekFailedError)

    def test_choice_label(self) -> None:
        signal = SignalDefinition(
            name="State", length=3, is_big_endian=False, choices={"OFF": 0, "READY": 2}
        )

        assert decode_signal(signal, b"\x02").label == "READY"
        assert decode_signal(signal, b"\x05").label is None

    def test_text_and_kv(self) -> None:
        signal = SignalDefinition(name="Counter", length=8)

        decoded = decode_signal(signal, b"\x2a")

        assert decoded.kv == "Counter=42"
        assert decoded.text == "Counter: 42 (0x2a)"

    def test_unit_carried(self) -> None:
        signal = SignalDefinition(name="Speed", length=8, unit="km/h")
        assert decode_signal(signal, b"\x10").unit == "km/h"


class TestToPhysical:
    """Tests for raw to physical conversion."""

    def test_unscaled_stays_int(self) -> None:
        value = to_physical(SignalDefinition(name="a", length=8), 200)

        assert value == 200
        assert isinstance(value, int)

    def test_scale_and_offset(self) -> None:
        signal = SignalDefinition(name="Temp", length=8, scale=0.5, offset=-40)
        assert to_physical(signal, 200) == 60.0

    def test_offset_only(self) -> None:
        signal = SignalDefinition(name="Temp", length=8, offset=-40)
        assert to_physical(signal, 90) == 50

    def test_signed(self) -> None:
        signal = SignalDefinition(name="Current", length=8, is_signed=True)

        assert to_physical(signal, 0xFF) == -1
        assert to_physical(signal, 0x80) == -128
        assert to_physical(signal, 0x7F) == 127

    def test_signed_with_scale(self) -> None:
        signal = SignalDefinition(name="Current", length=16, is_signed=True, scale=0.1)
        assert to_physical(signal, 0xFFF6) == pytest.approx(-1.0)

    def test_float32(self) -> None:
        signal = SignalDefinition(name="Accel", length=32, is_float=True)
        raw = int.from_bytes(struct.pack(">f", -2.25), "big")

        assert to_physical(signal, raw) == -2.25

    def test_float64(self) -> None:
        signal = SignalDefinition(name="Lat", length=64, is_float=True)
        raw = int.from_bytes(struct.pack(">d", 51.5), "big")

        assert to_physical(signal, raw) == 51.5

    def test_float_unsupported_width(self) -> None:
        diagnostics: list = []
        signal = SignalDefinition(name="Half", length=16, is_float=True)

        assert to_physical(signal, 0x3C00, diagnostics) == 0x3C00
        assert [d.kind for d in diagnostics] == ["float_width"]

    def test_clamp_to_maximum(self) -> None:
        signal = SignalDefinition(name="Speed", length=8, minimum=0, maximum=10)

        assert to_physical(signal, 50) == 10
        assert to_physical(signal, 5) == 5

    def test_clamp_to_minimum(self) -> None:
        signal = SignalDefinition(name="Temp", length=8, offset=-100, minimum=-40, maximum=125)
        assert to_physical(signal, 0) == -40

    def test_no_clamp_without_limits(self) -> None:
        signal = SignalDefinition(name="Current", length=8, is_signed=True)
        assert to_physical(signal, 0x80) == -128

    def test_maximum_only_keeps_negative_offset(self) -> None:
        """Test that an unset minimum does not clamp negative values to 0."""
        signal = SignalDefinition(name="Temp", start=7, length=8, offset=-40, maximum=215)

        assert to_physical(signal, 0) == -40
        assert to_physical(signal, 255) == 215

    def test_maximum_only_keeps_negative_signed(self) -> None:
        signal = SignalDefinition(name="Current", length=8, is_signed=True, maximum=100)

        assert to_physical(signal, 0xFF) == -1
        assert to_physical(signal, 0x7F) == 100

    def test_minimum_only(self) -> None:
        signal = SignalDefinition(name="Current", length=8, is_signed=True, minimum=-10)

        assert to_physical(signal, 0x80) == -10
        assert to_physical(signal, 0x7F) == 127

    def test_zero_range_is_unbounded(self) -> None:
        signal = SignalDefinition(name="Current", length=8, is_signed=True, minimum=0, maximum=0)
        assert to_physical(signal, 0xFF) == -1


class TestFloatDecode:
    """Tests for float signals read from payloads in both bit orders."""

    def test_intel_float(self) -> None:
        signal = SignalDefinition(name="X", start=0, length=32, is_big_endian=False, is_float=True)
        assert decode_signal(signal, struct.pack("<f", 1.5)).value == 1.5

    def test_motorola_float(self) -> None:
        signal = SignalDefinition(name="X", start=7, length=32, is_float=True)
        assert decode_signal(signal, struct.pack(">f", 1.5)).value == 1.5


class TestDecodeSignals:
    """Tests for decoding every signal of a message."""

    def test_all_signals(self, engine_message: MessageDefinition) -> None:
        payload = bytes([0x0F, 0xA0, 0x5A, 0x01])

        signals, diagnostics = decode_signals(engine_message, payload)

        assert [s.name for s in signals] == ["RPM", "Temp", "Gear"]
        assert signals[0].value == 1000.0
        assert signals[1].value == 50
        assert signals[2].label == "DRIVE"
        assert diagnostics == ()

    def test_failure_does_not_stop_siblings(self, caplog: pytest.LogCaptureFixture) -> None:
        message = MessageDefinition(
            name="Mixed",
            id=1,
            length=2,
            signals=(
                SignalDefinition(name="First", start=7, length=8),
                SignalDefinition(name="Overflow", start=8, length=16, is_big_endian=False),
                SignalDefinition(name="Reserved", length=0),
                SignalDefinition(name="Last", start=15, length=8),
            ),
        )

        with caplog.at_level(logging.WARNING):
            signals, diagnostics = decode_signals(message, b"\x11\x22")

        assert [s.name for s in signals] == ["First", "Last"]
        assert [s.raw for s in signals] == [0x11, 0x22]
        assert len(diagnostics) == 1
        assert diagnostics[0].kind == "read_failed"
        assert diagnostics[0].signal == "Overflow"
        assert diagnostics[0].details["cause"] == "OutOfRangeError"
        assert "Overflow" in caplog.text

    def test_empty_payload_reports_every_signal(self, engine_message: MessageDefinition) -> None:
        signals, diagnostics = decode_signals(engine_message, b"")

        assert signals == ()
        assert [d.signal for d in diagnostics] == ["RPM", "Temp", "Gear"]
        assert all(d.kind == "read_failed" for d in diagnostics)
