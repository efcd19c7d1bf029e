"""Tests for the packed command word codec.

Validates the bit layout, the +1 field offset, range checking and the
handling of kinds outside the known set.
"""

from __future__ import annotations

import logging

import pytest

from stitch_engine.commands import (
    COLOUR_BOUNDARY_KINDS,
    FIELD_LAYOUT,
    CommandKind,
    CommandRangeError,
    PackedCommand,
    UnknownCommandError,
    command_kind,
    decode,
    encode,
)


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class TestLayout:
    def test_bare_kind_is_low_byte(self) -> None:
        assert encode(CommandKind.JUMP) == 0x01
        assert encode(CommandKind.COLOUR_BREAK) == 0xE2

    def test_thread_zero_is_distinct_from_absent(self) -> None:
        assert encode(CommandKind.STITCH, thread=0) == 0x0100
        assert encode(CommandKind.STITCH) == 0x0000

    def test_field_positions(self) -> None:
        word = encode(CommandKind.NEEDLE_SET, thread=1, needle=2, order=3)
        assert word == 0x04030209

    def test_max_fields(self) -> None:
        word = encode(CommandKind.STITCH, thread=254, needle=254, order=254)
        assert word == 0xFFFFFF00

    def test_field_masks_do_not_overlap(self) -> None:
        seen = 0
        for mask, _shift in FIELD_LAYOUT.values():
            assert seen & mask == 0
            seen |= mask
        assert seen == 0xFFFFFFFF

    def test_colour_boundaries(self) -> None:
        assert CommandKind.COLOUR_CHANGE in COLOUR_BOUNDARY_KINDS
        assert CommandKind.NEEDLE_SET in COLOUR_BOUNDARY_KINDS
        assert CommandKind.COLOUR_BREAK not in COLOUR_BOUNDARY_KINDS


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------


class TestRoundTrip:
    @pytest.mark.parametrize("kind", list(CommandKind))
    def test_kind_survives(self, kind: CommandKind) -> None:
        assert decode(encode(kind)).kind is kind

    @pytest.mark.parametrize(
        "thread, needle, order",
        [
            (None, None, None),
            (0, None, None),
            (None, 0, None),
            (None, None, 0),
            (254, 0, 17),
            (3, 254, None),
        ],
    )
    def test_fields_survive(self, thread, needle, order) -> None:
        packed = decode(encode(CommandKind.STITCH, thread, needle, order))
        assert packed == PackedCommand(CommandKind.STITCH, thread, needle, order)

    def test_packed_command_encode(self) -> None:
        packed = PackedCommand(CommandKind.NEEDLE_SET, needle=4)
        assert decode(packed.encode()) == packed

    def test_decode_uses_bitwise_and(self) -> None:
        # Every field non-zero: a logical AND would report the same
        # value (or nothing) for all of them.
        packed = decode(0x0A141E02)
        assert packed.kind is CommandKind.TRIM
        assert packed.thread == 0x1D
        assert packed.needle == 0x13
        assert packed.order == 0x09

    def test_command_kind_ignores_fields(self) -> None:
        assert command_kind(encode(CommandKind.TRIM, thread=9, order=1)) is CommandKind.TRIM


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestRanges:
    @pytest.mark.parametrize("field", ["thread", "needle", "order"])
    def test_field_255_rejected(self, field: str) -> None:
        with pytest.raises(CommandRangeError, match=field):
            encode(CommandKind.STITCH, **{field: 255})

    def test_negative_field_rejected(self) -> None:
        with pytest.raises(CommandRangeError):
            encode(CommandKind.STITCH, thread=-1)

    def test_kind_outside_low_byte_rejected(self) -> None:
        with pytest.raises(CommandRangeError, match="Command kind"):
            encode(0x100)

    def test_range_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            encode(CommandKind.STITCH, needle=300)

    def test_decode_rejects_non_u32(self) -> None:
        with pytest.raises(CommandRangeError):
            decode(1 << 32)
        with pytest.raises(CommandRangeError):
            decode(-1)


class TestUnknownKinds:
    def test_lenient_decode_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="stitch_engine.commands.codec"):
            packed = decode(0x0108)
        assert packed.kind == 0x08
        assert not packed.is_recognised
        assert packed.thread == 0
        assert "Unrecognised command kind" in caplog.text

    def test_strict_decode_raises(self) -> None:
        with pytest.raises(UnknownCommandError, match="0x08"):
            decode(0x08, strict=True)

    def test_known_kind_is_recognised(self) -> None:
        assert decode(encode(CommandKind.END)).is_recognised

    def test_unknown_kind_round_trips_as_int(self) -> None:
        assert decode(0x42).encode() == 0x42
