"""Tests for the read-only segmentation views of a Pattern."""

from __future__ import annotations

from stitch_engine.commands import CommandKind, encode
from stitch_engine.pattern import DecodedStitch, Pattern, Thread


def build(*events) -> Pattern:
    """Pattern from ``(kind, x, y)`` triples."""
    p = Pattern()
    for kind, x, y in events:
        p.add_stitch_absolute(kind, (x, y))
    return p


S = CommandKind.STITCH
J = CommandKind.JUMP
T = CommandKind.TRIM
CC = CommandKind.COLOUR_CHANGE
CB = CommandKind.COLOUR_BREAK


# ---------------------------------------------------------------------------
# Stitch blocks
# ---------------------------------------------------------------------------


class TestStitchBlocks:
    def test_colour_change_with_no_threads(self) -> None:
        p = build((S, 0, 0), (CC, 0, 0), (S, 5, 5), (S, 10, 10))
        blocks = p.as_stitch_blocks()
        assert len(blocks) == 2
        assert [(s.x, s.y) for s in blocks[0].stitches] == [(0, 0)]
        assert [(s.x, s.y) for s in blocks[1].stitches] == [(5, 5), (10, 10)]
        assert blocks[0].thread.is_filler
        assert blocks[1].thread.is_filler
        assert blocks[0].thread != blocks[1].thread

        p.fix_colour_count()
        assert len(p.threads) == 2

    def test_threads_follow_colour_changes(self) -> None:
        red, blue = Thread("Red"), Thread("Blue")
        p = build((S, 0, 0), (CC, 0, 0), (S, 1, 1))
        p.add_thread(red)
        p.add_thread(blue)
        assert [b.thread for b in p.as_stitch_blocks()] == [red, blue]

    def test_other_commands_split_without_advancing(self) -> None:
        red = Thread("Red")
        p = build((S, 0, 0), (J, 5, 5), (T, 5, 5), (S, 6, 6), (S, 7, 7))
        p.add_thread(red)
        blocks = p.as_stitch_blocks()
        assert [len(b.stitches) for b in blocks] == [1, 2]
        assert all(b.thread is red for b in blocks)

    def test_filler_shared_within_segment(self) -> None:
        p = build((S, 0, 0), (J, 5, 5), (S, 6, 6))
        blocks = p.as_stitch_blocks()
        assert blocks[0].thread is blocks[1].thread

    def test_trailing_block_flushed(self) -> None:
        p = build((J, 0, 0), (S, 1, 1), (S, 2, 2))
        blocks = p.as_stitch_blocks()
        assert len(blocks) == 1
        assert len(blocks[0].stitches) == 2

    def test_leading_colour_break_does_not_advance(self) -> None:
        red, blue = Thread("Red"), Thread("Blue")
        p = build((CB, 0, 0), (S, 1, 1), (CB, 1, 1), (S, 2, 2))
        p.add_thread(red)
        p.add_thread(blue)
        assert [b.thread for b in p.as_stitch_blocks()] == [red, blue]

    def test_empty(self) -> None:
        assert Pattern().as_stitch_blocks() == []

    def test_blocks_reference_pattern_stitches(self) -> None:
        p = build((S, 0, 0))
        assert p.as_stitch_blocks()[0].stitches[0] is p.stitches[0]


# ---------------------------------------------------------------------------
# Command blocks
# ---------------------------------------------------------------------------


class TestCommandBlocks:
    def test_runs(self) -> None:
        p = build((S, 0, 0), (S, 1, 1), (J, 2, 2), (J, 3, 3), (J, 4, 4), (S, 5, 5))
        blocks = p.as_command_blocks()
        assert [len(b) for b in blocks] == [2, 3, 1]
        assert [b[0].kind for b in blocks] == [S, J, S]

    def test_first_stitch_never_splits(self) -> None:
        p = build((J, 0, 0), (J, 1, 1))
        assert [len(b) for b in p.as_command_blocks()] == [2]

    def test_single(self) -> None:
        p = build((T, 0, 0))
        assert len(p.as_command_blocks()) == 1

    def test_empty(self) -> None:
        assert Pattern().as_command_blocks() == []

    def test_fields_do_not_split_runs(self) -> None:
        p = Pattern()
        p.add_stitch_absolute(encode(S, thread=1), (0, 0))
        p.add_stitch_absolute(encode(S, thread=2), (1, 1))
        assert len(p.as_command_blocks()) == 1


# ---------------------------------------------------------------------------
# Colour blocks
# ---------------------------------------------------------------------------


class TestColourBlocks:
    def test_split_at_boundaries(self) -> None:
        red = Thread("Red")
        p = build((S, 0, 0), (S, 1, 1), (CC, 1, 1), (S, 2, 2))
        p.needle_change_relative(2)
        p.stitch_relative((1, 0))
        p.add_thread(red)

        blocks = p.as_colour_blocks()
        assert [len(b.stitches) for b in blocks] == [2, 2, 2]
        assert blocks[0].thread is red
        assert blocks[1].thread.is_filler
        assert blocks[2].thread is None
        # The boundary stitch opens the following block
        assert blocks[1].stitches[0].kind is CC
        assert blocks[2].stitches[0].kind is CommandKind.NEEDLE_SET

    def test_no_boundaries(self) -> None:
        p = build((S, 0, 0), (S, 1, 1))
        blocks = p.as_colour_blocks()
        assert len(blocks) == 1
        assert blocks[0].thread is None
        assert len(blocks[0].stitches) == 2

    def test_leading_boundary_gives_empty_first_block(self) -> None:
        p = build((CC, 0, 0), (S, 1, 1))
        blocks = p.as_colour_blocks()
        assert [len(b.stitches) for b in blocks] == [0, 2]

    def test_empty(self) -> None:
        blocks = Pattern().as_colour_blocks()
        assert len(blocks) == 1
        assert blocks[0].stitches == []


# ---------------------------------------------------------------------------
# Decoded stitches
# ---------------------------------------------------------------------------


class TestDecodedStitches:
    def test_fields(self) -> None:
        p = Pattern()
        p.add_stitch_absolute(encode(S, thread=0, order=4), (1, 2))
        p.needle_change_relative(5)
        decoded = p.as_decoded_stitches()
        assert decoded[0] == DecodedStitch(1, 2, S, 0, None, 4)
        assert decoded[1] == DecodedStitch(1, 2, CommandKind.NEEDLE_SET, None, 5, None)

    def test_to_record(self) -> None:
        p = build((J, 3, 4))
        assert p.as_decoded_stitches()[0].to_record() == {
            "x": 3,
            "y": 4,
            "kind": "JUMP",
            "thread": None,
            "needle": None,
            "order": None,
        }

    def test_unknown_kind_record(self) -> None:
        p = build((0x33, 0, 0))
        record = p.as_decoded_stitches()[0].to_record()
        assert record["kind"] == 0x33
