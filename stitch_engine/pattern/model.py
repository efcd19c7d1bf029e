"""Pattern data model: stitches, threads, metadata and a cursor.

A :class:`Pattern` owns an ordered stitch stream, an ordered thread list
and free-form metadata.  The stream is built either by a format reader
(see :mod:`stitch_engine.records`) or through the builder API, whose
relative variants resolve against :attr:`Pattern.position` -- the
coordinates of the most recently appended stitch.

Threads and colour segments
---------------------------
The stream does not reference threads directly.  Each colour boundary
advances an implicit thread index starting at 0, and ``threads[i]``
names the material of the i-th colour segment.  When ``threads`` is too
short a :class:`FillerThread` stands in; fillers are never written back
except by :meth:`Pattern.fix_colour_count`.

Views and rewrites
------------------
``as_*`` methods return read-only segmentations of the stream.  Rewrite
passes (:mod:`stitch_engine.pattern.rewrite`) return a new Pattern and
leave the receiver untouched.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from src.utils.geometry import Bounds, MatrixLike, apply_affine, bounding_box
from stitch_engine.commands.codec import (
    COLOUR_BOUNDARY_KINDS,
    COLOUR_RESET_KINDS,
    SEGMENT_START_KINDS,
    CommandKind,
    decode,
    encode,
)
from stitch_engine.pattern.vector import Number, Stitch, Vector2, VectorLike, components


# ---------------------------------------------------------------------------
# Threads
# ---------------------------------------------------------------------------


@dataclass
class Thread:
    """Thread colour / material descriptor.

    Parameters
    ----------
    description : str
        Free-form name, e.g. ``"Poppy Red"``.
    colour : int | None
        ``0xRRGGBB`` value.
    catalog_number : str | None
        Manufacturer catalogue number.
    brand : str | None
        Manufacturer.
    """

    description: str = ""
    colour: int | None = None
    catalog_number: str | None = None
    brand: str | None = None

    @property
    def is_filler(self) -> bool:
        return False

    @property
    def hex_colour(self) -> str | None:
        if self.colour is None:
            return None
        return f"#{self.colour:06x}"

    @staticmethod
    def filler() -> FillerThread:
        """Build a fresh placeholder thread."""
        return FillerThread(description="filler")


@dataclass(eq=False)
class FillerThread(Thread):
    """Placeholder for a colour segment with no registered thread.

    Equal only to itself: a filler never matches a real thread, nor a
    filler generated for another segment.
    """

    __eq__ = object.__eq__
    __hash__ = object.__hash__

    @property
    def is_filler(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


@dataclass
class StitchBlock:
    """Maximal run of STITCH commands sewn with one thread."""

    stitches: list[Stitch]
    thread: Thread | None


@dataclass
class ColourBlock:
    """Stream span between two colour boundaries.

    ``thread`` is ``None`` only for the trailing block.
    """

    stitches: list[Stitch]
    thread: Thread | None = None


CommandBlock = list[Stitch]
"""Maximal run of stitches sharing one command kind."""


@dataclass(frozen=True, slots=True)
class DecodedStitch:
    """Fully decoded stitch, as handed to writers."""

    x: Number
    y: Number
    kind: CommandKind | int
    thread: int | None
    needle: int | None
    order: int | None

    def to_record(self) -> dict[str, Any]:
        record = asdict(self)
        record["kind"] = (
            self.kind.name if isinstance(self.kind, CommandKind) else int(self.kind)
        )
        return record


# ---------------------------------------------------------------------------
# Pattern
# ---------------------------------------------------------------------------


class Pattern:
    """Ordered stitch stream plus threads, metadata and cursor."""

    def __init__(self) -> None:
        self.metadata: dict[str, Any] = {}
        self.stitches: list[Stitch] = []
        self.threads: list[Thread] = []
        self.position: Vector2 = Vector2()

    def __len__(self) -> int:
        return len(self.stitches)

    def __iter__(self) -> Iterator[Stitch]:
        return iter(self.stitches)

    def __repr__(self) -> str:
        return (
            f"Pattern(stitches={len(self.stitches)}, threads={len(self.threads)}, "
            f"position=({self.position.x}, {self.position.y}))"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def copy(self) -> Pattern:
        """Independent copy: new stitches, same thread objects."""
        pattern = Pattern()
        pattern.metadata = dict(self.metadata)
        pattern.stitches = [stitch.clone() for stitch in self.stitches]
        pattern.threads = list(self.threads)
        pattern.position = self.position.clone()
        return pattern

    def clear(self) -> None:
        self.metadata = {}
        self.stitches = []
        self.threads = []
        self.position = Vector2()

    # ------------------------------------------------------------------
    # Threads and metadata
    # ------------------------------------------------------------------

    def add_thread(self, thread: Thread) -> None:
        self.threads.append(thread)

    def set_metadata(self, name: str, data: Any) -> None:
        self.metadata[name] = data

    def get_metadata(self, name: str, default: Any = None) -> Any:
        return self.metadata.get(name, default)

    def get_thread(self, index: int) -> Thread | None:
        if 0 <= index < len(self.threads):
            return self.threads[index]
        return None

    def get_thread_or_filler(self, index: int) -> Thread:
        thread = self.get_thread(index)
        return thread if thread is not None else Thread.filler()

    def count_threads(self) -> int:
        return len(self.threads)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def count_stitches(self) -> int:
        return len(self.stitches)

    def get_commands_of_type(self, kind: CommandKind | int) -> list[Stitch]:
        return [stitch for stitch in self.stitches if stitch.kind == kind]

    def count_commands_of_type(self, kind: CommandKind | int) -> int:
        return sum(1 for stitch in self.stitches if stitch.kind == kind)

    def count_colour_changes(self) -> int:
        return self.count_commands_of_type(CommandKind.COLOUR_CHANGE)

    def count_needle_sets(self) -> int:
        return self.count_commands_of_type(CommandKind.NEEDLE_SET)

    def _coords(self) -> np.ndarray:
        return np.array(
            [(stitch.x, stitch.y) for stitch in self.stitches]
        ).reshape(-1, 2)

    def bounds(self) -> Bounds:
        """``(min_x, min_y, max_x, max_y)``; all zero for an empty pattern."""
        return bounding_box(self._coords())

    # ------------------------------------------------------------------
    # Builder API
    # ------------------------------------------------------------------

    def add_stitch_absolute(self, command: CommandKind | int, pos: VectorLike) -> None:
        """Append a stitch at ``pos`` and move the cursor there."""
        x, y = components(pos)
        self.stitches.append(Stitch(x, y, int(command)))
        self.position = Vector2(x, y)

    def add_stitch_relative(
        self, command: CommandKind | int, delta: VectorLike = None
    ) -> None:
        """Append a stitch at ``position + delta``."""
        position = self.position.clone()
        position.add(delta)
        self.add_stitch_absolute(command, position)

    def prepend_command(self, command: CommandKind | int, pos: VectorLike) -> None:
        """Insert a stitch at the head of the stream; the cursor is unchanged."""
        x, y = components(pos)
        self.stitches.insert(0, Stitch(x, y, int(command)))

    def move_relative(self, delta: VectorLike = None) -> None:
        self.add_stitch_relative(CommandKind.JUMP, delta)

    def move_absolute(self, pos: VectorLike) -> None:
        self.add_stitch_absolute(CommandKind.JUMP, pos)

    def stitch_relative(self, delta: VectorLike = None) -> None:
        self.add_stitch_relative(CommandKind.STITCH, delta)

    def stitch_absolute(self, pos: VectorLike) -> None:
        self.add_stitch_absolute(CommandKind.STITCH, pos)

    def stop_relative(self, delta: VectorLike = None) -> None:
        # Legacy alias: older callers expect "stop" to place a plain stitch.
        self.add_stitch_relative(CommandKind.STITCH, delta)

    def trim_relative(self, delta: VectorLike = None) -> None:
        self.add_stitch_relative(CommandKind.TRIM, delta)

    def colour_change_relative(self, delta: VectorLike = None) -> None:
        self.add_stitch_relative(CommandKind.COLOUR_CHANGE, delta)

    def needle_change_relative(self, needle: int = 0, delta: VectorLike = None) -> None:
        self.add_stitch_relative(encode(CommandKind.NEEDLE_SET, needle=needle), delta)

    def sequin_eject_relative(self, delta: VectorLike = None) -> None:
        self.add_stitch_relative(CommandKind.SEQUIN_EJECT, delta)

    def sequin_mode_relative(self, delta: VectorLike = None) -> None:
        self.add_stitch_relative(CommandKind.SEQUIN_MODE, delta)

    def end_relative(self, delta: VectorLike = None) -> None:
        self.add_stitch_relative(CommandKind.END, delta)

    def add_stitch_block(self, block: StitchBlock) -> None:
        """Append a block behind a colour or sequence break.

        A block whose thread differs from the last registered thread
        registers it and is preceded by COLOUR_BREAK; otherwise (same
        thread, or no thread given) a SEQUENCE_BREAK is used.
        """
        thread = block.thread
        if thread is not None and (not self.threads or thread != self.threads[-1]):
            self.threads.append(thread)
            self.add_stitch_relative(CommandKind.COLOUR_BREAK)
        else:
            self.add_stitch_relative(CommandKind.SEQUENCE_BREAK)

        for stitch in block.stitches:
            self.add_stitch_absolute(stitch.command, stitch)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def translate(self, delta: VectorLike) -> None:
        for stitch in self.stitches:
            stitch.add(delta)
        if self.stitches:
            last = self.stitches[-1]
            self.position = Vector2(last.x, last.y)

    def transform(self, matrix: MatrixLike) -> None:
        """Apply an affine transform to every stitch in place."""
        if not self.stitches:
            return
        transformed = apply_affine(self._coords(), matrix)
        for stitch, (x, y) in zip(self.stitches, transformed.tolist()):
            stitch.x = x
            stitch.y = y
        last = self.stitches[-1]
        self.position = Vector2(last.x, last.y)

    def move_centre_to_origin(self) -> None:
        """Translate so the bounding-box centre sits on the origin."""
        if not self.stitches:
            return
        min_x, min_y, max_x, max_y = self.bounds()
        cx = round((min_x + max_x) / 2)
        cy = round((min_y + max_y) / 2)
        self.translate((-cx, -cy))

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def colour_segment_count(self) -> int:
        """Number of colour segments that actually receive stitches."""
        segments = 0
        init_colour = True
        for stitch in self.stitches:
            kind = stitch.kind
            if kind in SEGMENT_START_KINDS:
                if init_colour:
                    segments += 1
                    init_colour = False
            elif kind in COLOUR_RESET_KINDS:
                init_colour = True
        return segments

    def fix_colour_count(self) -> None:
        """Pad ``threads`` with fillers until every colour segment has one."""
        needed = self.colour_segment_count()
        while len(self.threads) < needed:
            self.threads.append(self.get_thread_or_filler(len(self.threads)))

    # ------------------------------------------------------------------
    # Segmentation views
    # ------------------------------------------------------------------

    def as_stitch_blocks(self) -> list[StitchBlock]:
        """Group maximal STITCH runs, each tagged with its thread.

        COLOUR_CHANGE always advances the thread index.  COLOUR_BREAK
        advances it only once stitching has happened since the previous
        colour boundary, so a leading break does not skip a thread.
        Other commands just close the open block.
        """
        resolved: dict[int, Thread] = {}

        def thread_for(index: int) -> Thread:
            if index not in resolved:
                resolved[index] = self.get_thread_or_filler(index)
            return resolved[index]

        blocks: list[StitchBlock] = []
        block: list[Stitch] = []
        thread_index = 0
        stitched_since_boundary = False

        for stitch in self.stitches:
            kind = stitch.kind
            if kind == CommandKind.STITCH:
                block.append(stitch)
                stitched_since_boundary = True
                continue

            if block:
                blocks.append(StitchBlock(block, thread_for(thread_index)))
                block = []

            if kind == CommandKind.COLOUR_CHANGE:
                thread_index += 1
                stitched_since_boundary = False
            elif kind == CommandKind.COLOUR_BREAK:
                if stitched_since_boundary:
                    thread_index += 1
                stitched_since_boundary = False

        if block:
            blocks.append(StitchBlock(block, thread_for(thread_index)))
        return blocks

    def as_command_blocks(self) -> list[CommandBlock]:
        """Split the stream into maximal runs of one command kind."""
        results: list[CommandBlock] = []
        last_pos = 0
        last_kind: CommandKind | int | None = None
        for index, stitch in enumerate(self.stitches):
            kind = stitch.kind
            if last_kind is not None and kind != last_kind:
                results.append(self.stitches[last_pos:index])
                last_pos = index
            last_kind = kind
        if self.stitches:
            results.append(self.stitches[last_pos:])
        return results

    def as_colour_blocks(self) -> list[ColourBlock]:
        """Split at every COLOUR_CHANGE / NEEDLE_SET.

        The boundary stitch opens the following block.  The i-th block
        carries the i-th thread (or a filler); the trailing block after
        the last boundary carries none.
        """
        results: list[ColourBlock] = []
        thread_index = 0
        last_pos = 0
        for index, stitch in enumerate(self.stitches):
            if stitch.kind not in COLOUR_BOUNDARY_KINDS:
                continue
            results.append(
                ColourBlock(
                    self.stitches[last_pos:index],
                    self.get_thread_or_filler(thread_index),
                )
            )
            thread_index += 1
            last_pos = index
        results.append(ColourBlock(self.stitches[last_pos:]))
        return results

    def as_decoded_stitches(self) -> list[DecodedStitch]:
        decoded = []
        for stitch in self.stitches:
            packed = decode(stitch.command)
            decoded.append(
                DecodedStitch(
                    x=stitch.x,
                    y=stitch.y,
                    kind=packed.kind,
                    thread=packed.thread,
                    needle=packed.needle,
                    order=packed.order,
                )
            )
        return decoded

    def unique_threads(self) -> list[Thread]:
        """Threads in first-occurrence order without duplicates."""
        unique: list[Thread] = []
        for thread in self.threads:
            if thread not in unique:
                unique.append(thread)
        return unique

    def singleton_threads(self) -> list[Thread]:
        """Threads with immediate repeats collapsed."""
        singleton: list[Thread] = []
        for thread in self.threads:
            if not singleton or thread != singleton[-1]:
                singleton.append(thread)
        return singleton

    # ------------------------------------------------------------------
    # Rewrite passes
    # ------------------------------------------------------------------

    def interpolate_trim(self, jumps_required_to_trim: int) -> Pattern:
        from stitch_engine.pattern.rewrite import interpolate_trim

        return interpolate_trim(self, jumps_required_to_trim)

    def merge_jumps(self) -> Pattern:
        from stitch_engine.pattern.rewrite import merge_jumps

        return merge_jumps(self)

    def to_stable_pattern(self) -> Pattern:
        from stitch_engine.pattern.rewrite import to_stable_pattern

        return to_stable_pattern(self)
