"""Rewrite passes -- stream-to-stream normalizations.

Every pass reads its source pattern and returns a **new** Pattern; the
source is never mutated, so passes over independent patterns can run in
parallel without locking.

Passes:
    interpolate_trim   Replace long untrimmed jump runs with an explicit TRIM.
    merge_jumps        Collapse each jump run into one STITCH_BREAK marker.
    stable             Rebuild from stitch blocks with canonical
                       COLOUR_BREAK / SEQUENCE_BREAK markers.

``normalize_pattern`` chains passes by name, as listed in the
``normalize`` section of the engine config.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from stitch_engine.commands.codec import CommandKind
from stitch_engine.pattern.model import Pattern

if TYPE_CHECKING:
    from stitch_engine.configs.loader import NormalizeConfig, RewriteConfig

logger = logging.getLogger(__name__)


def _finish(source: Pattern, result: Pattern) -> Pattern:
    """Copy threads and metadata verbatim from ``source``."""
    result.threads.extend(source.threads)
    result.metadata.update(source.metadata)
    return result


def interpolate_trim(pattern: Pattern, jumps_required_to_trim: int) -> Pattern:
    """Insert a TRIM in place of every long, untrimmed jump run.

    The thread counts as trimmed after COLOUR_CHANGE or TRIM and as
    live after STITCH or SEQUIN_EJECT.  Jumps while trimmed are copied
    through.  A run of jumps while live is taken as a whole:

    - followed by another command and at least ``jumps_required_to_trim``
      long: the jumps are dropped and a TRIM is placed at the end of the
      previous stitching, then the terminating command follows;
    - running to the end of the stream and that long: only its final
      jump is kept, without a trim;
    - shorter: copied through unchanged.

    Parameters
    ----------
    pattern : Pattern
        Source pattern (not modified).
    jumps_required_to_trim : int
        Minimum run length that earns a trim.

    Returns
    -------
    Pattern
        New pattern with the same threads and metadata.
    """
    result = Pattern()
    stitches = pattern.stitches
    count = len(stitches)
    trimmed = False
    collapsed = 0

    i = 0
    while i < count:
        stitch = stitches[i]
        kind = stitch.kind
        if kind in (CommandKind.STITCH, CommandKind.SEQUIN_EJECT):
            trimmed = False
        elif kind in (CommandKind.COLOUR_CHANGE, CommandKind.TRIM):
            trimmed = True

        if trimmed or kind != CommandKind.JUMP:
            result.add_stitch_absolute(stitch.command, stitch)
            i += 1
            continue

        end = i
        while end < count and stitches[end].kind == CommandKind.JUMP:
            end += 1
        run = stitches[i:end]

        if len(run) < jumps_required_to_trim:
            for jump in run:
                result.add_stitch_absolute(jump.command, jump)
        elif end == count:
            result.add_stitch_absolute(run[-1].command, run[-1])
            collapsed += 1
        else:
            result.trim_relative()
            trimmed = True
            collapsed += 1
        i = end

    logger.debug(
        "interpolate_trim: %d -> %d stitches, %d jump runs collapsed (threshold %d)",
        count,
        len(result.stitches),
        collapsed,
        jumps_required_to_trim,
    )
    return _finish(pattern, result)


def merge_jumps(pattern: Pattern) -> Pattern:
    """Replace every run of jumps with a single STITCH_BREAK.

    The marker sits at the run's final jump (its destination).  Breaks
    are never emitted back to back: a STITCH_BREAK directly after
    another one is dropped.

    Parameters
    ----------
    pattern : Pattern
        Source pattern (not modified).

    Returns
    -------
    Pattern
        New pattern with the same threads and metadata.
    """
    result = Pattern()
    stitches = pattern.stitches
    count = len(stitches)
    merged = 0

    def last_is_break() -> bool:
        return bool(result.stitches) and result.stitches[-1].kind == CommandKind.STITCH_BREAK

    i = 0
    while i < count:
        stitch = stitches[i]
        kind = stitch.kind

        if kind == CommandKind.JUMP:
            end = i
            while end < count and stitches[end].kind == CommandKind.JUMP:
                end += 1
            merged += end - i
            if not last_is_break():
                result.add_stitch_absolute(CommandKind.STITCH_BREAK, stitches[end - 1])
            i = end
            continue

        if kind == CommandKind.STITCH_BREAK and last_is_break():
            i += 1
            continue

        result.add_stitch_absolute(stitch.command, stitch)
        i += 1

    logger.debug(
        "merge_jumps: %d -> %d stitches, %d jumps merged",
        count,
        len(result.stitches),
        merged,
    )
    return _finish(pattern, result)


def to_stable_pattern(pattern: Pattern) -> Pattern:
    """Rebuild ``pattern`` from its stitch blocks.

    Only STITCH commands survive; every block is introduced by a
    COLOUR_BREAK (thread differs from the previous block) or a
    SEQUENCE_BREAK (same thread).  The thread list is rebuilt from the
    blocks, metadata is copied.
    """
    result = Pattern()
    blocks = pattern.as_stitch_blocks()
    for block in blocks:
        result.add_stitch_block(block)
    result.metadata.update(pattern.metadata)

    logger.debug(
        "stable: %d stitches -> %d blocks, %d threads",
        len(pattern.stitches),
        len(blocks),
        len(result.threads),
    )
    return result


PASSES: dict[str, Callable[[Pattern, "RewriteConfig"], Pattern]] = {
    "interpolate_trim": lambda p, cfg: interpolate_trim(p, cfg.jumps_required_to_trim),
    "merge_jumps": lambda p, cfg: merge_jumps(p),
    "stable": lambda p, cfg: to_stable_pattern(p),
}
"""Pass name -> callable, in the vocabulary used by the engine config."""


def normalize_pattern(
    pattern: Pattern,
    normalize: NormalizeConfig,
    rewrite: RewriteConfig,
) -> Pattern:
    """Run the configured passes, then the optional in-place fix-ups.

    Parameters
    ----------
    pattern : Pattern
        Source pattern (not modified).
    normalize : NormalizeConfig
        Pass order and post-processing switches.
    rewrite : RewriteConfig
        Pass parameters.

    Returns
    -------
    Pattern
        A new pattern, even when no pass is configured.

    Raises
    ------
    KeyError
        If a pass name is unknown.
    """
    result = pattern
    for name in normalize.passes:
        result = PASSES[name](result, rewrite)

    if result is pattern:
        result = pattern.copy()

    if normalize.fix_colour_count:
        before = len(result.threads)
        result.fix_colour_count()
        if len(result.threads) != before:
            logger.info(
                "Padded thread list from %d to %d", before, len(result.threads)
            )

    if normalize.centre_on_origin:
        result.move_centre_to_origin()

    return result
