"""Conversion between Pattern objects and ``pattern.v1`` documents.

Readers hand the engine a validated document; writers receive either the
raw document (packed command words) or the fully decoded records.

Usage::

    from stitch_engine.records import pattern_from_file, write_pattern_file
    pattern = pattern_from_file("rose.yaml")
    write_pattern_file(pattern.merge_jumps(), "out/rose.json", fmt="json")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from src.utils import fs
from src.utils.validators import (
    PATTERN_SCHEMA,
    PatternFileV1,
    load_pattern_file,
    validate_pattern_document,
)
from stitch_engine.pattern.model import Pattern, Thread
from stitch_engine.pattern.vector import Stitch, Vector2

logger = logging.getLogger(__name__)

WRITERS = {
    "yaml": fs.atomic_yaml_dump,
    "json": fs.atomic_json_dump,
}


def pattern_from_document(doc: PatternFileV1 | dict[str, Any]) -> Pattern:
    """Build a Pattern from a validated (or raw) document.

    Every record becomes a new :class:`Stitch`; the cursor ends at the
    last stitch.

    Raises
    ------
    PatternFileError
        If ``doc`` is a raw mapping that fails validation.
    """
    if not isinstance(doc, PatternFileV1):
        doc = validate_pattern_document(doc)

    pattern = Pattern()
    pattern.metadata = dict(doc.metadata)
    pattern.threads = [
        Thread(
            description=record.description,
            colour=record.colour,
            catalog_number=record.catalog_number,
            brand=record.brand,
        )
        for record in doc.threads
    ]
    pattern.stitches = [
        Stitch(record.x, record.y, record.command) for record in doc.stitches
    ]
    if pattern.stitches:
        last = pattern.stitches[-1]
        pattern.position = Vector2(last.x, last.y)
    return pattern


def pattern_from_file(path: str | Path) -> Pattern:
    """Load a ``.yaml``/``.yml``/``.json`` pattern document."""
    pattern = pattern_from_document(load_pattern_file(path))
    logger.debug(
        "Loaded %s: %d stitches, %d threads",
        path,
        len(pattern.stitches),
        len(pattern.threads),
    )
    return pattern


def _thread_record(thread: Thread) -> dict[str, Any]:
    return {
        "description": thread.description,
        "colour": thread.colour,
        "catalog_number": thread.catalog_number,
        "brand": thread.brand,
    }


def pattern_to_document(pattern: Pattern) -> dict[str, Any]:
    """Plain-data ``pattern.v1`` document with raw command words."""
    return {
        "schema": PATTERN_SCHEMA,
        "metadata": dict(pattern.metadata),
        "threads": [_thread_record(thread) for thread in pattern.threads],
        "stitches": [
            {"x": stitch.x, "y": stitch.y, "command": stitch.command}
            for stitch in pattern.stitches
        ],
    }


def decoded_records(pattern: Pattern) -> list[dict[str, Any]]:
    """Fully decoded stitches: kind name plus thread/needle/order fields."""
    return [decoded.to_record() for decoded in pattern.as_decoded_stitches()]


def write_pattern_file(
    pattern: Pattern, path: str | Path, fmt: str = "yaml"
) -> Path:
    """Write ``pattern`` atomically as a YAML or JSON document.

    Parameters
    ----------
    pattern : Pattern
        Pattern to serialize.
    path : str | Path
        Target file; parent directories are created.
    fmt : str
        ``"yaml"`` or ``"json"``.

    Returns
    -------
    Path
        The written path.

    Raises
    ------
    ValueError
        If ``fmt`` is not a known format.
    """
    try:
        writer = WRITERS[fmt]
    except KeyError:
        raise ValueError(
            f"Unknown output format {fmt!r}; expected one of {sorted(WRITERS)}"
        ) from None

    path = Path(path)
    writer(pattern_to_document(pattern), path)
    logger.debug("Wrote %s (%d stitches)", path, len(pattern.stitches))
    return path
