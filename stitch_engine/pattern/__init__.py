"""
Pattern module.

In-memory pattern model (stitches, threads, metadata, cursor), its
segmentation views, and the rewrite passes that normalize a stream.
"""

from stitch_engine.pattern.model import (
    ColourBlock,
    CommandBlock,
    DecodedStitch,
    FillerThread,
    Pattern,
    StitchBlock,
    Thread,
)
from stitch_engine.pattern.rewrite import (
    interpolate_trim,
    merge_jumps,
    normalize_pattern,
    to_stable_pattern,
)
from stitch_engine.pattern.vector import Stitch, Vector2

__all__ = [
    "ColourBlock",
    "CommandBlock",
    "DecodedStitch",
    "FillerThread",
    "Pattern",
    "Stitch",
    "StitchBlock",
    "Thread",
    "Vector2",
    "interpolate_trim",
    "merge_jumps",
    "normalize_pattern",
    "to_stable_pattern",
]
