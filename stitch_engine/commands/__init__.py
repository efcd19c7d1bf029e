"""
Command word module.

Defines the closed set of command kinds and the packed 32-bit command
word codec shared by every stitch in a pattern.
"""

from stitch_engine.commands.codec import (
    COLOUR_BOUNDARY_KINDS,
    COLOUR_RESET_KINDS,
    FIELD_LAYOUT,
    SEGMENT_START_KINDS,
    CommandKind,
    CommandRangeError,
    PackedCommand,
    UnknownCommandError,
    command_kind,
    decode,
    encode,
)

__all__ = [
    "COLOUR_BOUNDARY_KINDS",
    "COLOUR_RESET_KINDS",
    "FIELD_LAYOUT",
    "SEGMENT_START_KINDS",
    "CommandKind",
    "CommandRangeError",
    "PackedCommand",
    "UnknownCommandError",
    "command_kind",
    "decode",
    "encode",
]
