"""Packed command words -- the vocabulary of the stitch stream.

Every stitch carries one 32-bit command word.  The low byte is the
command *kind*; the upper three bytes optionally select a thread, a
needle and an order (sequence) index::

    bits  0..7   kind
    bits  8..15  thread + 1   (0 = unset)
    bits 16..23  needle + 1   (0 = unset)
    bits 24..31  order  + 1   (0 = unset)

The ``+1`` offset reserves 0 for "field absent", so thread 0 and "no
thread" stay distinguishable.  Consequently only values in [0, 254] can
be packed; 255 would wrap onto the absent sentinel.

Kind values follow the numbering shared by common embroidery tooling,
so raw words coming from format readers need no translation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CommandRangeError(ValueError):
    """Raised when a kind, field or word does not fit the packed layout."""

    pass


class UnknownCommandError(ValueError):
    """Raised by strict decoding when the low byte is not a known kind."""

    pass


# ---------------------------------------------------------------------------
# Command kinds
# ---------------------------------------------------------------------------


class CommandKind(IntEnum):
    """Semantic operation carried by a stitch (low byte of the word)."""

    STITCH = 0x00
    JUMP = 0x01
    TRIM = 0x02
    STOP = 0x03
    END = 0x04
    COLOUR_CHANGE = 0x05
    SEQUIN_MODE = 0x06
    SEQUIN_EJECT = 0x07
    NEEDLE_SET = 0x09
    SEW_TO = 0xB0
    NEEDLE_AT = 0xB1
    STITCH_BREAK = 0xE0
    SEQUENCE_BREAK = 0xE1
    COLOUR_BREAK = 0xE2
    NO_COMMAND = 0xFF


_KIND_BY_VALUE = {kind.value: kind for kind in CommandKind}

FIELD_LAYOUT: dict[str, tuple[int, int]] = {
    "kind": (0x000000FF, 0),
    "thread": (0x0000FF00, 8),
    "needle": (0x00FF0000, 16),
    "order": (0xFF000000, 24),
}
"""Field name -> (mask, shift) within a command word."""

COMMAND_MASK = FIELD_LAYOUT["kind"][0]

FIELD_MAX = 0xFE
"""Largest packable thread / needle / order value."""

COLOUR_BOUNDARY_KINDS = frozenset({CommandKind.COLOUR_CHANGE, CommandKind.NEEDLE_SET})
"""Kinds that start a new colour block."""

COLOUR_RESET_KINDS = frozenset({CommandKind.COLOUR_CHANGE, CommandKind.COLOUR_BREAK})
"""Kinds after which the next needle-down starts a new colour segment."""

SEGMENT_START_KINDS = frozenset(
    {CommandKind.STITCH, CommandKind.SEW_TO, CommandKind.NEEDLE_AT}
)
"""Needle-down kinds that open a colour segment."""


# ---------------------------------------------------------------------------
# Decoded form
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PackedCommand:
    """Unpacked command word.

    Parameters
    ----------
    kind : CommandKind | int
        Command kind.  A plain ``int`` means the low byte is not a known
        kind (see :attr:`is_recognised`).
    thread, needle, order : int | None
        Optional indices in [0, 254]; ``None`` when absent.
    """

    kind: CommandKind | int
    thread: int | None = None
    needle: int | None = None
    order: int | None = None

    @property
    def is_recognised(self) -> bool:
        return isinstance(self.kind, CommandKind)

    def encode(self) -> int:
        return encode(self.kind, self.thread, self.needle, self.order)


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def _pack_field(name: str, value: int | None) -> int:
    if value is None:
        return 0
    if not 0 <= value <= FIELD_MAX:
        raise CommandRangeError(
            f"{name} must be in [0, {FIELD_MAX}] or None, got {value}"
        )
    mask, shift = FIELD_LAYOUT[name]
    return (((value & 0xFF) + 1) << shift) & mask


def _unpack_field(name: str, word: int) -> int | None:
    mask, shift = FIELD_LAYOUT[name]
    raw = (word & mask) >> shift
    return raw - 1 if raw else None


def encode(
    kind: CommandKind | int,
    thread: int | None = None,
    needle: int | None = None,
    order: int | None = None,
) -> int:
    """Pack a kind and optional indices into a 32-bit command word.

    Parameters
    ----------
    kind : CommandKind | int
        Command kind; must fit the low byte.
    thread, needle, order : int | None
        Optional indices in [0, 254].

    Returns
    -------
    int
        Unsigned 32-bit word.

    Raises
    ------
    CommandRangeError
        If ``kind`` is outside [0, 255] or any field outside [0, 254].
    """
    if not 0 <= int(kind) <= COMMAND_MASK:
        raise CommandRangeError(
            f"Command kind must be in [0, {COMMAND_MASK}], got {int(kind)}"
        )
    return (
        int(kind)
        | _pack_field("thread", thread)
        | _pack_field("needle", needle)
        | _pack_field("order", order)
    )


def command_kind(word: int) -> CommandKind | int:
    """Return the kind of ``word`` without decoding the other fields."""
    value = word & COMMAND_MASK
    return _KIND_BY_VALUE.get(value, value)


def decode(word: int, strict: bool = False) -> PackedCommand:
    """Unpack a 32-bit command word.

    Parameters
    ----------
    word : int
        Unsigned 32-bit command word.
    strict : bool
        Raise instead of warning when the kind is unrecognised.

    Returns
    -------
    PackedCommand
        Decoded fields; absent indices are ``None``.

    Raises
    ------
    CommandRangeError
        If ``word`` is not an unsigned 32-bit value.
    UnknownCommandError
        If ``strict`` and the low byte is not a :class:`CommandKind`.
    """
    if not 0 <= word <= 0xFFFFFFFF:
        raise CommandRangeError(f"Command word must be a u32, got {word:#x}")

    kind = command_kind(word)
    if not isinstance(kind, CommandKind):
        if strict:
            raise UnknownCommandError(
                f"Unrecognised command kind {kind:#04x} in word {word:#010x}"
            )
        logger.warning(
            "Unrecognised command kind %#04x in word %#010x", kind, word
        )

    return PackedCommand(
        kind=kind,
        thread=_unpack_field("thread", word),
        needle=_unpack_field("needle", word),
        order=_unpack_field("order", word),
    )
