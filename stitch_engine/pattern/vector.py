"""Points and stitches.

``Vector2`` is a small mutable point; ``Stitch`` is a point tagged with a
packed command word.  Deltas passed to :meth:`Vector2.add` may be
partial: any missing component counts as zero.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Union

from src.utils.geometry import MatrixLike, as_affine
from stitch_engine.commands.codec import (
    CommandKind,
    PackedCommand,
    command_kind,
    decode,
)

Number = Union[int, float]
VectorLike = Union["Vector2", Mapping[str, Number], Sequence[Number], None]


def components(value: VectorLike) -> tuple[Number, Number]:
    """Return ``(x, y)`` for any vector-like value; missing parts are 0."""
    if value is None:
        return 0, 0
    if isinstance(value, Vector2):
        return value.x, value.y
    if isinstance(value, Mapping):
        return value.get("x", 0), value.get("y", 0)
    if isinstance(value, Sequence) and len(value) <= 2:
        x = value[0] if len(value) > 0 else 0
        y = value[1] if len(value) > 1 else 0
        return x, y
    raise TypeError(f"Cannot interpret {value!r} as a 2D vector")


@dataclass(slots=True)
class Vector2:
    """2D point in pattern units."""

    x: Number = 0
    y: Number = 0

    @classmethod
    def from_tuple(cls, xy: Sequence[Number]) -> Vector2:
        x, y = xy
        return cls(x, y)

    def clone(self) -> Vector2:
        return Vector2(self.x, self.y)

    def add(self, delta: VectorLike) -> None:
        dx, dy = components(delta)
        self.x += dx
        self.y += dy

    def subtract(self, delta: VectorLike) -> None:
        dx, dy = components(delta)
        self.x -= dx
        self.y -= dy

    def apply_matrix(self, matrix: MatrixLike) -> None:
        """Transform in place: ``x' = a*x + c*y + e``, ``y' = b*x + d*y + f``."""
        m = as_affine(matrix)
        x, y = self.x, self.y
        self.x = m.a * x + m.c * y + m.e
        self.y = m.b * x + m.d * y + m.f

    def as_tuple(self) -> tuple[Number, Number]:
        return self.x, self.y


@dataclass(slots=True)
class Stitch(Vector2):
    """One event in the stream: a position plus a packed command word."""

    command: int = int(CommandKind.NO_COMMAND)

    @property
    def kind(self) -> CommandKind | int:
        return command_kind(self.command)

    @property
    def packed(self) -> PackedCommand:
        return decode(self.command)

    def clone(self) -> Stitch:
        return Stitch(self.x, self.y, self.command)
