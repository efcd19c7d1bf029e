"""Planar geometry helpers for stitch coordinates.

Provides:
    - 2D affine matrices in the six-coefficient (a, b, c, d, e, f) form
    - Batched point transforms on (N, 2) arrays
    - Axis-aligned bounding boxes

Used by:
    - Pattern.transform(): batched affine transform of every stitch
    - Pattern.bounds() / move_centre_to_origin(): extents
    - Tests: synthetic transforms with known results

Coordinate convention follows SVG / PostScript matrices::

    x' = a*x + c*y + e
    y' = b*x + d*y + f

Units are whatever the pattern uses (typically 0.1 mm stitch units);
nothing here converts units.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

Bounds = Tuple[float, float, float, float]
"""(min_x, min_y, max_x, max_y)."""


@dataclass(frozen=True, slots=True)
class Affine:
    """Six-coefficient 2D affine transform.

    Parameters
    ----------
    a, b, c, d : float
        Linear part (scale / shear / rotation).
    e, f : float
        Translation.
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> Affine:
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> Affine:
        return cls(e=tx, f=ty)

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None) -> Affine:
        return cls(a=sx, d=sx if sy is None else sy)

    @classmethod
    def rotation(cls, degrees: float) -> Affine:
        """Counter-clockwise rotation about the origin."""
        theta = math.radians(degrees)
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        return cls(a=cos_t, b=sin_t, c=-sin_t, d=cos_t)

    def to_array(self) -> np.ndarray:
        """Return the homogeneous 3x3 matrix."""
        return np.array(
            [
                [self.a, self.c, self.e],
                [self.b, self.d, self.f],
                [0.0, 0.0, 1.0],
            ],
            dtype=np.float64,
        )

    def then(self, other: Affine) -> Affine:
        """Compose: apply ``self`` first, then ``other``."""
        return as_affine(other.to_array() @ self.to_array())


MatrixLike = Union[Affine, Sequence[float], np.ndarray]


def as_affine(matrix: MatrixLike) -> Affine:
    """Coerce a matrix-like value to :class:`Affine`.

    Parameters
    ----------
    matrix : Affine | Sequence[float] | np.ndarray
        An ``Affine``, six coefficients ``(a, b, c, d, e, f)``, or a
        homogeneous 3x3 array.

    Raises
    ------
    ValueError
        If the shape is not recognised.
    """
    if isinstance(matrix, Affine):
        return matrix
    arr = np.asarray(matrix, dtype=np.float64)
    if arr.shape == (3, 3):
        return Affine(
            a=float(arr[0, 0]),
            b=float(arr[1, 0]),
            c=float(arr[0, 1]),
            d=float(arr[1, 1]),
            e=float(arr[0, 2]),
            f=float(arr[1, 2]),
        )
    if arr.shape == (6,):
        return Affine(*(float(v) for v in arr))
    raise ValueError(
        f"Affine matrix must have 6 coefficients or shape (3, 3), got shape {arr.shape}"
    )


def apply_affine(points: np.ndarray, matrix: MatrixLike) -> np.ndarray:
    """Transform an (N, 2) array of points.

    Parameters
    ----------
    points : np.ndarray
        Points, shape (N, 2).
    matrix : MatrixLike
        Transform to apply.

    Returns
    -------
    np.ndarray
        Transformed points, shape (N, 2), float64.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    m = as_affine(matrix).to_array()
    return pts @ m[:2, :2].T + m[:2, 2]


def bounding_box(points: np.ndarray) -> Bounds:
    """Axis-aligned bounds of an (N, 2) array; ``(0, 0, 0, 0)`` when empty."""
    pts = np.asarray(points).reshape(-1, 2)
    if pts.shape[0] == 0:
        return (0, 0, 0, 0)
    mins = pts.min(axis=0)
    maxs = pts.max(axis=0)
    return (mins[0].item(), mins[1].item(), maxs[0].item(), maxs[1].item())
