"""
Small helpers for 3-component vector arithmetic on plain tuples.

Camera poses and curve samples are exchanged as ``Vec3`` tuples so that
they compare by value and serialize directly into API responses.
"""

from __future__ import annotations

import math
from typing import Tuple

Vec3 = Tuple[float, float, float]


def dot(a: Vec3, b: Vec3) -> float:
    """Compute the dot product of two 3D vectors.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        The scalar dot product ``a·b``.
    """
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def sub(a: Vec3, b: Vec3) -> Vec3:
    """Subtract two 3D vectors (a - b)."""
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def cross(a: Vec3, b: Vec3) -> Vec3:
    """Right-handed cross product ``a × b``."""
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def length(a: Vec3) -> float:
    return math.hypot(a[0], a[1], a[2])


def normalize(a: Vec3, eps: float = 1e-12) -> Vec3 | None:
    """Return ``a`` scaled to unit length, or ``None`` if it is (near) zero."""
    n = length(a)
    if n <= eps or not math.isfinite(n):
        return None
    return (a[0] / n, a[1] / n, a[2] / n)
