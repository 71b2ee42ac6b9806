"""
Parametric 3D curve through an ordered set of control points.

The curve is a centripetal Catmull–Rom spline.  It passes through every
control point in order, and the centripetal knot spacing keeps it from
forming cusps or loops between closely spaced points.  Each segment is
stored as the four coefficients of a cubic polynomial so evaluation is
a single Horner step.

Sampling is arc-length aware: :meth:`CurvePath.point_at` takes a
normalized distance ``u`` in ``[0, 1]`` and maps it to the raw spline
parameter through a cumulative chord-length table, so equal steps in
``u`` cover equal distances along the curve.  This is what keeps the
camera speed independent of how unevenly the control points are spaced.

Instances are immutable once built and all queries are pure functions
of their argument.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from .errors import InsufficientPointsError
from .vectors import Vec3

logger = logging.getLogger(__name__)

# Knot intervals shorter than this are treated as coincident points.
_MIN_KNOT_INTERVAL: float = 1e-4

# Consecutive control points closer than this are merged into one.
_COINCIDENT_DISTANCE: float = _MIN_KNOT_INTERVAL ** 2

ControlPointSet = Tuple[Vec3, ...]


def _norms(v: np.ndarray) -> np.ndarray:
    """Euclidean length along the last axis; hypot avoids squaring overflow."""
    return np.hypot(np.hypot(v[..., 0], v[..., 1]), v[..., 2])


def _knot_interval(a: np.ndarray, b: np.ndarray) -> float:
    # Centripetal parameterization: square root of the chord length.
    return math.sqrt(math.hypot(*(b - a)))


def _merge_repeated_points(points: np.ndarray) -> np.ndarray:
    """Collapse runs of coincident consecutive points to a single point.

    A zero-length segment would otherwise be fitted with non-zero end
    tangents and loop back on itself.  The last point of the input is
    always kept so the curve still ends exactly on it.
    """
    steps = _norms(np.diff(points, axis=0))
    keep = np.concatenate(([True], steps > _COINCIDENT_DISTANCE))
    merged = points[keep].copy()
    merged[-1] = points[-1]
    return merged


def _segment_coefficients(
    p0: np.ndarray, p1: np.ndarray, p2: np.ndarray, p3: np.ndarray
) -> np.ndarray:
    """Return the cubic coefficients ``(c0, c1, c2, c3)`` of the p1→p2 segment.

    The tangents at p1 and p2 come from the non-uniform Catmull–Rom
    formulation and are rescaled to the unit interval so the segment
    can be evaluated as ``c0 + c1*w + c2*w**2 + c3*w**3`` for ``w`` in
    ``[0, 1]``.
    """
    dt0 = _knot_interval(p0, p1)
    dt1 = _knot_interval(p1, p2)
    dt2 = _knot_interval(p2, p3)
    if dt1 < _MIN_KNOT_INTERVAL:
        dt1 = 1.0
    if dt0 < _MIN_KNOT_INTERVAL:
        dt0 = dt1
    if dt2 < _MIN_KNOT_INTERVAL:
        dt2 = dt1

    t1 = (p1 - p0) / dt0 - (p2 - p0) / (dt0 + dt1) + (p2 - p1) / dt1
    t2 = (p2 - p1) / dt1 - (p3 - p1) / (dt1 + dt2) + (p3 - p2) / dt2
    t1 = t1 * dt1
    t2 = t2 * dt1

    c0 = p1
    c1 = t1
    c2 = -3.0 * p1 + 3.0 * p2 - 2.0 * t1 - t2
    c3 = 2.0 * p1 - 2.0 * p2 + t1 + t2
    return np.stack([c0, c1, c2, c3])


def _build_coefficients(points: np.ndarray) -> np.ndarray:
    """Compute per-segment coefficients, shape ``(n - 1, 4, 3)``.

    Open curves have no neighbour before the first point or after the
    last one, so those are replaced by reflections of the adjacent
    point through the endpoint.
    """
    n = len(points)
    ghost_start = 2.0 * points[0] - points[1]
    ghost_end = 2.0 * points[-1] - points[-2]
    coeffs = np.empty((n - 1, 4, 3), dtype=np.float64)
    for i in range(n - 1):
        p0 = points[i - 1] if i > 0 else ghost_start
        p3 = points[i + 2] if i + 2 < n else ghost_end
        coeffs[i] = _segment_coefficients(p0, points[i], points[i + 1], p3)
    return coeffs


class CurvePath:
    """Smooth open curve through ordered 3D control points.

    Args:
        control_points: At least two points, of which at least two
            must be distinct.
        arc_length_divisions: Number of chords used to approximate arc
            length.  Higher values give more uniform speed at the cost
            of a slightly slower build.

    Raises:
        InsufficientPointsError: If fewer than two distinct points are
            supplied.
    """

    def __init__(self, control_points: Sequence[Vec3], arc_length_divisions: int = 200) -> None:
        pts = np.asarray(control_points, dtype=np.float64).reshape(-1, 3)
        if len(pts) < 2:
            raise InsufficientPointsError(len(pts))
        pts.setflags(write=False)
        fitted = _merge_repeated_points(pts)
        if len(fitted) < 2:
            raise InsufficientPointsError(
                1, "All control points coincide; the path has zero length"
            )
        fitted.setflags(write=False)
        self._points = pts
        self._fitted = fitted
        self._coeffs = _build_coefficients(fitted)
        self._coeffs.setflags(write=False)
        self._divisions = max(1, int(arc_length_divisions))
        self._arc_lengths = self._build_arc_length_table()
        self._arc_lengths.setflags(write=False)
        logger.debug(
            "CurvePath built: %d control points, length=%.4f, divisions=%d",
            len(pts),
            self.length,
            self._divisions,
        )

    # ------------------------------------------------------------------
    # Raw spline parameter (not arc-length uniform)

    def _evaluate(self, s: np.ndarray) -> np.ndarray:
        """Evaluate the spline at raw parameters ``s`` (array in [0, 1])."""
        n_seg = len(self._coeffs)
        x = np.clip(s, 0.0, 1.0) * n_seg
        idx = np.minimum(np.floor(x).astype(int), n_seg - 1)
        w = (x - idx)[:, None]
        c = self._coeffs[idx]
        return c[:, 0] + w * (c[:, 1] + w * (c[:, 2] + w * c[:, 3]))

    def _derivative(self, s: float) -> np.ndarray:
        n_seg = len(self._coeffs)
        x = min(max(s, 0.0), 1.0) * n_seg
        idx = min(int(math.floor(x)), n_seg - 1)
        w = x - idx
        c = self._coeffs[idx]
        return c[1] + w * (2.0 * c[2] + w * 3.0 * c[3])

    def _build_arc_length_table(self) -> np.ndarray:
        grid = np.linspace(0.0, 1.0, self._divisions + 1)
        samples = self._evaluate(grid)
        chords = _norms(np.diff(samples, axis=0))
        return np.concatenate(([0.0], np.cumsum(chords)))

    def _u_to_s(self, u: float) -> float:
        """Map a normalized arc-length position to the raw spline parameter."""
        total = self._arc_lengths[-1]
        target = u * total
        i = int(np.searchsorted(self._arc_lengths, target, side="right")) - 1
        i = min(max(i, 0), self._divisions - 1)
        before = self._arc_lengths[i]
        seg = self._arc_lengths[i + 1] - before
        frac = (target - before) / seg if seg > 0.0 else 0.0
        frac = min(max(frac, 0.0), 1.0)
        return (i + frac) / self._divisions

    # ------------------------------------------------------------------
    # Public queries

    @property
    def control_points(self) -> ControlPointSet:
        return tuple((float(p[0]), float(p[1]), float(p[2])) for p in self._points)

    @property
    def length(self) -> float:
        """Approximate arc length of the whole curve."""
        return float(self._arc_lengths[-1])

    @property
    def arc_length_divisions(self) -> int:
        return self._divisions

    def point_at(self, u: float) -> Vec3:
        """Return the position a fraction ``u`` of the way along the curve.

        ``u`` is clamped to ``[0, 1]``.  The endpoints return the first
        and last control points exactly.
        """
        u = _clamp_unit(u)
        if u >= 1.0:
            last = self._points[-1]
            return (float(last[0]), float(last[1]), float(last[2]))
        p = self._evaluate(np.array([self._u_to_s(u)]))[0]
        return (float(p[0]), float(p[1]), float(p[2]))

    def tangent_at(self, u: float) -> Vec3:
        """Return the unit direction of travel at ``u``.

        Uses the spline derivative.  Where that vanishes the nearest
        control-polygon edge is used instead.
        """
        u = _clamp_unit(u)
        d = self._derivative(self._u_to_s(u))
        norm = float(_norms(d))
        if norm > 1e-12:
            d = d / norm
            return (float(d[0]), float(d[1]), float(d[2]))
        return self._fallback_direction(u)

    def _fallback_direction(self, u: float) -> Vec3:
        edges = np.diff(self._fitted, axis=0)
        norms = _norms(edges)
        # Start from the edge that contains u and search outwards.
        start = min(int(u * len(edges)), len(edges) - 1)
        order = sorted(range(len(edges)), key=lambda i: abs(i - start))
        for i in order:
            if norms[i] > 0.0:
                e = edges[i] / norms[i]
                return (float(e[0]), float(e[1]), float(e[2]))
        # Unreachable: construction guarantees two distinct points.
        return (0.0, 0.0, -1.0)

    def sample(self, count: int) -> List[Vec3]:
        """Return ``count`` points spaced evenly by arc length, ends included."""
        if count <= 0:
            return []
        if count == 1:
            return [self.point_at(0.0)]
        return [self.point_at(i / (count - 1)) for i in range(count)]

    def __repr__(self) -> str:
        return f"CurvePath(points={len(self._points)}, length={self.length:.4f})"


def _clamp_unit(value: float) -> float:
    if not math.isfinite(value):
        return 0.0 if value != math.inf else 1.0
    return min(max(float(value), 0.0), 1.0)
