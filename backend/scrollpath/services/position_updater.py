"""
Per-frame camera placement along a :class:`CurvePath`.

The camera sits at ``point_at(progress)`` and looks at a point a small
parameter distance ``look_ahead`` further along the curve.  Near the
end of the path there is nothing ahead to look at, so the direction is
taken from a point just behind the camera instead.  That keeps the
camera facing the direction of forward travel all the way to the end
rather than flipping round on the last frame.

The up vector is world-up ``(0, 1, 0)`` unless the camera is looking
almost straight up or down, in which case ``(0, 0, 1)`` is used so the
orientation basis never degenerates.

The updater writes into anything implementing :class:`CameraTransform`;
it has no knowledge of a particular rendering library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np

from ..config import DEFAULT_LOOK_AHEAD
from .curve_path import CurvePath
from .navigation import clamp_unit
from .vectors import Vec3, cross, dot, normalize, sub

WORLD_UP: Vec3 = (0.0, 1.0, 0.0)
SECONDARY_UP: Vec3 = (0.0, 0.0, 1.0)

# |forward · up| above this counts as parallel.
PARALLEL_THRESHOLD: float = 0.999

# Facing used if the curve gives no usable direction at all.
DEFAULT_FORWARD: Vec3 = (0.0, 0.0, -1.0)


@runtime_checkable
class CameraTransform(Protocol):
    """Anything with a settable position and look orientation."""

    def set_position(self, position: Vec3) -> None:
        ...

    def set_orientation(self, forward: Vec3, up: Vec3) -> None:
        ...


@dataclass(frozen=True)
class Orientation:
    """Orthonormal camera basis.

    Attributes:
        forward: Unit viewing direction.
        up: Unit up direction, perpendicular to ``forward``.
        right: ``forward × up``.
    """

    forward: Vec3
    up: Vec3
    right: Vec3

    def as_matrix(self) -> np.ndarray:
        """Return a 3×3 rotation whose columns are right, up and -forward.

        This is the usual camera-to-world rotation for a camera looking
        down its local -Z axis.
        """
        return np.column_stack(
            [
                np.asarray(self.right, dtype=np.float64),
                np.asarray(self.up, dtype=np.float64),
                -np.asarray(self.forward, dtype=np.float64),
            ]
        )


@dataclass
class CameraPose:
    """Minimal :class:`CameraTransform` holding the last written pose."""

    position: Vec3 = (0.0, 0.0, 0.0)
    orientation: Orientation = field(
        default_factory=lambda: Orientation(DEFAULT_FORWARD, WORLD_UP, (1.0, 0.0, 0.0))
    )

    def set_position(self, position: Vec3) -> None:
        self.position = position

    def set_orientation(self, forward: Vec3, up: Vec3) -> None:
        self.orientation = Orientation(forward=forward, up=up, right=cross(forward, up))


def orientation_from_forward(forward: Vec3, world_up: Vec3 = WORLD_UP) -> Orientation:
    """Build an orthonormal basis from a unit forward vector."""
    reference = world_up
    for candidate in (world_up, SECONDARY_UP, WORLD_UP):
        if abs(dot(forward, candidate)) <= PARALLEL_THRESHOLD:
            reference = candidate
            break
    right = normalize(cross(forward, reference)) or (1.0, 0.0, 0.0)
    up = cross(right, forward)
    return Orientation(forward=forward, up=up, right=right)


def look_direction(curve: CurvePath, progress: float, look_ahead: float = DEFAULT_LOOK_AHEAD) -> Vec3:
    """Return the unit direction the camera should face at ``progress``."""
    eps = abs(look_ahead) or DEFAULT_LOOK_AHEAD
    here = curve.point_at(progress)
    if progress + eps <= 1.0:
        chord = sub(curve.point_at(progress + eps), here)
    else:
        chord = sub(here, curve.point_at(progress - eps))
    forward = normalize(chord)
    if forward is None:
        forward = normalize(curve.tangent_at(progress))
    return forward or DEFAULT_FORWARD


def compute_camera_pose(
    curve: CurvePath,
    progress: float,
    look_ahead: float = DEFAULT_LOOK_AHEAD,
    world_up: Vec3 = WORLD_UP,
) -> tuple[Vec3, Orientation]:
    """Return the camera position and orientation for ``progress``."""
    progress = clamp_unit(float(progress))
    position = curve.point_at(progress)
    forward = look_direction(curve, progress, look_ahead)
    return position, orientation_from_forward(forward, world_up)


def update_camera(
    camera: CameraTransform,
    curve: CurvePath,
    progress: float,
    look_ahead: float = DEFAULT_LOOK_AHEAD,
    world_up: Vec3 = WORLD_UP,
) -> CameraTransform:
    """Write the pose for ``progress`` into ``camera`` and return it.

    Calling this twice with the same arguments writes identical values.
    """
    position, orientation = compute_camera_pose(curve, progress, look_ahead, world_up)
    camera.set_position(position)
    camera.set_orientation(orientation.forward, orientation.up)
    return camera
