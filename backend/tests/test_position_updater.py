"""
Tests for camera placement and orientation along a curve.
"""

from __future__ import annotations

import math
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from scrollpath.services.curve_path import CurvePath
from scrollpath.services.position_updater import (
    CameraPose,
    CameraTransform,
    compute_camera_pose,
    orientation_from_forward,
    update_camera,
)
from scrollpath.services.vectors import dot


STRAIGHT_Z = CurvePath([(0.0, 0.0, 0.0), (0.0, 0.0, 10.0)])
WINDING = CurvePath(
    [(0.0, 0.0, 0.0), (4.0, 1.0, 2.0), (6.0, 3.0, 8.0), (2.0, 5.0, 12.0), (0.0, 4.0, 16.0)]
)


class RecordingCamera:
    """Camera stand-in that records every write."""

    def __init__(self) -> None:
        self.positions = []
        self.orientations = []

    def set_position(self, position) -> None:
        self.positions.append(position)

    def set_orientation(self, forward, up) -> None:
        self.orientations.append((forward, up))


def test_straight_path_start_and_end() -> None:
    cam = update_camera(CameraPose(), STRAIGHT_Z, 0.0)
    assert cam.position == pytest.approx((0.0, 0.0, 0.0))
    assert cam.orientation.forward == pytest.approx((0.0, 0.0, 1.0))

    cam = update_camera(CameraPose(), STRAIGHT_Z, 1.0)
    assert cam.position == pytest.approx((0.0, 0.0, 10.0))
    # Still facing the direction of travel at the very end.
    assert cam.orientation.forward == pytest.approx((0.0, 0.0, 1.0))
    assert cam.orientation.up == pytest.approx((0.0, 1.0, 0.0))


def test_position_advances_monotonically_along_straight_path() -> None:
    zs = [compute_camera_pose(STRAIGHT_Z, i / 50)[0][2] for i in range(51)]
    assert all(b > a for a, b in zip(zs, zs[1:]))


def test_update_is_idempotent() -> None:
    a = update_camera(CameraPose(), WINDING, 0.37)
    b = update_camera(CameraPose(), WINDING, 0.37)
    assert a.position == b.position
    assert a.orientation == b.orientation
    update_camera(a, WINDING, 0.37)
    assert a == b


def test_vertical_travel_uses_secondary_up() -> None:
    curve = CurvePath([(0.0, 0.0, 0.0), (0.0, 10.0, 0.0)])
    _, orientation = compute_camera_pose(curve, 0.5)
    assert orientation.forward == pytest.approx((0.0, 1.0, 0.0))
    assert orientation.up == pytest.approx((0.0, 0.0, 1.0))
    assert all(math.isfinite(c) for c in orientation.right)


@pytest.mark.parametrize("progress", [0.0, 0.1, 0.45, 0.8, 0.995, 1.0])
def test_orientation_is_orthonormal(progress: float) -> None:
    _, o = compute_camera_pose(WINDING, progress)
    for v in (o.forward, o.up, o.right):
        assert math.hypot(*v) == pytest.approx(1.0)
    assert dot(o.forward, o.up) == pytest.approx(0.0, abs=1e-9)
    assert dot(o.forward, o.right) == pytest.approx(0.0, abs=1e-9)
    assert dot(o.up, o.right) == pytest.approx(0.0, abs=1e-9)

    m = o.as_matrix()
    assert m.shape == (3, 3)
    assert np.allclose(m.T @ m, np.eye(3), atol=1e-9)
    assert np.linalg.det(m) == pytest.approx(1.0)


def test_up_prefers_world_up() -> None:
    o = orientation_from_forward((1.0, 0.0, 0.0))
    assert o.up == pytest.approx((0.0, 1.0, 0.0))


def test_forward_does_not_flip_near_the_end() -> None:
    """Crossing from look-ahead to look-behind keeps the facing continuous."""
    before = compute_camera_pose(WINDING, 0.989)[1].forward
    after = compute_camera_pose(WINDING, 0.991)[1].forward
    end = compute_camera_pose(WINDING, 1.0)[1].forward
    assert dot(before, after) > 0.99
    assert dot(after, end) > 0.99


def test_progress_outside_range_is_clamped() -> None:
    assert compute_camera_pose(WINDING, -1.0) == compute_camera_pose(WINDING, 0.0)
    assert compute_camera_pose(WINDING, 2.0) == compute_camera_pose(WINDING, 1.0)


def test_any_camera_transform_can_be_driven() -> None:
    cam = RecordingCamera()
    assert isinstance(cam, CameraTransform)
    assert isinstance(CameraPose(), CameraTransform)

    update_camera(cam, STRAIGHT_Z, 0.5)
    assert len(cam.positions) == 1
    assert cam.positions[0] == pytest.approx((0.0, 0.0, 5.0), abs=1e-6)
    forward, up = cam.orientations[0]
    assert forward == pytest.approx((0.0, 0.0, 1.0))
    assert up == pytest.approx((0.0, 1.0, 0.0))


def test_repeated_start_point_keeps_facing_forward() -> None:
    """A doubled first control point must not turn the camera round."""
    curve = CurvePath([(0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, 10.0)])
    poses = [compute_camera_pose(curve, i / 400) for i in range(401)]
    zs = [position[2] for position, _ in poses]
    assert min(zs) >= 0.0
    assert all(b >= a for a, b in zip(zs, zs[1:]))
    for _, orientation in poses:
        assert orientation.forward == pytest.approx((0.0, 0.0, 1.0))
