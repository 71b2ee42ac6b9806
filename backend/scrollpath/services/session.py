"""
A navigation session: one curve, one navigation state, one camera.

The session is what a host frame loop talks to.  Input events go to
:meth:`NavigationSession.handle_input` as they arrive, and the host
calls :meth:`NavigationSession.advance_frame` once per displayed frame.
Nothing here schedules itself; a session simply stops when the host
stops calling it.

Use :meth:`NavigationSession.open` to load the curve and create the
session in one step, which guarantees the curve is ready before any
input is processed.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, Mapping, Optional

from ..config import NavigationSettings
from .curve_loader import CurveSource, load_curve_path
from .curve_path import CurvePath
from .navigation import NavigationPhase, NavigationState, NavigationStateMachine
from .position_updater import CameraPose, CameraTransform, update_camera

logger = logging.getLogger(__name__)


class NavigationSession:
    """Drive a camera along ``curve`` from scroll/touch input.

    Args:
        curve: The loaded curve.  Shared read-only; may be reused by
            other sessions.
        settings: Navigation tunables.  Defaults to
            :class:`NavigationSettings` defaults.
        camera: Transform written on every frame.  A fresh
            :class:`CameraPose` is used when omitted.
        clock: Monotonic time source in seconds, used when
            :meth:`advance_frame` is called without ``dt``.
    """

    def __init__(
        self,
        curve: CurvePath,
        settings: Optional[NavigationSettings] = None,
        camera: Optional[CameraTransform] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.settings = settings or NavigationSettings()
        self._curve = curve
        self._state = NavigationState()
        self._machine = NavigationStateMachine(
            self._state,
            sensitivity=self.settings.sensitivity,
            smoothing=self.settings.smoothing,
            damping_rate=self.settings.damping_rate,
            snap_threshold=self.settings.snap_threshold,
        )
        self._camera: CameraTransform = camera if camera is not None else CameraPose()
        self._clock = clock
        self._last_frame_time: Optional[float] = None
        self.frame_count = 0
        # Place the camera at the start so it is valid before the first frame.
        update_camera(self._camera, self._curve, self._state.progress, self.settings.look_ahead)

    @classmethod
    async def open(
        cls,
        source: CurveSource,
        settings: Optional[NavigationSettings] = None,
        camera: Optional[CameraTransform] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> "NavigationSession":
        """Load the curve at ``source`` and return a session positioned at its start.

        Raises:
            CurveLoadError: If the curve cannot be loaded; no session is
                created in that case.
        """
        settings = settings or NavigationSettings()
        curve = await load_curve_path(source, arc_length_divisions=settings.arc_length_divisions)
        return cls(curve, settings=settings, camera=camera, clock=clock)

    @property
    def curve(self) -> CurvePath:
        return self._curve

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def phase(self) -> NavigationPhase:
        return self._state.phase

    @property
    def camera(self) -> CameraTransform:
        return self._camera

    def handle_input(self, kind: str, payload: Mapping[str, Any] | None) -> float:
        """Apply a raw input event; returns the current progress."""
        return self._machine.handle_input(kind, payload)

    def apply_delta(self, delta: float) -> float:
        """Apply an already normalized delta; returns the current progress."""
        return self._machine.apply_delta(delta)

    def advance_frame(self, dt: Optional[float] = None) -> CameraTransform:
        """Advance damping by one frame and write the camera pose.

        Args:
            dt: Frame duration in seconds.  When omitted the time since
                the previous frame is read from the clock (zero for the
                first frame).  Steps are capped at
                ``settings.max_frame_dt``.

        Returns:
            The camera transform that was written.
        """
        now = self._clock()
        if dt is None:
            dt = 0.0 if self._last_frame_time is None else now - self._last_frame_time
        self._last_frame_time = now
        if not math.isfinite(dt) or dt < 0.0:
            dt = 0.0
        dt = min(dt, self.settings.max_frame_dt)

        self._machine.advance(dt)
        update_camera(self._camera, self._curve, self._state.progress, self.settings.look_ahead)
        self.frame_count += 1
        return self._camera

    def reset(self) -> CameraTransform:
        """Jump back to the start of the path."""
        self._machine.reset()
        return update_camera(self._camera, self._curve, self._state.progress, self.settings.look_ahead)
