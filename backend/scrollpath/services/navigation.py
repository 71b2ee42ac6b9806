"""
Navigation state and the state machine that mutates it.

``NavigationState.progress`` is the camera's normalized position along
the curve.  ``target`` is where progress is heading: scroll input moves
the target, and :meth:`NavigationStateMachine.advance` eases progress
towards it once per frame.  The gap between them is the pending scroll
momentum.  Both values are clamped to ``[0, 1]``; reaching an end stops
motion in that direction until input in the opposite direction arrives.

With smoothing disabled the target and progress move together and each
input is applied immediately.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from ..config import (
    DEFAULT_DAMPING_RATE,
    DEFAULT_SENSITIVITY,
    DEFAULT_SNAP_THRESHOLD,
)
from .input_normalization import normalize_input

logger = logging.getLogger(__name__)


class NavigationPhase(str, Enum):
    AT_START = "AT_START"
    IN_TRANSIT = "IN_TRANSIT"
    AT_END = "AT_END"


def clamp_unit(value: float) -> float:
    return min(max(value, 0.0), 1.0)


@dataclass
class NavigationState:
    """Mutable navigation state for one session.

    Attributes:
        progress: Current position along the curve, in ``[0, 1]``.
        target: Position progress is easing towards, in ``[0, 1]``.
    """

    progress: float = 0.0
    target: float = 0.0

    @property
    def pending(self) -> float:
        """Scroll momentum not yet applied to ``progress``."""
        return self.target - self.progress

    @property
    def phase(self) -> NavigationPhase:
        if self.progress <= 0.0:
            return NavigationPhase.AT_START
        if self.progress >= 1.0:
            return NavigationPhase.AT_END
        return NavigationPhase.IN_TRANSIT


class NavigationStateMachine:
    """Apply normalized scroll deltas and damping to a :class:`NavigationState`.

    Args:
        state: The state to mutate.  The machine is its only writer.
        sensitivity: Progress change per unit of normalized delta.
        smoothing: Ease progress towards the target over several frames
            instead of jumping on each input.
        damping_rate: Exponential approach rate (1/s).  After ``t``
            seconds a fraction ``1 - exp(-damping_rate * t)`` of the
            pending momentum has been applied, independent of how the
            time was split into frames.  A rate of zero disables
            damping, so progress reaches the target on the next frame.
        snap_threshold: Remaining gap below which progress is set to
            the target exactly.
    """

    def __init__(
        self,
        state: NavigationState,
        sensitivity: float = DEFAULT_SENSITIVITY,
        smoothing: bool = True,
        damping_rate: float = DEFAULT_DAMPING_RATE,
        snap_threshold: float = DEFAULT_SNAP_THRESHOLD,
    ) -> None:
        self.state = state
        self.sensitivity = abs(float(sensitivity))
        self.smoothing = smoothing
        self.damping_rate = max(0.0, float(damping_rate))
        self.snap_threshold = max(0.0, float(snap_threshold))

    def apply_delta(self, delta: float) -> float:
        """Apply one normalized scroll delta and return the current progress.

        Positive deltas move forward.  Zero and non-finite deltas are
        ignored.  Never raises.
        """
        if not isinstance(delta, (int, float)) or not math.isfinite(delta) or delta == 0:
            return self.state.progress
        step = self.sensitivity * delta
        if self.smoothing:
            self.state.target = clamp_unit(self.state.target + step)
        else:
            self.state.progress = clamp_unit(self.state.progress + step)
            self.state.target = self.state.progress
        logger.debug(
            "delta=%.3f step=%.6f progress=%.6f target=%.6f",
            delta,
            step,
            self.state.progress,
            self.state.target,
        )
        return self.state.progress

    def handle_input(self, kind: str, payload: Mapping[str, Any] | None) -> float:
        """Normalize a raw device event and apply it."""
        return self.apply_delta(normalize_input(kind, payload))

    def advance(self, dt: float) -> float:
        """Move progress towards the target for a frame lasting ``dt`` seconds."""
        state = self.state
        if not isinstance(dt, (int, float)) or not math.isfinite(dt) or dt <= 0:
            return state.progress
        gap = state.target - state.progress
        if gap == 0.0:
            return state.progress
        if not self.smoothing or self.damping_rate == 0.0:
            fraction = 1.0
        else:
            fraction = 1.0 - math.exp(-self.damping_rate * dt)
        remaining = gap * (1.0 - fraction)
        if abs(remaining) <= self.snap_threshold:
            state.progress = state.target
        else:
            state.progress = clamp_unit(state.progress + gap * fraction)
        return state.progress

    def reset(self) -> None:
        """Return to the start of the path."""
        self.state.progress = 0.0
        self.state.target = 0.0
