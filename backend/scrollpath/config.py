"""
Runtime configuration for the scrollpath backend.

Defaults live here as module-level constants.  Each tunable can be
overridden through an environment variable so that deployments and
tests can adjust scroll sensitivity, damping and storage location
without touching code.  Invalid values are ignored and the default is
used instead (a warning is logged).
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Progress gained per pixel of normalized scroll.  A typical wheel notch
# reports ~100 px, so one notch moves the camera 2% of the way along the
# path.
DEFAULT_SENSITIVITY: float = 0.0002

# Rate (1/s) of the exponential ease from progress towards its target.
DEFAULT_DAMPING_RATE: float = 6.0

# Once progress is this close to its target it snaps onto it.
DEFAULT_SNAP_THRESHOLD: float = 1e-5

# Parameter distance between the camera and the point it looks at.
DEFAULT_LOOK_AHEAD: float = 0.01

# Number of chord samples used for arc-length reparameterization.
DEFAULT_ARC_LENGTH_DIVISIONS: int = 200

# Upper bound on a single frame step, so a stalled tab does not jump.
DEFAULT_MAX_FRAME_DT: float = 0.25

# Storage root for uploaded curve documents and the SQLite database.
# Defaults to ``backend/storage`` next to the package.
STORAGE_DIR: Path = Path(
    os.getenv("SCROLLPATH_STORAGE_DIR")
    or Path(__file__).resolve().parents[1] / "storage"
)


@dataclass(frozen=True)
class NavigationSettings:
    """Tunables shared by the navigation state machine and updater.

    Attributes:
        sensitivity: Progress change per unit of normalized delta.
        smoothing: When False, deltas move progress immediately.
        damping_rate: Exponential approach rate in 1/s.
        snap_threshold: Gap below which progress snaps to its target.
        look_ahead: Parameter offset of the look-at sample.
        arc_length_divisions: Resolution of the arc-length table.
        max_frame_dt: Largest frame step accepted from the clock.
    """

    sensitivity: float = DEFAULT_SENSITIVITY
    smoothing: bool = True
    damping_rate: float = DEFAULT_DAMPING_RATE
    snap_threshold: float = DEFAULT_SNAP_THRESHOLD
    look_ahead: float = DEFAULT_LOOK_AHEAD
    arc_length_divisions: int = DEFAULT_ARC_LENGTH_DIVISIONS
    max_frame_dt: float = DEFAULT_MAX_FRAME_DT

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "NavigationSettings":
        """Return a copy with the non-``None`` entries of ``overrides`` applied."""
        if not overrides:
            return self
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return default
    if not math.isfinite(value) or value < minimum:
        logger.warning("Ignoring %s=%r: out of range", name, raw)
        return default
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> NavigationSettings:
    """Build :class:`NavigationSettings` from the environment.

    Recognised variables are ``SCROLLPATH_SENSITIVITY``,
    ``SCROLLPATH_SMOOTHING``, ``SCROLLPATH_DAMPING_RATE``,
    ``SCROLLPATH_LOOK_AHEAD`` and ``SCROLLPATH_ARC_DIVISIONS``.
    """
    divisions = int(
        _env_float("SCROLLPATH_ARC_DIVISIONS", DEFAULT_ARC_LENGTH_DIVISIONS, minimum=1.0)
    )
    return NavigationSettings(
        sensitivity=_env_float("SCROLLPATH_SENSITIVITY", DEFAULT_SENSITIVITY),
        smoothing=_env_bool("SCROLLPATH_SMOOTHING", True),
        damping_rate=_env_float("SCROLLPATH_DAMPING_RATE", DEFAULT_DAMPING_RATE),
        look_ahead=_env_float("SCROLLPATH_LOOK_AHEAD", DEFAULT_LOOK_AHEAD),
        arc_length_divisions=divisions,
    )


# Maximum number of live navigation sessions kept by the HTTP service.
MAX_SESSIONS: int = int(_env_float("SCROLLPATH_MAX_SESSIONS", 256, minimum=1.0))
