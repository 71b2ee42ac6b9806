"""
Translation of device-specific input events into a single scalar delta.

Every input device ends up producing one signed number expressed in
pixels of scroll, positive meaning "forward" (wheel scrolled down,
finger moved up).  Wheel and touch deltas are measured in the same
unit, so the same physical distance moves the camera by the same
amount whichever device produced it.

Normalizers are registered per event kind::

    @register_input_kind("keyboard")
    def _keyboard(payload):
        return KEY_STEP_PX if payload.get("key") == "ArrowDown" else 0.0

The navigation state machine only ever calls :func:`normalize_input`
and never needs to know which devices exist.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, Mapping

logger = logging.getLogger(__name__)

WHEEL = "wheel"
TOUCH = "touch"
SCALAR = "scalar"

# WheelEvent.deltaMode values
DOM_DELTA_PIXEL = 0
DOM_DELTA_LINE = 1
DOM_DELTA_PAGE = 2

# Pixel equivalents used for line- and page-based wheel deltas.
LINE_HEIGHT_PX: float = 16.0
PAGE_HEIGHT_PX: float = 800.0

Normalizer = Callable[[Mapping[str, Any]], float]

_NORMALIZERS: Dict[str, Normalizer] = {}


def register_input_kind(kind: str) -> Callable[[Normalizer], Normalizer]:
    """Decorator registering ``func`` as the normalizer for ``kind``."""

    def decorator(func: Normalizer) -> Normalizer:
        _NORMALIZERS[kind.strip().lower()] = func
        return func

    return decorator


def registered_kinds() -> list[str]:
    return sorted(_NORMALIZERS)


def _number(payload: Mapping[str, Any], key: str, default: float | None = None) -> float | None:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


@register_input_kind(WHEEL)
def _normalize_wheel(payload: Mapping[str, Any]) -> float:
    delta = _number(payload, "deltaY")
    if delta is None:
        return 0.0
    mode = payload.get("deltaMode", DOM_DELTA_PIXEL)
    if mode == DOM_DELTA_LINE:
        return delta * LINE_HEIGHT_PX
    if mode == DOM_DELTA_PAGE:
        return delta * PAGE_HEIGHT_PX
    return delta


@register_input_kind(TOUCH)
def _normalize_touch(payload: Mapping[str, Any]) -> float:
    previous = _number(payload, "previousY")
    current = _number(payload, "currentY")
    if previous is None or current is None:
        return 0.0
    # Screen y grows downwards: a finger moving up is a forward swipe.
    return previous - current


@register_input_kind(SCALAR)
def _normalize_scalar(payload: Mapping[str, Any]) -> float:
    delta = _number(payload, "delta")
    return 0.0 if delta is None else delta


def normalize_input(kind: str, payload: Mapping[str, Any] | None) -> float:
    """Return the signed scroll delta, in pixels, carried by an event.

    Unknown kinds and malformed payloads yield ``0.0``; this function
    never raises.
    """
    key = kind.strip().lower() if isinstance(kind, str) else ""
    normalizer = _NORMALIZERS.get(key)
    if normalizer is None:
        logger.debug("Ignoring input of unknown kind %r", kind)
        return 0.0
    if not isinstance(payload, Mapping):
        return 0.0
    try:
        delta = float(normalizer(payload))
    except Exception:
        logger.debug("Normalizer for %r failed on %r", key, payload, exc_info=True)
        return 0.0
    if not math.isfinite(delta):
        return 0.0
    return delta
