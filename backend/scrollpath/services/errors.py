"""
Exceptions raised while loading a curve document.

All of them derive from :class:`CurveLoadError` so callers that only
need to know that a session cannot start can catch a single type.  They
are raised during the one-time load phase only; navigation and frame
updates never raise.
"""

from __future__ import annotations


class CurveLoadError(Exception):
    """Base class for failures that prevent a curve from being built."""


class CurveFormatError(CurveLoadError):
    """The document is malformed or structurally invalid."""


class InsufficientPointsError(CurveLoadError):
    """The document holds fewer than two distinct control points."""

    def __init__(self, count: int, message: str | None = None) -> None:
        self.count = count
        super().__init__(
            message or f"A curve needs at least two distinct control points, got {count}"
        )


class SourceUnavailableError(CurveLoadError):
    """The curve source could not be retrieved."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Curve source {source!r} is unavailable: {reason}")
