"""
Pydantic data models for the scrollpath API.

These models define the shapes of requests and responses used by the
backend.  Keeping the schemas in one place makes the API contract easy
to review and lets the route modules stay focused on behaviour.
"""

from __future__ import annotations

from typing import List, Dict, Any
from pydantic import BaseModel, Field

from ..services.navigation import NavigationPhase


class CurvePoint(BaseModel):
    """Single 3D point."""

    x: float
    y: float
    z: float


class CurveInfo(BaseModel):
    """Metadata describing a stored curve document."""

    curveId: str = Field(..., description="Unique identifier for the stored curve")
    name: str = Field(..., description="Display name, taken from the uploaded filename")
    pointCount: int = Field(..., description="Number of control points in the document")
    length: float = Field(..., description="Approximate arc length of the fitted curve")
    createdAt: Any = Field(..., description="Timestamp of when the curve was uploaded")


class CurveDetail(CurveInfo):
    """Curve metadata plus its control points."""

    controlPoints: List[CurvePoint] = Field(
        ..., description="Control points in traversal order"
    )


class CurveSamplesResponse(BaseModel):
    """Points sampled evenly by arc length along a curve."""

    curveId: str = Field(..., description="Identifier of the sampled curve")
    length: float = Field(..., description="Approximate arc length of the curve")
    points: List[CurvePoint] = Field(..., description="Sampled points, both ends included")


class SessionCreateRequest(BaseModel):
    """Optional overrides for a new navigation session.

    Fields left unset use the server's configured defaults.
    """

    sensitivity: float | None = Field(
        default=None, ge=0.0, description="Progress gained per pixel of scroll"
    )
    smoothing: bool | None = Field(
        default=None, description="Ease progress towards its target over several frames"
    )
    dampingRate: float | None = Field(
        default=None, ge=0.0, description="Exponential easing rate in 1/s"
    )
    lookAhead: float | None = Field(
        default=None,
        gt=0.0,
        le=0.5,
        description="Parameter distance between the camera and its look-at point",
    )

    def overrides(self) -> Dict[str, Any]:
        return {
            "sensitivity": self.sensitivity,
            "smoothing": self.smoothing,
            "damping_rate": self.dampingRate,
            "look_ahead": self.lookAhead,
        }


class InputEventRequest(BaseModel):
    """A raw input event forwarded from the client."""

    kind: str = Field(..., description="Event kind, e.g. 'wheel', 'touch' or 'scalar'")
    payload: Dict[str, Any] = Field(
        default_factory=dict,
        description="Kind-specific fields such as deltaY/deltaMode or previousY/currentY",
    )


class FrameRequest(BaseModel):
    """Request to advance a session by one frame."""

    dt: float | None = Field(
        default=None,
        ge=0.0,
        description="Frame duration in seconds; measured server-side when omitted",
    )


class NavigationStateResponse(BaseModel):
    """Current navigation state of a session."""

    sessionId: str
    progress: float = Field(..., description="Camera position along the curve in [0, 1]")
    target: float = Field(..., description="Position the camera is easing towards")
    phase: NavigationPhase


class CameraPoseResponse(BaseModel):
    """Camera transform written for the latest frame."""

    sessionId: str
    progress: float
    phase: NavigationPhase
    position: CurvePoint
    forward: CurvePoint
    up: CurvePoint
    frame: int = Field(..., description="Number of frames advanced so far")


class SessionResponse(BaseModel):
    """Returned when a session is created or inspected."""

    sessionId: str
    curveId: str
    settings: Dict[str, Any]
    state: NavigationStateResponse
    pose: CameraPoseResponse
