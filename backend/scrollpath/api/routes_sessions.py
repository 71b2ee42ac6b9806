"""
Routes for creating and driving navigation sessions.

A client creates a session on a stored curve, forwards its wheel and
touch events to ``/input`` as they happen and calls ``/frame`` once per
rendered frame to receive the camera pose to draw with.  Sessions live
in memory only; restarting the server discards them.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import asdict, dataclass

from fastapi import APIRouter, HTTPException

from .models import (
    CameraPoseResponse,
    CurvePoint,
    FrameRequest,
    InputEventRequest,
    NavigationStateResponse,
    SessionCreateRequest,
    SessionResponse,
)
from .routes_curves import load_record_curve, require_curve_record
from ..config import MAX_SESSIONS, load_settings
from ..services.position_updater import CameraPose
from ..services.session import NavigationSession

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass
class SessionEntry:
    curve_id: str
    session: NavigationSession


# In‑memory registry of sessions keyed by sessionId, oldest first.  When
# more than MAX_SESSIONS are open the oldest one is dropped.
session_registry: "OrderedDict[str, SessionEntry]" = OrderedDict()


def _get_entry(session_id: str) -> SessionEntry:
    entry = session_registry.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return entry


def _state_response(session_id: str, session: NavigationSession) -> NavigationStateResponse:
    state = session.state
    return NavigationStateResponse(
        sessionId=session_id,
        progress=state.progress,
        target=state.target,
        phase=state.phase,
    )


def _point(v: tuple[float, float, float]) -> CurvePoint:
    return CurvePoint(x=v[0], y=v[1], z=v[2])


def _pose_response(session_id: str, entry: SessionEntry) -> CameraPoseResponse:
    session = entry.session
    camera = session.camera
    return CameraPoseResponse(
        sessionId=session_id,
        progress=session.state.progress,
        phase=session.phase,
        position=_point(camera.position),
        forward=_point(camera.orientation.forward),
        up=_point(camera.orientation.up),
        frame=session.frame_count,
    )


def _session_response(session_id: str, entry: SessionEntry) -> SessionResponse:
    return SessionResponse(
        sessionId=session_id,
        curveId=entry.curve_id,
        settings=asdict(entry.session.settings),
        state=_state_response(session_id, entry.session),
        pose=_pose_response(session_id, entry),
    )


@router.post("/curves/{curve_id}/sessions", response_model=SessionResponse, status_code=201)
async def create_session(curve_id: str, body: SessionCreateRequest | None = None) -> SessionResponse:
    """Start a navigation session at the beginning of a stored curve."""
    record = require_curve_record(curve_id)
    overrides = body.overrides() if body is not None else None
    settings = load_settings().with_overrides(overrides)
    curve = await load_record_curve(record, settings.arc_length_divisions)
    session = NavigationSession(curve, settings=settings, camera=CameraPose())
    session_id = uuid.uuid4().hex
    session_registry[session_id] = SessionEntry(curve_id=curve_id, session=session)
    while len(session_registry) > MAX_SESSIONS:
        evicted, _ = session_registry.popitem(last=False)
        logger.info("Session limit reached; dropped session %s", evicted)
    logger.info("Created session %s on curve %s", session_id, curve_id)
    return _session_response(session_id, session_registry[session_id])


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    """Return a session's navigation state and last written pose."""
    return _session_response(session_id, _get_entry(session_id))


@router.post("/sessions/{session_id}/input", response_model=NavigationStateResponse)
async def send_input(session_id: str, body: InputEventRequest) -> NavigationStateResponse:
    """Apply one raw input event.

    Unknown kinds and malformed payloads are accepted and ignored; the
    returned state is then simply unchanged.
    """
    entry = _get_entry(session_id)
    entry.session.handle_input(body.kind, body.payload)
    return _state_response(session_id, entry.session)


@router.post("/sessions/{session_id}/frame", response_model=CameraPoseResponse)
async def advance_frame(session_id: str, body: FrameRequest | None = None) -> CameraPoseResponse:
    """Advance the session by one frame and return the camera pose."""
    entry = _get_entry(session_id)
    dt = body.dt if body is not None else None
    entry.session.advance_frame(dt)
    return _pose_response(session_id, entry)


@router.post("/sessions/{session_id}/reset", response_model=CameraPoseResponse)
async def reset_session(session_id: str) -> CameraPoseResponse:
    """Move the camera back to the start of the curve."""
    entry = _get_entry(session_id)
    entry.session.reset()
    return _pose_response(session_id, entry)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str) -> None:
    """Close a session."""
    if session_registry.pop(session_id, None) is None:
        raise HTTPException(status_code=404, detail="Session not found")
