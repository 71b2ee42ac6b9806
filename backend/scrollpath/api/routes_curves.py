"""
Routes for curve document upload, inspection, sampling and export.

Curve documents are validated on upload, so every stored curve is known
to load.  Sampling and export read the document back through the curve
cache so that repeated previews do not refit the spline.
"""

from __future__ import annotations

import csv
import io
from typing import NoReturn

from fastapi import APIRouter, File, HTTPException, Query, Response, UploadFile

from .models import CurveDetail, CurveInfo, CurvePoint, CurveSamplesResponse
from ..config import DEFAULT_ARC_LENGTH_DIVISIONS
from ..services.curve_cache import evict_hash, load_cached_curve
from ..services.curve_path import CurvePath
from ..services.curves_store import (
    CurveRecord,
    delete_curve as delete_curve_record,
    get_curve_record,
    list_curves as list_curve_records,
)
from ..services.errors import (
    CurveFormatError,
    CurveLoadError,
    InsufficientPointsError,
    SourceUnavailableError,
)
from ..services.storage import remove_orphaned_document, save_curve_upload


router = APIRouter()

# Upper bound on the number of points returned by sampling endpoints.
MAX_SAMPLE_POINTS: int = 5000


def raise_for_load_error(exc: CurveLoadError) -> NoReturn:
    """Translate a curve loading failure into an HTTP error."""
    if isinstance(exc, SourceUnavailableError):
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if isinstance(exc, (CurveFormatError, InsufficientPointsError)):
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    raise HTTPException(status_code=500, detail=str(exc)) from exc


def _info(record: CurveRecord) -> CurveInfo:
    return CurveInfo(
        curveId=record.curve_id,
        name=record.name,
        pointCount=record.point_count,
        length=record.length,
        createdAt=record.created_at,
    )


def require_curve_record(curve_id: str) -> CurveRecord:
    record = get_curve_record(curve_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Curve not found")
    return record


async def load_record_curve(
    record: CurveRecord, divisions: int = DEFAULT_ARC_LENGTH_DIVISIONS
) -> CurvePath:
    """Load (or fetch from cache) the curve behind a stored record."""
    try:
        return await load_cached_curve(record.file_path, record.file_hash, divisions)
    except CurveLoadError as exc:
        raise_for_load_error(exc)


@router.post("/curves", response_model=CurveInfo, status_code=201)
async def upload_curve(file: UploadFile = File(...)) -> CurveInfo:
    """Upload a JSON curve document.

    The document must decode to at least two 3D points.  Malformed
    documents are rejected with 422 and nothing is stored.
    """
    try:
        record = save_curve_upload(file)
    except CurveLoadError as exc:
        raise_for_load_error(exc)
    return _info(record)


@router.get("/curves", response_model=list[CurveInfo])
async def list_curves() -> list[CurveInfo]:
    """Return all stored curves."""
    return [_info(r) for r in list_curve_records()]


@router.get("/curves/{curve_id}", response_model=CurveDetail)
async def get_curve(curve_id: str) -> CurveDetail:
    """Return a stored curve's metadata and control points."""
    record = require_curve_record(curve_id)
    curve = await load_record_curve(record)
    info = _info(record)
    return CurveDetail(
        **info.model_dump(),
        controlPoints=[CurvePoint(x=p[0], y=p[1], z=p[2]) for p in curve.control_points],
    )


@router.delete("/curves/{curve_id}", status_code=204)
async def delete_curve(curve_id: str) -> None:
    """Delete a curve and, if no other curve shares it, its document.

    Sessions already running on the curve keep their loaded copy.
    """
    record = delete_curve_record(curve_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Curve not found")
    if remove_orphaned_document(record):
        evict_hash(record.file_hash)


@router.get("/curves/{curve_id}/samples", response_model=CurveSamplesResponse)
async def sample_curve(
    curve_id: str,
    count: int = Query(default=128, ge=2, le=MAX_SAMPLE_POINTS),
) -> CurveSamplesResponse:
    """Sample ``count`` points spaced evenly by arc length."""
    record = require_curve_record(curve_id)
    curve = await load_record_curve(record)
    points = [CurvePoint(x=p[0], y=p[1], z=p[2]) for p in curve.sample(count)]
    return CurveSamplesResponse(curveId=curve_id, length=curve.length, points=points)


@router.get("/curves/{curve_id}/export")
async def export_curve(
    curve_id: str,
    count: int = Query(default=128, ge=2, le=MAX_SAMPLE_POINTS),
) -> Response:
    """Export evenly spaced samples of a curve as CSV (``x,y,z``)."""
    record = require_curve_record(curve_id)
    curve = await load_record_curve(record)
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["x", "y", "z"])
    for p in curve.sample(count):
        writer.writerow([f"{p[0]:.6f}", f"{p[1]:.6f}", f"{p[2]:.6f}"])
    return Response(content=output.getvalue(), media_type="text/csv")
