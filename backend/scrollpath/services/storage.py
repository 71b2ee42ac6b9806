"""
Local storage service for uploaded curve documents.

Documents are validated before anything is written, then stored once
per content hash under ``storage/curves/{sha256}.json``.  Each upload
gets its own ``CurveRecord`` so the same document can be registered
under several names.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from pathlib import Path

from fastapi import HTTPException, UploadFile

from ..config import STORAGE_DIR
from .curve_loader import build_curve_path
from .curves_store import (
    CurveRecord,
    count_records_for_hash,
    insert_curve_record,
)

logger = logging.getLogger(__name__)

# Directory for canonical curve documents keyed by hash.
STORAGE_CURVES_DIR = STORAGE_DIR / "curves"
STORAGE_CURVES_DIR.mkdir(parents=True, exist_ok=True)

# Uploads larger than this are rejected before parsing.
MAX_DOCUMENT_BYTES: int = 5 * 1024 * 1024


def save_curve_document(raw: bytes, name: str) -> CurveRecord:
    """Validate ``raw`` as a curve document and store it.

    Args:
        raw: The document bytes.
        name: Display name recorded with the curve.

    Returns:
        The persisted :class:`CurveRecord`.

    Raises:
        CurveFormatError: If the document is malformed.
        InsufficientPointsError: If it has fewer than two distinct points.
    """
    # Build the full curve so that anything stored is known to load.
    curve = build_curve_path(raw)
    file_hash = hashlib.sha256(raw).hexdigest()
    canonical_path = STORAGE_CURVES_DIR / f"{file_hash}.json"
    created = False
    if not canonical_path.exists():
        temp_path = STORAGE_CURVES_DIR / f"tmp_{uuid.uuid4().hex}"
        try:
            temp_path.write_bytes(raw)
            temp_path.replace(canonical_path)
            created = True
        finally:
            temp_path.unlink(missing_ok=True)
    record = CurveRecord(
        curve_id=uuid.uuid4().hex,
        file_hash=file_hash,
        name=name,
        file_path=str(canonical_path),
        point_count=len(curve.control_points),
        length=curve.length,
    )
    try:
        insert_curve_record(record)
    except Exception:
        # A document written by this call has no record pointing at it.
        if created:
            canonical_path.unlink(missing_ok=True)
        raise
    logger.info(
        "Stored curve %s (%s): %d points, length %.3f",
        record.curve_id,
        name,
        record.point_count,
        record.length,
    )
    return record


def save_curve_upload(upload_file: UploadFile) -> CurveRecord:
    """Read an uploaded file and store it via :func:`save_curve_document`."""
    logger.info("Saving uploaded curve %s", getattr(upload_file, "filename", "<unknown>"))
    chunks: list[bytes] = []
    size = 0
    while True:
        chunk = upload_file.file.read(8192)
        if not chunk:
            break
        size += len(chunk)
        if size > MAX_DOCUMENT_BYTES:
            raise HTTPException(status_code=413, detail="Curve document too large")
        chunks.append(chunk)
    name = Path(upload_file.filename or "curve.json").stem
    return save_curve_document(b"".join(chunks), name)


def remove_orphaned_document(record: CurveRecord) -> bool:
    """Delete the document behind ``record`` if no other curve uses it.

    Returns:
        True if the file was removed.
    """
    if count_records_for_hash(record.file_hash) > 0:
        return False
    path = Path(record.file_path)
    if path.exists():
        path.unlink()
        logger.debug("Removed orphaned curve document %s", path)
        return True
    return False
