"""
Loading of curve documents into :class:`CurvePath` objects.

A curve document is JSON holding an ordered list of 3D control points.
Two top-level shapes are accepted::

    [{"x": 0, "y": 0, "z": 0}, {"x": 0, "y": 0, "z": 10}]
    {"points": [[0, 0, 0], [0, 0, 10]], "name": "intro"}

Each record is either an object with numeric ``x``, ``y`` and ``z``
members (other members are ignored) or a three-element numeric array.
Every coordinate must be a finite real number.

Loading is all-or-nothing: either a fully built curve is returned or
one of the :mod:`errors <scrollpath.services.errors>` exceptions is
raised.  Nothing outside the returned value is modified.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import os
from pathlib import Path
from typing import Any, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

from ..config import DEFAULT_ARC_LENGTH_DIVISIONS
from .curve_path import ControlPointSet, CurvePath
from .errors import CurveFormatError, InsufficientPointsError, SourceUnavailableError
from .vectors import Vec3

logger = logging.getLogger(__name__)

CurveSource = Union[str, "os.PathLike[str]"]

_AXES = ("x", "y", "z")


def _coordinate(value: Any, where: str) -> float:
    # bool is an int subclass but never a meaningful coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CurveFormatError(f"{where}: expected a number, got {type(value).__name__}")
    try:
        result = float(value)
    except OverflowError as exc:
        raise CurveFormatError(f"{where}: coordinate out of range") from exc
    if not math.isfinite(result):
        raise CurveFormatError(f"{where}: coordinate must be finite, got {value!r}")
    return result


def _parse_record(record: Any, index: int) -> Vec3:
    if isinstance(record, dict):
        missing = [axis for axis in _AXES if axis not in record]
        if missing:
            raise CurveFormatError(f"point {index}: missing coordinate(s) {', '.join(missing)}")
        return (
            _coordinate(record["x"], f"point {index}.x"),
            _coordinate(record["y"], f"point {index}.y"),
            _coordinate(record["z"], f"point {index}.z"),
        )
    if isinstance(record, (list, tuple)):
        if len(record) != 3:
            raise CurveFormatError(
                f"point {index}: expected 3 coordinates, got {len(record)}"
            )
        return tuple(  # type: ignore[return-value]
            _coordinate(v, f"point {index}[{axis}]") for axis, v in enumerate(record)
        )
    raise CurveFormatError(
        f"point {index}: expected an object or array, got {type(record).__name__}"
    )


def parse_curve_document(document: Any) -> ControlPointSet:
    """Validate a decoded curve document and return its control points.

    Args:
        document: The result of decoding the JSON text.

    Returns:
        The ordered control points as a tuple of ``(x, y, z)`` tuples.

    Raises:
        CurveFormatError: If the structure or a coordinate is invalid.
        InsufficientPointsError: If fewer than two points are present.
    """
    if isinstance(document, dict):
        if "points" not in document:
            raise CurveFormatError("curve document has no 'points' member")
        records = document["points"]
    else:
        records = document
    if not isinstance(records, list):
        raise CurveFormatError(
            f"expected a list of points, got {type(records).__name__}"
        )
    points = tuple(_parse_record(r, i) for i, r in enumerate(records))
    if len(points) < 2:
        raise InsufficientPointsError(len(points))
    return points


def decode_curve_document(raw: Union[bytes, str]) -> ControlPointSet:
    """Decode JSON text and validate it as a curve document."""
    try:
        document = json.loads(raw)
    except ValueError as exc:
        raise CurveFormatError(f"curve document is not valid JSON: {exc}") from exc
    return parse_curve_document(document)


def build_curve_path(
    raw: Union[bytes, str],
    arc_length_divisions: int = DEFAULT_ARC_LENGTH_DIVISIONS,
) -> CurvePath:
    """Decode a curve document and build the corresponding curve."""
    points = decode_curve_document(raw)
    return CurvePath(points, arc_length_divisions=arc_length_divisions)


def resolve_source(source: CurveSource) -> Path:
    """Turn a source identifier into a filesystem path.

    Plain paths and ``file://`` URIs are supported.  Any other URI
    scheme raises :class:`SourceUnavailableError`.
    """
    text = os.fspath(source)
    parsed = urlparse(text)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    # Single-letter schemes are Windows drive letters, not URIs.
    if len(parsed.scheme) > 1:
        raise SourceUnavailableError(text, f"unsupported scheme '{parsed.scheme}'")
    return Path(text)


def read_source(source: CurveSource) -> bytes:
    """Read the raw bytes behind ``source``.

    Raises:
        SourceUnavailableError: If the file is missing or unreadable.
    """
    path = resolve_source(source)
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise SourceUnavailableError(str(source), "not found") from exc
    except OSError as exc:
        raise SourceUnavailableError(str(source), exc.strerror or str(exc)) from exc


async def load_curve_path(
    source: CurveSource,
    arc_length_divisions: int = DEFAULT_ARC_LENGTH_DIVISIONS,
) -> CurvePath:
    """Load a curve document from ``source`` and build a :class:`CurvePath`.

    The file read runs in a worker thread so the event loop is not
    blocked.  This must complete before any navigation can start.

    Raises:
        SourceUnavailableError: If the document cannot be retrieved.
        CurveFormatError: If the document is malformed.
        InsufficientPointsError: If fewer than two distinct points exist.
    """
    raw = await asyncio.to_thread(read_source, source)
    try:
        curve = build_curve_path(raw, arc_length_divisions=arc_length_divisions)
    except (CurveFormatError, InsufficientPointsError) as exc:
        logger.warning("Rejected curve document %s: %s", source, exc)
        raise
    logger.info(
        "Loaded curve from %s: %d control points, length %.3f",
        source,
        len(curve.control_points),
        curve.length,
    )
    return curve

