"""
Simple in‑memory caching layer for loaded curves.

Building a :class:`CurvePath` means decoding the document, fitting the
spline and tabulating arc length.  Several navigation sessions on the
same stored curve can share one read‑only instance, so loaded curves
are cached here.  A ``CurveCacheKey`` identifies a curve by the hash of
its document and the arc‑length resolution it was built with.

The cache is an ``OrderedDict`` giving least‑recently‑used (LRU)
eviction.  When the number of cached entries exceeds
``MAX_CACHE_ENTRIES`` the oldest entry is dropped.

Usage::

    key = CurveCacheKey(file_hash=record.file_hash, divisions=200)
    curve = get_curve_from_cache(key)
    if curve is None:
        curve = await load_curve_path(record.file_path, 200)
        put_curve_in_cache(key, curve)
"""

from __future__ import annotations

from dataclasses import dataclass
from collections import OrderedDict
from threading import RLock
from typing import Optional

from .curve_loader import CurveSource, load_curve_path
from .curve_path import CurvePath


@dataclass(frozen=True)
class CurveCacheKey:
    """Unique identifier for a cached curve.

    Attributes:
        file_hash: SHA‑256 of the curve document.
        divisions: Arc‑length table resolution used to build the curve.
    """

    file_hash: str
    divisions: int


# Least-recently-used curves, oldest first.  Every read and write goes
# through ``_lock`` so get/put/evict stay atomic whichever thread calls.
_cache: "OrderedDict[CurveCacheKey, CurvePath]" = OrderedDict()
_lock = RLock()
# Maximum number of entries retained in the cache.
MAX_CACHE_ENTRIES: int = 32


def get_curve_from_cache(key: CurveCacheKey) -> Optional[CurvePath]:
    """Return the cached curve for ``key`` or ``None``."""
    with _lock:
        curve = _cache.get(key)
        if curve is not None:
            # Move the key to the end to mark it as recently used
            _cache.move_to_end(key)
        return curve


def put_curve_in_cache(key: CurveCacheKey, curve: CurvePath) -> None:
    """Store ``curve`` under ``key``, evicting the LRU entry when full."""
    with _lock:
        _cache[key] = curve
        _cache.move_to_end(key)
        if len(_cache) > MAX_CACHE_ENTRIES:
            _cache.popitem(last=False)


def evict_hash(file_hash: str) -> None:
    """Drop every cached curve built from the document ``file_hash``."""
    with _lock:
        for key in [k for k in _cache if k.file_hash == file_hash]:
            del _cache[key]


async def load_cached_curve(source: CurveSource, file_hash: str, divisions: int) -> CurvePath:
    """Return the curve for ``file_hash``, loading it from ``source`` on a miss."""
    key = CurveCacheKey(file_hash=file_hash, divisions=divisions)
    curve = get_curve_from_cache(key)
    if curve is None:
        curve = await load_curve_path(source, arc_length_divisions=divisions)
        put_curve_in_cache(key, curve)
    return curve
