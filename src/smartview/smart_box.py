"""Smart Box: the padded bounding box around the filtered contracts."""

from __future__ import annotations

import logging
from typing import Iterable

from shapely.geometry import MultiPoint

from .config import SmartBoxPolicy
from .geo import normalize_longitude
from .models import BoundingBox, CanvasSize, LatLng, LocatedEntity, SmartBox
from .regions import CONUS_BOUNDS

_LOGGER = logging.getLogger("smartview.smart_box")

MODE_DEFAULT = "default"
MODE_SINGLE = "single"
MODE_FITTED = "fitted"

MAX_LATITUDE_DEG = 90.0


def normalized_points(entities: Iterable[LocatedEntity]) -> list[tuple[float, float]]:
    """(lng, lat) pairs in the negative-west convention, skipping unusable records."""
    points: list[tuple[float, float]] = []
    for entity in entities:
        if entity.latitude is None or entity.longitude is None:
            continue
        points.append((normalize_longitude(entity.longitude), entity.latitude))
    return points


def default_smart_box() -> SmartBox:
    return SmartBox(
        box=CONUS_BOUNDS,
        raw_box=CONUS_BOUNDS,
        centroid=CONUS_BOUNDS.center,
        entity_count=0,
        mode=MODE_DEFAULT,
    )


def compute_smart_box(
    entities: Iterable[LocatedEntity],
    canvas: CanvasSize,
    policy: SmartBoxPolicy | None = None,
) -> SmartBox:
    """Build the Smart Box for ``entities`` shown on a ``canvas``-sized panel.

    Padding is a fixed on-screen distance (``target_buffer_px``) converted to
    degrees with the raw box's degrees-per-pixel, then clamped to
    ``[min_padding_deg, max_padding_deg]``.
    """
    policy = policy or SmartBoxPolicy()
    points = normalized_points(entities)
    if not points:
        _LOGGER.debug("No located contracts; using the CONUS reference box.")
        return default_smart_box()

    if len(points) == 1:
        lng, lat = points[0]
        half = policy.single_entity_half_span_deg
        box = _clamp_lat(BoundingBox.around(lat, lng, half, half))
        return SmartBox(
            box=box,
            raw_box=box,
            centroid=LatLng(lat=lat, lng=lng),
            entity_count=1,
            mode=MODE_SINGLE,
            padding_deg=(half, half),
        )

    min_lng, min_lat, max_lng, max_lat = (float(v) for v in MultiPoint(points).bounds)
    raw_box = BoundingBox(lat_min=min_lat, lat_max=max_lat, lng_min=min_lng, lng_max=max_lng)
    if not canvas.is_usable:
        _LOGGER.debug("Canvas %s not usable; padding against fallback canvas.", canvas)
        canvas = policy.fallback_canvas

    pad_lat = _clamp(
        policy.target_buffer_px * raw_box.lat_span / canvas.height_px,
        policy.min_padding_deg,
        policy.max_padding_deg,
    )
    pad_lng = _clamp(
        policy.target_buffer_px * raw_box.lng_span / canvas.width_px,
        policy.min_padding_deg,
        policy.max_padding_deg,
    )
    smart_box = SmartBox(
        box=_clamp_lat(raw_box.expanded(pad_lat, pad_lng)),
        raw_box=raw_box,
        centroid=raw_box.center,
        entity_count=len(points),
        mode=MODE_FITTED,
        padding_deg=(pad_lat, pad_lng),
    )
    _LOGGER.debug(
        "Smart box over %d contracts: raw=%s padding=(%.4f, %.4f)",
        len(points),
        raw_box.to_dict(),
        pad_lat,
        pad_lng,
    )
    return smart_box


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def _clamp_lat(box: BoundingBox) -> BoundingBox:
    # Padding may push past a pole; the exported box stays on the globe.
    return BoundingBox(
        lat_min=_clamp(box.lat_min, -MAX_LATITUDE_DEG, MAX_LATITUDE_DEG),
        lat_max=_clamp(box.lat_max, -MAX_LATITUDE_DEG, MAX_LATITUDE_DEG),
        lng_min=box.lng_min,
        lng_max=box.lng_max,
    )
