"""Fit a bounding box to a pixel canvas on a Web Mercator tile map."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Any

from pyproj import Transformer

from .config import ViewportPolicy
from .geo import normalize_longitude
from .markers import CONTRACT_RADIUS_M, circle_bounds
from .models import BoundingBox, CanvasSize, LatLng, LocatedEntity, SmartBox, Viewport

_LOGGER = logging.getLogger("smartview.viewport")

EARTH_RADIUS_M = 6_378_137.0
WORLD_WIDTH_M = 2.0 * math.pi * EARTH_RADIUS_M
_MIN_SPAN_M = 1e-3


@lru_cache(maxsize=1)
def _web_mercator_transformer() -> Any:
    return Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


def mercator_y(lat: float) -> float:
    _, y = _web_mercator_transformer().transform(0.0, float(lat))
    return float(y)


def mercator_x_span(lng_min: float, lng_max: float) -> float:
    """Metres between two meridians; linear, so extended longitudes stay contiguous."""
    return EARTH_RADIUS_M * math.radians(lng_max - lng_min)


def projected_span_m(box: BoundingBox, policy: ViewportPolicy | None = None) -> tuple[float, float]:
    policy = policy or ViewportPolicy()
    box = _prepare_box(box, policy)
    width = mercator_x_span(box.lng_min, box.lng_max)
    height = mercator_y(box.lat_max) - mercator_y(box.lat_min)
    return (max(width, 0.0), max(height, 0.0))


def projected_size_px(
    box: BoundingBox,
    zoom: float,
    policy: ViewportPolicy | None = None,
) -> tuple[float, float]:
    """Pixel width and height of ``box`` rendered at ``zoom``."""
    policy = policy or ViewportPolicy()
    width_m, height_m = projected_span_m(box, policy)
    scale = policy.tile_size_px * (2.0 ** zoom) / WORLD_WIDTH_M
    return (width_m * scale, height_m * scale)


def fit_viewport(
    box: BoundingBox,
    canvas: CanvasSize,
    policy: ViewportPolicy | None = None,
    *,
    center: LatLng | None = None,
) -> Viewport:
    """Largest fractional zoom at which ``box`` fits inside the padded canvas.

    Each axis gets its own zoom from the projected span; the smaller one wins
    so neither axis overflows. The result is snapped down to
    ``policy.zoom_snap`` and clamped to ``[min_zoom, max_zoom]``.
    """
    policy = policy or ViewportPolicy()
    prepared = _prepare_box(box, policy)
    width_m, height_m = projected_span_m(prepared, policy)
    avail_w = max(canvas.width_px - 2.0 * policy.outer_padding_px, 1.0)
    avail_h = max(canvas.height_px - 2.0 * policy.outer_padding_px, 1.0)

    zoom_x = _axis_zoom(avail_w, width_m, policy.tile_size_px)
    zoom_y = _axis_zoom(avail_h, height_m, policy.tile_size_px)
    zoom = _snap_down(min(zoom_x, zoom_y), policy.zoom_snap)
    zoom = max(policy.min_zoom, min(zoom, policy.max_zoom))

    target = center if center is not None else prepared.center
    _LOGGER.debug(
        "Fitted %s into %sx%s px: zoom_x=%.3f zoom_y=%.3f -> %.2f",
        prepared.to_dict(),
        canvas.width_px,
        canvas.height_px,
        zoom_x,
        zoom_y,
        zoom,
    )
    return Viewport(center=target, zoom=zoom)


def fit_smart_box(
    smart_box: SmartBox,
    canvas: CanvasSize,
    policy: ViewportPolicy | None = None,
) -> Viewport:
    """Fit the padded box, centred on the raw contract centroid."""
    return fit_viewport(smart_box.box, canvas, policy, center=smart_box.centroid)


def focus_viewport(
    entity: LocatedEntity,
    canvas: CanvasSize,
    policy: ViewportPolicy | None = None,
    *,
    radius_m: float = CONTRACT_RADIUS_M,
) -> Viewport | None:
    """Viewport showing one contract's whole radius circle, centred on it."""
    if entity.latitude is None or entity.longitude is None:
        return None
    lng = normalize_longitude(entity.longitude)
    box = circle_bounds(entity.latitude, lng, radius_m)
    return fit_viewport(box, canvas, policy, center=LatLng(lat=entity.latitude, lng=lng))


def _prepare_box(box: BoundingBox, policy: ViewportPolicy) -> BoundingBox:
    box = box.normalized()
    low = policy.clamp_lat.min
    high = policy.clamp_lat.max
    return BoundingBox(
        lat_min=max(low, min(box.lat_min, high)),
        lat_max=max(low, min(box.lat_max, high)),
        lng_min=box.lng_min,
        lng_max=box.lng_max,
    )


def _axis_zoom(avail_px: float, span_m: float, tile_size_px: int) -> float:
    span_m = max(span_m, _MIN_SPAN_M)
    return math.log2(avail_px * WORLD_WIDTH_M / (tile_size_px * span_m))


def _snap_down(zoom: float, snap: float) -> float:
    if snap <= 0:
        return zoom
    return round(math.floor(zoom / snap + 1e-9) * snap, 10)
