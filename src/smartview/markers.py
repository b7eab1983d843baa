"""Contract marker styling: circle radius and end-date status colours."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

from .models import BoundingBox

# 50 miles, the tax-home proximity radius drawn around each contract.
CONTRACT_RADIUS_M = 80_467.2
METERS_PER_DEGREE = 111_000.0
RESTRICTED_WINDOW = timedelta(days=round(2 * 365.25))


@dataclass(frozen=True, slots=True)
class MarkerStyle:
    status: str
    color: str


STATUS_CURRENT = MarkerStyle(status="current", color="#2196F3")
STATUS_RESTRICTED = MarkerStyle(status="restricted", color="#F44336")
STATUS_AVAILABLE = MarkerStyle(status="available", color="#4CAF50")


def contract_status(end_date: date | None, today: date | None = None) -> MarkerStyle:
    """Classify a contract circle by how long ago the contract ended.

    Open-ended or unfinished contracts are current. A contract that ended less
    than two years ago still restricts its area; older ones leave it available.
    """
    today = today or date.today()
    if end_date is None or end_date > today:
        return STATUS_CURRENT
    if today - end_date < RESTRICTED_WINDOW:
        return STATUS_RESTRICTED
    return STATUS_AVAILABLE


def circle_bounds(lat: float, lng: float, radius_m: float = CONTRACT_RADIUS_M) -> BoundingBox:
    """Approximate lat/lng box enclosing a circle of ``radius_m`` metres."""
    lat_offset = radius_m / METERS_PER_DEGREE
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    lng_offset = radius_m / (METERS_PER_DEGREE * cos_lat)
    return BoundingBox.around(lat, lng, lat_offset, lng_offset)
