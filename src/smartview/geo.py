"""Longitude normalization and coordinate parsing."""

from __future__ import annotations

import math
from typing import Any

FULL_TURN_DEG = 360.0


def normalize_longitude(lng: float) -> float:
    """Map a longitude onto the negative-west, US-centred convention.

    Positive longitudes (east of Greenwich, or the 0-360 form) are shifted one
    full turn west, so Guam at +144.8 plots at -215.2, to the left of Hawaii.
    Zero, negative and non-finite values pass through unchanged.
    """
    if not math.isfinite(lng) or lng <= 0.0:
        return lng
    turns = max(1, math.ceil(lng / FULL_TURN_DEG))
    return lng - FULL_TURN_DEG * turns


def longitude_candidates(lng: float) -> tuple[float, ...]:
    """Every representation of ``lng`` a region bound may be written in."""
    normalized = normalize_longitude(lng)
    east = normalized + FULL_TURN_DEG
    out: list[float] = []
    for value in (lng, normalized, east):
        if value not in out:
            out.append(value)
    return tuple(out)


def coerce_coordinate(value: Any) -> float | None:
    """Parse a coordinate given as a number or numeric string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number
