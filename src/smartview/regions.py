"""Named map regions and point classification."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .geo import longitude_candidates
from .models import BoundingBox

CATCH_ALL_REGION = "other-international"


@dataclass(frozen=True, slots=True)
class Region:
    name: str
    bounds: BoundingBox | None
    extra_bounds: tuple[BoundingBox, ...] = ()

    @property
    def is_catch_all(self) -> bool:
        return self.bounds is None

    def matches(self, lat: float, lng: float) -> bool:
        if self.bounds is None:
            return True
        candidates = longitude_candidates(lng)
        return any(
            _box_matches(box, lat, candidates) for box in (self.bounds, *self.extra_bounds)
        )


def _box_matches(box: BoundingBox, lat: float, candidates: tuple[float, ...]) -> bool:
    if not box.lat_min <= lat <= box.lat_max:
        return False
    return any(box.lng_min <= candidate <= box.lng_max for candidate in candidates)


def _region(
    name: str,
    lat_min: float,
    lat_max: float,
    lng_min: float,
    lng_max: float,
    *extra: tuple[float, float, float, float],
) -> Region:
    return Region(
        name=name,
        bounds=BoundingBox(lat_min=lat_min, lat_max=lat_max, lng_min=lng_min, lng_max=lng_max),
        extra_bounds=tuple(
            BoundingBox(lat_min=a, lat_max=b, lng_min=c, lng_max=d) for a, b, c, d in extra
        ),
    )


# Priority order: first match wins. Guam and Northern Mariana keep their
# natural positive-east bounds, as do the Aleutians west of 180.
REGIONS: tuple[Region, ...] = (
    _region("conus", 24.396308, 49.384358, -125.0, -66.93457),
    _region("alaska", 51.0, 72.0, -180.0, -129.0, (51.0, 55.0, 172.0, 180.0)),
    _region("hawaii", 18.9, 22.3, -161.0, -154.0),
    _region("puerto-rico", 17.8, 18.6, -67.3, -65.2),
    _region("us-virgin-islands", 17.6, 18.4, -65.1, -64.5),
    _region("guam", 13.2, 13.7, 144.6, 145.0),
    _region("american-samoa", -14.8, -11.0, -171.5, -169.0),
    _region("northern-mariana", 14.1, 20.6, 144.9, 146.1),
    _region("canada", 41.7, 83.1, -141.0, -52.6),
    _region("mexico", 14.5, 32.7, -118.4, -86.7),
    _region("caribbean", 10.0, 27.0, -85.0, -59.0),
    _region("europe", 35.0, 71.0, -25.0, 45.0),
    _region("asia-pacific", -50.0, 50.0, 95.0, 180.0),
    Region(name=CATCH_ALL_REGION, bounds=None),
)

_REGIONS_BY_NAME = {region.name: region for region in REGIONS}

CONUS_BOUNDS: BoundingBox = _REGIONS_BY_NAME["conus"].bounds  # type: ignore[assignment]


def region_names() -> tuple[str, ...]:
    return tuple(region.name for region in REGIONS)


def get_region(name: str) -> Region:
    try:
        return _REGIONS_BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown region '{name}'") from None


def classify(lat: float, lng: float) -> str:
    """Return the first region in priority order containing the point.

    ``lng`` may be given in any sign convention; each region is tested against
    the raw, normalized and positive-east forms. Points that match no explicit
    region (including non-finite input) fall into the catch-all.
    """
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return CATCH_ALL_REGION
    for region in REGIONS:
        if region.is_catch_all:
            continue
        if region.matches(lat, lng):
            return region.name
    return CATCH_ALL_REGION
