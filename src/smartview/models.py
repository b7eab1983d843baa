"""Value types shared across the smart-view pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping

from .geo import coerce_coordinate


def _require_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected numeric value for '{field_name}'")
    return float(value)


def _parse_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


@dataclass(frozen=True, slots=True)
class LatLng:
    lat: float
    lng: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Closed lat/lng rectangle in decimal degrees."""

    lat_min: float
    lat_max: float
    lng_min: float
    lng_max: float

    @classmethod
    def around(cls, lat: float, lng: float, half_lat: float, half_lng: float) -> BoundingBox:
        return cls(
            lat_min=lat - half_lat,
            lat_max=lat + half_lat,
            lng_min=lng - half_lng,
            lng_max=lng + half_lng,
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> BoundingBox:
        return cls(
            lat_min=_require_number(raw.get("latMin"), "latMin"),
            lat_max=_require_number(raw.get("latMax"), "latMax"),
            lng_min=_require_number(raw.get("lngMin"), "lngMin"),
            lng_max=_require_number(raw.get("lngMax"), "lngMax"),
        )

    @property
    def lat_span(self) -> float:
        return self.lat_max - self.lat_min

    @property
    def lng_span(self) -> float:
        return self.lng_max - self.lng_min

    @property
    def center(self) -> LatLng:
        return LatLng(
            lat=(self.lat_min + self.lat_max) / 2.0,
            lng=(self.lng_min + self.lng_max) / 2.0,
        )

    def normalized(self) -> BoundingBox:
        """Return the box with any inverted min/max pair swapped."""
        lat_min, lat_max = sorted((self.lat_min, self.lat_max))
        lng_min, lng_max = sorted((self.lng_min, self.lng_max))
        return BoundingBox(lat_min=lat_min, lat_max=lat_max, lng_min=lng_min, lng_max=lng_max)

    def contains(self, lat: float, lng: float) -> bool:
        return self.lat_min <= lat <= self.lat_max and self.lng_min <= lng <= self.lng_max

    def expanded(self, pad_lat: float, pad_lng: float) -> BoundingBox:
        return BoundingBox(
            lat_min=self.lat_min - pad_lat,
            lat_max=self.lat_max + pad_lat,
            lng_min=self.lng_min - pad_lng,
            lng_max=self.lng_max + pad_lng,
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "latMin": self.lat_min,
            "latMax": self.lat_max,
            "lngMin": self.lng_min,
            "lngMax": self.lng_max,
        }


@dataclass(frozen=True, slots=True)
class CanvasSize:
    """Pixel size of the visible map panel."""

    width_px: float
    height_px: float

    @property
    def is_usable(self) -> bool:
        return self.width_px > 0 and self.height_px > 0

    def to_dict(self) -> dict[str, float]:
        return {"w": self.width_px, "h": self.height_px}


@dataclass(frozen=True, slots=True)
class LocatedEntity:
    """Contract record as supplied by the data-loading collaborator.

    Coordinates that cannot be used are stored as ``None`` rather than
    rejected, so callers can still list the record while the pipeline skips it.
    ``longitude`` keeps the caller's sign convention.
    """

    id: Any
    latitude: float | None
    longitude: float | None
    end_date: date | None = None
    name: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LocatedEntity:
        latitude = coerce_coordinate(data.get("latitude"))
        if latitude is not None and not -90.0 <= latitude <= 90.0:
            latitude = None
        longitude = coerce_coordinate(data.get("longitude"))
        end_raw = data.get("endDate", data.get("end_date"))
        name_raw = data.get("hospital_name", data.get("name"))
        name = name_raw.strip() if isinstance(name_raw, str) and name_raw.strip() else None
        return cls(
            id=data.get("id"),
            latitude=latitude,
            longitude=longitude,
            end_date=_parse_date(end_raw),
            name=name,
        )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def label(self) -> str:
        return self.name if self.name else f"contract {self.id}"


@dataclass(frozen=True, slots=True)
class SmartBox:
    """Padded box around the filtered contracts plus its cached centroid.

    ``centroid`` is the centre of ``raw_box`` (before padding) and is what the
    viewport gets centred on.
    """

    box: BoundingBox
    raw_box: BoundingBox
    centroid: LatLng
    entity_count: int
    mode: str
    padding_deg: tuple[float, float] = (0.0, 0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "box": self.box.to_dict(),
            "rawBox": self.raw_box.to_dict(),
            "centroid": self.centroid.to_dict(),
            "entityCount": self.entity_count,
            "mode": self.mode,
            "paddingDeg": {"lat": self.padding_deg[0], "lng": self.padding_deg[1]},
        }


@dataclass(frozen=True, slots=True)
class Viewport:
    center: LatLng
    zoom: float

    def to_dict(self) -> dict[str, Any]:
        return {"center": self.center.to_dict(), "zoom": self.zoom}
