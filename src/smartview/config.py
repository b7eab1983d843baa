"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .models import CanvasSize

WEB_MERCATOR_MAX_LAT = 85.05112878


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _optional_mapping(raw: Mapping[str, Any], key: str, field_name: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    return _mapping(value, field_name)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


def _canvas(raw: Mapping[str, Any], field_name: str) -> CanvasSize:
    canvas = CanvasSize(
        width_px=_float(raw.get("width_px"), f"{field_name}.width_px"),
        height_px=_float(raw.get("height_px"), f"{field_name}.height_px"),
    )
    if not canvas.is_usable:
        raise ValueError(f"{field_name} must have positive width_px and height_px")
    return canvas


@dataclass(frozen=True, slots=True)
class SmartBoxPolicy:
    """Padding rules for the box drawn around the filtered contracts."""

    target_buffer_px: float = 50.0
    min_padding_deg: float = 0.1
    max_padding_deg: float = 2.0
    single_entity_half_span_deg: float = 0.75
    fallback_canvas: CanvasSize = CanvasSize(width_px=1000.0, height_px=600.0)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> SmartBoxPolicy:
        defaults = cls()
        target_buffer_px = _float(
            raw.get("target_buffer_px", defaults.target_buffer_px), "smart_box.target_buffer_px"
        )
        min_padding_deg = _float(
            raw.get("min_padding_deg", defaults.min_padding_deg), "smart_box.min_padding_deg"
        )
        max_padding_deg = _float(
            raw.get("max_padding_deg", defaults.max_padding_deg), "smart_box.max_padding_deg"
        )
        half_span = _float(
            raw.get("single_entity_half_span_deg", defaults.single_entity_half_span_deg),
            "smart_box.single_entity_half_span_deg",
        )
        canvas_raw = raw.get("fallback_canvas")
        fallback_canvas = (
            defaults.fallback_canvas
            if canvas_raw is None
            else _canvas(_mapping(canvas_raw, "smart_box.fallback_canvas"), "smart_box.fallback_canvas")
        )
        if target_buffer_px < 0:
            raise ValueError("smart_box.target_buffer_px must be >= 0")
        if min_padding_deg < 0:
            raise ValueError("smart_box.min_padding_deg must be >= 0")
        if min_padding_deg > max_padding_deg:
            raise ValueError("smart_box.min_padding_deg cannot be greater than smart_box.max_padding_deg")
        if half_span <= 0:
            raise ValueError("smart_box.single_entity_half_span_deg must be > 0")
        return cls(
            target_buffer_px=target_buffer_px,
            min_padding_deg=min_padding_deg,
            max_padding_deg=max_padding_deg,
            single_entity_half_span_deg=half_span,
            fallback_canvas=fallback_canvas,
        )


@dataclass(frozen=True, slots=True)
class ClampLatConfig:
    min: float = -WEB_MERCATOR_MAX_LAT
    max: float = WEB_MERCATOR_MAX_LAT

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ClampLatConfig:
        defaults = cls()
        lat_min = _float(raw.get("min", defaults.min), "viewport.clamp_lat.min")
        lat_max = _float(raw.get("max", defaults.max), "viewport.clamp_lat.max")
        if lat_min >= lat_max:
            raise ValueError("viewport.clamp_lat.min must be < viewport.clamp_lat.max")
        if lat_min < -WEB_MERCATOR_MAX_LAT or lat_max > WEB_MERCATOR_MAX_LAT:
            raise ValueError(
                f"viewport.clamp_lat must stay within +/-{WEB_MERCATOR_MAX_LAT} (Web Mercator limit)"
            )
        return cls(min=lat_min, max=lat_max)


@dataclass(frozen=True, slots=True)
class ViewportPolicy:
    """Zoom fitting rules for a Web Mercator tile map."""

    outer_padding_px: float = 20.0
    min_zoom: float = 2.0
    max_zoom: float = 18.0
    zoom_snap: float = 0.1
    tile_size_px: int = 256
    clamp_lat: ClampLatConfig = ClampLatConfig()

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ViewportPolicy:
        defaults = cls()
        outer_padding_px = _float(
            raw.get("outer_padding_px", defaults.outer_padding_px), "viewport.outer_padding_px"
        )
        min_zoom = _float(raw.get("min_zoom", defaults.min_zoom), "viewport.min_zoom")
        max_zoom = _float(raw.get("max_zoom", defaults.max_zoom), "viewport.max_zoom")
        zoom_snap = _float(raw.get("zoom_snap", defaults.zoom_snap), "viewport.zoom_snap")
        tile_size_px = _int(raw.get("tile_size_px", defaults.tile_size_px), "viewport.tile_size_px")
        clamp_raw = raw.get("clamp_lat")
        clamp_lat = (
            defaults.clamp_lat
            if clamp_raw is None
            else ClampLatConfig.from_mapping(_mapping(clamp_raw, "viewport.clamp_lat"))
        )
        if outer_padding_px < 0:
            raise ValueError("viewport.outer_padding_px must be >= 0")
        if min_zoom > max_zoom:
            raise ValueError("viewport.min_zoom cannot be greater than viewport.max_zoom")
        if zoom_snap < 0:
            raise ValueError("viewport.zoom_snap must be >= 0")
        if tile_size_px <= 0:
            raise ValueError("viewport.tile_size_px must be > 0")
        return cls(
            outer_padding_px=outer_padding_px,
            min_zoom=min_zoom,
            max_zoom=max_zoom,
            zoom_snap=zoom_snap,
            tile_size_px=tile_size_px,
            clamp_lat=clamp_lat,
        )


@dataclass(frozen=True, slots=True)
class PreviewConfig:
    dpi: int = 100
    background: str = "white"
    point_color: str = "#2196F3"
    smart_box_color: str = "#ff7800"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> PreviewConfig:
        defaults = cls()
        dpi = _int(raw.get("dpi", defaults.dpi), "preview.dpi")
        if dpi <= 0:
            raise ValueError("preview.dpi must be > 0")
        return cls(
            dpi=dpi,
            background=_str(raw.get("background", defaults.background), "preview.background"),
            point_color=_str(raw.get("point_color", defaults.point_color), "preview.point_color"),
            smart_box_color=_str(
                raw.get("smart_box_color", defaults.smart_box_color), "preview.smart_box_color"
            ),
        )


@dataclass(frozen=True, slots=True)
class PathsConfig:
    logs_dir: Path | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        logs_raw = raw.get("logs_dir")
        if logs_raw is None:
            return cls()
        return cls(logs_dir=_path_from_cfg(logs_raw, "paths.logs_dir", root_dir))


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path | None
    smart_box: SmartBoxPolicy
    viewport: ViewportPolicy
    preview: PreviewConfig
    paths: PathsConfig

    @classmethod
    def default(cls) -> AppConfig:
        return cls(
            source_path=None,
            smart_box=SmartBoxPolicy(),
            viewport=ViewportPolicy(),
            preview=PreviewConfig(),
            paths=PathsConfig(),
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        return cls(
            source_path=source_path.resolve(),
            smart_box=SmartBoxPolicy.from_mapping(_optional_mapping(raw, "smart_box", "smart_box")),
            viewport=ViewportPolicy.from_mapping(_optional_mapping(raw, "viewport", "viewport")),
            preview=PreviewConfig.from_mapping(_optional_mapping(raw, "preview", "preview")),
            paths=PathsConfig.from_mapping(_optional_mapping(raw, "paths", "paths"), root_dir),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
