"""Debug preview: contracts, smart box and fitted viewport drawn to a PNG."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Sequence

from .config import PreviewConfig, ViewportPolicy
from .engine import RecomputeResult
from .geo import normalize_longitude
from .markers import contract_status
from .models import BoundingBox, LocatedEntity, Viewport
from .viewport import WORLD_WIDTH_M, mercator_x_span, mercator_y

_LOGGER = logging.getLogger("smartview.preview")

_UNFILTERED_COLOR = "#9e9e9e"


@dataclass(frozen=True, slots=True)
class _Frame:
    x0: float
    x1: float
    y0: float
    y1: float


def render_preview(
    result: RecomputeResult,
    *,
    entities: Sequence[LocatedEntity],
    output_path: Path,
    cfg: PreviewConfig | None = None,
    viewport_policy: ViewportPolicy | None = None,
    today: date | None = None,
) -> Path:
    """Draw what the map panel would show after ``result`` was applied.

    The plot is in Web Mercator metres. The figure has the canvas pixel size
    and its axes span exactly the fitted viewport, so the orange smart box
    should sit inside the frame with roughly the outer padding left over.
    """
    cfg = cfg or PreviewConfig()
    viewport_policy = viewport_policy or ViewportPolicy()
    plt, patches = _require_matplotlib()

    width_px = result.canvas.width_px
    height_px = result.canvas.height_px
    fig, ax = plt.subplots(figsize=(width_px / cfg.dpi, height_px / cfg.dpi), dpi=cfg.dpi)
    fig.subplots_adjust(left=0.0, right=1.0, bottom=0.0, top=1.0)
    try:
        _apply_background(fig=fig, ax=ax, background=cfg.background)
        frame = _viewport_frame(
            result.viewport,
            width_px=width_px,
            height_px=height_px,
            policy=viewport_policy,
        )
        ax.set_xlim(frame.x0, frame.x1)
        ax.set_ylim(frame.y0, frame.y1)
        ax.set_axis_off()

        _draw_box(ax, patches, result.smart_box.box, color=cfg.smart_box_color, dashed=False)
        if result.smart_box.raw_box != result.smart_box.box:
            _draw_box(ax, patches, result.smart_box.raw_box, color=cfg.smart_box_color, dashed=True)

        filtered_ids = {entity.id for entity in result.filtered}
        for entity in entities:
            if entity.latitude is None or entity.longitude is None:
                continue
            x = _x(normalize_longitude(entity.longitude))
            y = mercator_y(entity.latitude)
            if entity.id in filtered_ids:
                color = contract_status(entity.end_date, today).color
                ax.scatter([x], [y], s=36, c=color, edgecolors="black", linewidths=0.6, zorder=4)
            else:
                ax.scatter([x], [y], s=16, c=_UNFILTERED_COLOR, zorder=3)

        centroid = result.smart_box.centroid
        ax.scatter(
            [_x(centroid.lng)],
            [mercator_y(centroid.lat)],
            marker="+",
            s=80,
            c=cfg.point_color,
            zorder=5,
        )
        ax.text(
            0.01,
            0.99,
            f"zoom {result.viewport.zoom:.2f} | {result.smart_box.mode} | "
            f"{len(result.filtered)} contracts",
            transform=ax.transAxes,
            va="top",
            ha="left",
            fontsize=8,
            color="black",
        )

        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=cfg.dpi, format="png")
    finally:
        plt.close(fig)
    _LOGGER.info("Preview written to %s", output_path)
    return output_path


def _viewport_frame(
    viewport: Viewport,
    *,
    width_px: float,
    height_px: float,
    policy: ViewportPolicy,
) -> _Frame:
    meters_per_px = WORLD_WIDTH_M / (policy.tile_size_px * (2.0 ** viewport.zoom))
    half_w = width_px * meters_per_px / 2.0
    half_h = height_px * meters_per_px / 2.0
    cx = _x(viewport.center.lng)
    lat = max(policy.clamp_lat.min, min(viewport.center.lat, policy.clamp_lat.max))
    cy = mercator_y(lat)
    return _Frame(x0=cx - half_w, x1=cx + half_w, y0=cy - half_h, y1=cy + half_h)


def _draw_box(ax: Any, patches: Any, box: BoundingBox, *, color: str, dashed: bool) -> None:
    x0 = _x(box.lng_min)
    y0 = mercator_y(box.lat_min)
    width = mercator_x_span(box.lng_min, box.lng_max)
    height = mercator_y(box.lat_max) - y0
    rect = patches.Rectangle(
        (x0, y0),
        width,
        height,
        linewidth=1.0 if dashed else 2.5,
        linestyle="--" if dashed else "-",
        edgecolor=color,
        alpha=0.6 if dashed else 1.0,
        fill=False,
        zorder=2,
    )
    ax.add_patch(rect)
    if not dashed:
        fill = patches.Rectangle((x0, y0), width, height, facecolor=color, alpha=0.1, zorder=1)
        ax.add_patch(fill)


def _x(lng: float) -> float:
    return mercator_x_span(0.0, lng)


def _apply_background(*, fig: Any, ax: Any, background: str) -> None:
    if background.casefold() == "transparent":
        fig.patch.set_facecolor("white")
        fig.patch.set_alpha(0.0)
        ax.set_facecolor((1.0, 1.0, 1.0, 0.0))
    else:
        fig.patch.set_facecolor(background)
        ax.set_facecolor(background)


def _require_matplotlib() -> tuple[Any, Any]:
    try:
        import matplotlib

        matplotlib.use("Agg", force=False)
        import matplotlib.patches as patches
        import matplotlib.pyplot as plt
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for preview rendering") from exc
    return (plt, patches)
