"""ViewportEngine: one recompute entry point over the last-known inputs."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from .config import AppConfig
from .models import CanvasSize, LocatedEntity, SmartBox, Viewport
from .preferences import UserPreferences, filter_entities, region_counts, resolve_preferences
from .smart_box import compute_smart_box
from .viewport import fit_smart_box, focus_viewport

_LOGGER = logging.getLogger("smartview.engine")


class Trigger(str, enum.Enum):
    CONTRACT_CHANGE = "contract-change"
    PREFERENCE_CHANGE = "preference-change"
    RESIZE = "resize"
    MANUAL = "manual"


@dataclass(frozen=True, slots=True)
class RecomputeResult:
    trigger: Trigger
    filtered: tuple[LocatedEntity, ...]
    smart_box: SmartBox
    viewport: Viewport
    canvas: CanvasSize
    region_counts: dict[str, int] = field(default_factory=dict)

    @property
    def animate(self) -> bool:
        # Resize recomputes jump straight to the new view.
        return self.trigger is not Trigger.RESIZE

    def to_dict(self) -> dict[str, Any]:
        return {
            "trigger": self.trigger.value,
            "animate": self.animate,
            "canvas": self.canvas.to_dict(),
            "filteredIds": [entity.id for entity in self.filtered],
            "regionCounts": dict(self.region_counts),
            "smartBox": self.smart_box.to_dict(),
            "viewport": self.viewport.to_dict(),
        }


class ViewportEngine:
    """Owns the last-known contracts, preferences and canvas for one map.

    Every trigger recomputes from scratch; nothing is updated incrementally.
    Callers are expected to debounce resize events before calling in.
    """

    def __init__(
        self,
        cfg: AppConfig | None = None,
        *,
        entities: Iterable[LocatedEntity] = (),
        preferences: UserPreferences | None = None,
        canvas: CanvasSize | None = None,
    ) -> None:
        self.cfg = cfg or AppConfig.default()
        self._entities: tuple[LocatedEntity, ...] = tuple(entities)
        self._preferences = preferences or resolve_preferences(None)
        self._canvas = canvas
        self._last: RecomputeResult | None = None

    @property
    def entities(self) -> tuple[LocatedEntity, ...]:
        return self._entities

    @property
    def preferences(self) -> UserPreferences:
        return self._preferences

    @property
    def canvas(self) -> CanvasSize:
        if self._canvas is None or not self._canvas.is_usable:
            return self.cfg.smart_box.fallback_canvas
        return self._canvas

    @property
    def last_result(self) -> RecomputeResult | None:
        return self._last

    def update_entities(self, entities: Iterable[LocatedEntity]) -> RecomputeResult:
        self._entities = tuple(entities)
        return self.recompute(Trigger.CONTRACT_CHANGE)

    def update_preferences(self, preferences: UserPreferences) -> RecomputeResult:
        self._preferences = preferences
        return self.recompute(Trigger.PREFERENCE_CHANGE)

    def update_canvas(self, canvas: CanvasSize) -> RecomputeResult:
        self._canvas = canvas
        return self.recompute(Trigger.RESIZE)

    def recompute(self, trigger: Trigger | str = Trigger.MANUAL) -> RecomputeResult:
        trigger = Trigger(trigger)
        canvas = self.canvas
        filtered = tuple(filter_entities(self._entities, self._preferences))
        smart_box = compute_smart_box(filtered, canvas, self.cfg.smart_box)
        viewport = fit_smart_box(smart_box, canvas, self.cfg.viewport)
        result = RecomputeResult(
            trigger=trigger,
            filtered=filtered,
            smart_box=smart_box,
            viewport=viewport,
            canvas=canvas,
            region_counts=region_counts(self._entities),
        )
        self._last = result
        _LOGGER.debug(
            "[%s] %d/%d contracts in enabled regions, mode=%s, zoom=%.2f",
            trigger.value,
            len(filtered),
            len(self._entities),
            smart_box.mode,
            viewport.zoom,
        )
        return result

    def focus(self, entity_id: Any) -> Viewport | None:
        """Viewport for one contract's radius circle, or None if it is not located."""
        for entity in self._entities:
            if entity.id == entity_id:
                return focus_viewport(entity, self.canvas, self.cfg.viewport)
        return None
