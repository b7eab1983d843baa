"""Tests for the ViewportEngine recompute cycle."""

from __future__ import annotations

import pytest

from conftest import DEFAULT_HIDDEN_IDS, entity
from smartview.config import AppConfig
from smartview.engine import RecomputeResult, Trigger, ViewportEngine
from smartview.models import CanvasSize, LocatedEntity
from smartview.preferences import UserPreferences
from smartview.regions import CONUS_BOUNDS
from smartview.smart_box import MODE_DEFAULT, MODE_FITTED, MODE_SINGLE


class TestViewportEngine:
    """Test suite for recompute triggers and cached inputs."""

    def test_contract_change(self, sample_contracts: list[LocatedEntity], canvas: CanvasSize) -> None:
        engine = ViewportEngine(canvas=canvas)
        result = engine.update_entities(sample_contracts)
        assert result.trigger is Trigger.CONTRACT_CHANGE
        assert result.animate
        assert len(result.filtered) == len(sample_contracts) - len(DEFAULT_HIDDEN_IDS)
        assert result.smart_box.mode == MODE_FITTED
        assert engine.last_result is result

    def test_preference_change_reuses_entities(
        self, sample_contracts: list[LocatedEntity], canvas: CanvasSize
    ) -> None:
        engine = ViewportEngine(entities=sample_contracts, canvas=canvas)
        result = engine.update_preferences(UserPreferences.only("guam"))
        assert result.trigger is Trigger.PREFERENCE_CHANGE
        assert [contract.id for contract in result.filtered] == [4]
        assert result.smart_box.mode == MODE_SINGLE
        assert result.viewport.center.lng == pytest.approx(-215.157)

    def test_resize_does_not_animate(self, sample_contracts: list[LocatedEntity]) -> None:
        engine = ViewportEngine(entities=sample_contracts, canvas=CanvasSize(1200, 700))
        before = engine.recompute()
        after = engine.update_canvas(CanvasSize(600, 400))
        assert after.trigger is Trigger.RESIZE
        assert not after.animate
        assert after.canvas == CanvasSize(600, 400)
        assert after.smart_box.raw_box == before.smart_box.raw_box
        assert after.viewport.zoom < before.viewport.zoom

    def test_recompute_accepts_trigger_value(self, canvas: CanvasSize) -> None:
        engine = ViewportEngine(canvas=canvas)
        assert engine.recompute("preference-change").trigger is Trigger.PREFERENCE_CHANGE
        with pytest.raises(ValueError):
            engine.recompute("zoom")

    def test_nothing_enabled_shows_conus(
        self, sample_contracts: list[LocatedEntity], canvas: CanvasSize
    ) -> None:
        engine = ViewportEngine(
            entities=sample_contracts,
            preferences=UserPreferences(),
            canvas=canvas,
        )
        result = engine.recompute()
        assert result.filtered == ()
        assert result.smart_box.mode == MODE_DEFAULT
        assert result.smart_box.box == CONUS_BOUNDS
        assert result.region_counts["conus"] == 8

    @pytest.mark.parametrize("canvas", [None, CanvasSize(0, 0), CanvasSize(900, -1)])
    def test_unusable_canvas_uses_fallback(self, canvas: CanvasSize | None) -> None:
        engine = ViewportEngine(canvas=canvas)
        result = engine.recompute()
        assert result.canvas == AppConfig.default().smart_box.fallback_canvas

    def test_to_dict(self, canvas: CanvasSize) -> None:
        engine = ViewportEngine(
            entities=[entity(1, 47.6, -122.3), entity(2, 13.5, 144.8)],
            canvas=canvas,
        )
        payload = engine.recompute(Trigger.MANUAL).to_dict()
        assert payload["trigger"] == "manual"
        assert payload["animate"] is True
        assert payload["filteredIds"] == [1]
        assert payload["regionCounts"] == {"conus": 1, "guam": 1}
        assert payload["canvas"] == {"w": 1200, "h": 700}
        assert set(payload["smartBox"]) == {
            "box",
            "rawBox",
            "centroid",
            "entityCount",
            "mode",
            "paddingDeg",
        }
        assert set(payload["viewport"]) == {"center", "zoom"}


class TestFocus:
    """Test suite for focusing on one contract."""

    def test_known_contract(self, sample_contracts: list[LocatedEntity], canvas: CanvasSize) -> None:
        engine = ViewportEngine(entities=sample_contracts, canvas=canvas)
        viewport = engine.focus(11)
        assert viewport is not None
        assert viewport.center.lat == pytest.approx(18.3358)
        assert viewport.zoom > 6.0

    def test_focus_ignores_preferences(self, sample_contracts: list[LocatedEntity]) -> None:
        engine = ViewportEngine(entities=sample_contracts, preferences=UserPreferences())
        assert engine.focus(4) is not None

    def test_unknown_or_unlocated(self, canvas: CanvasSize) -> None:
        engine = ViewportEngine(entities=[entity("x", None, None)], canvas=canvas)
        assert engine.focus("x") is None
        assert engine.focus("missing") is None


def test_result_is_frozen(canvas: CanvasSize) -> None:
    result = ViewportEngine(canvas=canvas).recompute()
    assert isinstance(result, RecomputeResult)
    with pytest.raises(AttributeError):
        result.trigger = Trigger.RESIZE  # type: ignore[misc]
