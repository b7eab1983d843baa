"""Tests for longitude normalization and coordinate parsing."""

from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from smartview.geo import coerce_coordinate, longitude_candidates, normalize_longitude


class TestNormalizeLongitude:
    """Test suite for the negative-west longitude convention."""

    @given(st.floats(min_value=-180.0, max_value=0.0))
    def test_western_longitudes_unchanged(self, lng: float) -> None:
        assert normalize_longitude(lng) == lng

    @given(st.floats(min_value=1e-9, max_value=180.0))
    def test_eastern_longitudes_shift_one_turn(self, lng: float) -> None:
        assert normalize_longitude(lng) == lng - 360.0

    @given(st.floats(min_value=-720.0, max_value=720.0))
    def test_result_is_never_positive(self, lng: float) -> None:
        assert normalize_longitude(lng) <= 0.0

    def test_guam_plots_west_of_hawaii(self) -> None:
        assert normalize_longitude(144.843) == pytest.approx(-215.157)
        assert normalize_longitude(144.843) < normalize_longitude(-157.8581)

    def test_zero_to_360_form(self) -> None:
        assert normalize_longitude(237.7) == pytest.approx(-122.3)
        assert normalize_longitude(360.0) == 0.0

    def test_beyond_one_turn(self) -> None:
        assert normalize_longitude(500.0) == pytest.approx(-220.0)

    def test_non_finite_passes_through(self) -> None:
        assert math.isnan(normalize_longitude(float("nan")))
        assert normalize_longitude(float("inf")) == float("inf")


class TestLongitudeCandidates:
    """Test suite for the representations a region bound is tested against."""

    def test_eastern_point_includes_raw_and_normalized(self) -> None:
        candidates = longitude_candidates(144.843)
        assert candidates[0] == 144.843
        assert candidates[1] == pytest.approx(-215.157)
        assert all(value == pytest.approx(144.843) for value in candidates[2:])

    def test_western_point(self) -> None:
        candidates = longitude_candidates(-157.8581)
        assert candidates[0] == -157.8581
        assert candidates[-1] == pytest.approx(202.1419)

    def test_no_duplicates(self) -> None:
        candidates = longitude_candidates(-100.0)
        assert len(candidates) == len(set(candidates))


class TestCoerceCoordinate:
    """Test suite for lenient coordinate parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (47.5, 47.5),
            (-122, -122.0),
            ("21.3099", 21.3099),
            ("  -157.8581 ", -157.8581),
        ],
    )
    def test_accepts_numbers_and_numeric_strings(self, value: object, expected: float) -> None:
        assert coerce_coordinate(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, True, False, "", "   ", "north", float("nan"), float("inf"), "nan", [1.0]],
    )
    def test_rejects_unusable_values(self, value: object) -> None:
        assert coerce_coordinate(value) is None
