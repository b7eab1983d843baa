"""Shared fixtures: the sample contract set and default configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from smartview.config import AppConfig
from smartview.contracts import load_contracts
from smartview.models import CanvasSize, LocatedEntity

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
SAMPLE_CONTRACTS = DATA_DIR / "sample_contracts.yaml"
SAMPLE_PREFERENCES = DATA_DIR / "map_preferences.yaml"

# Sample ids whose region is off by default (Guam, American Samoa, Saipan).
DEFAULT_HIDDEN_IDS = {4, 7, 17}


def entity(entity_id: object, lat: float | None, lng: float | None, **kwargs: object) -> LocatedEntity:
    return LocatedEntity(id=entity_id, latitude=lat, longitude=lng, **kwargs)  # type: ignore[arg-type]


@pytest.fixture()
def sample_contracts() -> list[LocatedEntity]:
    return load_contracts(SAMPLE_CONTRACTS)


@pytest.fixture()
def sample_by_id(sample_contracts: list[LocatedEntity]) -> dict[object, LocatedEntity]:
    return {contract.id: contract for contract in sample_contracts}


@pytest.fixture()
def app_config() -> AppConfig:
    return AppConfig.default()


@pytest.fixture()
def canvas() -> CanvasSize:
    return CanvasSize(width_px=1200, height_px=700)


@pytest.fixture()
def seattle() -> LocatedEntity:
    return entity("seattle", 47.66284925157117, -122.28207402883619, name="Seattle Children's")


@pytest.fixture()
def phoenix() -> LocatedEntity:
    return entity("phoenix", 33.6159, -111.9626, name="Mayo Clinic Hospital")


@pytest.fixture()
def guam() -> LocatedEntity:
    return entity("guam", 13.5139, 144.8430, name="Guam Regional Medical City")
