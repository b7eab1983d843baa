"""User region preferences and the preference filter."""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from .models import LocatedEntity
from .regions import classify, region_names

_LOGGER = logging.getLogger("smartview.preferences")

# US states and territories are on until the user saves otherwise.
DEFAULT_PREFERENCES: Mapping[str, bool] = {
    "conus": True,
    "alaska": True,
    "hawaii": True,
    "puerto-rico": True,
    "us-virgin-islands": True,
    "guam": False,
    "american-samoa": False,
    "northern-mariana": False,
    "canada": False,
    "mexico": False,
    "caribbean": False,
    "europe": False,
    "asia-pacific": False,
    "other-international": False,
}


@dataclass(frozen=True, slots=True)
class UserPreferences:
    """Enabled flag per region name. Regions without an entry are disabled."""

    enabled: Mapping[str, bool] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> UserPreferences:
        return cls(
            enabled={
                str(name): value for name, value in raw.items() if isinstance(value, bool)
            }
        )

    @classmethod
    def only(cls, *names: str) -> UserPreferences:
        return cls(enabled={name: name in names for name in region_names()})

    def is_enabled(self, region: str) -> bool:
        return self.enabled.get(region) is True

    @property
    def enabled_regions(self) -> tuple[str, ...]:
        return tuple(name for name in region_names() if self.is_enabled(name))

    def unknown_regions(self) -> tuple[str, ...]:
        known = set(region_names())
        return tuple(sorted(name for name in self.enabled if name not in known))

    def to_dict(self) -> dict[str, bool]:
        return {name: self.is_enabled(name) for name in region_names()}


def resolve_preferences(saved: Any) -> UserPreferences:
    """Layer saved profile preferences over the defaults.

    A region missing from ``saved`` keeps its default; anything that is not a
    boolean counts as "not enabled".
    """
    if not isinstance(saved, Mapping):
        return UserPreferences(enabled=dict(DEFAULT_PREFERENCES))
    resolved: dict[str, bool] = {}
    for name, default in DEFAULT_PREFERENCES.items():
        if name in saved:
            resolved[name] = saved[name] is True
        else:
            resolved[name] = default
    for name, value in saved.items():
        if name not in resolved and isinstance(value, bool):
            resolved[str(name)] = value
    return UserPreferences(enabled=resolved)


def load_preferences(path: Path) -> UserPreferences:
    """Load saved map preferences from a YAML or JSON file."""
    if not path.exists():
        _LOGGER.debug("No preferences file at %s; using defaults.", path)
        return resolve_preferences(None)
    raw = read_preferences_file(path)
    return resolve_preferences(raw)


def read_preferences_file(path: Path) -> Mapping[str, Any] | None:
    text = path.read_text(encoding="utf-8")
    raw = json.loads(text) if path.suffix.casefold() == ".json" else yaml.safe_load(text)
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {path}")
    if "map_preferences" in raw:
        nested = raw["map_preferences"]
        if nested is None:
            return None
        if not isinstance(nested, Mapping):
            raise ValueError(f"Expected mapping for 'map_preferences' in {path}")
        return nested
    return raw


def filter_entities(
    entities: Iterable[LocatedEntity],
    prefs: UserPreferences | Mapping[str, Any],
) -> list[LocatedEntity]:
    """Keep entities whose region is enabled, in input order.

    ``prefs`` may also be a plain region -> bool mapping; regions it does not
    name are treated as disabled.
    """
    if not isinstance(prefs, UserPreferences):
        prefs = UserPreferences.from_mapping(prefs)
    kept: list[LocatedEntity] = []
    for entity in entities:
        if entity.latitude is None or entity.longitude is None:
            continue
        if prefs.is_enabled(classify(entity.latitude, entity.longitude)):
            kept.append(entity)
    return kept


def region_counts(entities: Iterable[LocatedEntity]) -> dict[str, int]:
    counts: Counter[str] = Counter()
    for entity in entities:
        if entity.latitude is None or entity.longitude is None:
            continue
        counts[classify(entity.latitude, entity.longitude)] += 1
    return {name: counts[name] for name in region_names() if counts[name]}
