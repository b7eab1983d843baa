"""Contract list loading from exported JSON/YAML files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from .models import LocatedEntity


def load_contracts(path: Path) -> list[LocatedEntity]:
    """Load contract records as located entities.

    Accepts either a top-level list or a mapping with a ``contracts`` list.
    Records with unusable coordinates are kept; the pipeline skips them.
    """
    if not path.exists():
        raise FileNotFoundError(f"Contracts file not found: {path}")
    text = path.read_text(encoding="utf-8")
    raw = json.loads(text) if path.suffix.casefold() == ".json" else yaml.safe_load(text)
    if isinstance(raw, Mapping):
        raw = raw.get("contracts")
    if not isinstance(raw, list):
        raise ValueError(f"Expected list of contracts in {path}")

    contracts: list[LocatedEntity] = []
    seen_ids: set[Any] = set()
    for idx, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise ValueError(f"Expected mapping at index {idx} in {path}")
        entity = LocatedEntity.from_mapping(item)
        if entity.id is None:
            entity = LocatedEntity(
                id=idx + 1,
                latitude=entity.latitude,
                longitude=entity.longitude,
                end_date=entity.end_date,
                name=entity.name,
            )
        elif isinstance(entity.id, bool) or not isinstance(entity.id, (str, int)):
            raise ValueError(f"Unsupported contract id at index {idx} in {path}")
        if entity.id in seen_ids:
            raise ValueError(f"Duplicate contract id '{entity.id}' in {path}")
        seen_ids.add(entity.id)
        contracts.append(entity)
    return contracts


def contract_index_by_id(contracts: Iterable[LocatedEntity]) -> dict[Any, LocatedEntity]:
    return {contract.id: contract for contract in contracts}


def parse_contract_id(raw: str, contracts: Iterable[LocatedEntity]) -> Any:
    """Match a CLI-supplied id against loaded ids, which may be ints or strings."""
    index = contract_index_by_id(contracts)
    if raw in index:
        return raw
    try:
        as_int = int(raw)
    except ValueError:
        return raw
    return as_int if as_int in index else raw
