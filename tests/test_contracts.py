"""Tests for contract loading and record parsing."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from conftest import SAMPLE_CONTRACTS
from smartview.contracts import contract_index_by_id, load_contracts, parse_contract_id
from smartview.models import BoundingBox, LocatedEntity


class TestLoadContracts:
    """Test suite for reading contract exports."""

    def test_sample_file(self) -> None:
        contracts = load_contracts(SAMPLE_CONTRACTS)
        assert len(contracts) == 20
        first = contracts[0]
        assert first.id == 1
        assert first.name == "Seattle Children's Hospital"
        assert first.end_date == date(2025, 9, 30)
        assert all(contract.has_coordinates for contract in contracts)

    def test_json_list(self, tmp_path: Path) -> None:
        path = tmp_path / "contracts.json"
        path.write_text(
            json.dumps(
                [
                    {"id": "a", "latitude": "40.0", "longitude": "-100.0", "endDate": "2024-01-31"},
                    {"latitude": None, "longitude": -100.0},
                ]
            ),
            encoding="utf-8",
        )
        contracts = load_contracts(path)
        assert [contract.id for contract in contracts] == ["a", 2]
        assert contracts[0].latitude == 40.0
        assert contracts[0].end_date == date(2024, 1, 31)
        assert not contracts[1].has_coordinates
        assert contracts[1].label == "contract 2"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_contracts(tmp_path / "absent.yaml")

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("contracts: 3\n", "Expected list of contracts"),
            ("just text\n", "Expected list of contracts"),
            ("- 1\n- 2\n", "Expected mapping at index 0"),
            ("- {id: 1}\n- {id: 1}\n", "Duplicate contract id"),
            ("- {id: [1, 2], latitude: 40, longitude: -100}\n", "Unsupported contract id at index 0"),
            ("- {id: 1}\n- {id: {a: 1}}\n", "Unsupported contract id at index 1"),
            ("- {id: true}\n", "Unsupported contract id at index 0"),
        ],
    )
    def test_malformed(self, tmp_path: Path, text: str, message: str) -> None:
        path = tmp_path / "contracts.yaml"
        path.write_text(text, encoding="utf-8")
        with pytest.raises(ValueError, match=message):
            load_contracts(path)


class TestLocatedEntity:
    """Test suite for parsing a single record."""

    def test_bad_end_date_is_ignored(self) -> None:
        record = LocatedEntity.from_mapping({"id": 1, "end_date": "soon"})
        assert record.end_date is None

    def test_blank_name_uses_id_label(self) -> None:
        record = LocatedEntity.from_mapping({"id": 5, "hospital_name": "  "})
        assert record.name is None
        assert record.label == "contract 5"

    def test_timestamp_end_date(self) -> None:
        record = LocatedEntity.from_mapping({"id": 1, "endDate": "2023-06-12T00:00:00Z"})
        assert record.end_date == date(2023, 6, 12)


class TestBoundingBox:
    """Test suite for the JSON surface of boxes."""

    def test_round_trip_keys(self) -> None:
        raw = {"latMin": 30, "latMax": 40.5, "lngMin": -100, "lngMax": -90}
        box = BoundingBox.from_mapping(raw)
        assert box.lat_max == 40.5
        assert box.to_dict() == {"latMin": 30.0, "latMax": 40.5, "lngMin": -100.0, "lngMax": -90.0}

    def test_non_numeric_raises(self) -> None:
        with pytest.raises(ValueError, match="latMin"):
            BoundingBox.from_mapping({"latMin": "30", "latMax": 40, "lngMin": -100, "lngMax": -90})


class TestParseContractId:
    """Test suite for matching CLI ids."""

    def test_int_ids(self) -> None:
        contracts = load_contracts(SAMPLE_CONTRACTS)
        assert parse_contract_id("4", contracts) == 4
        assert contract_index_by_id(contracts)[4].name == "Guam Regional Medical City"

    def test_string_ids(self) -> None:
        contracts = [LocatedEntity(id="4", latitude=1.0, longitude=1.0)]
        assert parse_contract_id("4", contracts) == "4"

    def test_unknown_id_is_returned_as_given(self) -> None:
        assert parse_contract_id("zz", []) == "zz"
        assert parse_contract_id("99", []) == "99"
