"""Validation layer for contract and preference inputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .config import AppConfig
from .contracts import load_contracts
from .models import LocatedEntity
from .preferences import (
    UserPreferences,
    filter_entities,
    read_preferences_file,
    region_counts,
    resolve_preferences,
)
from .regions import CATCH_ALL_REGION, region_names


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks a contracts export and saved preferences before a smart-view run."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self, *, contracts_path: Path, preferences_path: Path | None = None) -> ValidationReport:
        report = ValidationReport()
        if self.cfg.source_path is not None:
            report.add_info(f"Using config {self.cfg.source_path}")
        contracts = self._validate_contracts(report, contracts_path)
        prefs = self._validate_preferences(report, preferences_path)
        if contracts and prefs is not None:
            self._validate_coverage(report, contracts=contracts, prefs=prefs)
        return report

    def _validate_contracts(self, report: ValidationReport, path: Path) -> list[LocatedEntity]:
        try:
            contracts = load_contracts(path)
        except Exception as exc:
            report.add_error(f"Failed parsing contracts file '{path}': {exc}")
            return []
        if not contracts:
            report.add_warning(f"Contracts file is empty: {path}")
            return []
        report.add_info(f"Loaded {len(contracts)} contract records from {path}")

        unlocated = [contract.label for contract in contracts if not contract.has_coordinates]
        if unlocated:
            report.add_warning(
                f"{len(unlocated)} contract(s) without usable coordinates will be skipped: "
                + _format_list(unlocated)
            )
        wide = [
            contract.label
            for contract in contracts
            if contract.longitude is not None and abs(contract.longitude) > 360.0
        ]
        if wide:
            report.add_warning("Longitude beyond one full turn: " + _format_list(wide))

        counts = region_counts(contracts)
        report.add_info(
            "Contracts per region: "
            + ", ".join(f"{name}={count}" for name, count in counts.items())
        )
        if counts.get(CATCH_ALL_REGION):
            report.add_info(
                f"{counts[CATCH_ALL_REGION]} contract(s) fall outside every named region "
                f"and count as '{CATCH_ALL_REGION}'."
            )
        return contracts

    def _validate_preferences(
        self,
        report: ValidationReport,
        path: Path | None,
    ) -> UserPreferences | None:
        if path is None or not path.exists():
            report.add_info("No saved map preferences; using defaults.")
            return resolve_preferences(None)
        try:
            raw = read_preferences_file(path)
        except Exception as exc:
            report.add_error(f"Failed parsing preferences file '{path}': {exc}")
            return None
        if raw is None:
            report.add_info(f"Preferences file {path} is empty; using defaults.")
            return resolve_preferences(None)

        known = set(region_names())
        unknown = sorted(str(name) for name in raw if name not in known)
        if unknown:
            report.add_warning("Unknown region keys in preferences: " + _format_list(unknown))
        non_bool = sorted(str(name) for name, value in raw.items() if not isinstance(value, bool))
        if non_bool:
            report.add_warning(
                "Non-boolean preference values are treated as disabled: " + _format_list(non_bool)
            )

        prefs = resolve_preferences(raw)
        if not prefs.enabled_regions:
            report.add_warning("No regions enabled; smart view will show the CONUS reference box.")
        else:
            report.add_info("Enabled regions: " + ", ".join(prefs.enabled_regions))
        return prefs

    def _validate_coverage(
        self,
        report: ValidationReport,
        *,
        contracts: list[LocatedEntity],
        prefs: UserPreferences,
    ) -> None:
        kept = filter_entities(contracts, prefs)
        report.add_info(f"{len(kept)} of {len(contracts)} contracts are in enabled regions.")
        if not kept:
            report.add_warning(
                "No contracts in enabled regions; smart view will show the CONUS reference box."
            )


def format_report_lines(report: ValidationReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Validation passed with no errors.")
    return lines


def _format_list(values: list[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    shown = ", ".join(values[:limit])
    return f"{shown}, ... (+{len(values) - limit} more)"
