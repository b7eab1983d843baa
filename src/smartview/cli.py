"""CLI entrypoint for the smart-view map engine."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import AppConfig, load_config
from .contracts import load_contracts, parse_contract_id
from .engine import Trigger, ViewportEngine
from .geo import normalize_longitude
from .models import CanvasSize, LocatedEntity
from .preferences import UserPreferences, load_preferences, resolve_preferences
from .regions import classify
from .util import setup_logging, write_json
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("smartview.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartview",
        description="Region filtering and smart-box viewport fitting for contract maps.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default=None, help="Path to YAML config (defaults built in).")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")
        p.add_argument("--contracts", required=True, help="Contracts export (JSON or YAML).")

    def add_preferences(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--preferences",
            default=None,
            help="Saved map preferences (JSON or YAML). Defaults apply when omitted.",
        )

    def add_canvas(p: argparse.ArgumentParser) -> None:
        p.add_argument("--width", type=float, default=None, help="Map panel width in px.")
        p.add_argument("--height", type=float, default=None, help="Map panel height in px.")

    validate_p = subparsers.add_parser("validate", help="Validate contracts and preferences.")
    add_common(validate_p)
    add_preferences(validate_p)

    classify_p = subparsers.add_parser("classify", help="Print the region of every contract.")
    add_common(classify_p)
    classify_p.add_argument("--output", default=None, help="Write JSON here instead of stdout.")

    smart_p = subparsers.add_parser(
        "smart-view",
        help="Filter by preferences and fit the smart box to the canvas.",
    )
    add_common(smart_p)
    add_preferences(smart_p)
    add_canvas(smart_p)
    smart_p.add_argument("--output", default=None, help="Write JSON here instead of stdout.")

    focus_p = subparsers.add_parser("focus", help="Viewport around one contract's radius circle.")
    add_common(focus_p)
    add_canvas(focus_p)
    focus_p.add_argument("--id", required=True, help="Contract id to focus on.")
    focus_p.add_argument("--output", default=None, help="Write JSON here instead of stdout.")

    preview_p = subparsers.add_parser("preview", help="Render a debug PNG of the smart view.")
    add_common(preview_p)
    add_preferences(preview_p)
    add_canvas(preview_p)
    preview_p.add_argument("--output", required=True, help="PNG output path.")

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = AppConfig.default() if args.config is None else load_config(args.config)
    log_path = cfg.paths.logs_dir / "smartview.log" if cfg.paths.logs_dir is not None else None
    setup_logging(log_path, verbose=args.verbose)
    return cfg


def _canvas_from_args(args: argparse.Namespace, cfg: AppConfig) -> CanvasSize:
    fallback = cfg.smart_box.fallback_canvas
    width = args.width if args.width is not None else fallback.width_px
    height = args.height if args.height is not None else fallback.height_px
    canvas = CanvasSize(width_px=width, height_px=height)
    if not canvas.is_usable:
        LOGGER.warning(
            "Canvas %sx%s is not usable; using %sx%s.",
            width,
            height,
            fallback.width_px,
            fallback.height_px,
        )
        return fallback
    return canvas


def _optional_path(value: str | None) -> Path | None:
    return Path(value) if value else None


def _load_inputs(
    args: argparse.Namespace,
) -> tuple[list[LocatedEntity], UserPreferences] | None:
    try:
        contracts = load_contracts(Path(args.contracts))
        prefs_path = _optional_path(getattr(args, "preferences", None))
        prefs = load_preferences(prefs_path) if prefs_path is not None else resolve_preferences(None)
    except (OSError, ValueError) as exc:
        LOGGER.error("Failed loading inputs: %s", exc)
        return None
    return (contracts, prefs)


def _run_validate(cfg: AppConfig, args: argparse.Namespace) -> int:
    report = Validator(cfg).run(
        contracts_path=Path(args.contracts),
        preferences_path=_optional_path(args.preferences),
    )
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_classify(args: argparse.Namespace) -> int:
    try:
        contracts = load_contracts(Path(args.contracts))
    except (OSError, ValueError) as exc:
        LOGGER.error("Failed loading contracts: %s", exc)
        return 1
    rows = []
    for contract in contracts:
        row = {"id": contract.id, "name": contract.name, "region": None, "normalizedLng": None}
        if contract.latitude is not None and contract.longitude is not None:
            row["region"] = classify(contract.latitude, contract.longitude)
            row["normalizedLng"] = normalize_longitude(contract.longitude)
        rows.append(row)
    write_json(_optional_path(args.output), {"contracts": rows})
    LOGGER.info("Classified %d contracts.", len(rows))
    return 0


def _run_smart_view(cfg: AppConfig, args: argparse.Namespace) -> int:
    loaded = _load_inputs(args)
    if loaded is None:
        return 1
    contracts, prefs = loaded
    engine = ViewportEngine(cfg, preferences=prefs, canvas=_canvas_from_args(args, cfg))
    result = engine.update_entities(contracts)
    write_json(_optional_path(args.output), result.to_dict())
    LOGGER.info(
        "Smart view: %d/%d contracts, center=(%.4f, %.4f), zoom=%.2f",
        len(result.filtered),
        len(contracts),
        result.viewport.center.lat,
        result.viewport.center.lng,
        result.viewport.zoom,
    )
    return 0


def _run_focus(cfg: AppConfig, args: argparse.Namespace) -> int:
    try:
        contracts = load_contracts(Path(args.contracts))
    except (OSError, ValueError) as exc:
        LOGGER.error("Failed loading contracts: %s", exc)
        return 1
    engine = ViewportEngine(cfg, entities=contracts, canvas=_canvas_from_args(args, cfg))
    contract_id = parse_contract_id(args.id, contracts)
    viewport = engine.focus(contract_id)
    if viewport is None:
        LOGGER.error("Contract %s not found or has no usable coordinates.", args.id)
        return 1
    write_json(_optional_path(args.output), {"id": contract_id, "viewport": viewport.to_dict()})
    return 0


def _run_preview(cfg: AppConfig, args: argparse.Namespace) -> int:
    from .preview import render_preview

    loaded = _load_inputs(args)
    if loaded is None:
        return 1
    contracts, prefs = loaded
    engine = ViewportEngine(
        cfg,
        entities=contracts,
        preferences=prefs,
        canvas=_canvas_from_args(args, cfg),
    )
    result = engine.recompute(Trigger.MANUAL)
    try:
        render_preview(
            result,
            entities=contracts,
            output_path=Path(args.output),
            cfg=cfg.preview,
            viewport_policy=cfg.viewport,
        )
    except Exception as exc:
        LOGGER.error("Preview rendering failed: %s", exc)
        return 1
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    try:
        cfg = _load_and_setup(args)
    except (OSError, ValueError) as exc:
        setup_logging(verbose=args.verbose)
        LOGGER.error("Invalid config: %s", exc)
        return 1
    command = str(args.command)
    if command == "validate":
        return _run_validate(cfg, args)
    if command == "classify":
        return _run_classify(args)
    if command == "smart-view":
        return _run_smart_view(cfg, args)
    if command == "focus":
        return _run_focus(cfg, args)
    if command == "preview":
        return _run_preview(cfg, args)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
