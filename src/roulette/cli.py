"""CLI entrypoint for country roulette."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Sequence

from .client import HttpSelectionBackend
from .config import AppConfig, load_config
from .countries import load_catalog
from .engine import SpinEngine
from .presentation import ConsolePresenter, sidebar_lines
from .server import create_app
from .session import RouletteSession
from .store import SelectionStore
from .util import ensure_directories, load_or_create_device_id, setup_logging
from .validate import Validator, format_report_lines
from .view import MapView

LOGGER = logging.getLogger("roulette.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roulette",
        description="Spin the world map to pick the next country to visit.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    serve_p = subparsers.add_parser("serve", help="Run the persistence endpoint.")
    add_common(serve_p)

    spin_p = subparsers.add_parser("spin", help="Spin for the next unvisited country.")
    add_common(spin_p)
    spin_p.add_argument(
        "--pick",
        default=None,
        help="Country id to force as the winner of this spin.",
    )

    undo_p = subparsers.add_parser("undo", help="Remove the most recently used country.")
    add_common(undo_p)

    remove_p = subparsers.add_parser("remove", help="Remove one country from the used list.")
    add_common(remove_p)
    remove_p.add_argument("country_id", help="Country id to remove.")

    reset_p = subparsers.add_parser("reset", help="Clear the used list.")
    add_common(reset_p)

    status_p = subparsers.add_parser("status", help="Show the used list.")
    add_common(status_p)

    validate_p = subparsers.add_parser("validate", help="Validate config and GeoJSON catalog.")
    add_common(validate_p)
    validate_p.add_argument(
        "--strict",
        action="store_true",
        help="Treat catalog data-quality issues as errors.",
    )

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    setup_logging(cfg.paths.logs_dir / "roulette.log", verbose=args.verbose)
    ensure_directories(cfg.paths.build_directories)
    return cfg


def _open_session(cfg: AppConfig) -> RouletteSession:
    catalog = load_catalog(cfg.paths.geojson)
    device_id = load_or_create_device_id(cfg.paths.device_id_file)
    store = SelectionStore(device_id, HttpSelectionBackend(cfg.client))
    store.load()
    engine = SpinEngine(cfg.spin)
    return RouletteSession(catalog, store, engine, MapView(cfg.view))


def _log_sidebar(session: RouletteSession) -> None:
    for line in sidebar_lines(session):
        LOGGER.info(line)


def _run_serve(cfg: AppConfig) -> int:
    app = create_app(cfg.server)
    LOGGER.info("Serving selections from %s", cfg.server.database)
    app.run(host=cfg.server.host, port=cfg.server.port)
    return 0


def _run_spin(cfg: AppConfig, *, pick: str | None) -> int:
    session = _open_session(cfg)
    try:
        if pick is not None:
            if pick in session.store:
                LOGGER.warning("%s is already used; this spin will be random.", pick)
            session.choose_next(pick)
        if not session.can_spin:
            LOGGER.error("Nothing to spin: all countries are used.")
            return 1
        presenter = ConsolePresenter(session.catalog.names)
        session.engine.subscribe(presenter)
        result = asyncio.run(session.spin())
        if result is None:
            LOGGER.error("Spin was refused.")
            return 1
        if session.view is not None and session.view.is_focused:
            lon, lat = session.view.center
            LOGGER.info("Map centered on (%.2f, %.2f)", lon, lat)
        _log_sidebar(session)
        return 0
    finally:
        session.close()


def _run_undo(cfg: AppConfig) -> int:
    session = _open_session(cfg)
    removed = session.undo()
    if removed is None:
        LOGGER.info("Nothing to undo.")
    else:
        LOGGER.info("Undid %s (%s)", session.catalog.name_for(removed), removed)
    _log_sidebar(session)
    session.close()
    return 0


def _run_remove(cfg: AppConfig, *, country_id: str) -> int:
    session = _open_session(cfg)
    removed = session.remove(country_id)
    if not removed:
        LOGGER.warning("%s is not in the used list.", country_id)
    _log_sidebar(session)
    session.close()
    return 0 if removed else 1


def _run_reset(cfg: AppConfig) -> int:
    session = _open_session(cfg)
    session.reset()
    LOGGER.info("Used list cleared.")
    session.close()
    return 0


def _run_status(cfg: AppConfig) -> int:
    session = _open_session(cfg)
    _log_sidebar(session)
    LOGGER.info("%d of %d countries remain.", len(session.eligible_ids), len(session.catalog))
    session.close()
    return 0


def _run_validate(cfg: AppConfig, *, strict: bool) -> int:
    report = Validator(cfg).run(strict=strict)
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    if command == "serve":
        return _run_serve(cfg)
    if command == "spin":
        return _run_spin(cfg, pick=args.pick)
    if command == "undo":
        return _run_undo(cfg)
    if command == "remove":
        return _run_remove(cfg, country_id=str(args.country_id))
    if command == "reset":
        return _run_reset(cfg)
    if command == "status":
        return _run_status(cfg)
    if command == "validate":
        return _run_validate(cfg, strict=bool(args.strict))
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        return _dispatch(args)
    except (FileNotFoundError, ValueError, KeyError) as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
