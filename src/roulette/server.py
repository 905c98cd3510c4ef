"""Flask persistence endpoint storing one used-country list per device."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from flask import Blueprint, Flask, current_app, jsonify, request

from .config import ServerConfig

KEY_PREFIX = "country-roulette"

_LOGGER = logging.getLogger("roulette.server")


def storage_key(device_id: str) -> str:
    return f"{KEY_PREFIX}:{device_id}"


class SelectionRepository:
    """sqlite-backed key-value table of JSON-encoded id lists."""

    def __init__(self, database: Path) -> None:
        self.database = database

    def init_schema(self) -> None:
        self.database.parent.mkdir(parents=True, exist_ok=True)
        with self._transaction() as db:
            db.execute(
                "CREATE TABLE IF NOT EXISTS selections ("
                "key TEXT PRIMARY KEY, countries TEXT NOT NULL, updated_at TEXT NOT NULL)"
            )

    def get(self, device_id: str) -> list[str]:
        with self._transaction() as db:
            row = db.execute(
                "SELECT countries FROM selections WHERE key = ?", (storage_key(device_id),)
            ).fetchone()
        if row is None:
            return []
        return list(json.loads(row[0]))

    def set(self, device_id: str, countries: list[str]) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._transaction() as db:
            db.execute(
                "INSERT INTO selections (key, countries, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET countries = excluded.countries, "
                "updated_at = excluded.updated_at",
                (storage_key(device_id), json.dumps(countries), now),
            )

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.database)
        try:
            with conn:
                yield conn
        finally:
            conn.close()


bp = Blueprint("countries", __name__)


def _repository() -> SelectionRepository:
    return current_app.extensions["roulette.repository"]


@bp.get("/countries")
def get_countries() -> Any:
    device_id = request.args.get("id")
    if not device_id:
        return jsonify({"countries": []})
    return jsonify({"countries": _repository().get(device_id)})


@bp.post("/countries")
def post_countries() -> Any:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Invalid countries"}), 400
    device_id = body.get("id")
    if not device_id or not isinstance(device_id, str):
        return jsonify({"error": "No id"}), 400
    countries = body.get("countries")
    if not isinstance(countries, list) or not all(isinstance(c, str) for c in countries):
        return jsonify({"error": "Invalid countries"}), 400
    limit = current_app.config["ROULETTE_MAX_COUNTRIES"]
    if len(countries) > limit:
        _LOGGER.warning("Rejected %d countries for %s (limit %d)", len(countries), device_id, limit)
        return jsonify({"error": "Too many countries"}), 400
    _repository().set(device_id, countries)
    _LOGGER.info("Stored %d countries for %s", len(countries), device_id)
    return jsonify({"ok": True})


def create_app(cfg: ServerConfig, repository: SelectionRepository | None = None) -> Flask:
    app = Flask("roulette")
    repo = repository or SelectionRepository(cfg.database)
    repo.init_schema()
    app.extensions["roulette.repository"] = repo
    app.config["ROULETTE_MAX_COUNTRIES"] = cfg.max_countries_per_device
    app.register_blueprint(bp, url_prefix=cfg.url_prefix or None)
    return app
