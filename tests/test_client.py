from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import pytest
import requests

from roulette.client import HttpSelectionBackend
from roulette.config import ClientConfig, ServerConfig
from roulette.server import create_app
from roulette.store import PersistenceError, SelectionStore

CFG = ClientConfig(base_url="http://roulette.test/api", request_timeout_s=2.0)


class FakeResponse:
    def __init__(self, status_code: int, payload: Any) -> None:
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, response: FakeResponse | Exception) -> None:
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self._response = response

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if isinstance(self._response, Exception):
            raise self._response
        return self._response

    def close(self) -> None:
        pass


class FlaskSession:
    """Routes requests into a Flask test client."""

    def __init__(self, app) -> None:
        self.headers: dict[str, str] = {}
        self._client = app.test_client()

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        path = urlsplit(url).path
        response = self._client.open(
            path,
            method=method,
            query_string=kwargs.get("params"),
            json=kwargs.get("json"),
        )
        return FakeResponse(response.status_code, response.get_json())


def test_fetch_sends_device_id_and_timeout():
    session = FakeSession(FakeResponse(200, {"countries": ["FRA"]}))
    backend = HttpSelectionBackend(CFG, session=session)
    assert backend.fetch("dev") == ["FRA"]
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "http://roulette.test/api/countries")
    assert kwargs["params"] == {"id": "dev"}
    assert kwargs["timeout"] == 2.0


def test_save_posts_full_list():
    session = FakeSession(FakeResponse(200, {"ok": True}))
    backend = HttpSelectionBackend(CFG, session=session)
    backend.save("dev", ("FRA", "JPN"))
    method, _, kwargs = session.calls[0]
    assert method == "POST"
    assert kwargs["json"] == {"id": "dev", "countries": ["FRA", "JPN"]}


@pytest.mark.parametrize(
    "response",
    [
        requests.ConnectionError("refused"),
        FakeResponse(500, {"error": "boom"}),
        FakeResponse(200, ValueError("not json")),
        FakeResponse(200, ["not", "an", "object"]),
        FakeResponse(200, {"countries": "FRA"}),
    ],
)
def test_fetch_failures_raise_persistence_error(response):
    backend = HttpSelectionBackend(CFG, session=FakeSession(response))
    with pytest.raises(PersistenceError):
        backend.fetch("dev")


def test_rejected_save_raises_persistence_error():
    backend = HttpSelectionBackend(CFG, session=FakeSession(FakeResponse(400, {"error": "No id"})))
    with pytest.raises(PersistenceError):
        backend.save("dev", ["FRA"])


def test_store_over_http_against_flask_app(tmp_path: Path):
    app = create_app(
        ServerConfig(
            host="127.0.0.1",
            port=5000,
            url_prefix="/api",
            database=tmp_path / "selections.db",
            max_countries_per_device=10,
        )
    )
    backend = HttpSelectionBackend(CFG, session=FlaskSession(app))
    store = SelectionStore("device-42", backend)
    store.append("FRA")
    store.append("KEN")
    store.undo_last()

    reloaded = SelectionStore("device-42", HttpSelectionBackend(CFG, session=FlaskSession(app)))
    assert reloaded.load() == ("FRA",)
