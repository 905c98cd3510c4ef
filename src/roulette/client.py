"""HTTP backend for the selection store, talking to the `/countries` endpoint."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import requests

from .config import ClientConfig
from .store import PersistenceError

_LOGGER = logging.getLogger("roulette.client")


class HttpSelectionBackend:
    """Fetch and save per-device selection lists over HTTP.

    No retries: a failed call surfaces as `PersistenceError` and the store
    decides what to do with it.
    """

    def __init__(self, cfg: ClientConfig, *, session: requests.Session | None = None) -> None:
        self.cfg = cfg
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    @property
    def countries_url(self) -> str:
        return f"{self.cfg.base_url}/countries"

    def fetch(self, device_id: str) -> list[str]:
        payload = self._request("GET", params={"id": device_id})
        countries = payload.get("countries", [])
        if not isinstance(countries, list) or not all(isinstance(c, str) for c in countries):
            raise PersistenceError("Malformed 'countries' in response")
        return list(countries)

    def save(self, device_id: str, countries: Sequence[str]) -> None:
        payload = self._request("POST", json={"id": device_id, "countries": list(countries)})
        if payload.get("ok") is not True:
            raise PersistenceError(f"Save rejected: {payload.get('error', payload)}")
        _LOGGER.debug("Saved %d countries for %s", len(countries), device_id)

    def close(self) -> None:
        self._session.close()

    def _request(self, method: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._session.request(
                method,
                self.countries_url,
                timeout=self.cfg.request_timeout_s,
                **kwargs,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise PersistenceError(f"{method} {self.countries_url} failed: {exc}") from exc
        except ValueError as exc:
            raise PersistenceError(f"{method} {self.countries_url} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise PersistenceError(f"{method} {self.countries_url} returned non-object JSON")
        return payload
