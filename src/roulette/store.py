"""Visit history (the used set) and its best-effort persistence."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol, Sequence

_LOGGER = logging.getLogger("roulette.store")


class PersistenceError(RuntimeError):
    """Raised by a backend when loading or saving a selection list fails."""


class SelectionBackend(Protocol):
    def fetch(self, device_id: str) -> list[str]: ...

    def save(self, device_id: str, countries: Sequence[str]) -> None: ...

    def close(self) -> None: ...


class MemoryBackend:
    """Process-local backend keyed by device id."""

    def __init__(self) -> None:
        self._lists: dict[str, list[str]] = {}
        self.save_calls = 0

    def fetch(self, device_id: str) -> list[str]:
        return list(self._lists.get(device_id, []))

    def save(self, device_id: str, countries: Sequence[str]) -> None:
        self.save_calls += 1
        self._lists[device_id] = list(countries)

    def close(self) -> None:
        pass


class SelectionStore:
    """Chronological list of used country ids for one device.

    Every mutation updates memory first and then pushes the whole list to the
    backend. A failed save is logged and left alone: the in-memory list stays
    authoritative for the rest of the session.
    """

    def __init__(self, device_id: str, backend: SelectionBackend) -> None:
        if not device_id:
            raise ValueError("device_id must be non-empty")
        self.device_id = device_id
        self._backend = backend
        self._ids: list[str] = []

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, country_id: object) -> bool:
        return country_id in self._ids

    def load(self) -> tuple[str, ...]:
        """Replace the in-memory list with the backend's copy."""
        try:
            self._ids = list(self._backend.fetch(self.device_id))
        except PersistenceError as exc:
            _LOGGER.error("Failed loading used countries for %s: %s", self.device_id, exc)
            return self.ids
        _LOGGER.info("Loaded %d used countries for %s", len(self._ids), self.device_id)
        return self.ids

    def append(self, country_id: str) -> None:
        self._ids.append(country_id)
        _LOGGER.info("Marked %s as used (%d total)", country_id, len(self._ids))
        self._persist()

    def undo_last(self) -> str | None:
        if not self._ids:
            return None
        removed = self._ids.pop()
        _LOGGER.info("Undid %s (%d remaining)", removed, len(self._ids))
        self._persist()
        return removed

    def remove(self, country_id: str) -> bool:
        if country_id not in self._ids:
            return False
        self._ids.remove(country_id)
        _LOGGER.info("Removed %s (%d remaining)", country_id, len(self._ids))
        self._persist()
        return True

    def reset(self) -> None:
        self._ids.clear()
        _LOGGER.info("Cleared used countries for %s", self.device_id)
        self._persist()

    def retain(self, allowed_ids: Iterable[str]) -> list[str]:
        """Drop ids outside `allowed_ids`; persists only when something changed."""
        allowed = set(allowed_ids)
        dropped = [cid for cid in self._ids if cid not in allowed]
        if not dropped:
            return []
        self._ids = [cid for cid in self._ids if cid in allowed]
        _LOGGER.warning("Dropped unknown used countries: %s", ", ".join(dropped))
        self._persist()
        return dropped

    def close(self) -> None:
        self._backend.close()

    def _persist(self) -> None:
        try:
            self._backend.save(self.device_id, list(self._ids))
        except PersistenceError as exc:
            _LOGGER.error("Failed saving used countries for %s: %s", self.device_id, exc)
