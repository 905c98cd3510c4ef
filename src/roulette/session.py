"""Session controller owning the used set and wiring it to the spin engine."""

from __future__ import annotations

import logging

from .countries import Catalog
from .eligibility import eligible
from .engine import SpinEngine
from .models import Country, SpinEvent, SpinFinished
from .store import SelectionStore
from .view import MapView

_LOGGER = logging.getLogger("roulette.session")


class RouletteSession:
    """One user's session: catalog, visit history, engine and map view.

    The store is the single source of truth for used ids. The engine only
    ever sees a snapshot of eligible ids taken when a spin starts, and the
    session appends the winner when the engine reports it.
    """

    def __init__(
        self,
        catalog: Catalog,
        store: SelectionStore,
        engine: SpinEngine | None = None,
        view: MapView | None = None,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.engine = engine or SpinEngine()
        self.view = view
        self.selected: Country | None = None
        self._unsubscribe = self.engine.subscribe(self._on_event)
        if len(catalog) > 0:
            store.retain(catalog.ids)

    @property
    def eligible_ids(self) -> list[str]:
        return eligible(self.catalog.ids, self.store.ids)

    @property
    def all_used(self) -> bool:
        return len(self.catalog) > 0 and not self.eligible_ids

    @property
    def can_spin(self) -> bool:
        return not self.engine.is_spinning and bool(self.eligible_ids)

    def used_countries(self) -> list[Country]:
        return self.catalog.resolve(self.store.ids)

    def choose_next(self, country_id: str | None) -> None:
        """Force the winner of the next spin; `None` clears a pending choice."""
        if country_id is not None and country_id not in self.catalog:
            raise KeyError(f"Unknown country id: {country_id}")
        self.engine.predetermine(country_id)

    async def spin(self) -> SpinFinished | None:
        return await self.engine.spin(self.eligible_ids, names=self.catalog.names)

    def undo(self) -> str | None:
        removed = self.store.undo_last()
        if removed is not None and self.selected is not None and self.selected.id == removed:
            self.selected = None
        return removed

    def remove(self, country_id: str) -> bool:
        removed = self.store.remove(country_id)
        if removed and self.selected is not None and self.selected.id == country_id:
            self.selected = None
        return removed

    def reset(self) -> None:
        self.store.reset()
        self.selected = None

    def close(self) -> None:
        self.engine.close()
        if self.view is not None:
            self.view.close()
        self._unsubscribe()
        self.store.close()

    def _on_event(self, event: SpinEvent) -> None:
        if not isinstance(event, SpinFinished):
            return
        self.selected = self.catalog.get(event.country_id) or Country(
            id=event.country_id, name=event.name
        )
        if event.country_id in self.store:
            _LOGGER.warning("%s is already marked as used; not adding it again", event.country_id)
        else:
            self.store.append(event.country_id)
        if self.view is None:
            return
        center = self.catalog.centroid_for(event.country_id)
        if center is None:
            _LOGGER.debug("No geometry for %s; keeping current view", event.country_id)
            return
        self.view.focus(center)
