"""Map viewport: default world view and a temporary zoom onto the winner."""

from __future__ import annotations

import asyncio
import logging

from .config import ViewConfig
from .geometry import Point

_LOGGER = logging.getLogger("roulette.view")


class MapView:
    """Viewport state driven by finished spins.

    `focus` zooms onto a point and schedules a revert to the default view
    after `focus_hold_ms` of real time; a newer focus replaces the pending
    revert. Outside a running event loop no revert is scheduled.
    """

    def __init__(self, cfg: ViewConfig | None = None) -> None:
        self.cfg = cfg or ViewConfig()
        self.center: tuple[float, float] = self.cfg.default_center
        self.scale: float = self.cfg.default_scale
        self._revert: asyncio.TimerHandle | None = None

    @property
    def is_focused(self) -> bool:
        return self.center != self.cfg.default_center or self.scale != self.cfg.default_scale

    @property
    def revert_pending(self) -> bool:
        return self._revert is not None and not self._revert.cancelled()

    def focus(self, point: Point) -> None:
        self._cancel_revert()
        self.center = point.as_pair()
        self.scale = self.cfg.focus_scale
        _LOGGER.debug("View focused on (%.2f, %.2f)", point.lon, point.lat)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._revert = loop.call_later(self.cfg.focus_hold_ms / 1000.0, self._on_revert)

    def reset(self) -> None:
        self._cancel_revert()
        self.center = self.cfg.default_center
        self.scale = self.cfg.default_scale

    def close(self) -> None:
        self._cancel_revert()

    def _on_revert(self) -> None:
        self._revert = None
        self.reset()

    def _cancel_revert(self) -> None:
        if self._revert is not None:
            self._revert.cancel()
            self._revert = None
