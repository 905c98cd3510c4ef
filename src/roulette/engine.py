"""Decelerating spin state machine.

A spin runs as one coroutine: each tick publishes a fresh random highlight
drawn from the eligible pool, grows the delay, and then suspends for that
delay. The loop ends after `max_ticks` ticks or once the delay reaches
`max_delay_ms`, whichever comes first, and an independent final draw picks
the winner (or the predetermined id, when one is set and still eligible).
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Mapping, Sequence

from .config import SpinConfig
from .eligibility import pick_without_replacement
from .models import HighlightChanged, SpinEvent, SpinFinished, SpinStarted

Listener = Callable[[SpinEvent], None]
Sleep = Callable[[float], Awaitable[None]]

_LOGGER = logging.getLogger("roulette.engine")


def tick_schedule(cfg: SpinConfig) -> list[float]:
    """Delay in effect at the start of every tick of one full spin."""
    delays: list[float] = []
    delay = cfg.initial_delay_ms
    ticks = 0
    while True:
        delays.append(delay)
        ticks += 1
        delay *= cfg.growth_factor
        if ticks >= cfg.max_ticks or delay >= cfg.max_delay_ms:
            return delays


def highlight_count(cfg: SpinConfig, delay_ms: float) -> int:
    if delay_ms < cfg.highlight_delay_threshold_ms:
        return cfg.fast_highlight_count
    return cfg.slow_highlight_count


class SpinEngine:
    """Reusable Idle -> Spinning -> Idle machine; one spin at a time."""

    def __init__(
        self,
        cfg: SpinConfig | None = None,
        *,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.cfg = cfg or SpinConfig()
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._listeners: list[Listener] = []
        self._spinning = False
        self._highlight: frozenset[str] = frozenset()
        self._final_selection: str | None = None
        self._predetermined: str | None = None
        self._task: asyncio.Task[SpinFinished | None] | None = None
        self._closed = False

    @property
    def is_spinning(self) -> bool:
        return self._spinning

    @property
    def highlight(self) -> frozenset[str]:
        return self._highlight

    @property
    def final_selection(self) -> str | None:
        return self._final_selection

    @property
    def predetermined(self) -> str | None:
        return self._predetermined

    def predetermine(self, country_id: str | None) -> None:
        """Force the winner of the next completed spin (None clears it)."""
        self._predetermined = country_id
        if country_id is not None:
            _LOGGER.info("Next spin predetermined to %s", country_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def spin(
        self,
        pool: Sequence[str],
        *,
        names: Mapping[str, str] | None = None,
    ) -> SpinFinished | None:
        """Run one spin to completion; `None` if it was refused or the engine closed.

        The ticks run in a task of their own, so `close()` from elsewhere
        stops the spin without cancelling the awaiting coroutine.
        """
        task = self.start(pool, names=names)
        if task is None:
            return None
        try:
            return await task
        except asyncio.CancelledError:
            if self._closed and task.cancelled():
                return None
            raise

    def start(
        self,
        pool: Sequence[str],
        *,
        names: Mapping[str, str] | None = None,
    ) -> asyncio.Task[SpinFinished | None] | None:
        """Schedule a spin on the running loop and return its task."""
        snapshot = self._begin(pool)
        if snapshot is None:
            return None
        task = asyncio.get_running_loop().create_task(self._run(snapshot, names))
        self._task = task
        return task

    def close(self) -> None:
        """Stop any running spin; the engine refuses new spins afterwards."""
        self._closed = True
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # A spin closed from one of its own listeners stops at its next check.
        if task is not current:
            task.cancel()
        # The task may never get to run its cleanup if it has not started yet.
        self._spinning = False
        self._highlight = frozenset()
        self._task = None
        _LOGGER.info("Spin engine closed mid-spin")

    def _begin(self, pool: Sequence[str]) -> list[str] | None:
        if self._closed:
            _LOGGER.debug("Spin refused: engine closed")
            return None
        if self._spinning:
            _LOGGER.debug("Spin refused: already spinning")
            return None
        snapshot = list(dict.fromkeys(pool))
        if not snapshot:
            _LOGGER.debug("Spin refused: no eligible countries")
            return None
        self._spinning = True
        self._highlight = frozenset()
        self._final_selection = None
        return snapshot

    async def _run(
        self,
        snapshot: list[str],
        names: Mapping[str, str] | None,
    ) -> SpinFinished | None:
        try:
            _LOGGER.info("Spin started over %d eligible countries", len(snapshot))
            self._emit(SpinStarted(pool_size=len(snapshot), predetermined=self._predetermined))
            schedule = tick_schedule(self.cfg)
            for tick, delay in enumerate(schedule, start=1):
                if self._closed:
                    return None
                if tick > 1:
                    await self._sleep(delay * self.cfg.time_unit_s)
                picks = pick_without_replacement(
                    snapshot, highlight_count(self.cfg, delay), self._rng
                )
                self._highlight = frozenset(picks)
                _LOGGER.debug("Tick %d (delay %.1f): %s", tick, delay, ", ".join(picks))
                self._emit(HighlightChanged(tick=tick, highlight=self._highlight, delay_ms=delay))

            if self._closed:
                return None
            winner, forced = self._draw_winner(snapshot)
            self._predetermined = None
            self._final_selection = winner
            self._highlight = frozenset()
            self._spinning = False
            name = names.get(winner, winner) if names is not None else winner
            result = SpinFinished(country_id=winner, name=name, ticks=len(schedule), forced=forced)
            _LOGGER.info("Spin finished after %d ticks: %s (%s)", result.ticks, winner, name)
            self._emit(result)
            return result
        finally:
            self._spinning = False
            self._highlight = frozenset()
            self._task = None

    def _draw_winner(self, snapshot: list[str]) -> tuple[str, bool]:
        chosen = self._predetermined
        if chosen is not None:
            if chosen in snapshot:
                return chosen, True
            _LOGGER.info("Predetermined %s is not eligible; drawing at random", chosen)
        return pick_without_replacement(snapshot, 1, self._rng)[0], False

    def _emit(self, event: SpinEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
