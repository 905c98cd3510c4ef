"""Map fill colours, sidebar text and a console presenter for spin events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Collection, Sequence

from .models import HighlightChanged, SpinEvent, SpinFinished, SpinStarted
from .session import RouletteSession


@dataclass(frozen=True, slots=True)
class MapPalette:
    default: str = "#E5E7EB"
    used: str = "#D4B483"
    highlighted: str = "#FBBF24"
    selected: str = "#10B981"
    hover: str = "#D1D5DB"
    stroke: str = "#FFFFFF"


PALETTE = MapPalette()

_LOGGER = logging.getLogger("roulette.presentation")


def fill_color(
    country_id: str,
    *,
    used: Collection[str],
    highlight: Collection[str] = (),
    selected: str | None = None,
    palette: MapPalette = PALETTE,
) -> str:
    """Fill for one country; selected beats highlighted beats used."""
    if selected is not None and country_id == selected:
        return palette.selected
    if country_id in highlight:
        return palette.highlighted
    if country_id in used:
        return palette.used
    return palette.default


def hover_color(country_id: str, *, used: Collection[str], palette: MapPalette = PALETTE) -> str:
    return palette.used if country_id in used else palette.hover


def flag_emoji(iso_a2: str | None) -> str:
    """Regional-indicator flag for a two-letter code; empty when unknown."""
    if not iso_a2 or len(iso_a2) != 2 or not iso_a2.isalpha():
        return ""
    return "".join(chr(0x1F1E6 + ord(ch) - ord("A")) for ch in iso_a2.upper())


def spin_button_label(session: RouletteSession) -> str:
    if session.all_used:
        return "ALL COMPLETE!"
    if session.engine.is_spinning:
        return "SPINNING..."
    return "SPIN"


def sidebar_lines(session: RouletteSession) -> Sequence[str]:
    lines: list[str] = ["CURRENT SELECTION"]
    selected = session.selected
    if selected is not None:
        flag = flag_emoji(selected.iso_a2)
        lines.append(f"  {flag + ' ' if flag else ''}{selected.name} ({selected.id})")
    elif session.engine.is_spinning:
        lines.append("  Spinning...")
    else:
        lines.append("  Press SPIN to start!")

    lines.append(f"[{spin_button_label(session)}]")

    used = session.used_countries()
    lines.append(f"USED COUNTRIES ({len(used)})")
    if not used:
        lines.append("  No countries used yet")
    for country in reversed(used):
        flag = flag_emoji(country.iso_a2)
        lines.append(f"  {flag + ' ' if flag else ''}{country.name} ({country.id})")
    if session.all_used:
        lines.append("You've visited all countries!")
    return lines


class ConsolePresenter:
    """Logs spin progress; subscribe it to a `SpinEngine`."""

    def __init__(self, names: dict[str, str] | None = None) -> None:
        self._names = names or {}
        self.events: list[SpinEvent] = []

    def __call__(self, event: SpinEvent) -> None:
        self.events.append(event)
        if isinstance(event, SpinStarted):
            _LOGGER.info("Spinning over %d countries...", event.pool_size)
        elif isinstance(event, HighlightChanged):
            labels = sorted(self._names.get(cid, cid) for cid in event.highlight)
            _LOGGER.info("  %s", " | ".join(labels))
        elif isinstance(event, SpinFinished):
            suffix = " (chosen)" if event.forced else ""
            _LOGGER.info("Selected %s (%s)%s", event.name, event.country_id, suffix)
