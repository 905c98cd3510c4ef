from __future__ import annotations

import asyncio
import logging
import random

from roulette.config import SpinConfig
from roulette.engine import SpinEngine
from roulette.models import HighlightChanged, SpinFinished, SpinStarted
from roulette.presentation import (
    PALETTE,
    ConsolePresenter,
    fill_color,
    flag_emoji,
    hover_color,
    sidebar_lines,
    spin_button_label,
)
from roulette.session import RouletteSession
from roulette.store import MemoryBackend, SelectionStore


def test_fill_color_precedence():
    used = {"A", "B"}
    assert fill_color("Z", used=used) == PALETTE.default
    assert fill_color("A", used=used) == PALETTE.used
    assert fill_color("A", used=used, highlight={"A"}) == PALETTE.highlighted
    assert fill_color("A", used=used, highlight={"A"}, selected="A") == PALETTE.selected
    assert fill_color("C", used=used, highlight={"C"}) == "#FBBF24"


def test_hover_color_keeps_used_colour():
    assert hover_color("A", used={"A"}) == "#D4B483"
    assert hover_color("B", used={"A"}) == "#D1D5DB"


def test_flag_emoji():
    assert flag_emoji("fr") == "\U0001F1EB\U0001F1F7"
    assert flag_emoji(None) == ""
    assert flag_emoji("-9") == ""
    assert flag_emoji("FRA") == ""


def _session(catalog) -> RouletteSession:
    engine = SpinEngine(SpinConfig(time_unit_s=0.0), rng=random.Random(8))
    return RouletteSession(catalog, SelectionStore("d", MemoryBackend()), engine)


def test_sidebar_before_any_spin(catalog):
    lines = sidebar_lines(_session(catalog))
    assert lines == [
        "CURRENT SELECTION",
        "  Press SPIN to start!",
        "[SPIN]",
        "USED COUNTRIES (0)",
        "  No countries used yet",
    ]


def test_sidebar_lists_newest_first_and_completion(catalog):
    session = _session(catalog)
    for country_id in ["AAA", "BBB"]:
        session.store.append(country_id)
    session.choose_next("CCC")
    asyncio.run(session.spin())
    lines = sidebar_lines(session)
    assert lines[1] == "  Charlie (CCC)"
    assert lines[2] == "[ALL COMPLETE!]"
    assert lines[3:6] == ["USED COUNTRIES (3)", "  Charlie (CCC)", "  Bravo (BBB)"]
    assert lines[-1] == "You've visited all countries!"
    assert spin_button_label(session) == "ALL COMPLETE!"


def test_console_presenter_logs_events(caplog):
    presenter = ConsolePresenter({"A": "Alpha", "B": "Bravo"})
    with caplog.at_level(logging.INFO, logger="roulette.presentation"):
        presenter(SpinStarted(pool_size=2))
        presenter(HighlightChanged(tick=1, highlight=frozenset({"B", "A"}), delay_ms=60.0))
        presenter(SpinFinished(country_id="A", name="Alpha", ticks=20, forced=True))
    assert len(presenter.events) == 3
    assert "Alpha | Bravo" in caplog.text
    assert "Selected Alpha (A) (chosen)" in caplog.text
