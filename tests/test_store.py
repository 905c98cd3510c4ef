from __future__ import annotations

import logging
from typing import Sequence

import pytest

from roulette.store import MemoryBackend, PersistenceError, SelectionStore


class FailingBackend:
    def __init__(self) -> None:
        self.attempts = 0

    def fetch(self, device_id: str) -> list[str]:
        raise PersistenceError("backend down")

    def save(self, device_id: str, countries: Sequence[str]) -> None:
        self.attempts += 1
        raise PersistenceError("backend down")

    def close(self) -> None:
        pass


def test_mutations_are_persisted_in_full():
    backend = MemoryBackend()
    store = SelectionStore("device-1", backend)
    store.append("A")
    store.append("B")
    store.append("C")
    assert backend.fetch("device-1") == ["A", "B", "C"]
    assert store.remove("B")
    assert backend.fetch("device-1") == ["A", "C"]
    assert backend.save_calls == 4


def test_undo_removes_exactly_the_last_append():
    store = SelectionStore("d", MemoryBackend())
    for country_id in ["A", "B", "C", "D"]:
        store.append(country_id)
    assert store.undo_last() == "D"
    assert store.ids == ("A", "B", "C")


def test_undo_on_empty_is_a_no_op():
    backend = MemoryBackend()
    store = SelectionStore("d", backend)
    assert store.undo_last() is None
    assert backend.save_calls == 0


def test_remove_keeps_order_of_the_rest():
    store = SelectionStore("d", MemoryBackend())
    for country_id in ["A", "B", "C", "D"]:
        store.append(country_id)
    assert store.remove("B")
    assert store.ids == ("A", "C", "D")
    assert not store.remove("ZZZ")
    assert store.ids == ("A", "C", "D")


def test_reset_clears_everything():
    backend = MemoryBackend()
    store = SelectionStore("d", backend)
    store.append("A")
    store.reset()
    assert store.ids == ()
    assert len(store) == 0
    assert backend.fetch("d") == []


def test_load_replaces_memory_with_backend_copy():
    backend = MemoryBackend()
    backend.save("d", ["X", "Y"])
    store = SelectionStore("d", backend)
    assert store.load() == ("X", "Y")
    assert "X" in store


def test_devices_are_partitioned():
    backend = MemoryBackend()
    SelectionStore("one", backend).append("A")
    assert SelectionStore("two", backend).load() == ()


def test_save_failure_is_logged_and_memory_kept(caplog):
    backend = FailingBackend()
    store = SelectionStore("d", backend)
    with caplog.at_level(logging.ERROR, logger="roulette.store"):
        store.append("A")
        store.append("B")
        store.undo_last()
    assert store.ids == ("A",)
    assert backend.attempts == 3
    assert "Failed saving used countries for d" in caplog.text


def test_load_failure_keeps_current_list(caplog):
    store = SelectionStore("d", FailingBackend())
    with caplog.at_level(logging.ERROR, logger="roulette.store"):
        assert store.load() == ()
    assert "Failed loading used countries" in caplog.text


def test_retain_drops_unknown_ids_and_persists_only_on_change():
    backend = MemoryBackend()
    backend.save("d", ["A", "GONE", "B"])
    store = SelectionStore("d", backend)
    store.load()
    calls_before = backend.save_calls
    assert store.retain(["A", "B"]) == ["GONE"]
    assert store.ids == ("A", "B")
    assert backend.save_calls == calls_before + 1
    assert store.retain(["A", "B"]) == []
    assert backend.save_calls == calls_before + 1


def test_device_id_is_required():
    with pytest.raises(ValueError):
        SelectionStore("", MemoryBackend())
