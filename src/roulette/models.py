"""Domain models shared across roulette modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

UNKNOWN_COUNTRY_ID = "UNKNOWN"

# Property lookups are tried in order; the first non-empty value wins.
COUNTRY_ID_PROPERTIES = ("ISO_A3", "iso_a3", "id", "NAME", "name")
COUNTRY_NAME_PROPERTIES = ("NAME", "name", "ADMIN", "admin")
ISO_A3_PROPERTIES = ("ISO_A3", "iso_a3")
ISO_A2_PROPERTIES = ("ISO_A2", "iso_a2")


def _first_property(properties: Mapping[str, Any], candidates: tuple[str, ...]) -> str | None:
    for key in candidates:
        value = properties.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def country_id_from_properties(properties: Mapping[str, Any]) -> str:
    """Stable country identifier, falling back to the `UNKNOWN` sentinel."""
    return _first_property(properties, COUNTRY_ID_PROPERTIES) or UNKNOWN_COUNTRY_ID


def country_name_from_properties(properties: Mapping[str, Any]) -> str:
    return _first_property(properties, COUNTRY_NAME_PROPERTIES) or country_id_from_properties(
        properties
    )


@dataclass(frozen=True, slots=True)
class Country:
    """One selectable entry of the catalog, derived from a GeoJSON feature."""

    id: str
    name: str
    iso_a3: str | None = None
    iso_a2: str | None = None

    @classmethod
    def from_properties(
        cls,
        properties: Mapping[str, Any],
        *,
        a3_to_a2: Mapping[str, str] | None = None,
    ) -> Country:
        iso_a3 = _first_property(properties, ISO_A3_PROPERTIES)
        iso_a2 = _first_property(properties, ISO_A2_PROPERTIES)
        if iso_a2 is None and iso_a3 is not None and a3_to_a2 is not None:
            iso_a2 = a3_to_a2.get(iso_a3.upper())
        return cls(
            id=country_id_from_properties(properties),
            name=country_name_from_properties(properties),
            iso_a3=iso_a3,
            iso_a2=iso_a2,
        )


@dataclass(frozen=True, slots=True)
class SpinStarted:
    pool_size: int
    predetermined: str | None = None


@dataclass(frozen=True, slots=True)
class HighlightChanged:
    tick: int
    highlight: frozenset[str]
    delay_ms: float


@dataclass(frozen=True, slots=True)
class SpinFinished:
    country_id: str
    name: str
    ticks: int
    forced: bool = False


SpinEvent = SpinStarted | HighlightChanged | SpinFinished
