"""Country catalog loading and indexing from a GeoJSON feature collection."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Sequence

from .geometry import Geometry, Point, centroid, parse_geojson_geometry
from .iso_codes import A3_TO_A2
from .models import Country

_LOGGER = logging.getLogger("roulette.countries")


class Catalog:
    """Ordered, read-only list of the countries selectable in a session.

    When two features resolve to the same identifier the first one owns the
    name and geometry lookups; the later entry is still kept in order.
    """

    def __init__(
        self,
        countries: Sequence[Country],
        geometries: Mapping[str, Geometry | None] | None = None,
    ) -> None:
        self._countries: tuple[Country, ...] = tuple(countries)
        self._by_id: dict[str, Country] = {}
        for country in self._countries:
            self._by_id.setdefault(country.id, country)
        self._geometries: dict[str, Geometry | None] = dict(geometries or {})

    def __len__(self) -> int:
        return len(self._countries)

    def __iter__(self) -> Iterator[Country]:
        return iter(self._countries)

    def __contains__(self, country_id: object) -> bool:
        return country_id in self._by_id

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(country.id for country in self._countries)

    @property
    def names(self) -> dict[str, str]:
        return {country_id: country.name for country_id, country in self._by_id.items()}

    def get(self, country_id: str) -> Country | None:
        return self._by_id.get(country_id)

    def name_for(self, country_id: str) -> str:
        country = self._by_id.get(country_id)
        return country.name if country is not None else country_id

    def geometry_for(self, country_id: str) -> Geometry | None:
        return self._geometries.get(country_id)

    def centroid_for(self, country_id: str) -> Point | None:
        return centroid(self.geometry_for(country_id))

    def resolve(self, country_ids: Iterable[str]) -> list[Country]:
        """Map ids onto catalog entries, dropping ids the catalog does not know."""
        return [self._by_id[cid] for cid in country_ids if cid in self._by_id]

    def duplicate_ids(self) -> list[str]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for country in self._countries:
            if country.id in seen and country.id not in duplicates:
                duplicates.append(country.id)
            seen.add(country.id)
        return duplicates


def parse_features(features: Sequence[Any]) -> Catalog:
    """Build a catalog from GeoJSON features, preserving feature order."""
    countries: list[Country] = []
    geometries: dict[str, Geometry | None] = {}
    for idx, feature in enumerate(features):
        if not isinstance(feature, Mapping):
            raise ValueError(f"Expected mapping for feature at index {idx}")
        properties = feature.get("properties") or {}
        if not isinstance(properties, Mapping):
            raise ValueError(f"Expected mapping for properties of feature at index {idx}")
        country = Country.from_properties(properties, a3_to_a2=A3_TO_A2)
        countries.append(country)
        if country.id in geometries:
            continue
        raw_geometry = feature.get("geometry")
        try:
            geometries[country.id] = parse_geojson_geometry(raw_geometry)
        except ValueError as exc:
            _LOGGER.warning("Ignoring malformed geometry for %s: %s", country.id, exc)
            geometries[country.id] = None
    return Catalog(countries, geometries)


def load_catalog(path: Path) -> Catalog:
    """Load the country catalog from a GeoJSON FeatureCollection file."""
    if not path.exists():
        raise FileNotFoundError(f"GeoJSON file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected GeoJSON object in {path}")
    features = raw.get("features")
    if not isinstance(features, list):
        raise ValueError(f"Expected 'features' list in {path}")
    catalog = parse_features(features)
    _LOGGER.info("Loaded %d countries from %s", len(catalog), path)
    return catalog
