from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from roulette.countries import Catalog, parse_features


def make_feature(properties: dict[str, Any], coordinates: Any = None, kind: str = "Polygon") -> dict[str, Any]:
    geometry = None if coordinates is None else {"type": kind, "coordinates": coordinates}
    return {"type": "Feature", "properties": properties, "geometry": geometry}


@pytest.fixture
def features() -> list[dict[str, Any]]:
    return [
        make_feature(
            {"ISO_A3": "AAA", "NAME": "Alpha"},
            [[[0.0, 0.0], [0.0, 2.0], [2.0, 2.0], [2.0, 0.0]]],
        ),
        make_feature(
            {"ISO_A3": "BBB", "NAME": "Bravo"},
            [[[[10.0, 10.0], [10.0, 12.0], [12.0, 12.0], [12.0, 10.0]]]],
            kind="MultiPolygon",
        ),
        make_feature({"ISO_A3": "CCC", "NAME": "Charlie"}),
    ]


@pytest.fixture
def catalog(features: list[dict[str, Any]]) -> Catalog:
    return parse_features(features)


@pytest.fixture
def geojson_path(tmp_path: Path, features: list[dict[str, Any]]) -> Path:
    path = tmp_path / "world.geojson"
    path.write_text(json.dumps({"type": "FeatureCollection", "features": features}), encoding="utf-8")
    return path
