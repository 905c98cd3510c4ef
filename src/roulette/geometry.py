"""Coordinate trees and the vertex-averaged centroid used for map re-centering.

GeoJSON nests positions to different depths depending on the geometry type
(Point, LineString, Polygon, MultiPolygon). Instead of inspecting untyped
lists at every step, raw coordinates are parsed once into a small tagged tree
of `Point` leaves and `Group` nodes which the centroid walk then consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterator, Mapping, Sequence


@dataclass(frozen=True, slots=True)
class Point:
    lon: float
    lat: float

    def as_pair(self) -> tuple[float, float]:
        return (self.lon, self.lat)


@dataclass(frozen=True, slots=True)
class Group:
    """Ring, polygon or multipolygon: any sequence of nested geometries."""

    members: tuple[Geometry, ...] = ()


Geometry = Point | Group


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def parse_coordinates(raw: Any) -> Geometry:
    """Parse a GeoJSON `coordinates` value into a `Point`/`Group` tree.

    A sequence whose first element is a number is a position; only its
    first two values (lon, lat) are used.
    """
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise ValueError(f"Expected coordinate sequence, got {type(raw).__name__}")
    if raw and _is_number(raw[0]):
        if len(raw) < 2 or not _is_number(raw[1]):
            raise ValueError(f"Invalid position: {raw!r}")
        return Point(float(raw[0]), float(raw[1]))
    return Group(tuple(parse_coordinates(item) for item in raw))


def parse_geojson_geometry(geometry: Mapping[str, Any] | None) -> Geometry | None:
    """Parse a GeoJSON geometry object; `None` for null or empty geometries."""
    if geometry is None:
        return None
    if geometry.get("type") == "GeometryCollection":
        members = [
            parsed
            for parsed in (parse_geojson_geometry(item) for item in geometry.get("geometries") or [])
            if parsed is not None
        ]
        return Group(tuple(members)) if members else None
    coordinates = geometry.get("coordinates")
    if coordinates is None:
        return None
    return parse_coordinates(coordinates)


def iter_points(geometry: Geometry) -> Iterator[Point]:
    stack: list[Geometry] = [geometry]
    while stack:
        node = stack.pop()
        if isinstance(node, Point):
            yield node
        else:
            stack.extend(reversed(node.members))


def centroid(geometry: Geometry | None) -> Point | None:
    """Arithmetic mean of every position in the tree.

    This is not an area-weighted centroid; it is only meant to point a map
    viewport at the country. Returns `None` when the tree has no positions.
    """
    if geometry is None:
        return None
    lon_sum = 0.0
    lat_sum = 0.0
    count = 0
    for point in iter_points(geometry):
        lon_sum += point.lon
        lat_sum += point.lat
        count += 1
    if count == 0:
        return None
    return Point(lon_sum / count, lat_sum / count)
