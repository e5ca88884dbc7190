"""Serializers that turn an optimized route into map-ready structures."""

from __future__ import annotations

from typing import Any, Dict, List

from shapely.geometry import LineString, MultiPoint, Point, mapping

from ...config import settings
from ...models.domain import Location, OptimizedRoute
from ..geospatial import has_coordinates
from ..routing.maps_url import format_stop_address


def _located_stops(route: OptimizedRoute) -> list[tuple[int, Location]]:
    """Stops with usable coordinates, keeping their 1-based route sequence."""
    return [
        (sequence, location)
        for sequence, location in enumerate(route.ordered_locations, start=1)
        if has_coordinates(location.lat, location.lng)
    ]


def route_overlay(route: OptimizedRoute, default_center: tuple[float, float] | None = None) -> Dict[str, Any]:
    """Numbered markers plus the polyline connecting them, in visiting order.

    ``bounds`` is ``[[south, west], [north, east]]`` around the located stops
    and ``center`` its midpoint. With nothing located the map falls back to
    ``default_center`` (``settings.map_center`` unless given) and no bounds.
    """
    stops = _located_stops(route)
    if stops:
        west, south, east, north = MultiPoint([(location.lng, location.lat) for _, location in stops]).bounds
        bounds: list[list[float]] | None = [[south, west], [north, east]]
        center = [(south + north) / 2, (west + east) / 2]
    else:
        bounds = None
        center = list(default_center or settings.map_center)

    return {
        "markers": [
            {
                "sequence": sequence,
                "id": location.id,
                "lat": location.lat,
                "lng": location.lng,
                "label": str(sequence),
            }
            for sequence, location in stops
        ],
        "polyline": [[location.lat, location.lng] for _, location in stops],
        "center": center,
        "bounds": bounds,
    }


def route_to_geojson(route: OptimizedRoute, state: str | None = None) -> Dict[str, Any]:
    """Export the route as a GeoJSON FeatureCollection.

    Each located stop becomes a Point feature; when at least two stops are
    located the visiting path is added as a LineString. GeoJSON uses
    (lng, lat) ordering.
    """
    stops = _located_stops(route)
    features: List[Dict[str, Any]] = [
        {
            "type": "Feature",
            "geometry": mapping(Point(location.lng, location.lat)),
            "properties": {
                "sequence": sequence,
                "id": location.id,
                "address": format_stop_address(location, state),
            },
        }
        for sequence, location in stops
    ]

    if len(stops) >= 2:
        path = LineString([(location.lng, location.lat) for _, location in stops])
        features.append(
            {
                "type": "Feature",
                "geometry": mapping(path),
                "properties": {
                    "kind": "route",
                    "stop_count": len(route.ordered_locations),
                    "total_distance_miles": route.total_distance_miles,
                    "estimated_minutes": route.estimated_minutes,
                },
            }
        )

    return {"type": "FeatureCollection", "features": features}
