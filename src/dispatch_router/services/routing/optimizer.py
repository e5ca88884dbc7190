"""Greedy nearest-neighbor ordering for a technician's daily stops."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from ...config import settings
from ...models.domain import Location, OptimizedRoute
from ..geospatial import has_coordinates, haversine_miles
from .maps_url import build_google_maps_url

logger = logging.getLogger(__name__)

UNLOCATABLE_POLICIES = ("drop", "append")


@dataclass(slots=True)
class RouteOptimizerConfig:
    average_speed_mph: float = settings.average_speed_mph
    dwell_minutes_per_stop: int = settings.dwell_minutes_per_stop
    state: str = settings.default_state
    unlocatable_policy: str = settings.unlocatable_policy

    def __post_init__(self) -> None:
        if not self.average_speed_mph > 0:
            raise ValueError(f"average_speed_mph must be positive, got {self.average_speed_mph}")
        if self.dwell_minutes_per_stop < 0:
            raise ValueError(f"dwell_minutes_per_stop must be >= 0, got {self.dwell_minutes_per_stop}")
        if self.unlocatable_policy not in UNLOCATABLE_POLICIES:
            raise ValueError(
                f"unlocatable_policy must be one of {UNLOCATABLE_POLICIES}, got '{self.unlocatable_policy}'"
            )


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def estimate_minutes(distance_miles: float, stop_count: int, config: RouteOptimizerConfig) -> int:
    drive_minutes = distance_miles / config.average_speed_mph * 60
    dwell_minutes = config.dwell_minutes_per_stop * stop_count
    return int(_round_half_up(drive_minutes + dwell_minutes))


def _nearest_neighbor_order(
    stops: Sequence[Location],
    start: tuple[float, float] | None,
) -> tuple[list[Location], float]:
    """Visit the closest remaining stop until none are left.

    Ties keep the stop that appears first in ``stops``. Without an explicit
    start the first stop is the origin and is emitted as-is.
    """
    remaining = list(stops)
    ordered: list[Location] = []
    total_distance = 0.0

    if start is None:
        first = remaining.pop(0)
        ordered.append(first)
        current_lat, current_lng = first.lat, first.lng
    else:
        current_lat, current_lng = start

    while remaining:
        nearest_index = 0
        nearest_distance = math.inf
        for index, candidate in enumerate(remaining):
            distance = haversine_miles(current_lat, current_lng, candidate.lat, candidate.lng)
            if distance < nearest_distance:
                nearest_distance = distance
                nearest_index = index

        nearest = remaining.pop(nearest_index)
        ordered.append(nearest)
        total_distance += nearest_distance
        current_lat, current_lng = nearest.lat, nearest.lng

    return ordered, total_distance


def optimize_route(
    locations: Sequence[Location],
    start_lat: float | None = None,
    start_lng: float | None = None,
    config: RouteOptimizerConfig | None = None,
) -> OptimizedRoute:
    """Order stops into a short driving route and estimate distance and time.

    Args:
        locations: Stops in the caller's original order. Any mix of geocoded
            and ungeocoded entries is accepted.
        start_lat: Optional fixed origin latitude (depot, technician position).
        start_lng: Optional fixed origin longitude. Ignored unless both parts
            of the start are valid coordinates.
        config: Speed, dwell and unlocatable-stop policy; defaults to settings.

    Returns:
        OptimizedRoute. Degenerate inputs (empty, nothing geocoded) produce
        zero metrics rather than errors.
    """
    config = config or RouteOptimizerConfig()
    locations = list(locations)

    if not locations:
        return OptimizedRoute(
            ordered_locations=[],
            total_distance_miles=0.0,
            estimated_minutes=0,
            google_maps_url="",
        )

    geocoded = [location for location in locations if has_coordinates(location.lat, location.lng)]
    unlocatable = [location for location in locations if not has_coordinates(location.lat, location.lng)]

    if not geocoded:
        # Address-based navigation still works without coordinates.
        return OptimizedRoute(
            ordered_locations=locations,
            total_distance_miles=0.0,
            estimated_minutes=0,
            google_maps_url=build_google_maps_url(locations, config.state),
        )

    start: tuple[float, float] | None = None
    if has_coordinates(start_lat, start_lng):
        start = (float(start_lat), float(start_lng))
    elif start_lat is not None or start_lng is not None:
        logger.debug(f"Ignoring unusable start coordinate ({start_lat}, {start_lng})")

    ordered, total_distance = _nearest_neighbor_order(geocoded, start)

    skipped_ids: list[str] = []
    if unlocatable:
        if config.unlocatable_policy == "append":
            ordered.extend(unlocatable)
        else:
            skipped_ids = [location.id for location in unlocatable]
            logger.info(
                f"Dropping {len(skipped_ids)} stop(s) without coordinates from the optimized route: {skipped_ids}"
            )

    return OptimizedRoute(
        ordered_locations=ordered,
        total_distance_miles=_round_half_up(total_distance, 1),
        estimated_minutes=estimate_minutes(total_distance, len(ordered), config),
        google_maps_url=build_google_maps_url(ordered, config.state),
        skipped_location_ids=skipped_ids,
    )


def format_duration(minutes: int) -> str:
    """Render minutes as "45 min", "1h" or "1h 30m"."""
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"
