"""Routing orchestration service."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Callable

from ...config import settings
from ...models.domain import Location, OptimizedRoute
from ...schemas.routing import LocationModel, RouteRequest, RouteResponse
from ..geocoding.client import GeocoderClient
from ..geocoding.service import LRUGeocodeCache, geocode_locations
from ..outputs.route_formatter import route_overlay, route_to_geojson
from .optimizer import RouteOptimizerConfig, format_duration, optimize_route

logger = logging.getLogger(__name__)

# Address -> coordinates shared by all requests, bounded by recency.
_geocode_cache = LRUGeocodeCache(settings.geocode_cache_size)


def clear_geocode_cache() -> None:
    _geocode_cache.clear()


def _build_config(payload: RouteRequest) -> RouteOptimizerConfig:
    base = RouteOptimizerConfig()
    overrides = payload.options
    return RouteOptimizerConfig(
        average_speed_mph=overrides.average_speed_mph
        if overrides and overrides.average_speed_mph is not None
        else base.average_speed_mph,
        dwell_minutes_per_stop=overrides.dwell_minutes_per_stop
        if overrides and overrides.dwell_minutes_per_stop is not None
        else base.dwell_minutes_per_stop,
        state=overrides.state if overrides and overrides.state is not None else base.state,
        unlocatable_policy=overrides.unlocatable_policy
        if overrides and overrides.unlocatable_policy is not None
        else base.unlocatable_policy,
    )


def _to_location(model: LocationModel) -> Location:
    return Location(
        id=model.id,
        address=model.address,
        city=model.city,
        zip=model.zip,
        lat=model.lat,
        lng=model.lng,
    )


GeocoderFactory = Callable[[], GeocoderClient]


def _optimize(
    payload: RouteRequest,
    geocoder_factory: GeocoderFactory | None = None,
) -> tuple[OptimizedRoute, RouteOptimizerConfig, dict]:
    ids = [location.id for location in payload.locations]
    if len(set(ids)) != len(ids):
        raise ValueError("Location ids must be unique within one request.")

    config = _build_config(payload)
    locations = [_to_location(model) for model in payload.locations]
    metadata: dict = {"input_count": len(locations)}

    if payload.geocode_missing and locations:
        factory = geocoder_factory or GeocoderClient
        with factory() as client:
            report = geocode_locations(
                locations,
                client,
                cache=_geocode_cache,
                city_fallback=payload.city_fallback,
                state=config.state,
            )
        locations = report.locations
        metadata["geocoding"] = {
            "geocoded_ids": report.geocoded_ids,
            "approximate_ids": report.approximate_ids,
            "failed_ids": report.failed_ids,
            "requests_made": report.requests_made,
        }

    route = optimize_route(
        locations,
        start_lat=payload.start_lat,
        start_lng=payload.start_lng,
        config=config,
    )
    logger.info(
        f"Planned route with {len(route.ordered_locations)} stop(s), "
        f"{route.total_distance_miles} mi, ~{route.estimated_minutes} min"
    )
    return route, config, metadata


def plan_route(payload: RouteRequest, geocoder_factory: GeocoderFactory | None = None) -> RouteResponse:
    """Optionally geocode the stops, then order them into a route.

    ``geocoder_factory`` builds the geocoding client used when
    ``payload.geocode_missing`` is set; it defaults to ``GeocoderClient``.
    """
    route, config, metadata = _optimize(payload, geocoder_factory)
    metadata.update(
        {
            "status": "optimized" if route.ordered_locations else "empty",
            "stop_count": len(route.ordered_locations),
            "unlocatable_policy": config.unlocatable_policy,
            "skipped_location_ids": route.skipped_location_ids,
            "average_speed_mph": config.average_speed_mph,
            "dwell_minutes_per_stop": config.dwell_minutes_per_stop,
            "map_overlays": route_overlay(route),
        }
    )

    return RouteResponse(
        ordered_locations=[LocationModel(**asdict(location)) for location in route.ordered_locations],
        total_distance_miles=route.total_distance_miles,
        estimated_minutes=route.estimated_minutes,
        estimated_duration=format_duration(route.estimated_minutes),
        google_maps_url=route.google_maps_url,
        metadata=metadata,
    )


def export_route_geojson(payload: RouteRequest, geocoder_factory: GeocoderFactory | None = None) -> dict:
    route, config, _ = _optimize(payload, geocoder_factory)
    return route_to_geojson(route, config.state)
