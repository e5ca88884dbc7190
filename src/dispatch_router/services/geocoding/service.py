"""Batch geocoding for stops that are missing coordinates."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator, MutableMapping, Sequence

from ...config import settings
from ...models.domain import GeocodeResult, Location
from ..geospatial import has_coordinates
from ..routing.maps_url import format_stop_address
from .client import GeocoderClient

logger = logging.getLogger(__name__)

GeocodeCache = MutableMapping[str, GeocodeResult]


class LRUGeocodeCache(MutableMapping[str, GeocodeResult]):
    """Address -> result mapping that evicts the least recently used entry."""

    def __init__(self, maxsize: int) -> None:
        if maxsize < 1:
            raise ValueError(f"maxsize must be >= 1, got {maxsize}")
        self.maxsize = maxsize
        self._entries: OrderedDict[str, GeocodeResult] = OrderedDict()

    def __getitem__(self, key: str) -> GeocodeResult:
        value = self._entries[key]
        self._entries.move_to_end(key)
        return value

    def __setitem__(self, key: str, value: GeocodeResult) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.maxsize:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted '{evicted}' from geocode cache")

    def __delitem__(self, key: str) -> None:
        del self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


@dataclass(slots=True)
class GeocodingReport:
    locations: list[Location]
    geocoded_ids: list[str] = field(default_factory=list)
    approximate_ids: list[str] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)
    requests_made: int = 0


def geocode_locations(
    locations: Sequence[Location],
    client: GeocoderClient,
    *,
    cache: GeocodeCache | None = None,
    delay_seconds: float | None = None,
    city_fallback: bool = False,
    state: str | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> GeocodingReport:
    """Fill in coordinates for stops that lack them.

    Lookups run one at a time in input order with ``delay_seconds`` between
    consecutive network lookups. Successful results are stored in ``cache``
    keyed by the formatted address so repeated addresses cost nothing.
    Locations are returned in input order; unresolved ones keep their missing
    coordinates.
    """
    delay_seconds = settings.geocode_delay_seconds if delay_seconds is None else delay_seconds
    cache = {} if cache is None else cache
    report = GeocodingReport(locations=[])
    lookups_done = 0

    def paced(lookup: Callable[..., GeocodeResult | None], *args: str | None) -> GeocodeResult | None:
        nonlocal lookups_done
        if lookups_done > 0 and delay_seconds > 0:
            sleep(delay_seconds)
        lookups_done += 1
        report.requests_made += 1
        return lookup(*args)

    for location in locations:
        if has_coordinates(location.lat, location.lng):
            report.locations.append(location)
            continue

        if not location.address.strip() or not location.city.strip():
            logger.warning(f"Stop {location.id} has no address or city; not geocoding it")
            report.failed_ids.append(location.id)
            report.locations.append(location)
            continue

        address = format_stop_address(location, state)
        result = cache.get(address)
        if result is None:
            result = paced(client.geocode, address)
            if result is None and city_fallback and location.city.strip():
                result = paced(client.geocode_city, location.city, state)
            if result is not None:
                cache[address] = result

        if result is None:
            logger.warning(f"Could not geocode stop {location.id}: '{address}'")
            report.failed_ids.append(location.id)
            report.locations.append(location)
            continue

        report.geocoded_ids.append(location.id)
        if result.approximate:
            report.approximate_ids.append(location.id)
        report.locations.append(replace(location, lat=result.lat, lng=result.lng))

    logger.info(
        f"Geocoded {len(report.geocoded_ids)} stop(s), {len(report.failed_ids)} failed, "
        f"{report.requests_made} request(s) made"
    )
    return report
