"""HTTP client for the public geocoding services (Nominatim, US Census)."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from ...config import settings
from ...models.domain import GeocodeResult
from ..geospatial import has_coordinates

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

logger = logging.getLogger(__name__)


class GeocoderClient:
    """Resolve free-text addresses to coordinates.

    Nominatim is queried first and the US Census one-line geocoder is used as a
    fallback. A provider that keeps failing is logged and treated as "no match"
    so the next provider still gets a chance; callers only ever see ``None``
    for an address that could not be resolved.
    """

    def __init__(
        self,
        base_url: str | None = None,
        census_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = (base_url or settings.nominatim_base_url).rstrip("/")
        self.census_url = census_url or settings.census_geocoder_url
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.geocoder_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.geocoder_backoff_seconds
        )
        self._sleep = sleep
        self._client = httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"User-Agent": self.user_agent},
            transport=transport,
        )

    def __enter__(self) -> "GeocoderClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _get_json(self, url: str, params: dict[str, str]) -> Any | None:
        """GET ``url`` and decode JSON, retrying transient failures.

        Returns None once retries are exhausted or the failure is permanent.
        """
        attempt = 0
        while True:
            try:
                response = self._client.get(url, params=params)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                if status_code not in RETRYABLE_STATUS_CODES or attempt >= self.max_retries:
                    logger.warning(f"Geocoding request to {url} failed with HTTP {status_code}")
                    return None
            except httpx.TransportError as e:
                if attempt >= self.max_retries:
                    logger.warning(f"Geocoding request to {url} failed after {attempt + 1} attempt(s): {e}")
                    return None
            except httpx.HTTPError as e:
                logger.warning(f"Geocoding request to {url} failed: {e}")
                return None
            except ValueError as e:
                logger.warning(f"Geocoding response from {url} is not valid JSON: {e}")
                return None
            attempt += 1
            wait_time = self.backoff_seconds * attempt
            logger.debug(f"Retrying geocoding request in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
            self._sleep(wait_time)

    def _search_nominatim(self, query: str) -> tuple[float, float] | None:
        data = self._get_json(
            f"{self.base_url}/search",
            {"format": "json", "q": query, "limit": "1"},
        )
        if not isinstance(data, list) or not data:
            return None
        try:
            lat, lng = float(data[0]["lat"]), float(data[0]["lon"])
        except (KeyError, TypeError, ValueError):
            return None
        return (lat, lng) if has_coordinates(lat, lng) else None

    def _search_census(self, address: str) -> tuple[float, float] | None:
        data = self._get_json(
            self.census_url,
            {"address": address, "benchmark": settings.census_benchmark, "format": "json"},
        )
        try:
            matches = data["result"]["addressMatches"]
            coordinates = matches[0]["coordinates"]
            lat, lng = float(coordinates["y"]), float(coordinates["x"])
        except (KeyError, IndexError, TypeError, ValueError):
            return None
        return (lat, lng) if has_coordinates(lat, lng) else None

    def geocode(self, address: str) -> GeocodeResult | None:
        """Resolve an address, trying Nominatim then the Census geocoder."""
        if not address or not address.strip():
            raise ValueError("Address is required for geocoding.")
        address = address.strip()

        coordinates = self._search_nominatim(address)
        if coordinates:
            return GeocodeResult(lat=coordinates[0], lng=coordinates[1], source="nominatim")

        logger.info(f"Nominatim found no match for '{address}', trying Census geocoder")
        coordinates = self._search_census(address)
        if coordinates:
            return GeocodeResult(lat=coordinates[0], lng=coordinates[1], source="census")
        return None

    def geocode_city(self, city: str, state: str | None = None) -> GeocodeResult | None:
        """City-level approximation used when a street address cannot be found."""
        if not city or not city.strip():
            raise ValueError("City is required for city-level geocoding.")
        state = settings.default_state if state is None else state
        coordinates = self._search_nominatim(f"{city.strip()}, {state}")
        if coordinates:
            return GeocodeResult(lat=coordinates[0], lng=coordinates[1], source="nominatim", approximate=True)
        return None
