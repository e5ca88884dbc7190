"""Google Maps directions links for an ordered list of stops."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import quote

from ...config import settings
from ...models.domain import Location

GOOGLE_MAPS_DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1"

# Characters encodeURIComponent leaves untouched on top of quote()'s defaults.
_URI_COMPONENT_SAFE = "!~*'()"


def format_stop_address(location: Location, state: str | None = None) -> str:
    """Render a stop as "{address}, {city}, {state} {zip}"; the zip slot stays blank when missing."""
    state = settings.default_state if state is None else state
    return f"{location.address}, {location.city}, {state} {location.zip or ''}"


def _encode(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def build_google_maps_url(locations: Sequence[Location], state: str | None = None) -> str:
    """Build a multi-stop directions URL.

    The first stop is the origin, the last one the destination and anything in
    between becomes a pipe-separated waypoint list. A single stop yields a
    destination-only link and an empty sequence an empty string.
    """
    if not locations:
        return ""

    addresses = [_encode(format_stop_address(location, state)) for location in locations]

    if len(addresses) == 1:
        return f"{GOOGLE_MAPS_DIRECTIONS_URL}&destination={addresses[0]}"

    url = f"{GOOGLE_MAPS_DIRECTIONS_URL}&origin={addresses[0]}&destination={addresses[-1]}"
    waypoints = "|".join(addresses[1:-1])
    if waypoints:
        url += f"&waypoints={waypoints}"
    return url
