"""Domain models for dispatch stops and optimized routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True)
class Location:
    """A job site to visit. Coordinates are optional until geocoded."""

    id: str
    address: str
    city: str
    zip: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass(slots=True)
class OptimizedRoute:
    ordered_locations: List[Location]
    total_distance_miles: float
    estimated_minutes: int
    google_maps_url: str
    skipped_location_ids: List[str] = field(default_factory=list)


@dataclass(slots=True)
class GeocodeResult:
    lat: float
    lng: float
    source: str
    approximate: bool = False
