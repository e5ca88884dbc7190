"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class LocationModel(BaseModel):
    id: str
    address: str
    city: str
    zip: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class RouteOptions(BaseModel):
    average_speed_mph: Optional[float] = Field(None, gt=0)
    dwell_minutes_per_stop: Optional[int] = Field(None, ge=0)
    state: Optional[str] = None
    unlocatable_policy: Optional[Literal["drop", "append"]] = Field(
        default=None,
        description="Stops without coordinates are dropped (default) or appended after the optimized stops.",
    )


class RouteRequest(BaseModel):
    locations: List[LocationModel] = Field(default_factory=list)
    start_lat: Optional[float] = Field(default=None, description="Fixed origin latitude (depot or technician).")
    start_lng: Optional[float] = Field(default=None, description="Fixed origin longitude.")
    options: Optional[RouteOptions] = None
    geocode_missing: bool = Field(
        default=False,
        description="Resolve stops without coordinates through the geocoder before optimizing.",
    )
    city_fallback: bool = Field(
        default=False,
        description="Accept a city-level location when a street address cannot be geocoded.",
    )


class RouteResponse(BaseModel):
    ordered_locations: List[LocationModel]
    total_distance_miles: float
    estimated_minutes: int
    estimated_duration: str
    google_maps_url: str
    metadata: dict


class GeocodeRequest(BaseModel):
    address: str = ""


class GeocodeResponse(BaseModel):
    success: bool
    lat: Optional[float] = None
    lng: Optional[float] = None
    source: Optional[str] = None
    approximate: bool = False
    error: Optional[str] = None
