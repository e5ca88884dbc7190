"""Application configuration and settings management."""

from typing import Any, Literal

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DISPATCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Dispatch Route Planner API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Route estimation
    average_speed_mph: float = Field(
        default=25.0,
        gt=0.0,
        description="Assumed average driving speed for metro traffic.",
    )
    dwell_minutes_per_stop: int = Field(
        default=5,
        ge=0,
        description="Fixed time allowance spent at each stop.",
    )
    default_state: str = Field(
        default="TX",
        description="State abbreviation appended to every navigation address.",
    )
    unlocatable_policy: Literal["drop", "append"] = Field(
        default="drop",
        description="What to do with stops lacking coordinates when others are geocoded.",
    )
    map_center: tuple[float, float] = Field(
        default=(29.7604, -95.3698),
        description="Default map center (lat, lng) when no stop can be located.",
    )

    # Geocoding collaborator
    nominatim_base_url: str = Field(default="https://nominatim.openstreetmap.org")
    census_geocoder_url: str = Field(
        default="https://geocoding.geo.census.gov/geocoder/locations/onelineaddress",
    )
    census_benchmark: str = Field(default="Public_AR_Current")
    geocoder_user_agent: str = Field(default="ClearAirDispatcher/1.0")
    geocoder_timeout_seconds: float = Field(default=10.0, gt=0.0)
    geocoder_max_retries: int = Field(default=2, ge=0)
    geocoder_backoff_seconds: float = Field(default=1.0, ge=0.0)
    geocode_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Pause between consecutive geocoding requests (Nominatim usage policy).",
    )
    geocode_cache_size: int = Field(
        default=512,
        ge=1,
        description="Most recently used addresses kept in the process-wide geocode cache.",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("map_center", mode="before")
    @classmethod
    def _parse_coordinate_from_env(cls, value: Any) -> tuple[float, float]:
        """Accept "lat,lng" or a JSON array for the map center."""
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                parsed = [item.strip() for item in value.split(",")]
            value = parsed
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        raise ValueError("map_center must be a (lat, lng) pair")


settings = Settings()
