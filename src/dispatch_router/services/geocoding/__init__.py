"""Geocoding collaborator: address lookup and paced batch resolution."""

from .client import GeocoderClient
from .service import GeocodingReport, geocode_locations

__all__ = ["GeocoderClient", "GeocodingReport", "geocode_locations"]
