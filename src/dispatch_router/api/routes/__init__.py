"""Route group exports."""

from . import geocode, health, routes

__all__ = ["routes", "geocode", "health"]
