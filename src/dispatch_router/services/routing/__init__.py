"""Route ordering, estimates and navigation links."""

from .maps_url import build_google_maps_url, format_stop_address
from .optimizer import RouteOptimizerConfig, format_duration, optimize_route

__all__ = [
    "optimize_route",
    "format_duration",
    "RouteOptimizerConfig",
    "build_google_maps_url",
    "format_stop_address",
]
