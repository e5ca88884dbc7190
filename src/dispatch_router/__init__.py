"""Route planning service for field-service dispatch."""

__version__ = "0.1.0"
