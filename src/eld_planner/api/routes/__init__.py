"""Route group exports."""

from . import health, hos, trips

__all__ = ["health", "hos", "trips"]
