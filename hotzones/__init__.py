"""Hotzones: anonymous, ephemeral, location-scoped event reporting server."""

__version__ = "1.0.0"
