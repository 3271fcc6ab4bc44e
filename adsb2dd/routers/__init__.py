"""API routers."""
from adsb2dd.routers import dd, system

__all__ = ["dd", "system"]
