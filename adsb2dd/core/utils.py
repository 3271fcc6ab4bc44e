"""
Utility functions for parameter parsing, validation, and unit conversion.
"""
import math
from typing import Any, Optional
from urllib.parse import urlparse

FEET_TO_METERS = 0.3048
KNOTS_TO_MPS = 1852.0 / 3600.0
FPM_TO_MPS = FEET_TO_METERS / 60.0


def parse_float(value: Optional[str]) -> Optional[float]:
    """Parse a finite float from a query string value, or return None."""
    if value is None:
        return None
    try:
        result = float(value.strip())
    except (ValueError, AttributeError):
        return None
    if not math.isfinite(result):
        return None
    return result


def parse_position(value: Optional[str]) -> Optional[tuple[float, float, float]]:
    """
    Parse a "lat,lon,alt" string into a (lat, lon, alt) tuple.

    Returns None unless there are exactly three finite numbers and the
    latitude/longitude are within range.
    """
    if not value:
        return None
    parts = value.split(",")
    if len(parts) != 3:
        return None
    numbers = [parse_float(p) for p in parts]
    if any(n is None for n in numbers):
        return None
    lat, lon, alt = numbers
    if not is_valid_position(lat, lon):
        return None
    return lat, lon, alt


def is_valid_position(lat: Optional[float], lon: Optional[float]) -> bool:
    """Check if coordinates are present and within bounds."""
    if lat is None or lon is None:
        return False
    if not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
        return False
    return True


def normalize_server(server: Optional[str]) -> Optional[str]:
    """Strip whitespace and trailing slashes from a server base URL."""
    if server is None:
        return None
    server = server.strip().rstrip("/")
    return server or None


def host_of(url: str) -> str:
    """Extract the lowercase host of a URL, used as the backoff key."""
    parsed = urlparse(url)
    return parsed.hostname.lower() if parsed.hostname else parsed.netloc.lower()


def safe_altitude_ft(alt_value: Any) -> Optional[float]:
    """Safely convert a tar1090 altitude to feet, handling 'ground' and other strings."""
    if alt_value is None or isinstance(alt_value, bool):
        return None
    if isinstance(alt_value, (int, float)):
        return float(alt_value) if math.isfinite(alt_value) else None
    if isinstance(alt_value, str):
        if alt_value.lower() == "ground":
            return 0.0
        try:
            result = float(alt_value)
        except ValueError:
            return None
        return result if math.isfinite(result) else None
    return None


def safe_number(value: Any) -> Optional[float]:
    """Return value as a finite float if it is numeric, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)
