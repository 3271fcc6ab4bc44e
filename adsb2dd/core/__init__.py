"""Core package containing configuration, exceptions, and utilities."""
from adsb2dd.core.config import get_settings, Settings
from adsb2dd.core.exceptions import (
    Adsb2ddError,
    ParameterError,
    CapacityError,
    UpstreamValidationError,
    UpstreamError,
    TransientFetchError,
    InvalidSnapshotError,
)
from adsb2dd.core.utils import (
    parse_float,
    parse_position,
    is_valid_position,
    normalize_server,
    safe_altitude_ft,
    safe_number,
)

__all__ = [
    "get_settings",
    "Settings",
    "Adsb2ddError",
    "ParameterError",
    "CapacityError",
    "UpstreamValidationError",
    "UpstreamError",
    "TransientFetchError",
    "InvalidSnapshotError",
    "parse_float",
    "parse_position",
    "is_valid_position",
    "normalize_server",
    "safe_altitude_ft",
    "safe_number",
]
