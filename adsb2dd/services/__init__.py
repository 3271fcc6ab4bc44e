"""Services package."""
from adsb2dd.services.geometry import (
    SPEED_OF_LIGHT, geodetic_to_ecef, enu_to_ecef_velocity,
    bistatic_delay_doppler, aircraft_delay_doppler, convert_snapshot
)
from adsb2dd.services.registry import ConfigRegistry
from adsb2dd.services.upstream import UpstreamClient, parse_snapshot
from adsb2dd.services.scheduler import UpdateScheduler, SchedulerState
from adsb2dd.services.registration import RegistrationRequest, parse_request, register

__all__ = [
    # Geometry
    "SPEED_OF_LIGHT",
    "geodetic_to_ecef",
    "enu_to_ecef_velocity",
    "bistatic_delay_doppler",
    "aircraft_delay_doppler",
    "convert_snapshot",
    # Registry and update loop
    "ConfigRegistry",
    "UpdateScheduler",
    "SchedulerState",
    # Upstream
    "UpstreamClient",
    "parse_snapshot",
    # Registration
    "RegistrationRequest",
    "parse_request",
    "register",
]
