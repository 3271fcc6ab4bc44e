"""
Bistatic delay-Doppler geometry.

Converts receiver/transmitter sites and tar1090 aircraft reports into
bistatic delay and Doppler. All positions are taken to Earth-centred
Earth-fixed (ECEF) coordinates on the WGS-84 ellipsoid before any metric
computation. Pure functions, no I/O.

Conventions:
    bistatic_range = |aircraft - tx| + |aircraft - rx|          (m)
    delay          = bistatic_range / c                         (s)
    range_rate     = d(bistatic_range)/dt                       (m/s)
    doppler        = -range_rate * fc / c                       (Hz)

A target closing on the sites has a negative range rate and a positive
Doppler shift.
"""
import logging
import math
from typing import Any, Optional

from adsb2dd.core.utils import (
    FPM_TO_MPS, FEET_TO_METERS, KNOTS_TO_MPS,
    is_valid_position, safe_altitude_ft, safe_number
)
from adsb2dd.models import DelayDoppler, Output, Position, UpstreamSnapshot

logger = logging.getLogger(__name__)

SPEED_OF_LIGHT = 299_792_458.0  # m/s

WGS84_A = 6378137.0
WGS84_F = 1 / 298.257223563
WGS84_E2 = WGS84_F * (2 - WGS84_F)

Vector = tuple[float, float, float]


def geodetic_to_ecef(lat: float, lon: float, alt: float) -> Vector:
    """Convert latitude/longitude (degrees) and altitude (m) to ECEF meters."""
    lat_rad, lon_rad = math.radians(lat), math.radians(lon)
    sin_lat = math.sin(lat_rad)
    cos_lat = math.cos(lat_rad)
    n = WGS84_A / math.sqrt(1 - WGS84_E2 * sin_lat ** 2)

    x = (n + alt) * cos_lat * math.cos(lon_rad)
    y = (n + alt) * cos_lat * math.sin(lon_rad)
    z = (n * (1 - WGS84_E2) + alt) * sin_lat
    return x, y, z


def enu_to_ecef_velocity(lat: float, lon: float, east: float, north: float, up: float) -> Vector:
    """Rotate a local east/north/up velocity at (lat, lon) into ECEF axes."""
    lat_rad, lon_rad = math.radians(lat), math.radians(lon)
    sin_lat, cos_lat = math.sin(lat_rad), math.cos(lat_rad)
    sin_lon, cos_lon = math.sin(lon_rad), math.cos(lon_rad)

    vx = -sin_lon * east - sin_lat * cos_lon * north + cos_lat * cos_lon * up
    vy = cos_lon * east - sin_lat * sin_lon * north + cos_lat * sin_lon * up
    vz = cos_lat * north + sin_lat * up
    return vx, vy, vz


def _leg(target: Vector, site: Vector, velocity: Vector) -> tuple[float, float]:
    """Distance from site to target and its rate of change.

    A target sitting exactly on the site has no defined direction, so that
    leg contributes zero rate.
    """
    dx = target[0] - site[0]
    dy = target[1] - site[1]
    dz = target[2] - site[2]
    distance = math.sqrt(dx * dx + dy * dy + dz * dz)
    if distance == 0.0:
        return 0.0, 0.0
    rate = (velocity[0] * dx + velocity[1] * dy + velocity[2] * dz) / distance
    return distance, rate


def bistatic_delay_doppler(
    rx: Vector,
    tx: Vector,
    target: Vector,
    velocity: Vector,
    fc: float
) -> tuple[float, float, float, float]:
    """
    Compute bistatic geometry for a target in ECEF coordinates.

    Returns (delay_s, bistatic_range_m, range_rate_mps, doppler_hz).
    """
    rx_range, rx_rate = _leg(target, rx, velocity)
    tx_range, tx_rate = _leg(target, tx, velocity)

    bistatic_range = rx_range + tx_range
    range_rate = rx_rate + tx_rate
    delay = bistatic_range / SPEED_OF_LIGHT
    doppler = -range_rate * fc / SPEED_OF_LIGHT
    return delay, bistatic_range, range_rate, doppler


def aircraft_kinematics(ac: dict[str, Any]) -> Optional[tuple[Position, Vector]]:
    """
    Extract position and ENU velocity from a tar1090 aircraft record.

    Altitude prefers geometric over barometric; vertical rate likewise and
    defaults to zero when neither is reported. Returns None when position,
    altitude, ground speed or track is missing.
    """
    lat, lon = safe_number(ac.get("lat")), safe_number(ac.get("lon"))
    if not is_valid_position(lat, lon):
        return None

    alt_ft = safe_altitude_ft(ac.get("alt_geom"))
    if alt_ft is None:
        alt_ft = safe_altitude_ft(ac.get("alt_baro"))
    if alt_ft is None:
        return None

    gs = safe_number(ac.get("gs"))
    track = safe_number(ac.get("track"))
    if gs is None or track is None:
        return None

    vr = safe_number(ac.get("geom_rate"))
    if vr is None:
        vr = safe_number(ac.get("baro_rate"))
    if vr is None:
        vr = 0.0

    speed = gs * KNOTS_TO_MPS
    track_rad = math.radians(track)
    velocity = (
        speed * math.sin(track_rad),
        speed * math.cos(track_rad),
        vr * FPM_TO_MPS,
    )
    return Position(lat, lon, alt_ft * FEET_TO_METERS), velocity


def aircraft_delay_doppler(
    rx: Position,
    tx: Position,
    fc: float,
    ac: dict[str, Any]
) -> Optional[DelayDoppler]:
    """Delay-Doppler for a single aircraft record, or None if it lacks required fields."""
    hex_id = ac.get("hex")
    if not isinstance(hex_id, str) or not hex_id:
        return None

    kinematics = aircraft_kinematics(ac)
    if kinematics is None:
        return None
    position, (east, north, up) = kinematics

    target = geodetic_to_ecef(position.lat, position.lon, position.alt)
    velocity = enu_to_ecef_velocity(position.lat, position.lon, east, north, up)
    delay, bistatic_range, range_rate, doppler = bistatic_delay_doppler(
        geodetic_to_ecef(rx.lat, rx.lon, rx.alt),
        geodetic_to_ecef(tx.lat, tx.lon, tx.alt),
        target,
        velocity,
        fc,
    )

    flight = ac.get("flight")
    if isinstance(flight, str):
        flight = flight.strip() or None
    else:
        flight = None

    return DelayDoppler(
        hex=hex_id.lower(),
        flight=flight,
        delay=delay,
        bistatic_range=bistatic_range,
        range_rate=range_rate,
        doppler=doppler,
    )


def convert_snapshot(rx: Position, tx: Position, fc: float, snapshot: UpstreamSnapshot) -> Output:
    """
    Convert every usable aircraft in a snapshot to delay-Doppler.

    Aircraft missing required fields are left out of the output.
    """
    results: dict[str, DelayDoppler] = {}
    skipped = 0
    for ac in snapshot.aircraft:
        if not isinstance(ac, dict):
            skipped += 1
            continue
        dd = aircraft_delay_doppler(rx, tx, fc, ac)
        if dd is None:
            skipped += 1
            continue
        results[dd.hex] = dd

    if skipped:
        logger.debug(f"Skipped {skipped} aircraft without usable kinematics")
    return Output(timestamp=snapshot.now, aircraft=results)
