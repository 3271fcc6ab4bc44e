"""
Structured records for configurations, upstream snapshots and outputs.
"""
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class Position:
    """Geodetic position: degrees, degrees, meters above the WGS-84 ellipsoid."""
    lat: float
    lon: float
    alt: float

    def as_list(self) -> list[float]:
        return [self.lat, self.lon, self.alt]


@dataclass(frozen=True)
class UpstreamSnapshot:
    """Decoded tar1090 aircraft.json payload."""
    now: float
    aircraft: list[dict[str, Any]]
    messages: Optional[int] = None


@dataclass(frozen=True)
class DelayDoppler:
    """
    Bistatic measurement for one aircraft.

    Units: delay in seconds, bistatic_range in meters (path sum
    transmitter->aircraft->receiver), range_rate in m/s (negative when the
    path is shrinking), doppler in Hz (positive for a closing target).
    """
    hex: str
    flight: Optional[str]
    delay: float
    bistatic_range: float
    range_rate: float
    doppler: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "flight": self.flight,
            "delay": self.delay,
            "bistatic_range": self.bistatic_range,
            "range_rate": self.range_rate,
            "doppler": self.doppler,
        }


@dataclass(frozen=True)
class Output:
    """Result of one conversion; replaced wholesale on each update."""
    timestamp: float
    aircraft: dict[str, DelayDoppler] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "aircraft": {hex_id: dd.to_dict() for hex_id, dd in self.aircraft.items()},
        }


class ConfigStatus(str, Enum):
    PENDING = "pending"  # slot reserved, upstream probe in flight
    ACTIVE = "active"
    FAILED = "failed"  # probe failed, slot released


@dataclass(eq=False)
class Configuration:
    """One registered receiver/transmitter/frequency/server combination."""
    key: str
    server: str
    api_url: str
    rx: Position
    tx: Position
    fc: float
    registered_at: float = 0.0
    output: Optional[Output] = None
    status: ConfigStatus = ConfigStatus.PENDING
    ready: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def last_update(self) -> float:
        """Timestamp of the last successful output, or registration time."""
        if self.output is not None:
            return self.output.timestamp
        return self.registered_at

    def output_dict(self) -> dict[str, Any]:
        output = self.output
        return output.to_dict() if output is not None else {}
