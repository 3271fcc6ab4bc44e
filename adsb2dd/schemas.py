"""
Pydantic schemas for API responses with OpenAPI documentation.
"""
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class ErrorResponse(BaseModel):
    """Error body returned for rejected requests."""
    error: str = Field(..., description="Error message", examples=["Invalid parameters."])


class AircraftDelayDoppler(BaseModel):
    """Bistatic delay-Doppler of one aircraft."""
    flight: Optional[str] = Field(None, description="Callsign/flight number")
    delay: float = Field(..., description="Bistatic delay in seconds (path sum / c)")
    bistatic_range: float = Field(..., description="Transmitter-aircraft-receiver path length in meters")
    range_rate: float = Field(..., description="Rate of change of the path length in m/s")
    doppler: float = Field(..., description="Doppler shift in Hz, positive when closing")


class DelayDopplerResponse(BaseModel):
    """Latest output of a configuration. Empty object until the first update."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "timestamp": 1703001234.567,
                "aircraft": {
                    "a12345": {
                        "flight": "UAL123",
                        "delay": 0.0001521,
                        "bistatic_range": 45598.2,
                        "range_rate": -118.4,
                        "doppler": 39.5
                    }
                }
            }
        }
    )

    timestamp: Optional[float] = Field(None, description="Upstream snapshot time (unix seconds)")
    aircraft: dict[str, AircraftDelayDoppler] = Field(
        default_factory=dict, description="Delay-Doppler keyed by ICAO hex"
    )


class ConfigurationInfo(BaseModel):
    """Derived fields of a registered configuration."""
    key: str = Field(..., description="Canonical configuration key")
    server: str = Field(..., description="tar1090 server base URL")
    api_url: str = Field(..., description="aircraft.json URL polled by the update loop")
    rx: list[float] = Field(..., description="Receiver latitude, longitude, altitude (m)")
    tx: list[float] = Field(..., description="Transmitter latitude, longitude, altitude (m)")
    fc: float = Field(..., description="Carrier frequency in Hz")
    last_update: float = Field(..., description="Last output timestamp, or registration time")
    aircraft_count: int = Field(0, description="Aircraft in the latest output")


class HealthResponse(BaseModel):
    """Service health and update loop state."""
    status: str = Field(..., description="Overall status", examples=["healthy"])
    scheduler: str = Field(..., description="Update loop state: idle or running")
    configs: int = Field(..., description="Registered configurations")
    max_configs: int = Field(..., description="Registry capacity")
    ticks: int = Field(..., description="Completed update passes")
    last_tick_duration: Optional[float] = Field(None, description="Duration of the last pass in seconds")
