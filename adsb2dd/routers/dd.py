"""
Delay-Doppler API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from adsb2dd.core import Settings, get_settings
from adsb2dd.routers.dependencies import get_registry, get_upstream
from adsb2dd.schemas import ConfigurationInfo, DelayDopplerResponse, ErrorResponse
from adsb2dd.services.registration import parse_request, register
from adsb2dd.services.registry import ConfigRegistry
from adsb2dd.services.upstream import UpstreamClient

router = APIRouter(prefix="/api", tags=["Delay-Doppler"])


@router.get(
    "/dd",
    summary="Get Delay-Doppler",
    description="""
Register a receiver/transmitter/frequency/server configuration and return
its latest bistatic delay-Doppler output.

The first request for a configuration checks that the tar1090 server
serves a valid aircraft.json and returns an empty object; the update loop
fills in the output shortly after. Later requests with the same parameters
return the cached output without contacting the server.

- **server**: tar1090 base URL, e.g. `http://192.168.1.10/tar1090`
- **rx** / **tx**: `lat,lon,alt` in degrees, degrees, meters
- **fc**: carrier frequency in Hz
    """,
    responses={
        200: {"model": DelayDopplerResponse, "description": "Latest output, or {} before the first update"},
        400: {"model": ErrorResponse, "description": "Invalid parameters or registry full"},
        500: {"model": ErrorResponse, "description": "tar1090 server failed the validity check"},
    }
)
async def get_delay_doppler(
    server: Optional[str] = Query(None, description="tar1090 server base URL"),
    rx: Optional[str] = Query(None, description="Receiver lat,lon,alt"),
    tx: Optional[str] = Query(None, description="Transmitter lat,lon,alt"),
    fc: Optional[str] = Query(None, description="Carrier frequency in Hz"),
    registry: ConfigRegistry = Depends(get_registry),
    upstream: UpstreamClient = Depends(get_upstream),
    settings: Settings = Depends(get_settings),
):
    """Register a configuration if needed and return its cached output."""
    request = parse_request(server, rx, tx, fc, settings.aircraft_path)
    config = await register(registry, upstream, request)
    return config.output_dict()


@router.get(
    "/configs",
    response_model=list[ConfigurationInfo],
    summary="List Configurations",
    description="List active configurations with their derived fields."
)
async def list_configurations(registry: ConfigRegistry = Depends(get_registry)):
    """List active configurations."""
    configs = []
    for config in registry.snapshot():
        output = config.output
        configs.append(ConfigurationInfo(
            key=config.key,
            server=config.server,
            api_url=config.api_url,
            rx=config.rx.as_list(),
            tx=config.tx.as_list(),
            fc=config.fc,
            last_update=config.last_update,
            aircraft_count=len(output.aircraft) if output else 0,
        ))
    return configs
