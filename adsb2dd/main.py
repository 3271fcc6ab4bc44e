"""
adsb2dd API

A FastAPI application converting live ADS-B aircraft reports from tar1090
servers into bistatic delay-Doppler coordinates for any number of
receiver/transmitter/frequency configurations.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from adsb2dd import __version__
from adsb2dd.core import Adsb2ddError, get_settings
from adsb2dd.routers import dd, system
from adsb2dd.services.registry import ConfigRegistry
from adsb2dd.services.scheduler import UpdateScheduler
from adsb2dd.services.upstream import UpstreamClient

settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting adsb2dd v{__version__}")

    registry = ConfigRegistry(max_configs=settings.max_configs)
    upstream = UpstreamClient(timeout=settings.upstream_timeout, user_agent=settings.user_agent)
    scheduler = UpdateScheduler(
        registry,
        upstream,
        interval=settings.update_interval,
        inactivity_timeout=settings.inactivity_timeout,
        tick_deadline=settings.tick_deadline,
    )
    app.state.registry = registry
    app.state.upstream = upstream
    app.state.scheduler = scheduler

    scheduler.start()
    logger.info(
        f"Limits: {settings.max_configs} configs, "
        f"eviction after {settings.inactivity_timeout:.0f}s without new data"
    )

    yield

    logger.info("Shutting down...")
    await scheduler.stop()
    await upstream.close()
    registry.clear()
    logger.info("Shutdown complete")


app = FastAPI(
    title="adsb2dd",
    version=__version__,
    description="""
## Overview
Converts ADS-B aircraft positions and velocities from tar1090 servers into
bistatic delay-Doppler coordinates.

## Usage
Call `/api/dd` with a tar1090 server, receiver and transmitter locations and
a carrier frequency. The first call registers the configuration; poll the
same URL to receive updated output.
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Delay-Doppler",
            "description": "Configuration registration and cached delay-Doppler output"
        },
        {
            "name": "System",
            "description": "Health checks"
        },
    ]
)


@app.exception_handler(Adsb2ddError)
async def adsb2dd_error_handler(request: Request, exc: Adsb2ddError):
    """Return client-facing errors as {"error": message}."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Include routers
app.include_router(dd.router)
app.include_router(system.router)

# Mount static files if directory exists
if os.path.isdir(settings.static_dir):
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


def run():
    """Run the server with uvicorn."""
    import uvicorn
    uvicorn.run(
        "adsb2dd.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
