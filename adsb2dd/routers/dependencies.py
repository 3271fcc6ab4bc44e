"""
Dependency providers for the shared registry, upstream client and scheduler.

The objects live on app.state, created by the application lifespan; tests
replace them through app.dependency_overrides.
"""
from fastapi import Request

from adsb2dd.services.registry import ConfigRegistry
from adsb2dd.services.scheduler import UpdateScheduler
from adsb2dd.services.upstream import UpstreamClient


def get_registry(request: Request) -> ConfigRegistry:
    return request.app.state.registry


def get_upstream(request: Request) -> UpstreamClient:
    return request.app.state.upstream


def get_scheduler(request: Request) -> UpdateScheduler:
    return request.app.state.scheduler
