"""
Periodic update loop for registered configurations.

One pass fetches every distinct upstream URL concurrently, recomputes the
output of each configuration whose snapshot advanced, and evicts
configurations that have not advanced for longer than the inactivity
timeout. The next pass is armed only after the previous one has finished,
so passes never overlap.
"""
import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Optional, Protocol

from adsb2dd.core.exceptions import UpstreamError
from adsb2dd.models import Configuration, Output, Position, UpstreamSnapshot
from adsb2dd.services.geometry import convert_snapshot
from adsb2dd.services.registry import ConfigRegistry

logger = logging.getLogger(__name__)

Converter = Callable[[Position, Position, float, UpstreamSnapshot], Output]


class SnapshotSource(Protocol):
    async def fetch_snapshot(self, url: str) -> UpstreamSnapshot: ...


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class UpdateScheduler:
    """Single-flight periodic refresher for a ConfigRegistry."""

    def __init__(
        self,
        registry: ConfigRegistry,
        upstream: SnapshotSource,
        interval: float = 1.0,
        inactivity_timeout: float = 600,
        tick_deadline: float = 10.0,
        converter: Converter = convert_snapshot,
        clock: Callable[[], float] = time.time
    ):
        self._registry = registry
        self._upstream = upstream
        self.interval = interval
        self.inactivity_timeout = inactivity_timeout
        self.tick_deadline = tick_deadline
        self._converter = converter
        self._clock = clock
        self._state = SchedulerState.IDLE
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0
        self.last_tick_duration: Optional[float] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _fetch_all(self, urls: set[str]) -> dict[str, UpstreamSnapshot]:
        """Fetch each URL once, concurrently, within the tick deadline."""
        if not urls:
            return {}

        tasks = {url: asyncio.create_task(self._upstream.fetch_snapshot(url)) for url in urls}
        try:
            done, pending = await asyncio.wait(tasks.values(), timeout=self.tick_deadline)
        finally:
            unfinished = [task for task in tasks.values() if not task.done()]
            for task in unfinished:
                task.cancel()
            if unfinished:
                await asyncio.gather(*unfinished, return_exceptions=True)

        snapshots = {}
        for url, task in tasks.items():
            if task not in done:
                logger.warning(f"Fetch from {url} missed the {self.tick_deadline}s tick deadline")
                continue
            error = task.exception()
            if error is None:
                snapshots[url] = task.result()
            elif isinstance(error, UpstreamError):
                logger.warning(f"Failed to fetch {url}: {error.reason}")
            else:
                logger.error(f"Unexpected error fetching {url}: {error!r}")
        return snapshots

    def _update(self, config: Configuration, snapshot: Optional[UpstreamSnapshot]) -> None:
        """Recompute one configuration's output, then check it for eviction."""
        current = config.output
        if snapshot is not None and (current is None or snapshot.now > current.timestamp):
            output = self._converter(config.rx, config.tx, config.fc, snapshot)
            if not self._registry.update_output(config, output):
                logger.debug(f"Discarded stale output for {config.key}")

        idle = self._clock() - config.last_update
        if idle > self.inactivity_timeout:
            if self._registry.remove(config.key, expected=config):
                logger.info(f"Removed {config.key} after {idle:.0f}s without new data")

    async def run_once(self) -> bool:
        """
        Run one pass over the registry.

        Returns False without doing anything if a pass is already running.
        """
        if self._state is SchedulerState.RUNNING:
            logger.warning("Update pass already running, skipping")
            return False

        self._state = SchedulerState.RUNNING
        started = time.monotonic()
        try:
            configs = self._registry.snapshot()
            snapshots = await self._fetch_all({c.api_url for c in configs})
            for config in configs:
                try:
                    self._update(config, snapshots.get(config.api_url))
                except Exception as e:
                    logger.error(f"Error updating {config.key}: {e!r}")
        finally:
            self.ticks += 1
            self.last_tick_duration = time.monotonic() - started
            self._state = SchedulerState.IDLE

        logger.debug(
            f"Pass {self.ticks}: {len(configs)} configs, {len(snapshots)} snapshots "
            f"in {self.last_tick_duration:.3f}s"
        )
        return True

    async def _loop(self) -> None:
        logger.info(f"Update loop started (interval: {self.interval}s)")
        while True:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Error in update loop: {e!r}")
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        """Start the update loop; a running loop is returned as is."""
        if not self.running:
            self._task = asyncio.create_task(self._loop())
        return self._task

    async def stop(self) -> None:
        """Stop the update loop."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Update loop stopped")
