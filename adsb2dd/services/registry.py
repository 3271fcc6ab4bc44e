"""
Thread-safe registry of active delay-Doppler configurations.

Every insert, delete and output replacement happens under one lock, so the
capacity check and the insert are a single atomic step. Outputs are
replaced by reference, never mutated, so readers need no lock.
"""
import logging
import threading
import time
from typing import Callable, Optional

from adsb2dd.core.exceptions import CapacityError
from adsb2dd.models import ConfigStatus, Configuration, Output

logger = logging.getLogger(__name__)


class ConfigRegistry:
    """
    Bounded map from configuration key to Configuration.

    A new key first enters in PENDING state, holding a slot while its
    upstream server is probed, and becomes ACTIVE once the probe succeeds.
    Only ACTIVE entries are visited by the update loop.
    """

    def __init__(self, max_configs: int = 10, clock: Callable[[], float] = time.time):
        if max_configs < 1:
            raise ValueError("max_configs must be at least 1")
        self._max_configs = max_configs
        self._clock = clock
        self._entries: dict[str, Configuration] = {}
        self._lock = threading.Lock()

    @property
    def max_configs(self) -> int:
        return self._max_configs

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def try_register(self, config: Configuration) -> tuple[Configuration, bool]:
        """
        Return the existing entry for config.key, or reserve a slot for config.

        Raises CapacityError when the key is new and the registry is full.
        """
        with self._lock:
            existing = self._entries.get(config.key)
            if existing is not None:
                return existing, False
            if len(self._entries) >= self._max_configs:
                raise CapacityError()
            config.registered_at = self._clock()
            config.status = ConfigStatus.PENDING
            self._entries[config.key] = config
            return config, True

    def activate(self, config: Configuration) -> bool:
        """Mark a reserved entry as active. Returns False if it was removed meanwhile."""
        with self._lock:
            if self._entries.get(config.key) is not config:
                return False
            config.status = ConfigStatus.ACTIVE
        config.ready.set()
        logger.info(f"Registered {config.key} ({len(self)}/{self._max_configs})")
        return True

    def release(self, config: Configuration) -> None:
        """Drop a reserved entry whose probe failed and wake any waiters."""
        with self._lock:
            if self._entries.get(config.key) is config:
                del self._entries[config.key]
            config.status = ConfigStatus.FAILED
        config.ready.set()

    def get(self, key: str) -> Optional[Configuration]:
        with self._lock:
            return self._entries.get(key)

    def snapshot(self) -> list[Configuration]:
        """Active entries at this instant; later inserts/removals do not affect the list."""
        with self._lock:
            return [c for c in self._entries.values() if c.status is ConfigStatus.ACTIVE]

    def for_each(self, visitor: Callable[[Configuration], None]) -> int:
        """Call visitor once per active entry. The visitor may remove entries."""
        configs = self.snapshot()
        for config in configs:
            visitor(config)
        return len(configs)

    def update_output(self, config: Configuration, output: Output) -> bool:
        """
        Replace config's output unless the entry was removed or the new
        timestamp is older than the stored one.
        """
        with self._lock:
            if self._entries.get(config.key) is not config:
                return False
            current = config.output
            if current is not None and output.timestamp < current.timestamp:
                return False
            config.output = output
            return True

    def remove(self, key: str, expected: Optional[Configuration] = None) -> bool:
        """
        Remove key. When expected is given, only remove if it is still the
        registered entry.
        """
        with self._lock:
            current = self._entries.get(key)
            if current is None or (expected is not None and current is not expected):
                return False
            del self._entries[key]
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
