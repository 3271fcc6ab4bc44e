"""
Client for tar1090 aircraft.json endpoints.
"""
import asyncio
import logging
import time
from typing import Any, Optional

import httpx

from adsb2dd.core.exceptions import InvalidSnapshotError, TransientFetchError, UpstreamError
from adsb2dd.core.utils import host_of, safe_number
from adsb2dd.models import UpstreamSnapshot

logger = logging.getLogger(__name__)

DEFAULT_BACKOFF = 5.0  # seconds, when a 429 carries no usable Retry-After
MAX_BACKOFF = 60.0


def parse_snapshot(url: str, data: Any) -> UpstreamSnapshot:
    """Validate a decoded aircraft.json payload."""
    if not isinstance(data, dict):
        raise InvalidSnapshotError(url, "payload is not a JSON object")

    now = safe_number(data.get("now"))
    if now is None:
        raise InvalidSnapshotError(url, "invalid or missing timestamp in the 'now' key")

    aircraft = data.get("aircraft", [])
    if not isinstance(aircraft, list):
        raise InvalidSnapshotError(url, "'aircraft' is not a list")

    messages = data.get("messages")
    return UpstreamSnapshot(
        now=now,
        aircraft=aircraft,
        messages=messages if isinstance(messages, int) else None,
    )


class UpstreamClient:
    """
    Fetches aircraft.json snapshots with a bounded per-request timeout.

    Hosts answering 429 are put into backoff, honouring Retry-After, and
    requests to them fail fast until the backoff expires.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        user_agent: str = "adsb2dd",
        client: Optional[httpx.AsyncClient] = None
    ):
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )
        self._backoff_until: dict[str, float] = {}

    async def close(self) -> None:
        await self._client.aclose()

    def _in_backoff(self, host: str) -> bool:
        until = self._backoff_until.get(host)
        if until is None:
            return False
        if time.monotonic() >= until:
            del self._backoff_until[host]
            return False
        return True

    def _start_backoff(self, host: str, response: httpx.Response) -> float:
        retry_after = response.headers.get("Retry-After")
        delay = DEFAULT_BACKOFF
        if retry_after:
            try:
                delay = min(MAX_BACKOFF, max(0.0, float(retry_after)))
            except ValueError:
                pass
        self._backoff_until[host] = time.monotonic() + delay
        return delay

    async def _get_json(self, url: str) -> Any:
        host = host_of(url)
        if self._in_backoff(host):
            raise TransientFetchError(url, "host in rate-limit backoff")

        try:
            response = await asyncio.wait_for(self._client.get(url), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise TransientFetchError(url, f"timed out after {self.timeout}s")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransientFetchError(url, f"request failed: {e}")

        if response.status_code == 429:
            delay = self._start_backoff(host, response)
            logger.warning(f"Rate limited (429) from {host}, backing off for {delay:.0f}s")
            raise TransientFetchError(url, "rate limited")

        if not response.is_success:
            raise TransientFetchError(url, f"failed to fetch data, status {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise TransientFetchError(url, f"malformed JSON: {e}")

    async def fetch_snapshot(self, url: str) -> UpstreamSnapshot:
        """
        Fetch and validate one snapshot.

        Raises TransientFetchError for network/HTTP/decoding failures and
        InvalidSnapshotError for payloads that decode but are not aircraft.json.
        """
        data = await self._get_json(url)
        return parse_snapshot(url, data)

    async def probe(self, url: str) -> bool:
        """Check that url serves a valid aircraft.json. Never raises."""
        try:
            await self.fetch_snapshot(url)
        except UpstreamError as e:
            logger.warning(f"Probe failed for {e.url}: {e.reason}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error probing {url}: {e}")
            return False
        return True
