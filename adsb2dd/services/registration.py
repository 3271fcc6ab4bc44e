"""
Registration of delay-Doppler configurations from API query parameters.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from adsb2dd.core.exceptions import ParameterError, UpstreamValidationError
from adsb2dd.core.utils import normalize_server, parse_float, parse_position
from adsb2dd.models import ConfigStatus, Configuration, Position
from adsb2dd.services.registry import ConfigRegistry

logger = logging.getLogger(__name__)


class Prober(Protocol):
    async def probe(self, url: str) -> bool: ...


@dataclass(frozen=True)
class RegistrationRequest:
    """Validated query parameters for one configuration."""
    server: str
    api_url: str
    rx: Position
    tx: Position
    fc: float

    @property
    def key(self) -> str:
        """Canonical key; equal parameters give equal keys regardless of formatting."""
        rx = ",".join(repr(v) for v in self.rx.as_list())
        tx = ",".join(repr(v) for v in self.tx.as_list())
        return f"server={self.server}&rx={rx}&tx={tx}&fc={self.fc!r}"

    def to_configuration(self) -> Configuration:
        return Configuration(
            key=self.key,
            server=self.server,
            api_url=self.api_url,
            rx=self.rx,
            tx=self.tx,
            fc=self.fc,
        )


def parse_request(
    server: Optional[str],
    rx: Optional[str],
    tx: Optional[str],
    fc: Optional[str],
    aircraft_path: str = "/data/aircraft.json"
) -> RegistrationRequest:
    """Validate raw query values. Raises ParameterError on any problem."""
    server = normalize_server(server)
    rx_pos = parse_position(rx)
    tx_pos = parse_position(tx)
    fc_hz = parse_float(fc)

    if server is None or rx_pos is None or tx_pos is None or fc_hz is None or fc_hz <= 0:
        raise ParameterError()

    return RegistrationRequest(
        server=server,
        api_url=server + aircraft_path,
        rx=Position(*rx_pos),
        tx=Position(*tx_pos),
        fc=fc_hz,
    )


async def register(
    registry: ConfigRegistry,
    prober: Prober,
    request: RegistrationRequest
) -> Configuration:
    """
    Return the configuration for request, registering it if new.

    Known keys are returned without contacting the server. A new key takes
    a registry slot before its server is probed and gives it back if the
    probe fails or the caller goes away.
    """
    config, is_new = registry.try_register(request.to_configuration())

    if not is_new:
        if config.status is ConfigStatus.PENDING:
            await config.ready.wait()
        if config.status is ConfigStatus.FAILED:
            raise UpstreamValidationError()
        return config

    valid = False
    try:
        valid = await prober.probe(config.api_url)
    finally:
        if not valid:
            registry.release(config)

    if not valid:
        logger.warning(f"Rejected {config.key}: upstream validity check failed")
        raise UpstreamValidationError()

    registry.activate(config)
    return config
