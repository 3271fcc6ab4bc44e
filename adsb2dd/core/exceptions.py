"""
Error taxonomy shared by the HTTP boundary and the update loop.

Client-facing errors carry the status code and message returned in the
``{"error": ...}`` body. Upstream fetch errors never reach clients; the
scheduler logs them and keeps the last good output.
"""


class Adsb2ddError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500
    message = "Internal error."

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.message)
        self.detail = detail


class ParameterError(Adsb2ddError):
    """Missing or malformed query parameters."""

    status_code = 400
    message = "Invalid parameters."


class CapacityError(Adsb2ddError):
    """Registry is full and the configuration is not yet registered."""

    status_code = 400
    message = "Exceeded max API requests."


class UpstreamValidationError(Adsb2ddError):
    """Initial probe of the tar1090 server failed."""

    status_code = 500
    message = "Error checking tar1090 validity."


class UpstreamError(Exception):
    """A fetch from a tar1090 server did not produce a usable snapshot."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class TransientFetchError(UpstreamError):
    """Network error, timeout, non-success status or undecodable body."""


class InvalidSnapshotError(UpstreamError):
    """Payload decoded but is not a valid aircraft.json snapshot."""
