"""Exception hierarchy for the hub client.

Transport and connection errors abort the operation that raised them.
Decode errors are absorbed by the router; analysis errors are turned
into results. ``HubSession`` lets none of them escape.
"""
from __future__ import annotations

from typing import Optional


class NaviError(RuntimeError):
    """Base class for all hub client errors."""
    pass


class TransportUnavailableError(NaviError):
    """Raised when no usable Bluetooth backend or adapter exists."""
    pass


class DeviceNotFoundError(NaviError):
    """Raised when no hub matching the name filter was found."""
    pass


class MultipleHubsError(NaviError):
    """Raised when more than one matching hub is advertising."""
    def __init__(self, message, devices):
        super().__init__(message)
        self.devices = devices  # list[HubInfo]


class ConnectionFailedError(NaviError):
    """Raised when the link or the command/event service cannot be set up."""
    pass


class ChannelUnavailableError(NaviError):
    """Raised when notifications cannot be enabled on the characteristic."""
    pass


class NotConnectedError(NaviError):
    """Raised when an operation needs a connection and there is none."""
    pass


class WriteFailedError(NaviError):
    """Raised when the transport rejects a write."""
    pass


class CommandSendFailedError(NaviError):
    """Raised by the router when a fetch command could not be sent."""
    pass


class InvalidStateError(NaviError):
    """Raised when an operation is not valid in the current mode."""
    pass


class DecodeError(NaviError):
    """Base class for per-line decode failures."""
    pass


class SpuriousFrameError(DecodeError):
    """A status line that is not expected in the current mode."""
    pass


class MalformedRecordError(DecodeError):
    """A record line without exactly the expected number of fields."""
    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


class AnalysisError(NaviError):
    """Base class for analysis service failures."""
    pass


class AnalysisNetworkError(AnalysisError):
    """The analysis service could not be reached."""
    pass


class AnalysisHttpError(AnalysisError):
    """The analysis service answered with a non-success status."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(AnalysisError):
    """The analysis service response did not contain any text."""
    pass
