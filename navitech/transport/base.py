"""Abstract base class for the transport layer.

The Transport interface is the connection to one hub: a link plus a
single bidirectional command/event channel. Implementations can be BLE,
a simulator, or anything else that can write bytes and deliver
notification packets.

Key principles:
- One notification handler slot (no duplicate delivery)
- Typed failures (see ``navitech.errors``) instead of half-open state
- No protocol knowledge; packets are raw bytes
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

NotificationHandler = Callable[[bytes], None]
DisconnectHandler = Callable[[], None]


class Transport(ABC):
    """Abstract transport interface for hub communication.

    Transports are responsible for:
    1. Managing connection lifecycle
    2. Enabling/disabling notifications on the channel
    3. Writing command bytes
    4. Delivering notification packets to the single registered handler

    Transports should NOT contain protocol logic like framing or
    readiness tracking. They are pure communication channels.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Discover the hub and establish the link.

        Raises:
            TransportUnavailableError: No usable backend or adapter
            DeviceNotFoundError: No matching hub was found
            ConnectionFailedError: Link or service setup failed
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Tear down channel and link.

        Must be safe to call multiple times and must never raise; the
        transport is disconnected afterwards even if teardown fails.
        """
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if the link is up."""
        pass

    @abstractmethod
    def is_channel_open(self) -> bool:
        """Check if notifications are enabled."""
        pass

    @abstractmethod
    async def open_channel(self) -> bool:
        """Enable notifications on the command/event channel.

        Returns:
            True if notifications were enabled, False if they already were

        Raises:
            ChannelUnavailableError: Notifications could not be enabled
        """
        pass

    @abstractmethod
    async def close_channel(self) -> bool:
        """Disable notifications, best effort.

        Returns:
            True if an open channel was closed, False if none was open
        """
        pass

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Write raw bytes to the channel.

        Raises:
            NotConnectedError: There is no link
            WriteFailedError: The write was rejected
        """
        pass

    @abstractmethod
    def set_notification_handler(self, handler: Optional[NotificationHandler]) -> None:
        """Install the handler that receives notification packets.

        Replaces any previous handler. Passing None removes it; packets
        arriving without a handler are dropped.
        """
        pass

    @abstractmethod
    def set_disconnect_handler(self, handler: Optional[DisconnectHandler]) -> None:
        """Install the handler called when the link is lost unexpectedly."""
        pass

    @property
    def device_name(self) -> Optional[str]:
        """Name of the connected hub, if known."""
        return None

    async def __aenter__(self) -> Transport:
        """Context manager support - connect on enter."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager support - disconnect on exit."""
        await self.disconnect()
