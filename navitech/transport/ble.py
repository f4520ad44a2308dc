"""BLE transport for the NaViTech hub.

The hub exposes the Pybricks command/event service with one
read/write/notify characteristic. This module handles:
- Hub discovery by advertised name (via ``finder``)
- Link and service setup with bleak
- Enabling/disabling notifications and writing command bytes
- Link-loss detection

Note: This is a RAW BYTE layer. It does not interpret packets.
      Use NotificationRouter to frame and decode them.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from bleak import BleakClient
from bleak.exc import BleakError

from ..config import (
    COMMAND_EVENT_CHAR_UUID,
    COMMAND_EVENT_SERVICE_UUID,
    DEFAULT_SCAN_TIMEOUT,
    HUB_NAME_FILTER,
)
from ..errors import (
    ChannelUnavailableError,
    ConnectionFailedError,
    NotConnectedError,
    WriteFailedError,
)
from .base import DisconnectHandler, NotificationHandler, Transport
from .finder import find_single_hub

logger = logging.getLogger(__name__)


class BleTransport(Transport):
    """Transport over one BLE command/event characteristic.

    Example:
        >>> transport = BleTransport()
        >>> await transport.connect()
        >>> transport.set_notification_handler(lambda packet: print(packet))
        >>> await transport.open_channel()
        True
        >>> await transport.write(b"\\x06prunus")
        >>> await transport.disconnect()
    """

    def __init__(self,
                 device_name: str = HUB_NAME_FILTER,
                 service_uuid: str = COMMAND_EVENT_SERVICE_UUID,
                 char_uuid: str = COMMAND_EVENT_CHAR_UUID,
                 scan_timeout: float = DEFAULT_SCAN_TIMEOUT,
                 address: Optional[str] = None):
        """Initialize BLE transport.

        Args:
            device_name: Advertised name to look for
            service_uuid: Command/event service UUID
            char_uuid: Command/event characteristic UUID
            scan_timeout: Scan duration in seconds
            address: Connect to this address directly and skip scanning
        """
        self._device_name = device_name
        self._service_uuid = service_uuid
        self._char_uuid = char_uuid
        self._scan_timeout = scan_timeout
        self._address = address

        self._client: Optional[BleakClient] = None
        self._char = None
        self._connected_name: Optional[str] = None
        self._channel_open = False
        self._closing = False

        # Single handler slots
        self._notification_handler: Optional[NotificationHandler] = None
        self._disconnect_handler: Optional[DisconnectHandler] = None

    async def connect(self) -> None:
        """Discover the hub, connect and resolve the characteristic."""
        if self.is_connected():
            logger.warning("Already connected")
            return

        if self._address is not None:
            target = self._address
            name = self._device_name
        else:
            # Raises TransportUnavailableError / DeviceNotFoundError / MultipleHubsError
            info = await find_single_hub(name=self._device_name, timeout=self._scan_timeout)
            target = info.device if info.device is not None else info.address
            name = info.name
            logger.info(f"Hub selected: {name} ({info.address})")

        client = BleakClient(target, disconnected_callback=self._on_link_lost)
        try:
            await client.connect()
        except (BleakError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"Failed to connect to {name}: {e}")
            raise ConnectionFailedError(f"Connection failed: {e}") from e

        char = self._resolve_characteristic(client)
        if char is None:
            logger.error("Command/event characteristic not found on hub")
            await self._safe_client_disconnect(client)
            raise ConnectionFailedError(
                f"Characteristic {self._char_uuid} not found in service {self._service_uuid}"
            )

        self._client = client
        self._char = char
        self._connected_name = name
        self._channel_open = False
        self._closing = False
        logger.info(f"Connected to {name}, command/event characteristic found")

    def _resolve_characteristic(self, client: BleakClient):
        service = client.services.get_service(self._service_uuid)
        if service is None:
            return None
        return service.get_characteristic(self._char_uuid)

    async def disconnect(self) -> None:
        """Close channel and link; never raises."""
        client = self._client
        if client is None:
            self._reset()
            return

        self._closing = True
        self._notification_handler = None

        if self._channel_open:
            try:
                await client.stop_notify(self._char)
            except Exception as e:
                logger.error(f"Error stopping notifications: {e}")

        await self._safe_client_disconnect(client)
        self._reset()
        logger.info("Disconnected from hub")

    async def _safe_client_disconnect(self, client: BleakClient) -> None:
        try:
            await client.disconnect()
        except Exception as e:
            logger.error(f"Error closing BLE link: {e}")

    def _reset(self) -> None:
        self._closing = False
        self._client = None
        self._char = None
        self._connected_name = None
        self._channel_open = False
        self._notification_handler = None

    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected

    def is_channel_open(self) -> bool:
        return self._channel_open and self.is_connected()

    @property
    def device_name(self) -> Optional[str]:
        return self._connected_name

    async def open_channel(self) -> bool:
        """Enable notifications; a second call is a logged no-op."""
        if not self.is_connected():
            raise ChannelUnavailableError("Characteristic unavailable: not connected")

        if self._channel_open:
            logger.warning("Notifications already enabled, not subscribing again")
            return False

        try:
            await self._client.start_notify(self._char, self._on_notification)
        except (BleakError, OSError) as e:
            logger.error(f"Failed to enable notifications: {e}")
            raise ChannelUnavailableError(f"Cannot enable notifications: {e}") from e

        self._channel_open = True
        logger.debug("Notifications enabled")
        return True

    async def close_channel(self) -> bool:
        """Disable notifications, best effort."""
        if not self._channel_open or self._client is None:
            logger.info("No open channel to close")
            return False

        try:
            await self._client.stop_notify(self._char)
        except (BleakError, OSError) as e:
            logger.warning(f"Error disabling notifications: {e}")
        finally:
            self._channel_open = False

        logger.debug("Notifications disabled")
        return True

    async def write(self, data: bytes) -> None:
        """Write bytes with response."""
        if not self.is_connected():
            raise NotConnectedError("Cannot write, not connected")

        try:
            await self._client.write_gatt_char(self._char, data, response=True)
        except (BleakError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"Write error: {e}")
            raise WriteFailedError(f"Write failed: {e}") from e

    def set_notification_handler(self, handler: Optional[NotificationHandler]) -> None:
        self._notification_handler = handler

    def set_disconnect_handler(self, handler: Optional[DisconnectHandler]) -> None:
        self._disconnect_handler = handler

    # Internal callbacks (run on the event loop)

    def _on_notification(self, _sender, data: bytearray) -> None:
        handler = self._notification_handler
        if handler is None:
            logger.debug(f"Dropping {len(data)} byte packet, no handler installed")
            return
        try:
            handler(bytes(data))
        except Exception as e:
            logger.error(f"Error in notification handler: {e}")

    def _on_link_lost(self, client: BleakClient) -> None:
        if self._closing or client is not self._client:
            return

        logger.warning("BLE connection lost")
        self._reset()

        handler = self._disconnect_handler
        if handler is not None:
            try:
                handler()
            except Exception as e:
                logger.error(f"Error in disconnect handler: {e}")
