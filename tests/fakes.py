"""In-memory collaborators for router and session tests."""

import asyncio
from typing import List, Optional

from navitech.analysis import Analyzer
from navitech.errors import ChannelUnavailableError, NotConnectedError
from navitech.transport import Transport


class FakeTransport(Transport):
    """Transport that records calls and lets tests inject packets."""

    def __init__(self, name="NaViTech", connect_error=None, open_error=None,
                 write_error=None, disconnect_error=None):
        self.name = name
        self.connect_error = connect_error
        self.open_error = open_error
        self.write_error = write_error
        self.disconnect_error = disconnect_error

        self.connected = False
        self.channel_open = False
        self.subscriptions = 0
        self.disconnect_calls = 0
        self.writes: List[bytes] = []
        self.handler = None
        self.disconnect_handler = None

    async def connect(self) -> None:
        await asyncio.sleep(0)
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.handler = None
        self.channel_open = False
        self.connected = False
        if self.disconnect_error is not None:
            raise self.disconnect_error

    def is_connected(self) -> bool:
        return self.connected

    def is_channel_open(self) -> bool:
        return self.channel_open

    @property
    def device_name(self) -> Optional[str]:
        return self.name if self.connected else None

    async def open_channel(self) -> bool:
        if not self.connected:
            raise ChannelUnavailableError("not connected")
        if self.open_error is not None:
            raise self.open_error
        if self.channel_open:
            return False
        self.channel_open = True
        self.subscriptions += 1
        return True

    async def close_channel(self) -> bool:
        if not self.channel_open:
            return False
        self.channel_open = False
        return True

    async def write(self, data: bytes) -> None:
        await asyncio.sleep(0)
        if not self.connected:
            raise NotConnectedError("not connected")
        if self.write_error is not None:
            raise self.write_error
        self.writes.append(bytes(data))

    def set_notification_handler(self, handler) -> None:
        self.handler = handler

    def set_disconnect_handler(self, handler) -> None:
        self.disconnect_handler = handler

    def deliver(self, packet: bytes) -> None:
        """Simulate one notification packet from the hub."""
        if self.handler is not None:
            self.handler(packet)

    def drop_link(self) -> None:
        """Simulate the hub going out of range."""
        self.connected = False
        self.channel_open = False
        self.handler = None
        if self.disconnect_handler is not None:
            self.disconnect_handler()


class FakeAnalyzer(Analyzer):
    """Analyzer that answers from memory."""

    def __init__(self, text="analysis text", error=None):
        self.text = text
        self.error = error
        self.calls = []
        self.closed = False

    async def analyze(self, record):
        self.calls.append(record)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return f"{self.text}: {record.hue}"

    async def aclose(self) -> None:
        self.closed = True
