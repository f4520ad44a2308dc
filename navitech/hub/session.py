"""Hub session facade.

Manages the transport, the notification router and analysis dispatch,
exposing the operations a UI needs (connect, start, stop, fetch,
disconnect) plus observable state and a stream of status lines.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from ..analysis import AnalysisDispatcher, Analyzer
from ..config import SessionConfig
from ..errors import (
    ChannelUnavailableError,
    CommandSendFailedError,
    InvalidStateError,
    MalformedRecordError,
    NaviError,
    TransportUnavailableError,
)
from ..models import PRUNUS, AnalysisResult, HubCommand, SensorRecord, SessionState
from ..protocol import Protocol, PybricksProtocol
from ..transport import BleTransport, Transport
from .router import NotificationRouter

logger = logging.getLogger(__name__)


class HubSession:
    """High-level interface to one NaViTech hub.

    This class acts as a facade, managing:
    1. The link and channel (Transport)
    2. Framing and mode tracking (NotificationRouter)
    3. Handing records to the analysis service (AnalysisDispatcher)

    Every operation reports its outcome as status lines; errors are
    logged, rolled back and reported, never raised.
    """

    def __init__(self,
                 transport: Optional[Transport] = None,
                 analyzer: Optional[Analyzer] = None,
                 config: Optional[SessionConfig] = None,
                 protocol: Optional[Protocol] = None):
        """Initialize session.

        Args:
            transport: Transport to use, or None for a BleTransport built
                from ``config``
            analyzer: Analysis service, or None to only report records
            config: Session tunables (default: SessionConfig())
            protocol: Protocol implementation (default: PybricksProtocol)
        """
        self._config = config or SessionConfig()
        self._transport = transport or BleTransport(
            device_name=self._config.device_name,
            service_uuid=self._config.service_uuid,
            char_uuid=self._config.char_uuid,
            scan_timeout=self._config.scan_timeout,
        )
        self._protocol = protocol or PybricksProtocol(
            line_buffer_max_size=self._config.line_buffer_max_size
        )
        self._dispatcher = AnalysisDispatcher(analyzer) if analyzer is not None else None

        self._router = NotificationRouter(
            self._transport,
            self._protocol,
            on_record=self._on_record,
            on_ready=self._on_ready,
            on_malformed=self._on_malformed_record,
            readiness_token=self._config.readiness_token,
            drain_window=self._config.drain_window,
            grace_notifications=self._config.grace_notifications,
            line_buffer_max_size=self._config.line_buffer_max_size,
        )
        self._transport.set_disconnect_handler(self._on_link_lost)

        # Bumped on stop/disconnect; analysis results from older epochs are dropped
        self._epoch = 0

        self._status_lines: List[str] = []
        self._status_callbacks: List[Callable[[str], None]] = []
        self._state_callbacks: List[Callable[[SessionState], None]] = []
        self._analysis_callbacks: List[Callable[[AnalysisResult], None]] = []

    # --- Operations ---

    async def connect(self) -> bool:
        """Find and connect to the hub.

        Returns:
            True if the hub is connected afterwards
        """
        if self._transport.is_connected():
            self._report("Status: Already connected.")
            return True

        self._report("Status: Scanning for devices...")
        try:
            await self._transport.connect()
        except TransportUnavailableError as e:
            self._fail_connect(f"Error: Bluetooth is not available: {e}")
            return False
        except NaviError as e:
            self._fail_connect(f"Error: Connection failed: {e}")
            return False

        self._report(f"Status: Device selected: {self._transport.device_name}")
        self._report("Status: Command/Event characteristic found.")
        self._report("Status: Ready to start data stream.")
        self._notify_state()
        return True

    def _fail_connect(self, message: str) -> None:
        self._router.reset()
        self._report(message, level=logging.ERROR)
        self._notify_state()

    async def start(self) -> bool:
        """Enable notifications and wait for the hub's readiness token.

        Calling it again restarts framing without a second subscription.
        """
        if not self._transport.is_connected():
            self._report("Error: Characteristic unavailable.", level=logging.ERROR)
            return False

        self._report("Status: Starting data stream...")
        self._router.start()
        try:
            await self._transport.open_channel()
        except ChannelUnavailableError as e:
            self._router.stop()
            self._report(f"Error starting data stream: {e}", level=logging.ERROR)
            self._notify_state()
            return False

        self._report("Status: Data stream started.")
        self._report(f"Status: Waiting for '{self._config.readiness_token}' message from hub...")
        self._notify_state()
        return True

    async def stop(self) -> bool:
        """Stop the data stream and disable notifications.

        Returns:
            True if an open channel was closed
        """
        self._report("Status: Stopping data stream.")
        self._epoch += 1
        self._router.stop()

        if not self._transport.is_connected():
            self._report("Status: Characteristic is not available. Data stream may already be stopped.")
            self._notify_state()
            return False

        closed = await self._transport.close_channel()
        if closed:
            self._report("Status: Data stream stopped.")
        else:
            self._report("Status: No open channel. Data stream already stopped.")
        self._notify_state()
        return closed

    async def fetch_record(self, command: HubCommand = PRUNUS) -> bool:
        """Ask the hub for one sensor record.

        Returns:
            True if the command was sent
        """
        if not self.snapshot().can_fetch:
            self._report("Status: Data stream not active or hub not ready. Start data stream first.")
            return False

        self._report("Status: Waiting for sensor data...")
        try:
            await self._router.fetch_record(command)
        except CommandSendFailedError as e:
            self._report(f"Error sending command: {e}", level=logging.ERROR)
            self._notify_state()
            return False
        except InvalidStateError as e:
            self._report(f"Error: {e}", level=logging.ERROR)
            return False

        self._report(f"Status: '{command.name}' command sent successfully")
        self._notify_state()
        return True

    async def disconnect(self) -> None:
        """Disconnect from the hub. Always ends disconnected."""
        self._report("Status: Disconnecting from hub...")
        self._epoch += 1
        was_connected = self._transport.is_connected()
        self._router.stop()

        try:
            await self._transport.disconnect()
        except Exception as e:
            logger.error(f"Error during disconnect: {e}")

        if was_connected:
            self._report("Status: Disconnected from hub.")
        else:
            self._report("Status: No device connected.")
        self._notify_state()

    async def aclose(self) -> None:
        """Disconnect and release the analysis service."""
        await self.disconnect()
        if self._dispatcher is not None:
            await self._dispatcher.aclose()

    async def __aenter__(self) -> HubSession:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # --- State Interface ---

    def snapshot(self) -> SessionState:
        """Create an immutable snapshot of the session."""
        connected = self._transport.is_connected()
        return SessionState(
            connected=connected,
            channel_open=connected and self._transport.is_channel_open(),
            stream_active=self._router.stream_active,
            hub_ready=self._router.hub_ready,
            mode=self._router.mode,
            device_name=self._transport.device_name if connected else None,
        )

    @property
    def status_lines(self) -> List[str]:
        return list(self._status_lines)

    @property
    def router(self) -> NotificationRouter:
        return self._router

    async def wait_for_analysis(self) -> None:
        """Wait until all dispatched analyses have finished."""
        if self._dispatcher is not None:
            await self._dispatcher.drain()

    # --- Subscriptions ---

    def subscribe_status(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe to human-readable status lines."""
        return self._subscribe(self._status_callbacks, callback)

    def subscribe_state(self, callback: Callable[[SessionState], None]) -> Callable[[], None]:
        """Subscribe to state snapshots; the current one is sent at once."""
        unsubscribe = self._subscribe(self._state_callbacks, callback)
        try:
            callback(self.snapshot())
        except Exception as e:
            logger.error(f"Error in state callback: {e}")
        return unsubscribe

    def subscribe_analysis(self, callback: Callable[[AnalysisResult], None]) -> Callable[[], None]:
        """Subscribe to analysis results (successes and failures)."""
        return self._subscribe(self._analysis_callbacks, callback)

    @staticmethod
    def _subscribe(callbacks: list, callback) -> Callable[[], None]:
        callbacks.append(callback)

        def unsubscribe():
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    # --- Internal callbacks ---

    def _on_ready(self) -> None:
        self._report("Status: Hub is ready and waiting for command.")
        self._notify_state()

    def _on_malformed_record(self, error: MalformedRecordError) -> None:
        self._report(f"Error: Invalid sensor data format: {error.line}", level=logging.ERROR)

    def _on_record(self, record: SensorRecord) -> None:
        self._report(
            f"Status: Sensor data: hue={record.hue} saturation={record.saturation} "
            f"value={record.color_value} reflection={record.reflection} ambient={record.ambient}"
        )
        if self._dispatcher is None:
            return

        self._report("Status: Getting spectroscopic analysis...")
        epoch = self._epoch
        task = self._dispatcher.submit(record)
        task.add_done_callback(lambda t: self._on_analysis_done(epoch, t))

    def _on_analysis_done(self, epoch: int, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        result = task.result()
        if epoch != self._epoch:
            logger.debug("Discarding analysis result from a stopped stream")
            return

        if result.ok:
            self._report("Status: Spectroscopic analysis received.")
        else:
            self._report(f"Error during spectroscopic analysis: {result.error}", level=logging.ERROR)

        for callback in list(self._analysis_callbacks):
            try:
                callback(result)
            except Exception as e:
                logger.error(f"Error in analysis callback: {e}")

    def _on_link_lost(self) -> None:
        self._epoch += 1
        self._router.reset()
        self._report("Error: Connection to hub lost.", level=logging.ERROR)
        self._notify_state()

    def _report(self, line: str, level: int = logging.INFO) -> None:
        logger.log(level, line)
        self._status_lines.append(line)
        for callback in list(self._status_callbacks):
            try:
                callback(line)
            except Exception as e:
                logger.error(f"Error in status callback: {e}")

    def _notify_state(self) -> None:
        state = self.snapshot()
        for callback in list(self._state_callbacks):
            try:
                callback(state)
            except Exception as e:
                logger.error(f"Error in state callback: {e}")
