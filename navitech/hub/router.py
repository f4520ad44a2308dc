"""Notification router: the state machine behind the shared channel.

The hub uses one notification channel for two kinds of traffic:

- status text ("rdy") while the hub is idle
- NaVi record lines while it answers a fetch command

The router installs exactly one handler on the transport and
dispatches every packet on the current ``Mode``. Switching between
status and record framing is a mode change, never a handler swap, so
a packet can not reach two consumers or a half-swapped state.

    IDLE --start()--> AWAITING_READY --"rdy"--> STREAMING_READY
    STREAMING_READY --fetch_record()--> AWAITING_SENSOR_RECORD
    AWAITING_SENSOR_RECORD --drain window--> AWAITING_READY
    any --stop()--> IDLE
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from ..buffer import LineBuffer
from ..config import DEFAULT_DRAIN_WINDOW, LINE_BUFFER_MAX_SIZE, READINESS_TOKEN
from ..errors import (
    CommandSendFailedError,
    InvalidStateError,
    MalformedRecordError,
    NotConnectedError,
    SpuriousFrameError,
    WriteFailedError,
)
from ..models import HubCommand, Mode, SensorRecord
from ..protocol import Protocol, ProtocolParser, PybricksProtocol, SensorRecordAssembler
from ..transport import Transport

logger = logging.getLogger(__name__)

# Status frames are NUL padded; a NUL ends a status line like a newline does
STATUS_TERMINATORS = (b'\x00', b'\n')


class NotificationRouter:
    """Routes notification packets to the readiness or record consumer.

    Responsibilities:
    - Own the readiness line buffer
    - Track mode, hub readiness and the pending fetch
    - Send fetch commands and open/close the drain window
    - Hand finished records to ``on_record`` without waiting on it
    """

    def __init__(self,
                 transport: Transport,
                 protocol: Optional[Protocol] = None,
                 *,
                 on_record: Optional[Callable[[SensorRecord], None]] = None,
                 on_ready: Optional[Callable[[], None]] = None,
                 on_malformed: Optional[Callable[[MalformedRecordError], None]] = None,
                 readiness_token: str = READINESS_TOKEN,
                 drain_window: float = DEFAULT_DRAIN_WINDOW,
                 grace_notifications: int = 0,
                 line_buffer_max_size: int = LINE_BUFFER_MAX_SIZE):
        """Initialize router.

        Args:
            transport: Transport whose notification slot the router uses
            protocol: Protocol implementation (default: PybricksProtocol)
            on_record: Called with each decoded sensor record
            on_ready: Called when the hub announces readiness
            on_malformed: Called for each skipped record line
            readiness_token: Status text meaning "idle, send a command"
            drain_window: Seconds after a sent fetch before readiness
                framing is restored
            grace_notifications: Packets dropped unseen after start()
            line_buffer_max_size: Cap on an unterminated status line
        """
        self._transport = transport
        self._protocol = protocol or PybricksProtocol(line_buffer_max_size=line_buffer_max_size)
        self._on_record = on_record
        self._on_ready = on_ready
        self._on_malformed = on_malformed
        self._readiness_token = readiness_token
        self._drain_window = drain_window
        self._grace_notifications = grace_notifications

        self._buffer = LineBuffer(max_size=line_buffer_max_size)
        self._mode = Mode.IDLE
        self._hub_ready = False
        self._grace_remaining = 0

        # Only valid in AWAITING_SENSOR_RECORD
        self._assembler: Optional[SensorRecordAssembler] = None
        self._fetch_generation = 0

    # --- State ---

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def hub_ready(self) -> bool:
        return self._hub_ready

    @property
    def stream_active(self) -> bool:
        return self._mode is not Mode.IDLE

    @property
    def pending_fetch(self) -> bool:
        """True while a fetch response may still be arriving."""
        return self._mode is Mode.AWAITING_SENSOR_RECORD

    @property
    def drain_window(self) -> float:
        return self._drain_window

    # --- Operations ---

    def start(self) -> None:
        """Enter AWAITING_READY and take over the notification slot.

        Valid from any mode; a running fetch is abandoned.
        """
        if self._mode is Mode.AWAITING_SENSOR_RECORD:
            logger.warning("Stream restarted while a fetch was pending; dropping it")

        self._buffer.reset()
        self._assembler = None
        self._hub_ready = False
        self._grace_remaining = self._grace_notifications
        self._mode = Mode.AWAITING_READY
        self._transport.set_notification_handler(self.on_notification)
        logger.info("Data stream started, waiting for readiness token")

    def stop(self) -> None:
        """Enter IDLE and release the notification slot."""
        self._transport.set_notification_handler(None)
        self.reset()
        logger.info("Data stream stopped")

    def reset(self) -> None:
        """Enter IDLE without touching the transport (link already gone)."""
        self._mode = Mode.IDLE
        self._hub_ready = False
        self._assembler = None
        self._grace_remaining = 0
        self._buffer.reset()

    async def fetch_record(self, command: HubCommand) -> None:
        """Send a fetch command and switch to record framing.

        Raises:
            InvalidStateError: Hub is not in STREAMING_READY
            CommandSendFailedError: The write failed; the previous
                STREAMING_READY state is restored
        """
        if self._mode is not Mode.STREAMING_READY or not self._hub_ready:
            raise InvalidStateError(f"Cannot fetch a record in mode {self._mode.value}")

        data = self._protocol.serialize_command(command)

        self._fetch_generation += 1
        generation = self._fetch_generation
        self._assembler = self._protocol.new_assembler(on_malformed=self._malformed_record)
        self._hub_ready = False
        self._mode = Mode.AWAITING_SENSOR_RECORD
        logger.debug(f"Record framing active for fetch #{generation}")

        try:
            await self._transport.write(data)
        except (WriteFailedError, NotConnectedError) as e:
            if self._is_current_fetch(generation):
                self._assembler = None
                self._mode = Mode.STREAMING_READY
                self._hub_ready = True
            raise CommandSendFailedError(f"Failed to send '{command.name}': {e}") from e

        logger.info(f"'{command.name}' command sent")
        if self._is_current_fetch(generation):
            loop = asyncio.get_running_loop()
            loop.call_later(self._drain_window, self._end_drain_window, generation)

    def _is_current_fetch(self, generation: int) -> bool:
        return (generation == self._fetch_generation
                and self._mode is Mode.AWAITING_SENSOR_RECORD)

    def _end_drain_window(self, generation: int) -> None:
        if not self._is_current_fetch(generation):
            logger.debug(f"Drain window of fetch #{generation} expired after a mode change")
            return

        if self._assembler is not None and self._assembler.pending:
            logger.warning(f"Discarding incomplete record text: {self._assembler.pending!r}")
        self._assembler = None
        self._buffer.reset()
        self._mode = Mode.AWAITING_READY
        logger.debug("Drain window closed, readiness framing restored")

    # --- Notification handling ---

    def on_notification(self, packet: bytes) -> None:
        """Handle one notification packet.

        Runs to completion before the next packet; never raises for
        bad input.
        """
        if self._mode is Mode.IDLE:
            logger.debug(f"Ignoring {len(packet)} byte packet while idle")
            return

        if self._grace_remaining > 0:
            self._grace_remaining -= 1
            logger.debug(f"Dropping packet in grace period: {packet!r}")
            return

        if self._mode is Mode.AWAITING_SENSOR_RECORD:
            self._handle_record_packet(packet)
        else:
            self._handle_status_packet(packet)

    def _handle_status_packet(self, packet: bytes) -> None:
        """Decode one status packet.

        Each packet is a complete status frame. A trailing fragment
        without terminator ends at the packet boundary and is never
        joined with the next packet.
        """
        payload = ProtocolParser.strip_marker(packet)
        framed = payload.replace(STATUS_TERMINATORS[0], STATUS_TERMINATORS[1])
        raw_lines = self._buffer.feed(framed)
        if self._buffer.size:
            raw_lines.append(self._buffer.flush())

        for raw_line in raw_lines:
            text = self._protocol.decode_status(raw_line)
            if not text:
                continue
            try:
                self._accept_status(text)
            except SpuriousFrameError as e:
                logger.info(f"Ignoring spurious notification: {e}")

    def _accept_status(self, text: str) -> None:
        if text != self._readiness_token:
            raise SpuriousFrameError(repr(text))
        if self._mode is not Mode.AWAITING_READY:
            raise SpuriousFrameError(f"{text!r} while {self._mode.value}")

        self._mode = Mode.STREAMING_READY
        self._hub_ready = True
        logger.info("Hub is ready and waiting for command")
        if self._on_ready is not None:
            try:
                self._on_ready()
            except Exception as e:
                logger.error(f"Error in ready callback: {e}")

    def _malformed_record(self, error: MalformedRecordError) -> None:
        if self._on_malformed is None:
            return
        try:
            self._on_malformed(error)
        except Exception as e:
            logger.error(f"Error in malformed record callback: {e}")

    def _handle_record_packet(self, packet: bytes) -> None:
        for record in self._assembler.feed(packet):
            logger.info(f"Sensor record received: {record.as_tuple()}")
            if self._on_record is None:
                continue
            try:
                self._on_record(record)
            except Exception as e:
                logger.error(f"Error in record callback: {e}")
