"""Command serializer for the hub protocol.

Converts command objects to wire bytes.
Pure functions with no side effects.
"""
from __future__ import annotations

from ..models import HubCommand


class CommandSerializer:
    """Serializer for hub commands.

    Wire format: one opcode byte followed by the ASCII command name.
    There is no length prefix, checksum or terminator.
    """

    @staticmethod
    def serialize_command(command: HubCommand) -> bytes:
        """Convert a command to wire bytes.

        Args:
            command: Command to serialize

        Returns:
            Bytes ready to write to the command/event characteristic

        Raises:
            ValueError: If the opcode does not fit a byte or the name is not ASCII

        Examples:
            >>> CommandSerializer.serialize_command(HubCommand(0x06, "prunus"))
            b'\\x06prunus'
        """
        if not isinstance(command, HubCommand):
            raise ValueError(f"Unknown command type: {type(command)}")
        if not 0 <= command.opcode <= 0xFF:
            raise ValueError(f"Opcode out of range: {command.opcode}")
        try:
            payload = command.name.encode("ascii")
        except UnicodeEncodeError as e:
            raise ValueError(f"Command name must be ASCII: {command.name!r}") from e
        return bytes([command.opcode]) + payload
