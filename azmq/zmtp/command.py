"""ZMTP command frames: PING, PONG, READY, ERROR and their wire format."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from azmq.errors import ProtocolViolation
from azmq.message import Msg, MsgFlags

log = logging.getLogger(__name__)

# Frame flag bits in the first octet of every ZMTP frame.
ZMTP_FLAG_MORE = 0b0000_0001
ZMTP_FLAG_LONG = 0b0000_0010
ZMTP_FLAG_COMMAND = 0b0000_0100

# Command names carried at the start of a command frame body.
ZMTP_CMD_READY_NAME = b"READY"
ZMTP_CMD_ERROR_NAME = b"ERROR"
ZMTP_CMD_SUBSCRIBE_NAME = b"SUBSCRIBE"
ZMTP_CMD_CANCEL_NAME = b"CANCEL"
ZMTP_CMD_PING_NAME = b"PING"
ZMTP_CMD_PONG_NAME = b"PONG"

_PING_PREFIX = bytes([len(ZMTP_CMD_PING_NAME)]) + ZMTP_CMD_PING_NAME
_PONG_PREFIX = bytes([len(ZMTP_CMD_PONG_NAME)]) + ZMTP_CMD_PONG_NAME
_READY_PREFIX = bytes([len(ZMTP_CMD_READY_NAME)]) + ZMTP_CMD_READY_NAME
_ERROR_PREFIX = bytes([len(ZMTP_CMD_ERROR_NAME)]) + ZMTP_CMD_ERROR_NAME

_MAX_NAME_LENGTH = 255


@dataclass(frozen=True)
class Ping:
    """A PING command with its time-to-live and context."""

    ttl: int = 0
    context: bytes = b""


@dataclass(frozen=True)
class Pong:
    """A PONG command echoing the context of a PING."""

    context: bytes = b""


@dataclass(frozen=True)
class ErrorCommand:
    """An ERROR command sent by the peer."""


@dataclass(frozen=True)
class UnknownCommand:
    """A command frame that is not specifically handled."""

    body: bytes


@dataclass
class ZmtpReady:
    """A parsed READY command: its metadata properties."""

    properties: dict[str, bytes] = field(default_factory=dict)

    @classmethod
    def parse_properties(cls, body: bytes) -> "ZmtpReady":
        """Parse a sequence of (name-len, name, value-len, value) entries."""
        properties: dict[str, bytes] = {}
        view = memoryview(bytes(body))
        pos = 0
        end = len(view)
        while pos < end:
            name_len = view[pos]
            pos += 1
            if end - pos < name_len:
                raise ProtocolViolation("Invalid metadata name length")
            try:
                name = bytes(view[pos : pos + name_len]).decode("utf-8")
            except UnicodeDecodeError:
                raise ProtocolViolation("Metadata name not valid UTF-8") from None
            pos += name_len

            if end - pos < 4:
                raise ProtocolViolation("Invalid metadata value length")
            (value_len,) = struct.unpack_from(">I", view, pos)
            pos += 4
            if end - pos < value_len:
                raise ProtocolViolation("Invalid metadata value length")
            properties[name] = bytes(view[pos : pos + value_len])
            pos += value_len
        return cls(properties)

    def encode_properties(self) -> bytes:
        """Encode the properties in the ZMTP metadata format."""
        parts: list[bytes] = []
        for name, value in self.properties.items():
            name_bytes = name.encode("utf-8")
            if len(name_bytes) > _MAX_NAME_LENGTH:
                log.warning(
                    "Skipping ZMTP metadata property with name longer than 255 bytes: %s",
                    name,
                )
                continue
            value_bytes = bytes(value)
            parts.append(bytes([len(name_bytes)]))
            parts.append(name_bytes)
            parts.append(struct.pack(">I", len(value_bytes)))
            parts.append(value_bytes)
        return b"".join(parts)

    @staticmethod
    def create_msg(properties: Mapping[str, bytes]) -> Msg:
        """Build a READY command message carrying ``properties``."""
        body = _READY_PREFIX + ZmtpReady(dict(properties)).encode_properties()
        return Msg(body, MsgFlags.COMMAND)


ZmtpCommand = Union[Ping, Pong, ZmtpReady, ErrorCommand, UnknownCommand]


def parse_command(msg: Msg) -> Optional[ZmtpCommand]:
    """Parse a single-frame command message, or return None if it is not one."""
    if not msg.is_command() or msg.is_more():
        return None
    body = msg.data
    if body is None:
        return None

    if body.startswith(_PING_PREFIX):
        header = len(_PING_PREFIX) + 2
        if len(body) < header:
            return None
        (ttl,) = struct.unpack_from(">H", body, len(_PING_PREFIX))
        return Ping(ttl, body[header:])
    if body.startswith(_PONG_PREFIX):
        return Pong(body[len(_PONG_PREFIX) :])
    if body.startswith(_READY_PREFIX):
        try:
            return ZmtpReady.parse_properties(body[len(_READY_PREFIX) :])
        except ProtocolViolation as exc:
            log.error("Failed to parse READY properties: %s", exc)
            return None
    if body.startswith(_ERROR_PREFIX):
        return ErrorCommand()
    return UnknownCommand(body)


def create_ping(ttl: int, context: bytes) -> Msg:
    """Build a PING command message."""
    return Msg(_PING_PREFIX + struct.pack(">H", ttl) + bytes(context), MsgFlags.COMMAND)


def create_pong(context: bytes) -> Msg:
    """Build a PONG command message."""
    return Msg(_PONG_PREFIX + bytes(context), MsgFlags.COMMAND)