"""Framing of messages into ZMTP frames and back."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional

from azmq.message import Msg, MsgFlags
from azmq.zmtp.command import ZMTP_FLAG_COMMAND, ZMTP_FLAG_LONG, ZMTP_FLAG_MORE

_SHORT_HEADER = 2
_LONG_HEADER = 9
_MAX_SHORT_SIZE = 255


@dataclass(frozen=True)
class _FrameHeader:
    flags: int
    size: int


class ZmtpCodec:
    """Encodes messages to ZMTP frames and decodes frames from a byte buffer.

    The decoder keeps state between calls so that frames may arrive in pieces.
    """

    def __init__(self) -> None:
        self._header: Optional[_FrameHeader] = None

    def encode(self, msg: Msg) -> bytes:
        """Return the wire form of ``msg``."""
        data = msg.data or b""
        size = len(data)
        flags = 0
        if msg.is_more():
            flags |= ZMTP_FLAG_MORE
        if msg.is_command():
            flags |= ZMTP_FLAG_COMMAND
        if size <= _MAX_SHORT_SIZE:
            header = bytes([flags, size])
        else:
            header = bytes([flags | ZMTP_FLAG_LONG]) + struct.pack(">Q", size)
        return header + data

    def decode(self, buffer: bytearray) -> Optional[Msg]:
        """Take one frame off the front of ``buffer``.

        Returns None when more bytes are needed; consumed bytes are removed.
        """
        if self._header is None:
            if not buffer:
                return None
            flags = buffer[0]
            is_long = bool(flags & ZMTP_FLAG_LONG)
            header_len = _LONG_HEADER if is_long else _SHORT_HEADER
            if len(buffer) < header_len:
                return None
            if is_long:
                (size,) = struct.unpack_from(">Q", buffer, 1)
            else:
                size = buffer[1]
            del buffer[:header_len]
            self._header = _FrameHeader(flags, size)

        header = self._header
        if len(buffer) < header.size:
            return None
        body = bytes(buffer[: header.size])
        del buffer[: header.size]
        self._header = None

        msg_flags = MsgFlags(0)
        if header.flags & ZMTP_FLAG_MORE:
            msg_flags |= MsgFlags.MORE
        if header.flags & ZMTP_FLAG_COMMAND:
            msg_flags |= MsgFlags.COMMAND
        return Msg(body, msg_flags)