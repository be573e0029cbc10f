"""Commands exchanged between actors, their mailboxes, and pipe event hooks."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections import deque
from typing import Any, AsyncIterator, Deque, Dict, Mapping, Protocol, Tuple, runtime_checkable

log = logging.getLogger(__name__)

DEFAULT_MAILBOX_CAPACITY = 128


class CommandKind(str, enum.Enum):
    """Every kind of command an actor can receive."""

    # User requests (API handle -> socket core)
    USER_BIND = "UserBind"
    USER_CONNECT = "UserConnect"
    USER_DISCONNECT = "UserDisconnect"
    USER_UNBIND = "UserUnbind"
    USER_SEND = "UserSend"
    USER_RECV = "UserRecv"
    USER_SET_OPT = "UserSetOpt"
    USER_GET_OPT = "UserGetOpt"
    USER_MONITOR = "UserMonitor"
    USER_CLOSE = "UserClose"
    # Lifecycle
    STOP = "Stop"
    CLEANUP_COMPLETE = "CleanupComplete"
    REPORT_ERROR = "ReportError"
    # Connection management
    CONN_SUCCESS = "ConnSuccess"
    CONN_FAILED = "ConnFailed"
    LISTENER_STOPPED = "ListenerStopped"
    CONNECTER_STOPPED = "ConnecterStopped"
    SESSION_STOPPED = "SessionStopped"
    # Session <-> engine
    ATTACH = "Attach"
    SESSION_PUSH_CMD = "SessionPushCmd"
    ENGINE_PUSH_CMD = "EnginePushCmd"
    ENGINE_READY = "EngineReady"
    ENGINE_ERROR = "EngineError"
    ENGINE_STOPPED = "EngineStopped"
    # ZAP
    REQUEST_ZAP_AUTH = "RequestZapAuth"
    PROCESS_ZAP_REPLY = "ProcessZapReply"
    # Pipes
    PIPE_MESSAGE_RECEIVED = "PipeMessageReceived"
    PIPE_CLOSED_BY_PEER = "PipeClosedByPeer"
    ATTACH_PIPE = "AttachPipe"
    # In-process transport
    INPROC_CONNECT_REQUEST = "InprocConnectRequest"
    INPROC_PIPE_CLOSED = "InprocPipeClosed"


# kind -> (required field names, optional field names defaulting to None)
_SIGNATURES: Dict[CommandKind, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    CommandKind.USER_BIND: (("endpoint", "reply_tx"), ()),
    CommandKind.USER_CONNECT: (("endpoint", "reply_tx"), ()),
    CommandKind.USER_DISCONNECT: (("endpoint", "reply_tx"), ()),
    CommandKind.USER_UNBIND: (("endpoint", "reply_tx"), ()),
    CommandKind.USER_SEND: (("msg",), ()),
    CommandKind.USER_RECV: (("reply_tx",), ()),
    CommandKind.USER_SET_OPT: (("option", "value", "reply_tx"), ()),
    CommandKind.USER_GET_OPT: (("option", "reply_tx"), ()),
    CommandKind.USER_MONITOR: (("monitor_tx", "reply_tx"), ()),
    CommandKind.USER_CLOSE: (("reply_tx",), ()),
    CommandKind.STOP: ((), ()),
    CommandKind.CLEANUP_COMPLETE: (("handle",), ("endpoint_uri",)),
    CommandKind.REPORT_ERROR: (("handle", "endpoint_uri", "error"), ()),
    CommandKind.CONN_SUCCESS: (
        ("endpoint", "target_endpoint_uri", "session_mailbox"),
        ("session_handle", "session_task_handle"),
    ),
    CommandKind.CONN_FAILED: (("endpoint", "error"), ()),
    CommandKind.LISTENER_STOPPED: (("handle", "endpoint_uri"), ()),
    CommandKind.CONNECTER_STOPPED: (("handle", "endpoint_uri"), ()),
    CommandKind.SESSION_STOPPED: (("handle", "endpoint_uri"), ()),
    CommandKind.ATTACH: (("engine_mailbox",), ("engine_handle", "engine_task_handle")),
    CommandKind.SESSION_PUSH_CMD: (("msg",), ()),
    CommandKind.ENGINE_PUSH_CMD: (("msg",), ()),
    CommandKind.ENGINE_READY: ((), ("peer_identity",)),
    CommandKind.ENGINE_ERROR: (("error",), ()),
    CommandKind.ENGINE_STOPPED: ((), ()),
    CommandKind.REQUEST_ZAP_AUTH: ((), ()),
    CommandKind.PROCESS_ZAP_REPLY: ((), ()),
    CommandKind.PIPE_MESSAGE_RECEIVED: (("pipe_id", "msg"), ()),
    CommandKind.PIPE_CLOSED_BY_PEER: (("pipe_id",), ()),
    CommandKind.ATTACH_PIPE: (
        ("rx_from_core", "tx_to_core", "pipe_read_id", "pipe_write_id"),
        (),
    ),
    CommandKind.INPROC_CONNECT_REQUEST: (
        (
            "connector_uri",
            "connector_pipe_tx",
            "connector_pipe_rx",
            "connector_pipe_write_id",
            "connector_pipe_read_id",
            "reply_tx",
        ),
        (),
    ),
    CommandKind.INPROC_PIPE_CLOSED: (("pipe_read_id",), ()),
}


class Command:
    """A message sent between actors: a kind plus the fields that kind carries.

    Fields are read as attributes, e.g. ``cmd.endpoint``.
    """

    __slots__ = ("kind", "_fields")

    def __init__(self, kind: CommandKind | str, /, **fields: Any) -> None:
        kind = CommandKind(kind)
        required, optional = _SIGNATURES[kind]
        missing = [name for name in required if name not in fields]
        if missing:
            raise TypeError(f"{kind.value} is missing fields: {', '.join(missing)}")
        unknown = sorted(set(fields) - set(required) - set(optional))
        if unknown:
            raise TypeError(f"{kind.value} does not take fields: {', '.join(unknown)}")
        values: Dict[str, Any] = dict.fromkeys(optional)
        values.update(fields)
        self.kind = kind
        self._fields = values

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._fields[name]
        except KeyError:
            raise AttributeError(
                f"{self.kind.value} command has no field {name!r}"
            ) from None

    @property
    def fields(self) -> Mapping[str, Any]:
        """A copy of the fields this command carries."""
        return dict(self._fields)

    def variant_name(self) -> str:
        """Return the name of this command's kind."""
        return self.kind.value

    def __repr__(self) -> str:
        names = ", ".join(self._fields)
        return f"Command({self.kind.value}{': ' + names if names else ''})"


class MailboxClosed(Exception):
    """Raised when sending to, or receiving from, a closed and empty mailbox."""

    def __init__(self) -> None:
        super().__init__("Mailbox closed")


class _Channel:
    """A bounded, closable asynchronous FIFO shared by a sender and a receiver."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.items: Deque[Command] = deque()
        self.closed = False
        self._getters: Deque[asyncio.Future] = deque()
        self._putters: Deque[asyncio.Future] = deque()

    @staticmethod
    def _wake_one(waiters: Deque[asyncio.Future]) -> None:
        while waiters:
            fut = waiters.popleft()
            if not fut.done():
                fut.set_result(None)
                return

    @staticmethod
    def _wake_all(waiters: Deque[asyncio.Future]) -> None:
        for fut in waiters:
            if not fut.done():
                fut.set_result(None)
        waiters.clear()

    async def _wait(self, waiters: Deque[asyncio.Future]) -> None:
        fut = asyncio.get_running_loop().create_future()
        waiters.append(fut)
        try:
            await fut
        except asyncio.CancelledError:
            if fut in waiters:
                waiters.remove(fut)
            elif fut.done() and not fut.cancelled():
                # Our wakeup was consumed; hand it on to the next waiter.
                self._wake_one(waiters)
            raise

    async def send(self, command: Command) -> None:
        while True:
            if self.closed:
                raise MailboxClosed()
            if len(self.items) < self.capacity:
                break
            await self._wait(self._putters)
        self.items.append(command)
        self._wake_one(self._getters)

    async def recv(self) -> Command:
        while not self.items:
            if self.closed:
                raise MailboxClosed()
            await self._wait(self._getters)
        command = self.items.popleft()
        self._wake_one(self._putters)
        return command

    def close(self) -> bool:
        if self.closed:
            return False
        self.closed = True
        self._wake_all(self._getters)
        self._wake_all(self._putters)
        return True


class MailboxSender:
    """The sending end of an actor's mailbox; may be shared freely."""

    __slots__ = ("_channel",)

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel

    async def send(self, command: Command) -> None:
        """Queue ``command``, waiting while the mailbox is full.

        Raises MailboxClosed if the mailbox is closed.
        """
        await self._channel.send(command)

    def close(self) -> bool:
        """Close the mailbox; return True if this call closed it."""
        return self._channel.close()

    def is_closed(self) -> bool:
        """Return True if the mailbox has been closed."""
        return self._channel.closed

    def __len__(self) -> int:
        return len(self._channel.items)

    def __repr__(self) -> str:
        return f"MailboxSender(queued={len(self)}, closed={self.is_closed()})"


class MailboxReceiver:
    """The receiving end of an actor's mailbox."""

    __slots__ = ("_channel",)

    def __init__(self, channel: _Channel) -> None:
        self._channel = channel

    async def recv(self) -> Command:
        """Return the next command, waiting for one to arrive.

        Queued commands are still delivered after close; once none remain,
        MailboxClosed is raised.
        """
        return await self._channel.recv()

    def close(self) -> bool:
        """Close the mailbox; return True if this call closed it."""
        return self._channel.close()

    def is_closed(self) -> bool:
        """Return True if the mailbox has been closed."""
        return self._channel.closed

    def __len__(self) -> int:
        return len(self._channel.items)

    async def __aiter__(self) -> AsyncIterator[Command]:
        while True:
            try:
                yield await self.recv()
            except MailboxClosed:
                return

    def __repr__(self) -> str:
        return f"MailboxReceiver(queued={len(self)}, closed={self.is_closed()})"


def mailbox(capacity: int = DEFAULT_MAILBOX_CAPACITY) -> Tuple[MailboxSender, MailboxReceiver]:
    """Create a bounded mailbox and return its (sender, receiver) pair."""
    if capacity < 1:
        raise ValueError(f"mailbox capacity must be at least 1, got {capacity}")
    channel = _Channel(capacity)
    return MailboxSender(channel), MailboxReceiver(channel)


@runtime_checkable
class PipeEvents(Protocol):
    """Implemented by actors that consume from a pipe, to hear of its events."""

    async def activate_read(self, pipe_id: int) -> None:
        """Called when a message is written to an empty pipe."""

    async def pipe_closed_by_peer(self, pipe_id: int) -> None:
        """Called when the writing end of the pipe is closed."""