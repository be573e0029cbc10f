"""The context: handle allocation, socket registry, inproc names and shutdown."""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from azmq.errors import AddrInUse
from azmq.runtime import Command, CommandKind, MailboxClosed, MailboxSender

log = logging.getLogger(__name__)

_TERMINATION_POLL_SECONDS = 5.0


@dataclass(frozen=True)
class InprocBinding:
    """Registry entry for an endpoint bound on the in-process transport."""

    binder_command_mailbox: MailboxSender


class Context:
    """Manages sockets and shared resources, and coordinates their shutdown.

    Usable as an async context manager; leaving the block terminates it.
    """

    def __init__(self) -> None:
        log.debug("Creating new context")
        self._handles = itertools.count(1)
        self._sockets: Dict[int, MailboxSender] = {}
        self._inproc: Dict[str, InprocBinding] = {}
        self._notify = asyncio.Event()
        self._shutdown_initiated = False

    @property
    def active_sockets(self) -> int:
        """Number of sockets currently registered."""
        return len(self._sockets)

    @property
    def shutdown_initiated(self) -> bool:
        """True once shutdown has begun."""
        return self._shutdown_initiated

    def next_handle(self) -> int:
        """Return a new unique handle id."""
        return next(self._handles)

    def _notify_waiters(self) -> None:
        event, self._notify = self._notify, asyncio.Event()
        event.set()

    async def register_socket(self, handle: int, mailbox: MailboxSender) -> None:
        """Record a newly created socket actor's mailbox."""
        self._sockets[handle] = mailbox
        log.debug("Socket %d registered", handle)

    async def unregister_socket(self, handle: int) -> None:
        """Forget a socket actor, waking term() waiters if it was the last."""
        if self._sockets.pop(handle, None) is None:
            log.warning("Attempted to unregister non-existent socket %d", handle)
            return
        log.debug("Socket %d unregistered", handle)
        if not self._sockets and self._shutdown_initiated:
            log.debug("Last socket unregistered during shutdown, notifying term waiters.")
            self._notify_waiters()

    async def shutdown(self) -> None:
        """Send Stop to every registered socket; later calls do nothing."""
        if self._shutdown_initiated:
            log.debug("Context shutdown already initiated.")
            return
        self._shutdown_initiated = True
        log.info("Context shutdown initiated.")
        if not self._sockets:
            log.debug("No active sockets during shutdown initiation.")
            self._notify_waiters()
            return

        async def stop(mailbox: MailboxSender) -> None:
            try:
                await mailbox.send(Command(CommandKind.STOP))
            except MailboxClosed:
                pass  # the socket has already gone

        await asyncio.gather(*(stop(mb) for mb in list(self._sockets.values())))
        log.debug("Sent Stop command to all registered sockets.")

    async def wait_for_termination(self) -> None:
        """Wait until every socket has unregistered after shutdown began."""
        if not self._shutdown_initiated:
            log.warning("wait_for_termination called before shutdown was initiated.")
            return
        while self._sockets:
            count = len(self._sockets)
            log.debug("Waiting for %d sockets to terminate...", count)
            event = self._notify
            try:
                await asyncio.wait_for(event.wait(), _TERMINATION_POLL_SECONDS)
            except asyncio.TimeoutError:
                log.warning(
                    "Timeout while waiting for context termination (%d sockets), still checking...",
                    count,
                )
        log.info("Context termination complete (all sockets stopped).")

    async def term(self) -> None:
        """Shut down all sockets and wait for them to stop."""
        await self.shutdown()
        await self.wait_for_termination()

    async def register_inproc(self, name: str, binding: InprocBinding) -> None:
        """Bind ``name`` on the in-process transport; raise AddrInUse if taken."""
        if name in self._inproc:
            raise AddrInUse(f"inproc://{name}")
        log.debug("Registering inproc binding %s", name)
        self._inproc[name] = binding

    async def unregister_inproc(self, name: str) -> None:
        """Release an in-process binding, if present."""
        if self._inproc.pop(name, None) is not None:
            log.debug("Unregistered inproc binding %s", name)

    async def lookup_inproc(self, name: str) -> Optional[InprocBinding]:
        """Return the binding registered under ``name``, if any."""
        return self._inproc.get(name)

    async def get_socket_mailbox(self, handle: int) -> Optional[MailboxSender]:
        """Return the mailbox of a registered socket, if any."""
        return self._sockets.get(handle)

    async def __aenter__(self) -> "Context":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.term()

    def __repr__(self) -> str:
        return "Context(...)"


def context() -> Context:
    """Create a new context."""
    return Context()