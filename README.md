# azmq

Asynchronous building blocks for ZeroMQ-style messaging on `asyncio`.
The package has no dependencies outside the standard library.

## What is included

- **Messages** (`azmq.message`)
  - `Msg`: a single frame with `data` (bytes or `None`), `flags` and `metadata`;
    `size()`, `is_more()`, `is_command()`.
  - `MsgFlags`: `MORE` and `COMMAND`.
  - `Blob`: an immutable `bytes` subclass with `size()` and `is_empty()`.
  - `Metadata`: a map keyed by a value's type (`insert_typed`, `get`, `contains`,
    `remove`, `is_empty`, `len`), with `PeerAddress` and `ZapUserId` entry types.
- **ZMTP protocol pieces** (`azmq.zmtp`)
  - `azmq.zmtp.greeting.ZmtpGreeting`: `encode(mechanism, as_server)` builds the
    64-byte greeting (the mechanism name is null-padded to 20 bytes);
    `decode(buffer)` takes one greeting off the front of a `bytearray`, returns
    `None` while incomplete and raises `ProtocolViolation` on a bad signature,
    a version below 3 or an invalid as-server byte; `mechanism_name()` returns
    the name up to the first null.
  - `azmq.zmtp.codec.ZmtpCodec`: `encode(msg)` returns a short frame (payload up
    to 255 bytes) or a long frame with an 8-byte big-endian length;
    `decode(buffer)` removes one frame from a `bytearray` and keeps state
    between calls, so frames may arrive in pieces.
  - `azmq.zmtp.command`: `parse_command(msg)` yields `Ping`, `Pong`, `ZmtpReady`,
    `ErrorCommand` or `UnknownCommand` (or `None` for non-command or multi-part
    frames and malformed READY bodies); `create_ping(ttl, context)`,
    `create_pong(context)` and `ZmtpReady.create_msg(properties)` build command
    messages; `ZmtpReady.parse_properties` / `encode_properties` handle the
    metadata format. The frame flag and command name constants live here too.
- **Runtime** (`azmq.runtime`)
  - `Command(kind, **fields)`: a message between actors; `kind` is a
    `CommandKind`, the fields each kind requires are checked on construction and
    read back as attributes; `variant_name()` returns the kind's name.
  - `mailbox(capacity=128)`: a bounded, closable channel returning a
    `(MailboxSender, MailboxReceiver)` pair. Sending waits while the mailbox is
    full; closed mailboxes raise `MailboxClosed`; a receiver can be used with
    `async for`, which ends once the mailbox is closed and drained.
  - `PipeEvents`: the protocol pipe consumers implement
    (`activate_read`, `pipe_closed_by_peer`).
- **Context** (`azmq.context`)
  - `Context` / `context()`: unique handles (`next_handle`), a socket registry
    (`register_socket`, `unregister_socket`, `get_socket_mailbox`), an inproc
    name registry (`register_inproc`, which raises `AddrInUse` for a taken name,
    `unregister_inproc`, `lookup_inproc`) and shutdown: `shutdown()` sends a
    `Stop` command to every registered socket, `wait_for_termination()` waits
    until all have unregistered, and `term()` does both. A `Context` is also an
    async context manager that terminates on exit.
- **Errors** (`azmq.errors`): the `ZmqError` hierarchy (`Timeout`, `AddrInUse`,
  `HostUnreachable`, `ProtocolViolation`, `SecurityError`, ...) and
  `from_io_endpoint(error, endpoint)` to map an `OSError` onto it.
- **Version** (`azmq.version`): `version()` returns `(0, 1, 0)`;
  `version_major()`, `version_minor()` and `version_patch()` return the parts.

## What is not included

There are no sockets in this package: nothing binds, connects, sends or
receives over a network, and there are no TCP, IPC or inproc transports, no
engine that drives the greeting and READY exchange over a stream, no
heartbeating and no security mechanisms (NULL, PLAIN, CURVE) or ZAP
authentication. The context keeps registries and coordinates shutdown of
whatever actors register with it, but does not create socket actors itself.

## Installation

```
pip install azmq
```

## Example: framing

```python
from azmq.message import Msg, MsgFlags
from azmq.zmtp.codec import ZmtpCodec

codec = ZmtpCodec()
wire = codec.encode(Msg(b"hello", flags=MsgFlags.MORE))

buffer = bytearray(wire)
msg = codec.decode(buffer)
assert msg.data == b"hello" and msg.is_more()
assert not buffer
```

## Example: greeting

```python
from azmq.zmtp.greeting import ZmtpGreeting

raw = ZmtpGreeting.encode(b"NULL", as_server=True)
greeting = ZmtpGreeting.decode(bytearray(raw))
assert greeting.mechanism_name() == "NULL"
assert greeting.as_server
```

## Example: commands

```python
from azmq.zmtp.command import Ping, create_ping, parse_command

cmd = parse_command(create_ping(0, b"ctx"))
assert cmd == Ping(ttl=0, context=b"ctx")
```

## Example: context lifecycle

```python
import asyncio
from azmq.context import context
from azmq.runtime import CommandKind, mailbox

async def main():
    ctx = context()
    sender, receiver = mailbox()
    handle = ctx.next_handle()
    await ctx.register_socket(handle, sender)

    async def socket_actor():
        async for command in receiver:
            if command.kind is CommandKind.STOP:
                await ctx.unregister_socket(handle)
                return

    actor = asyncio.create_task(socket_actor())
    await ctx.term()
    await actor

asyncio.run(main())
```

## Running the tests

```
pip install -e ".[test]"
pytest
```