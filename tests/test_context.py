import asyncio

import pytest

from azmq.context import Context, InprocBinding, context
from azmq.errors import AddrInUse
from azmq.runtime import CommandKind, mailbox


def test_handles_start_at_one_and_are_unique():
    ctx = context()
    first = ctx.next_handle()
    second = ctx.next_handle()
    assert first == 1
    assert second == first + 1


@pytest.mark.asyncio
async def test_register_and_unregister_socket():
    ctx = Context()
    tx, _ = mailbox()
    handle = ctx.next_handle()
    await ctx.register_socket(handle, tx)
    assert ctx.active_sockets == 1
    assert await ctx.get_socket_mailbox(handle) is tx
    await ctx.unregister_socket(handle)
    assert ctx.active_sockets == 0
    assert await ctx.get_socket_mailbox(handle) is None


@pytest.mark.asyncio
async def test_unregister_unknown_socket_keeps_count():
    ctx = Context()
    tx, _ = mailbox()
    await ctx.register_socket(ctx.next_handle(), tx)
    await ctx.unregister_socket(999)
    assert ctx.active_sockets == 1


@pytest.mark.asyncio
async def test_shutdown_sends_stop_to_every_socket():
    ctx = Context()
    receivers = []
    for _ in range(3):
        tx, rx = mailbox()
        receivers.append(rx)
        await ctx.register_socket(ctx.next_handle(), tx)
    await ctx.shutdown()
    assert ctx.shutdown_initiated
    kinds = [(await rx.recv()).kind for rx in receivers]
    assert kinds == [CommandKind.STOP] * 3


@pytest.mark.asyncio
async def test_second_shutdown_sends_nothing_more():
    ctx = Context()
    tx, rx = mailbox()
    await ctx.register_socket(ctx.next_handle(), tx)
    await ctx.shutdown()
    await ctx.shutdown()
    assert len(rx) == 1


@pytest.mark.asyncio
async def test_shutdown_ignores_closed_mailbox():
    ctx = Context()
    tx, _ = mailbox()
    tx.close()
    await ctx.register_socket(ctx.next_handle(), tx)
    await ctx.shutdown()
    assert ctx.shutdown_initiated


@pytest.mark.asyncio
async def test_term_with_no_sockets_finishes():
    ctx = Context()
    await asyncio.wait_for(ctx.term(), 1)
    assert ctx.shutdown_initiated
    assert ctx.active_sockets == 0


@pytest.mark.asyncio
async def test_term_waits_for_sockets_to_unregister():
    ctx = Context()
    tx, rx = mailbox()
    handle = ctx.next_handle()
    await ctx.register_socket(handle, tx)
    terminating = asyncio.create_task(ctx.term())
    await asyncio.sleep(0.05)
    assert not terminating.done()
    assert (await rx.recv()).kind is CommandKind.STOP
    await ctx.unregister_socket(handle)
    await asyncio.wait_for(terminating, 1)
    assert ctx.active_sockets == 0


@pytest.mark.asyncio
async def test_wait_for_termination_without_shutdown_returns():
    ctx = Context()
    tx, _ = mailbox()
    await ctx.register_socket(ctx.next_handle(), tx)
    await asyncio.wait_for(ctx.wait_for_termination(), 1)
    assert not ctx.shutdown_initiated
    assert ctx.active_sockets == 1


@pytest.mark.asyncio
async def test_async_with_terminates():
    async with Context() as ctx:
        tx, _ = mailbox()
        assert ctx.active_sockets == 0
    assert ctx.shutdown_initiated


@pytest.mark.asyncio
async def test_inproc_register_and_lookup():
    ctx = Context()
    tx, _ = mailbox()
    binding = InprocBinding(tx)
    await ctx.register_inproc("service", binding)
    found = await ctx.lookup_inproc("service")
    assert found is binding
    assert found.binder_command_mailbox is tx


@pytest.mark.asyncio
async def test_inproc_duplicate_name_raises():
    ctx = Context()
    tx, _ = mailbox()
    await ctx.register_inproc("service", InprocBinding(tx))
    with pytest.raises(AddrInUse) as info:
        await ctx.register_inproc("service", InprocBinding(tx))
    assert info.value.detail == "inproc://service"


@pytest.mark.asyncio
async def test_inproc_unregister_frees_name():
    ctx = Context()
    tx, _ = mailbox()
    await ctx.register_inproc("service", InprocBinding(tx))
    await ctx.unregister_inproc("service")
    assert await ctx.lookup_inproc("service") is None
    other = InprocBinding(mailbox()[0])
    await ctx.register_inproc("service", other)
    assert await ctx.lookup_inproc("service") is other


@pytest.mark.asyncio
async def test_lookup_unknown_inproc_is_none():
    ctx = Context()
    assert await ctx.lookup_inproc("missing") is None