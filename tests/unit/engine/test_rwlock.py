"""Unit tests for the asyncio reader/writer lock."""
import asyncio

import pytest

from warden.engine.rwlock import AsyncRWLock


@pytest.mark.asyncio
async def test_readers_share_the_lock():
    lock = AsyncRWLock()
    inside = asyncio.Event()
    release = asyncio.Event()

    async def reader():
        async with lock.read():
            if lock.readers == 2:
                inside.set()
            await release.wait()

    tasks = [asyncio.create_task(reader()) for _ in range(2)]
    await asyncio.wait_for(inside.wait(), timeout=1)
    assert lock.readers == 2
    release.set()
    await asyncio.gather(*tasks)
    assert lock.readers == 0


@pytest.mark.asyncio
async def test_writer_waits_for_readers():
    lock = AsyncRWLock()
    order = []
    reader_in = asyncio.Event()
    release_reader = asyncio.Event()

    async def reader():
        async with lock.read():
            order.append("read-start")
            reader_in.set()
            await release_reader.wait()
            order.append("read-end")

    async def writer():
        async with lock.write():
            order.append("write")

    r = asyncio.create_task(reader())
    await reader_in.wait()
    w = asyncio.create_task(writer())
    await asyncio.sleep(0.01)
    assert order == ["read-start"]
    release_reader.set()
    await asyncio.gather(r, w)
    assert order == ["read-start", "read-end", "write"]


@pytest.mark.asyncio
async def test_waiting_writer_blocks_new_readers():
    lock = AsyncRWLock()
    order = []
    first_in = asyncio.Event()
    release_first = asyncio.Event()

    async def first_reader():
        async with lock.read():
            first_in.set()
            await release_first.wait()

    async def writer():
        async with lock.write():
            order.append("write")

    async def late_reader():
        async with lock.read():
            order.append("late-read")

    r1 = asyncio.create_task(first_reader())
    await first_in.wait()
    w = asyncio.create_task(writer())
    await asyncio.sleep(0.01)
    r2 = asyncio.create_task(late_reader())
    await asyncio.sleep(0.01)
    assert order == []
    release_first.set()
    await asyncio.gather(r1, w, r2)
    assert order == ["write", "late-read"]


@pytest.mark.asyncio
async def test_cancelled_writer_unblocks_readers():
    lock = AsyncRWLock()
    hold = asyncio.Event()
    held = asyncio.Event()

    async def holder():
        async with lock.read():
            held.set()
            await hold.wait()

    h = asyncio.create_task(holder())
    await held.wait()

    async def writer():
        async with lock.write():
            pass

    w = asyncio.create_task(writer())
    await asyncio.sleep(0.01)
    w.cancel()
    with pytest.raises(asyncio.CancelledError):
        await w

    async with lock.read():
        assert lock.readers == 2
    hold.set()
    await h
    assert not lock.writer_active
