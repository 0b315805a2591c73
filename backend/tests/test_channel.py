"""
Tests for the update channels.

Requires Python 3.11+.
"""

import asyncio
import threading
import time

import pytest

from utils.errors import ChannelClosedError
from watcher.channel import (
    UPDATE_SIGNAL,
    AsyncUpdateChannel,
    SendResult,
    UpdateChannel,
)


class TestUpdateChannel:
    """Test cases for the threaded UpdateChannel."""

    @pytest.fixture
    def channel(self) -> UpdateChannel:
        return UpdateChannel()

    def test_receive_times_out(self, channel: UpdateChannel):
        """Test that receive raises TimeoutError when nothing is sent."""
        with pytest.raises(TimeoutError):
            channel.receive(timeout=0.01)

    def test_send_without_receiver_times_out(self, channel: UpdateChannel):
        """Test that an unbuffered send does not complete on its own."""
        assert channel.send(0.02, threading.Event()) is SendResult.TIMED_OUT

        # The abandoned signal is not left behind for a later receiver
        with pytest.raises(TimeoutError):
            channel.receive(timeout=0.01)

    def test_send_is_delivered(self, channel: UpdateChannel):
        """Test that a waiting receiver takes the signal."""
        received = []
        receiver = threading.Thread(target=lambda: received.append(channel.receive(timeout=1.0)))
        receiver.start()

        result = channel.send(1.0, threading.Event())
        receiver.join()

        assert result is SendResult.DELIVERED
        assert received == [UPDATE_SIGNAL]

    def test_send_waits_for_late_receiver(self, channel: UpdateChannel):
        """Test that a send blocks until a receiver arrives."""
        results = []
        sender = threading.Thread(
            target=lambda: results.append(channel.send(1.0, threading.Event()))
        )
        sender.start()
        time.sleep(0.05)

        assert channel.receive(timeout=1.0) is UPDATE_SIGNAL
        sender.join()
        assert results == [SendResult.DELIVERED]

    def test_abort_preempts_send(self, channel: UpdateChannel):
        """Test that setting the abort event and interrupting ends a send."""
        abort = threading.Event()
        results = []
        sender = threading.Thread(target=lambda: results.append(channel.send(10.0, abort)))
        sender.start()
        time.sleep(0.02)

        started = time.monotonic()
        abort.set()
        channel.interrupt()
        sender.join(timeout=1.0)

        assert results == [SendResult.CANCELLED]
        assert time.monotonic() - started < 1.0

    def test_close(self, channel: UpdateChannel):
        """Test that a closed channel yields None and refuses sends."""
        channel.close()

        assert channel.closed
        assert channel.receive() is None
        assert channel.receive(timeout=0.01) is None
        with pytest.raises(ChannelClosedError):
            channel.send(0.01, threading.Event())

    def test_close_twice_fails(self, channel: UpdateChannel):
        """Test that a channel is closed exactly once."""
        channel.close()

        with pytest.raises(ChannelClosedError):
            channel.close()

    def test_close_wakes_receiver(self, channel: UpdateChannel):
        """Test that a blocked receiver returns None on close."""
        received = []
        receiver = threading.Thread(target=lambda: received.append(channel.receive()))
        receiver.start()
        time.sleep(0.02)

        channel.close()
        receiver.join(timeout=1.0)

        assert received == [None]

    def test_iteration_ends_on_close(self, channel: UpdateChannel):
        """Test iterating a channel until it closes."""
        def produce() -> None:
            for _ in range(3):
                channel.send(1.0, threading.Event())
            channel.close()

        producer = threading.Thread(target=produce)
        producer.start()
        signals = list(channel)
        producer.join()

        assert signals == [UPDATE_SIGNAL] * 3


class TestAsyncUpdateChannel:
    """Test cases for AsyncUpdateChannel."""

    @pytest.mark.asyncio
    async def test_receive_times_out(self):
        """Test that receive raises TimeoutError when nothing is sent."""
        channel = AsyncUpdateChannel()

        with pytest.raises(TimeoutError):
            await channel.receive(timeout=0.01)

    @pytest.mark.asyncio
    async def test_send_without_receiver_times_out(self):
        """Test that an unbuffered send does not complete on its own."""
        channel = AsyncUpdateChannel()

        assert await channel.send(0.02) is False

    @pytest.mark.asyncio
    async def test_send_is_delivered(self):
        """Test handing a signal to a waiting receiver."""
        channel = AsyncUpdateChannel()
        receiver = asyncio.create_task(channel.receive(timeout=1.0))
        await asyncio.sleep(0)

        assert await channel.send(1.0) is True
        assert await receiver is UPDATE_SIGNAL

    @pytest.mark.asyncio
    async def test_send_waits_for_late_receiver(self):
        """Test that a send blocks until a receiver arrives."""
        channel = AsyncUpdateChannel()
        sender = asyncio.create_task(channel.send(1.0))
        await asyncio.sleep(0.02)

        assert not sender.done()
        assert await channel.receive(timeout=1.0) is UPDATE_SIGNAL
        assert await sender is True

    @pytest.mark.asyncio
    async def test_timed_out_receiver_is_skipped(self):
        """Test that a signal is not lost to a receiver that gave up."""
        channel = AsyncUpdateChannel()
        with pytest.raises(TimeoutError):
            await channel.receive(timeout=0.01)

        assert await channel.send(0.02) is False

    @pytest.mark.asyncio
    async def test_repeated_timeouts_leave_no_waiters(self):
        """Test that polling a quiet channel does not accumulate waiting receivers."""
        channel = AsyncUpdateChannel()

        for _ in range(1000):
            with pytest.raises(TimeoutError):
                await channel.receive(timeout=0)

        assert len(channel._getters) == 0

    @pytest.mark.asyncio
    async def test_cancelled_receiver_leaves_no_waiter(self):
        """Test that a receiver cancelled while waiting is forgotten."""
        channel = AsyncUpdateChannel()
        receiver = asyncio.create_task(channel.receive())
        await asyncio.sleep(0)

        receiver.cancel()
        with pytest.raises(asyncio.CancelledError):
            await receiver

        assert len(channel._getters) == 0

    @pytest.mark.asyncio
    async def test_close_releases_receiver(self):
        """Test that close wakes waiting receivers with None."""
        channel = AsyncUpdateChannel()
        receiver = asyncio.create_task(channel.receive())
        await asyncio.sleep(0)

        channel.close()

        assert await receiver is None
        assert await channel.receive() is None
        with pytest.raises(ChannelClosedError):
            channel.close()
        with pytest.raises(ChannelClosedError):
            await channel.send(0.01)

    @pytest.mark.asyncio
    async def test_async_iteration(self):
        """Test iterating a channel until it closes."""
        channel = AsyncUpdateChannel()

        async def produce() -> None:
            for _ in range(2):
                await channel.send(1.0)
            channel.close()

        producer = asyncio.create_task(produce())
        signals = [signal async for signal in channel]
        await producer

        assert signals == [UPDATE_SIGNAL] * 2
