"""
LogTail Update Channels.

Unbuffered channels carrying content-free update signals from a watcher
to a single consumer. A send completes only once a receiver has taken
the signal.
Requires Python 3.11+.
"""

import asyncio
import enum
import threading
import time
from collections import deque
from collections.abc import AsyncIterator, Iterator

from utils.errors import ChannelClosedError


class UpdateSignal:
    """Signals that the watched file changed. Carries no payload."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UPDATE_SIGNAL"


UPDATE_SIGNAL = UpdateSignal()


class SendResult(enum.Enum):
    """Outcome of a blocking send."""

    DELIVERED = "delivered"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class UpdateChannel:
    """
    Rendezvous channel between a watcher thread and a consumer.

    The consumer side is ``receive`` and iteration. The watcher side is
    ``send``, ``close`` and ``interrupt``.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._offered = False
        self._taken = False
        self._closed = False

    def receive(self, timeout: float | None = None) -> UpdateSignal | None:
        """
        Wait for the next update signal.

        Args:
            timeout: Seconds to wait, or None to wait until a signal arrives
                or the channel closes

        Returns:
            UPDATE_SIGNAL, or None once the channel is closed

        Raises:
            TimeoutError: If nothing arrived within ``timeout``
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                if self._offered:
                    self._offered = False
                    self._taken = True
                    self._cond.notify_all()
                    return UPDATE_SIGNAL
                if self._closed:
                    return None
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError("no update received")
                self._cond.wait(remaining)

    def send(self, timeout: float, abort: threading.Event) -> SendResult:
        """
        Offer a signal and block until it is taken, ``timeout`` elapses or
        ``abort`` is set. Setting ``abort`` must be followed by ``interrupt``
        to wake a blocked sender.
        """
        deadline = time.monotonic() + timeout
        with self._cond:
            if self._closed:
                raise ChannelClosedError("send on closed channel")
            self._offered = True
            self._taken = False
            self._cond.notify_all()
            try:
                while not self._taken:
                    if abort.is_set():
                        return SendResult.CANCELLED
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return SendResult.TIMED_OUT
                    self._cond.wait(remaining)
                return SendResult.DELIVERED
            finally:
                self._offered = False

    def interrupt(self) -> None:
        """Wake up a blocked sender so it re-checks its abort event."""
        with self._cond:
            self._cond.notify_all()

    def close(self) -> None:
        """Close the channel. Receivers drain to None from then on."""
        with self._cond:
            if self._closed:
                raise ChannelClosedError("channel already closed")
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[UpdateSignal]:
        while (signal := self.receive()) is not None:
            yield signal


class AsyncUpdateChannel:
    """
    Rendezvous channel between a watcher task and a consumer coroutine.

    Must be used from a single event loop.
    """

    def __init__(self) -> None:
        self._getters: deque[asyncio.Future[UpdateSignal | None]] = deque()
        self._receiver_waiting = asyncio.Event()
        self._closed = False

    async def receive(self, timeout: float | None = None) -> UpdateSignal | None:
        """
        Wait for the next update signal.

        Returns:
            UPDATE_SIGNAL, or None once the channel is closed

        Raises:
            TimeoutError: If nothing arrived within ``timeout``
        """
        if self._closed:
            return None
        getter: asyncio.Future[UpdateSignal | None] = asyncio.get_running_loop().create_future()
        self._getters.append(getter)
        self._receiver_waiting.set()
        try:
            if timeout is None:
                return await getter
            return await asyncio.wait_for(getter, timeout)
        finally:
            # A receiver that timed out or was cancelled leaves nothing behind
            if getter.cancelled() and getter in self._getters:
                self._getters.remove(getter)

    async def send(self, timeout: float) -> bool:
        """
        Hand a signal to a waiting receiver.

        Returns:
            True once delivered, False if no receiver showed up within ``timeout``
        """
        if self._closed:
            raise ChannelClosedError("send on closed channel")
        try:
            async with asyncio.timeout(timeout):
                while True:
                    while self._getters:
                        getter = self._getters.popleft()
                        # Receivers that timed out or were cancelled left done futures
                        if not getter.done():
                            getter.set_result(UPDATE_SIGNAL)
                            return True
                    self._receiver_waiting.clear()
                    await self._receiver_waiting.wait()
        except TimeoutError:
            return False

    def close(self) -> None:
        """Close the channel and release every waiting receiver with None."""
        if self._closed:
            raise ChannelClosedError("channel already closed")
        self._closed = True
        while self._getters:
            getter = self._getters.popleft()
            if not getter.done():
                getter.set_result(None)

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> AsyncIterator[UpdateSignal]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[UpdateSignal]:
        while (signal := await self.receive()) is not None:
            yield signal
