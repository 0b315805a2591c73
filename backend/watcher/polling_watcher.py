"""
LogTail Polling File Watcher.

Detects file changes by polling size and modification time, without
relying on OS change notifications.
Requires Python 3.11+.
"""

import asyncio
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from filesystem.base import FileStat, FileSystem
from filesystem.os_fs import OsFileSystem
from utils.config import get_settings
from utils.errors import WatcherError
from utils.logger import LoggerMixin
from watcher.channel import AsyncUpdateChannel, SendResult, UpdateChannel


class PollingFileWatcher(LoggerMixin):
    """
    Watches a single file from a background thread.

    Each poll compares the file's size and modification time against the
    last snapshot the consumer acknowledged. On a difference the watcher
    blocks sending one signal. If the consumer does not take it within the
    refresh interval the send is abandoned and the file re-polled; since the
    snapshot was not updated, the next poll signals again with the freshest
    metadata. Changes made while a send is pending therefore collapse into
    a single further signal instead of queueing up.

    A watcher is one-shot: once its channel closes, make a new one.
    """

    def __init__(
        self,
        path: str | Path,
        fs: FileSystem | None = None,
        poll_interval_ms: int | None = None,
        refresh_interval_ms: int | None = None,
    ) -> None:
        """
        Initialize the watcher.

        Args:
            path: File to watch
            fs: Filesystem to query, the OS one by default
            poll_interval_ms: Sleep between two metadata queries
            refresh_interval_ms: How long a send may block before re-polling
        """
        settings = get_settings()

        self._path = path
        self._fs = fs or OsFileSystem()
        if poll_interval_ms is None:
            poll_interval_ms = settings.watcher.poll_interval_ms
        if refresh_interval_ms is None:
            refresh_interval_ms = settings.watcher.refresh_interval_ms
        self._poll_interval = poll_interval_ms / 1000.0
        self._refresh_interval = refresh_interval_ms / 1000.0

        self._error: Exception | None = None
        self._stop = threading.Event()
        self._updates: UpdateChannel | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> tuple[UpdateChannel, Callable[[], None]]:
        """
        Start polling in a background thread.

        Returns:
            The update channel and an idempotent cancel function

        Raises:
            WatcherError: If this watcher was already started
        """
        if self._thread is not None:
            raise WatcherError("watcher already started, create a new one")

        updates = UpdateChannel()
        self._updates = updates
        self._thread = threading.Thread(
            target=self._watch,
            args=(updates,),
            name=f"polling-watcher:{os.fspath(self._path)}",
            daemon=True,
        )
        self._thread.start()

        self.log.info(
            "watcher_started",
            path=os.fspath(self._path),
            poll_interval_ms=round(self._poll_interval * 1000),
            refresh_interval_ms=round(self._refresh_interval * 1000),
        )
        return updates, self.cancel

    def cancel(self) -> None:
        """Stop watching. Safe to call any number of times."""
        self._stop.set()
        if self._updates is not None:
            self._updates.interrupt()

    def _watch(self, updates: UpdateChannel) -> None:
        """Polling loop; runs in the watcher thread."""
        last: FileStat | None = None
        try:
            while not self._stop.is_set():
                try:
                    current = self._fs.stat(self._path)
                except Exception as e:
                    # Recorded before the channel closes in the finally block
                    self._error = e
                    self.log.error(
                        "metadata_query_failed",
                        path=os.fspath(self._path),
                        error=str(e),
                    )
                    return

                if current != last:
                    result = updates.send(self._refresh_interval, self._stop)
                    if result is SendResult.DELIVERED:
                        last = current
                    elif result is SendResult.TIMED_OUT:
                        self.log.debug("notification_send_timed_out", path=os.fspath(self._path))
                        continue
                    else:
                        return

                if self._stop.wait(self._poll_interval):
                    return
        finally:
            updates.close()
            self.log.info(
                "watcher_stopped",
                path=os.fspath(self._path),
                failed=self._error is not None,
            )

    def join(self, timeout: float | None = None) -> None:
        """Wait for the watcher thread to exit."""
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def error(self) -> Exception | None:
        """The metadata query failure that stopped the watcher, if any."""
        return self._error

    @property
    def is_running(self) -> bool:
        """Check if the watcher thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def path(self) -> str | Path:
        return self._path

    def __enter__(self) -> UpdateChannel:
        """Context manager entry; yields the update channel."""
        updates, _ = self.start()
        return updates

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.cancel()
        self.join(timeout=5.0)


class AsyncPollingFileWatcher(LoggerMixin):
    """
    Asyncio version of the polling watcher.

    Runs as a task instead of a thread. Metadata queries run in a worker
    thread; cancelling the task preempts the query, a pending send and the
    idle sleep alike.
    """

    def __init__(
        self,
        path: str | Path,
        fs: FileSystem | None = None,
        poll_interval_ms: int | None = None,
        refresh_interval_ms: int | None = None,
    ) -> None:
        settings = get_settings()

        self._path = path
        self._fs = fs or OsFileSystem()
        if poll_interval_ms is None:
            poll_interval_ms = settings.watcher.poll_interval_ms
        if refresh_interval_ms is None:
            refresh_interval_ms = settings.watcher.refresh_interval_ms
        self._poll_interval = poll_interval_ms / 1000.0
        self._refresh_interval = refresh_interval_ms / 1000.0

        self._error: Exception | None = None
        self._updates: AsyncUpdateChannel | None = None
        self._task: asyncio.Task[None] | None = None

    def start(self) -> tuple[AsyncUpdateChannel, Callable[[], None]]:
        """
        Start polling in a task on the running event loop.

        Returns:
            The update channel and an idempotent cancel function

        Raises:
            WatcherError: If this watcher was already started
        """
        if self._task is not None:
            raise WatcherError("watcher already started, create a new one")

        updates = AsyncUpdateChannel()
        self._updates = updates
        self._task = asyncio.get_running_loop().create_task(
            self._watch(updates),
            name=f"polling-watcher:{os.fspath(self._path)}",
        )
        # Closing from a done callback also covers a task cancelled before
        # its first step, which never runs the coroutine body.
        self._task.add_done_callback(self._on_done)

        self.log.info("watcher_started", path=os.fspath(self._path))
        return updates, self.cancel

    def cancel(self) -> None:
        """Stop watching. Safe to call any number of times."""
        if self._task is not None:
            self._task.cancel()

    async def _watch(self, updates: AsyncUpdateChannel) -> None:
        last: FileStat | None = None
        while True:
            try:
                current = await asyncio.to_thread(self._fs.stat, self._path)
            except Exception as e:
                self._error = e
                self.log.error(
                    "metadata_query_failed",
                    path=os.fspath(self._path),
                    error=str(e),
                )
                return

            if current != last:
                if await updates.send(self._refresh_interval):
                    last = current
                else:
                    self.log.debug("notification_send_timed_out", path=os.fspath(self._path))
                    continue

            await asyncio.sleep(self._poll_interval)

    def _on_done(self, task: asyncio.Task[None]) -> None:
        if not task.cancelled() and task.exception() is not None:
            # Only a cancelled watcher may report no error
            self._error = task.exception()
            self.log.error("watcher_crashed", path=os.fspath(self._path), error=str(self._error))
        if self._updates is not None:
            self._updates.close()
        self.log.info(
            "watcher_stopped",
            path=os.fspath(self._path),
            failed=self._error is not None,
        )

    async def join(self) -> None:
        """Wait until the watcher task has finished and its channel is closed."""
        if self._task is None:
            return
        await asyncio.wait({self._task})
        # Done callbacks run one loop iteration after completion
        while self._updates is not None and not self._updates.closed:
            await asyncio.sleep(0)

    @property
    def error(self) -> Exception | None:
        """The metadata query failure that stopped the watcher, if any."""
        return self._error

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def __aenter__(self) -> AsyncUpdateChannel:
        updates, _ = self.start()
        return updates

    async def __aexit__(self, *args: Any) -> None:
        self.cancel()
        await self.join()
