"""Bounded multi-producer, single-consumer channel for scan results.

Aggregation tasks send completed results; the report stage receives them.
The channel is built on asyncio.Queue, so a full channel suspends senders
and an empty one suspends the receiver without busy-waiting. Closing the
channel shuts the queue down: buffered results are still delivered, after
which the receiver sees end-of-stream instead of blocking forever.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Final

from disk_scan.types.models import ScanResult

DEFAULT_CHANNEL_CAPACITY: Final[int] = 16


class ChannelClosedError(Exception):
    """Raised when sending on, or receiving from, a closed and drained channel."""


class ResultChannel:
    """Bounded FIFO conduit from aggregation tasks to the report writer.

    Close the channel only after every producer has finished; results sent
    before close() are never lost.
    """

    def __init__(self, capacity: int = DEFAULT_CHANNEL_CAPACITY) -> None:
        """Initialize the channel.

        Args:
            capacity: Maximum number of buffered results (must be positive)

        Raises:
            ValueError: If capacity is not positive
        """
        if capacity <= 0:
            msg = "capacity must be greater than zero"
            raise ValueError(msg)

        self.capacity: int = capacity
        self._queue: asyncio.Queue[ScanResult] = asyncio.Queue(maxsize=capacity)
        self._closed: bool = False

    @property
    def closed(self) -> bool:
        """Whether the producer side has been closed."""
        return self._closed

    def qsize(self) -> int:
        """Number of results currently buffered."""
        return self._queue.qsize()

    async def send(self, result: ScanResult) -> None:
        """Send a result, suspending while the channel is full.

        Args:
            result: Completed scan result

        Raises:
            ChannelClosedError: If the channel has been closed
        """
        try:
            await self._queue.put(result)
        except asyncio.QueueShutDown as exc:
            msg = "cannot send on a closed result channel"
            raise ChannelClosedError(msg) from exc

    async def receive(self) -> ScanResult:
        """Receive the next result, suspending while the channel is empty.

        Returns:
            Next buffered result in FIFO order

        Raises:
            ChannelClosedError: If the channel is closed and fully drained
        """
        try:
            result = await self._queue.get()
        except asyncio.QueueShutDown as exc:
            msg = "result channel is closed and drained"
            raise ChannelClosedError(msg) from exc

        self._queue.task_done()
        return result

    def close(self) -> None:
        """Close the producer side and signal end-of-stream to the receiver."""
        if self._closed:
            return
        self._closed = True
        self._queue.shutdown(immediate=False)

    async def __aiter__(self) -> AsyncIterator[ScanResult]:
        """Iterate over results until the channel is closed and drained."""
        while True:
            try:
                yield await self.receive()
            except ChannelClosedError:
                return
