"""Size and time triggered batching of recorded items."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BatcherClosedError(RuntimeError):
    """Raised when adding to a batcher that was drained for shutdown."""


@dataclass
class BatchItem(Generic[T]):
    """An item handed to the flush callback."""

    data: T
    delta_ms: float  # time spent in the buffer before the flush


@dataclass
class _Pending(Generic[T]):
    data: T
    added_at: float
    future: asyncio.Future[None]


class Batcher(Generic[T]):
    """Collects items and hands them to ``on_flush`` in batches.

    A batch is flushed as soon as it holds ``max_items`` items, or
    ``max_elapsed_ms`` after the first item entered an empty buffer,
    whichever comes first.  The future returned by ``add`` resolves once the
    item's batch went through ``on_flush``, or fails with the flush error.
    Failed batches are dropped.
    """

    def __init__(
        self,
        on_flush: Callable[[list[BatchItem[T]]], Awaitable[None]],
        *,
        max_items: int = 25,
        max_elapsed_ms: float = 5_000,
    ):
        if max_items < 1:
            raise ValueError(f"max_items must be at least 1, received {max_items}")
        if max_elapsed_ms < 0:
            raise ValueError(f"max_elapsed_ms must not be negative, received {max_elapsed_ms}")

        self.on_flush = on_flush
        self.max_items = max_items
        self.max_elapsed_ms = max_elapsed_ms

        self._buffer: list[_Pending[T]] = []
        self._timer: asyncio.TimerHandle | None = None
        self._flushes: set[asyncio.Task[None]] = set()
        self._closed = False
        self._stats = {
            "batches_sent": 0,
            "items_sent": 0,
            "flush_errors": 0,
        }

    def add(self, data: T) -> asyncio.Future[None]:
        """Buffer an item; must be called from a running event loop."""
        if self._closed:
            raise BatcherClosedError("Batcher is closed")

        loop = asyncio.get_running_loop()
        pending = _Pending(data=data, added_at=time.monotonic(), future=loop.create_future())
        self._buffer.append(pending)

        if len(self._buffer) >= self.max_items:
            self._schedule_flush()
        elif self._timer is None:
            logger.debug(f"Arming flush timer ({self.max_elapsed_ms}ms)")
            self._timer = loop.call_later(self.max_elapsed_ms / 1000, self._schedule_flush)

        return pending.future

    def _schedule_flush(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        batch, self._buffer = self._buffer, []
        if not batch:
            return

        task = asyncio.get_running_loop().create_task(self._flush(batch))
        self._flushes.add(task)
        task.add_done_callback(self._flushes.discard)

    async def _flush(self, batch: list[_Pending[T]]) -> None:
        now = time.monotonic()
        items = [BatchItem(data=p.data, delta_ms=(now - p.added_at) * 1000) for p in batch]

        try:
            await self.on_flush(items)
        except Exception as e:
            self._stats["flush_errors"] += 1
            for pending in batch:
                if not pending.future.done():
                    pending.future.set_exception(e)
            return

        self._stats["batches_sent"] += 1
        self._stats["items_sent"] += len(batch)
        for pending in batch:
            if not pending.future.done():
                pending.future.set_result(None)

    async def wait_for_all(self) -> None:
        """Flush whatever is buffered, wait for running flushes, then close."""
        self._closed = True
        logger.debug(f"Draining batcher ({len(self._buffer)} buffered)")
        self._schedule_flush()
        if self._flushes:
            await asyncio.gather(*self._flushes)
        logger.info(f"Batcher closed. Stats: {self.stats}")

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    @property
    def stats(self) -> dict[str, int]:
        return {**self._stats, "buffer_size": self.buffer_size}
