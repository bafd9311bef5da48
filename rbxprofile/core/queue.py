"""Batching request queue that throttles aggregation work."""

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from rbxprofile.exceptions import ConfigError
from rbxprofile.logging import get_logger

Job = Callable[[], Awaitable[Any]]


@dataclass
class QueueJob:
    """A submitted job and the future its caller is waiting on."""

    job: Job
    future: asyncio.Future


class RequestQueue:
    """
    FIFO queue that runs jobs in fixed-size batches with a pause in between.

    At most one batch is in flight at a time. The worker starts when work
    arrives and stops once the queue is drained.

    Example:
        queue = RequestQueue(batch_size=3, batch_delay_ms=1200)
        profile = await queue.submit(lambda: aggregate("builderman"))
    """

    def __init__(self, batch_size: int = 3, batch_delay_ms: int = 1200):
        if batch_size < 1:
            raise ConfigError(f"batch_size must be at least 1, got {batch_size}")
        if batch_delay_ms < 0:
            raise ConfigError(f"batch_delay_ms must not be negative, got {batch_delay_ms}")

        self.batch_size = batch_size
        self.batch_delay_ms = batch_delay_ms
        self.batches_processed = 0
        self._jobs: deque[QueueJob] = deque()
        self._worker: asyncio.Task | None = None
        self._closed = False
        self._log = get_logger("queue")

    @property
    def pending(self) -> int:
        """Jobs waiting for a batch slot."""
        return len(self._jobs)

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def submit(self, job: Job) -> asyncio.Future:
        """
        Enqueue a job.

        Args:
            job: Zero-argument callable returning an awaitable

        Returns:
            Future resolved with the job's result or exception
        """
        if self._closed:
            raise RuntimeError("RequestQueue is closed")

        future = asyncio.get_running_loop().create_future()
        self._jobs.append(QueueJob(job, future))

        if not self.running:
            self._worker = asyncio.create_task(self._process())
        return future

    async def _process(self) -> None:
        while self._jobs:
            batch = [self._jobs.popleft() for _ in range(min(self.batch_size, len(self._jobs)))]

            try:
                outcomes = await asyncio.gather(
                    *(self._execute(item) for item in batch),
                    return_exceptions=True,
                )
            except asyncio.CancelledError:
                for item in batch:
                    item.future.cancel()
                raise

            # Count the batch before waking its callers.
            self.batches_processed += 1
            for item, outcome in zip(batch, outcomes):
                _settle(item.future, outcome)

            self._log.debug(
                "batch_complete",
                batch_size=len(batch),
                pending=len(self._jobs),
                batches_processed=self.batches_processed,
            )

            if self._jobs and self.batch_delay_ms > 0:
                await asyncio.sleep(self.batch_delay_ms / 1000)

    async def _execute(self, item: QueueJob) -> Any:
        return await item.job()

    async def close(self) -> None:
        """Stop the worker and cancel jobs that never started."""
        self._closed = True
        while self._jobs:
            item = self._jobs.popleft()
            item.future.cancel()

        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None


def _settle(future: asyncio.Future, outcome: Any) -> None:
    if future.done():
        return
    if isinstance(outcome, asyncio.CancelledError):
        future.cancel()
    elif isinstance(outcome, BaseException):
        future.set_exception(outcome)
    else:
        future.set_result(outcome)
