"""Detached execution of side effects (notification fan-out, email).

Work submitted here runs after the request that produced it has returned.
Every job runs inside an error boundary: exceptions are logged with the
job's label and discarded, so a failing side effect can never reach the
request that triggered it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from agora_stage.core.settings import settings

logger = logging.getLogger(__name__)

Job = Callable[[], None]


class BackgroundDispatcher(Protocol):
    """Anything that can run a job later without the caller awaiting it."""

    def submit(self, job: Job, *, label: str) -> None:
        """Schedule ``job``; must never raise."""


def run_guarded(job: Job, label: str) -> None:
    """Run ``job``, logging and swallowing anything it raises."""
    try:
        job()
    except Exception:  # noqa: BLE001 - detached work must not propagate
        logger.exception("Background job %s failed", label)


class InlineDispatcher:
    """Runs jobs immediately on the calling thread, inside the error boundary.

    Used by tests and one-off scripts where no event loop is running.
    """

    def submit(self, job: Job, *, label: str) -> None:
        run_guarded(job, label)


@dataclass
class _QueuedJob:
    job: Job
    label: str


class NotificationWorker:
    """Consumes submitted jobs from an asyncio queue in the background.

    Jobs run one at a time in a worker thread (database and HTTP calls are
    blocking). ``submit`` is safe to call from any thread; jobs submitted
    while the worker is stopped run inline so they are not silently lost.
    """

    def __init__(self, max_queue_size: int | None = None) -> None:
        self._max_queue_size = (
            settings.fanout_queue_size if max_queue_size is None else max_queue_size
        )
        self._queue: asyncio.Queue[_QueuedJob] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background consumer on the running event loop."""
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._task = asyncio.create_task(self._run(self._queue))

    async def stop(self, timeout: float | None = None) -> None:
        """Drain pending jobs (up to ``timeout`` seconds) and stop the consumer."""
        if self._task is None or self._queue is None:
            return

        drain_timeout = settings.fanout_drain_timeout_seconds if timeout is None else timeout
        # Let enqueue callbacks already scheduled by submit() land in the queue.
        await asyncio.sleep(0)
        try:
            await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
        except TimeoutError:
            logger.warning(
                "NotificationWorker stopped with %d job(s) still queued",
                self._queue.qsize(),
            )

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._queue = None
        self._loop = None

    def submit(self, job: Job, *, label: str) -> None:
        loop = self._loop
        if not self.running or loop is None or loop.is_closed():
            logger.warning("NotificationWorker is not running; running %s inline", label)
            run_guarded(job, label)
            return

        try:
            loop.call_soon_threadsafe(self._enqueue, _QueuedJob(job, label))
        except RuntimeError:
            # Loop closed between the check and the call.
            logger.exception("Could not schedule background job %s", label)

    def _enqueue(self, item: _QueuedJob) -> None:
        if self._queue is None:
            logger.error("Dropping background job %s: worker stopped", item.label)
            return
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            logger.error("Dropping background job %s: queue is full", item.label)

    async def _run(self, queue: asyncio.Queue[_QueuedJob]) -> None:
        while True:
            item = await queue.get()
            try:
                await asyncio.to_thread(run_guarded, item.job, item.label)
            finally:
                queue.task_done()


class _DispatcherSingleton:
    """Process-wide dispatcher, replaced at startup by the running worker."""

    _instance: BackgroundDispatcher | None = None

    @classmethod
    def get_instance(cls) -> BackgroundDispatcher:
        if cls._instance is None:
            cls._instance = InlineDispatcher()
        return cls._instance

    @classmethod
    def set_instance(cls, dispatcher: BackgroundDispatcher | None) -> None:
        cls._instance = dispatcher


def get_dispatcher() -> BackgroundDispatcher:
    """Return the dispatcher services should submit detached work to."""
    return _DispatcherSingleton.get_instance()


def set_dispatcher(dispatcher: BackgroundDispatcher | None) -> None:
    """Install ``dispatcher`` process-wide (None resets to inline)."""
    _DispatcherSingleton.set_instance(dispatcher)
