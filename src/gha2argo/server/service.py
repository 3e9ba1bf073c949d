# server/service.py
from __future__ import annotations

import logging
import queue
import threading
from typing import Optional, Set

from ..errors import EmptyBodyFailure, QueueFullFailure, UnknownJobFailure
from ..translator import convert_document
from . import settings
from .jobqueue import JobQueue
from .models import ConversionResult, TranslationJob
from .store import MemoryResultStore, RedisResultStore, ResultStore
from .workers import ConvertFn, WorkerPool

logger = logging.getLogger(__name__)

STATUS_PROCESSING = "processing"
STATUS_DONE = "done"
STATUS_NOT_FOUND = "not_found"


class ConversionService:
    """
    Owns the job queue, the worker pool and the result store.

    Built once at startup and handed to the HTTP layer, which only calls
    convert (synchronous), submit / result / status (asynchronous).
    """

    def __init__(
        self,
        *,
        num_workers: int = settings.NUM_WORKERS,
        max_queue: int = settings.MAX_QUEUE,
        store: Optional[ResultStore] = None,
        convert: ConvertFn = convert_document,
    ):
        self.queue = JobQueue(max_queue)
        self.store: ResultStore = store if store is not None else MemoryResultStore()
        self.pool = WorkerPool(
            self.queue,
            self.store,
            convert,
            num_workers=num_workers,
            on_done=self._job_done,
        )
        # ids accepted by submit() whose result has not been stored yet
        self._pending: Set[str] = set()
        self._pending_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        num_workers: Optional[int] = None,
        max_queue: Optional[int] = None,
    ) -> ConversionService:
        """Build from environment settings; explicit arguments win."""
        store: Optional[ResultStore] = None
        if settings.RESULT_BACKEND == "redis":
            store = RedisResultStore.from_url(settings.REDIS_URL, prefix=settings.RESULT_KEY_PREFIX)
        elif settings.RESULT_BACKEND != "memory":
            raise ValueError(f"Unknown RESULT_BACKEND: {settings.RESULT_BACKEND!r} (memory|redis)")
        return cls(
            num_workers=num_workers or settings.NUM_WORKERS,
            max_queue=max_queue or settings.MAX_QUEUE,
            store=store,
        )

    # -------------------- lifecycle --------------------

    def start(self) -> None:
        self.pool.start()

    def stop(self, wait: bool = True) -> None:
        self.pool.stop(wait=wait)

    def __enter__(self) -> ConversionService:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # -------------------- submission --------------------

    def _enqueue(self, job: TranslationJob) -> None:
        if not job.payload:
            raise EmptyBodyFailure()
        try:
            self.queue.enqueue(job)
        except QueueFullFailure:
            logger.warning("Queue full (capacity=%d), rejecting job", self.queue.capacity)
            raise

    def submit(self, payload: bytes) -> str:
        """
        Asynchronous mode: queue the payload and return its job id.

        Raises:
            EmptyBodyFailure: payload is empty
            QueueFullFailure: no room in the queue; no job was created
        """
        job = TranslationJob(payload=payload)
        with self._pending_lock:
            self._pending.add(job.id)
        try:
            self._enqueue(job)
        except Exception:
            with self._pending_lock:
                self._pending.discard(job.id)
            raise
        logger.info("Queued job %s", job.id)
        return job.id

    def convert(self, payload: bytes) -> ConversionResult:
        """
        Synchronous mode: queue the payload and block until a worker answers
        on this job's private reply channel.
        """
        reply: "queue.Queue[ConversionResult]" = queue.Queue(maxsize=1)
        job = TranslationJob(payload=payload, reply=reply)
        self._enqueue(job)
        logger.info("Queued job %s, waiting for result", job.id)
        return reply.get()

    # -------------------- polling --------------------

    def result(self, job_id: str) -> Optional[ConversionResult]:
        """Stored result, or None while processing and for unknown ids alike."""
        return self.store.get(job_id)

    def require_result(self, job_id: str) -> ConversionResult:
        res = self.result(job_id)
        if res is None:
            raise UnknownJobFailure(job_id)
        return res

    def status(self, job_id: str) -> str:
        # workers store the result before clearing the pending id
        with self._pending_lock:
            in_flight = job_id in self._pending
        if self.store.get(job_id) is not None:
            return STATUS_DONE
        if in_flight:
            return STATUS_PROCESSING
        return STATUS_NOT_FOUND

    def queued(self) -> int:
        return len(self.queue)

    def _job_done(self, result: ConversionResult) -> None:
        with self._pending_lock:
            self._pending.discard(result.job_id)
