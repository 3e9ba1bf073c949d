# server/workers.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from ..errors import ConversionError
from .jobqueue import JobQueue
from .models import ConversionResult, TranslationJob
from .store import ResultStore

logger = logging.getLogger(__name__)

ConvertFn = Callable[[bytes], str]


def process_job(job: TranslationJob, convert: ConvertFn) -> ConversionResult:
    """
    Run one conversion and capture its outcome.

    Never raises: parse/build failures, and anything unexpected, become the
    job's error result.
    """
    try:
        output = convert(job.payload)
    except ConversionError as e:
        return ConversionResult(job_id=job.id, error=str(e))
    except Exception as e:
        logger.exception("Unexpected error converting job %s", job.id)
        return ConversionResult(job_id=job.id, error=f"{type(e).__name__}: {e}")
    return ConversionResult(job_id=job.id, output=output)


class WorkerPool:
    """Fixed number of threads draining a JobQueue into a ResultStore."""

    def __init__(
        self,
        queue: JobQueue,
        store: ResultStore,
        convert: ConvertFn,
        num_workers: int = 5,
        on_done: Optional[Callable[[ConversionResult], None]] = None,
    ):
        if num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {num_workers}")
        self.queue = queue
        self.store = store
        self.convert = convert
        self.num_workers = num_workers
        self.on_done = on_done
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._executor is not None

    def start(self) -> None:
        with self._lock:
            if self._executor is not None:
                return
            logger.info("Starting %d workers...", self.num_workers)
            self._executor = ThreadPoolExecutor(
                max_workers=self.num_workers,
                thread_name_prefix="gha2argo-worker",
            )
            self._futures = [
                self._executor.submit(self._worker_loop, worker_id)
                for worker_id in range(1, self.num_workers + 1)
            ]

    def stop(self, wait: bool = True) -> None:
        """Close the queue; workers finish what is queued and exit."""
        with self._lock:
            executor, self._executor = self._executor, None
        self.queue.close()
        if executor is not None:
            executor.shutdown(wait=wait)

    def _worker_loop(self, worker_id: int) -> None:
        logger.info("Worker %d started", worker_id)
        while True:
            job = self.queue.dequeue()
            if job is None:
                break
            logger.info("Worker %d processing job %s", worker_id, job.id)
            result = process_job(job, self.convert)
            if result.ok:
                logger.info("Worker %d completed job %s", worker_id, job.id)
            else:
                logger.warning("Worker %d failed job %s: %s", worker_id, job.id, result.error)
            self._deliver(job, result)
        logger.info("Worker %d stopped", worker_id)

    def _deliver(self, job: TranslationJob, result: ConversionResult) -> None:
        try:
            self.store.put(job.id, result)
        except Exception:
            # the loop keeps running and a sync caller still gets its reply
            logger.exception("Failed to store result for job %s", job.id)
        if self.on_done is not None:
            self.on_done(result)
        if job.reply is not None:
            job.reply.put(result)
