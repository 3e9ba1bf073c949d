# server/jobqueue.py
from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Optional

from ..errors import QueueClosed, QueueFullFailure
from .models import TranslationJob


class JobQueue:
    """
    Bounded FIFO shared by all producers and all workers.

    Producers never wait: enqueue either accepts the job right away or
    raises QueueFullFailure. Workers block in dequeue until a job arrives
    or the queue is closed.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"queue capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._items: Deque[TranslationJob] = deque()
        self._cond = threading.Condition()
        self._closed = False

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    @property
    def closed(self) -> bool:
        return self._closed

    def enqueue(self, job: TranslationJob) -> None:
        with self._cond:
            if self._closed:
                raise QueueClosed("job queue is closed")
            if len(self._items) >= self.capacity:
                raise QueueFullFailure(self.capacity)
            self._items.append(job)  # FIFO: push right
            self._cond.notify()

    def dequeue(self) -> Optional[TranslationJob]:
        """Next job, or None once the queue is closed and drained."""
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if self._items:
                return self._items.popleft()  # FIFO: pop left
            return None

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()
