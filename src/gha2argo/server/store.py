# server/store.py
from __future__ import annotations

import json
import threading
from typing import Dict, Optional, Protocol

import redis

from .models import ConversionResult


class DuplicateResult(Exception):
    """A job id was written twice; every job has exactly one result."""
    pass


class ResultStore(Protocol):
    def put(self, job_id: str, result: ConversionResult) -> None: ...

    def get(self, job_id: str) -> Optional[ConversionResult]: ...


class MemoryResultStore:
    """Thread-safe in-process store. Results are kept for the process lifetime."""

    def __init__(self) -> None:
        self._results: Dict[str, ConversionResult] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def put(self, job_id: str, result: ConversionResult) -> None:
        with self._lock:
            if job_id in self._results:
                raise DuplicateResult(job_id)
            self._results[job_id] = result

    def get(self, job_id: str) -> Optional[ConversionResult]:
        with self._lock:
            return self._results.get(job_id)


def result_key(prefix: str, job_id: str) -> str:
    return f"{prefix}:{job_id}"


class RedisResultStore:
    """
    Results shared through Redis, so several API processes can answer polls.

    Writes use SET NX: the first result for a job id wins.
    """

    def __init__(self, client: redis.Redis, prefix: str = "gha2argo:result"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "gha2argo:result") -> RedisResultStore:
        return cls(redis.from_url(url, decode_responses=True), prefix=prefix)

    def put(self, job_id: str, result: ConversionResult) -> None:
        stored = self.client.set(
            result_key(self.prefix, job_id),
            json.dumps(result.to_dict()),
            nx=True,
        )
        if not stored:
            raise DuplicateResult(job_id)

    def get(self, job_id: str) -> Optional[ConversionResult]:
        raw = self.client.get(result_key(self.prefix, job_id))
        if raw is None:
            return None
        return ConversionResult.from_dict(json.loads(raw))
