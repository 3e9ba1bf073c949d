# server/models.py
from __future__ import annotations

import queue
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


def new_job_id() -> str:
    return str(uuid.uuid4())


@dataclass
class TranslationJob:
    """One conversion request waiting in (or taken from) the job queue."""
    payload: bytes
    id: str = field(default_factory=new_job_id)
    # set only for synchronous submissions; receives exactly one result
    reply: Optional["queue.Queue[ConversionResult]"] = field(default=None, repr=False)


@dataclass(frozen=True)
class ConversionResult:
    """Terminal outcome of a TranslationJob (Argo YAML or an error message)."""
    job_id: str
    output: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {"job_id": self.job_id, "output": self.output, "error": self.error}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ConversionResult:
        return cls(
            job_id=data["job_id"],
            output=data.get("output", ""),
            error=data.get("error"),
        )
