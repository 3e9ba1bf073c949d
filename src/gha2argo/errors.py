# errors.py
from __future__ import annotations

from dataclasses import dataclass


class ConversionError(Exception):
    """Base class for every failure the converter reports to a caller."""
    pass


class ParseFailure(ConversionError):
    """Source workflow is not valid YAML or not a usable workflow."""
    pass


class BuildFailure(ConversionError):
    """Target document could not be assembled or serialized."""
    pass


@dataclass
class QueueFullFailure(ConversionError):
    capacity: int

    def __str__(self) -> str:
        return f"Server busy, queue is full (capacity={self.capacity})"


@dataclass
class UnknownJobFailure(ConversionError):
    job_id: str

    def __str__(self) -> str:
        return f"Job not found or still processing: {self.job_id}"


class EmptyBodyFailure(ConversionError):
    def __str__(self) -> str:
        return "Request body is empty"


class QueueClosed(Exception):
    """Raised by enqueue once the queue has been shut down."""
    pass
