# images.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

DEFAULT_IMAGE = "alpine:latest"

# (substring of the runs-on label, container image); first match wins
RUNS_ON_IMAGES: List[Tuple[str, str]] = [
    ("ubuntu-22.04", "ubuntu:22.04"),
    ("ubuntu-latest", "ubuntu:22.04"),
    ("ubuntu-20.04", "ubuntu:20.04"),
]


def map_image(label: str) -> str:
    """Map a GitHub `runs-on` label to a container image."""
    for needle, image in RUNS_ON_IMAGES:
        if needle in label:
            return image
    return DEFAULT_IMAGE


def image_for_job(runs_on: Optional[Sequence[str]]) -> str:
    """Only the first runs-on label is considered."""
    if not runs_on:
        return DEFAULT_IMAGE
    return map_image(runs_on[0])
