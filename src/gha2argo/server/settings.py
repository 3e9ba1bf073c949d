from __future__ import annotations
import os

NUM_WORKERS = int(os.environ.get("NUM_WORKERS", "5"))
MAX_QUEUE = int(os.environ.get("MAX_QUEUE", "100"))

# "memory" keeps results in-process; "redis" shares them through REDIS_URL
RESULT_BACKEND = os.environ.get("RESULT_BACKEND", "memory")
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
RESULT_KEY_PREFIX = os.environ.get("RESULT_KEY_PREFIX", "gha2argo:result")
