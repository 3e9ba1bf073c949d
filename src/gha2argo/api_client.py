# api_client.py
from __future__ import annotations

import json
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin


class APIError(Exception):
    """Raised when a request to the conversion service fails."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


@dataclass
class PollResult:
    """Outcome of one poll of /result/{job_id}."""
    status: str  # done | processing | not_found
    output: str = ""


class ConverterClient:
    """HTTP client for a running gha2argo service."""

    def __init__(self, base_url: str, timeout: float = 300.0):
        """
        Initialize API client.

        Args:
            base_url: Base URL of the service (e.g., "http://localhost:8080")
            timeout: Socket timeout in seconds for each request
        """
        # Ensure base_url doesn't end with /
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return urljoin(self.base_url + "/", path.lstrip("/"))

    def _open(self, method: str, path: str, body: Optional[bytes] = None) -> tuple[int, bytes]:
        req = urllib.request.Request(
            self._url(path),
            data=body,
            headers={"Content-Type": "application/x-yaml"},
            method=method,
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                return response.status, response.read()
        except urllib.error.HTTPError as e:
            error_body = e.read() if e.fp else b""
            return e.code, error_body
        except urllib.error.URLError as e:
            raise APIError(f"Network error: {e.reason}")

    @staticmethod
    def _error(status: int, body: bytes) -> APIError:
        detail = body.decode("utf-8", errors="replace")
        try:
            detail = json.loads(detail).get("detail", detail)
        except (json.JSONDecodeError, AttributeError):
            pass
        return APIError(f"API request failed: {status}. {detail}", status=status)

    def convert(self, workflow: bytes) -> str:
        """Synchronous conversion; returns the Argo YAML."""
        status, body = self._open("POST", "/api/v1/convert", workflow)
        if status != 200:
            raise self._error(status, body)
        return body.decode("utf-8")

    def submit(self, workflow: bytes) -> str:
        """Queue a conversion; returns the job id."""
        status, body = self._open("POST", "/convert", workflow)
        if status != 202:
            raise self._error(status, body)
        try:
            return json.loads(body)["jobID"]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise APIError(f"Invalid JSON response: {e}")

    def poll(self, job_id: str) -> PollResult:
        status, body = self._open("GET", f"/result/{job_id}")
        if status == 200:
            return PollResult(status="done", output=body.decode("utf-8"))
        if status == 404:
            try:
                state = json.loads(body).get("status", "not_found")
            except (json.JSONDecodeError, AttributeError):
                state = "not_found"
            return PollResult(status=state)
        raise self._error(status, body)

    def wait(self, job_id: str, poll_interval: float = 1.0, max_polls: Optional[int] = None) -> str:
        """
        Poll until the job has a result.

        A 404 "not_found" is treated like "processing": the service only
        knows a job as pending in the process that accepted it.
        """
        polls = 0
        while True:
            res = self.poll(job_id)
            if res.status == "done":
                return res.output
            polls += 1
            if max_polls is not None and polls >= max_polls:
                raise APIError(f"Job {job_id} has no result after {polls} polls")
            time.sleep(poll_interval)
