# argo_client.py
from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Any, Dict, Optional, Protocol
from urllib.parse import urljoin


class SubmitError(Exception):
    """Raised when the Argo Server rejects or cannot receive a workflow."""
    pass


class DocumentSubmitter(Protocol):
    def submit(self, document: Dict[str, Any]) -> str: ...


class ArgoClient:
    """
    Hands translated workflows to an Argo Server.

    Only creation is supported; what happens to the workflow afterwards is
    up to Argo.
    """

    def __init__(
        self,
        base_url: str,
        namespace: str = "argo",
        token: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            base_url: Argo Server URL (e.g., "https://localhost:2746")
            namespace: Namespace to create workflows in
            token: Bearer token (`argo auth token`), if the server needs one
            timeout: Socket timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.namespace = namespace
        self.token = token
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            token = self.token
            if not token.lower().startswith("bearer "):
                token = f"Bearer {token}"
            headers["Authorization"] = token
        return headers

    def submit(self, document: Dict[str, Any]) -> str:
        """
        Create a workflow from a translated document.

        Returns:
            Name Argo assigned to the workflow (generateName + suffix)

        Raises:
            SubmitError: If the request fails
        """
        url = urljoin(self.base_url + "/", f"api/v1/workflows/{self.namespace}")
        data = json.dumps({"workflow": document}).encode("utf-8")
        req = urllib.request.Request(url, data=data, headers=self._headers(), method="POST")

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                created = json.loads(response.read().decode("utf-8") or "{}")
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8") if e.fp else ""
            raise SubmitError(f"Argo Server rejected workflow: {e.code} {e.reason}. {error_body}")
        except urllib.error.URLError as e:
            raise SubmitError(f"Network error: {e.reason}")
        except json.JSONDecodeError as e:
            raise SubmitError(f"Invalid JSON response: {e}")

        name = (created.get("metadata") or {}).get("name")
        if not name:
            raise SubmitError("Argo Server response has no metadata.name")
        return name
