"""Tests for the HTTP API (server/app.py)."""

import time

import pytest
import yaml
from fastapi.testclient import TestClient

from gha2argo.server.app import create_app
from gha2argo.server.service import ConversionService


@pytest.fixture
def client(service):
    with TestClient(create_app(service)) as c:
        yield c


@pytest.fixture
def stalled_client():
    """Service whose workers never start, with room for one job."""
    svc = ConversionService(num_workers=1, max_queue=1)
    svc.submit(b"jobs:\n  a: {}\n")
    yield TestClient(create_app(svc))
    svc.stop()


def poll(client, url, timeout=5.0):
    deadline = time.monotonic() + timeout
    while True:
        resp = client.get(url)
        if resp.status_code != 404 or time.monotonic() > deadline:
            return resp
        time.sleep(0.02)


class TestSyncEndpoint:
    """POST /api/v1/convert"""

    def test_success(self, client, ci_workflow):
        resp = client.post("/api/v1/convert", content=ci_workflow)

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/x-yaml")
        manifest = yaml.safe_load(resp.text)
        assert manifest["spec"]["entrypoint"] == "main-dag"

    def test_translation_failure(self, client):
        resp = client.post("/api/v1/convert", content=b"jobs: [")

        assert resp.status_code == 500
        assert resp.json()["detail"].startswith("Failed to process job:")

    def test_empty_body(self, client):
        resp = client.post("/api/v1/convert", content=b"")
        assert resp.status_code == 400

    def test_wrong_method(self, client):
        assert client.get("/api/v1/convert").status_code == 405

    def test_queue_full(self, stalled_client, ci_workflow):
        resp = stalled_client.post("/api/v1/convert", content=ci_workflow)
        assert resp.status_code == 503


class TestAsyncEndpoints:
    """POST /convert and GET /result/{jobID}"""

    def test_submit_and_poll(self, client, ci_workflow):
        resp = client.post("/convert", content=ci_workflow)

        assert resp.status_code == 202
        body = resp.json()
        assert body["status"] == "processing"
        assert body["resultURL"] == f"/result/{body['jobID']}"

        result = poll(client, body["resultURL"])
        assert result.status_code == 200
        assert yaml.safe_load(result.text)["kind"] == "Workflow"

    def test_failed_job(self, client):
        job_id = client.post("/convert", content=b"- not a workflow\n").json()["jobID"]

        result = poll(client, f"/result/{job_id}")
        assert result.status_code == 500
        assert "Failed to process job" in result.json()["detail"]

    def test_unknown_job(self, client):
        resp = client.get("/result/does-not-exist")

        assert resp.status_code == 404
        assert resp.json()["status"] == "not_found"
        assert "does-not-exist" in resp.json()["message"]

    def test_still_processing(self, stalled_client):
        svc = stalled_client.app.state.service
        job_id = next(iter(svc._pending))

        resp = stalled_client.get(f"/result/{job_id}")
        assert resp.status_code == 404
        assert resp.json()["status"] == "processing"

    def test_queue_full(self, stalled_client, ci_workflow):
        resp = stalled_client.post("/convert", content=ci_workflow)
        assert resp.status_code == 503

    def test_empty_body(self, client):
        assert client.post("/convert", content=b"").status_code == 400

    def test_wrong_methods(self, client):
        assert client.get("/convert").status_code == 405
        assert client.post("/result/abc").status_code == 405


class TestShutdown:
    """Submissions after the service stopped."""

    def test_rejected_with_503(self, ci_workflow):
        svc = ConversionService(num_workers=1, max_queue=2)
        svc.stop()
        client = TestClient(create_app(svc))

        assert client.post("/convert", content=ci_workflow).status_code == 503
        resp = client.post("/api/v1/convert", content=ci_workflow)
        assert resp.status_code == 503
        assert resp.json()["detail"] == "Server is shutting down"
        assert svc._pending == set()


class TestHealth:
    def test_healthz(self, client):
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "queued": 0, "workers": 2}
