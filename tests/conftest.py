"""Shared fixtures for gha2argo tests."""

import pytest

from gha2argo.server.service import ConversionService

CI_WORKFLOW = b"""
name: CI
on: [push, pull_request]
jobs:
  test:
    runs-on: ubuntu-latest
    steps:
      - name: Run tests
        run: go test ./...

  build:
    needs: test
    runs-on: ubuntu-latest
    steps:
      - name: Build
        run: go build -o app ./cmd
"""

SINGLE_JOB_WORKFLOW = b"""
name: Lint
on: push
jobs:
  Lint Code:
    runs-on: ubuntu-20.04
    steps:
      - uses: actions/checkout@v4
      - name: Ruff
        run: ruff check .
"""


@pytest.fixture
def ci_workflow():
    return CI_WORKFLOW


@pytest.fixture
def single_job_workflow():
    return SINGLE_JOB_WORKFLOW


@pytest.fixture
def service():
    """Running service with a small pool and queue."""
    svc = ConversionService(num_workers=2, max_queue=10)
    svc.start()
    yield svc
    svc.stop()
