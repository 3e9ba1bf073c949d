"""Tests for parser.py module."""

import pytest

from gha2argo.errors import ParseFailure
from gha2argo.parser import parse_workflow


class TestParseWorkflow:
    """Test GitHub Actions YAML normalization."""

    def test_parses_jobs_in_document_order(self, ci_workflow):
        wf = parse_workflow(ci_workflow)

        assert wf.name == "CI"
        assert list(wf.jobs) == ["test", "build"]
        assert wf.jobs["build"].needs == ["test"]
        assert wf.jobs["test"].needs == []
        assert wf.jobs["test"].runs_on == ["ubuntu-latest"]

    def test_steps(self, single_job_workflow):
        wf = parse_workflow(single_job_workflow)
        steps = wf.jobs["Lint Code"].steps

        assert len(steps) == 2
        assert steps[0].uses == "actions/checkout@v4"
        assert steps[0].name is None
        assert steps[1].name == "Ruff"
        assert steps[1].run == "ruff check ."

    def test_accepts_str_input(self):
        wf = parse_workflow("jobs:\n  a:\n    steps: []\n")
        assert list(wf.jobs) == ["a"]
        assert wf.name == ""

    def test_needs_and_runs_on_lists(self):
        wf = parse_workflow(
            b"""
jobs:
  deploy:
    needs: [build, test]
    runs-on: [self-hosted, linux]
    steps:
      - uses: actions/setup-go@v5
        with:
          go-version: '1.22'
"""
        )
        job = wf.jobs["deploy"]
        assert job.needs == ["build", "test"]
        assert job.runs_on == ["self-hosted", "linux"]
        assert job.steps[0].with_ == {"go-version": "1.22"}

    def test_runs_on_group_labels(self):
        wf = parse_workflow(
            b"""
jobs:
  a:
    runs-on:
      group: large
      labels: ubuntu-22.04
"""
        )
        assert wf.jobs["a"].runs_on == ["ubuntu-22.04"]

    def test_step_without_run_or_uses_is_kept_as_skipped(self):
        wf = parse_workflow(b"jobs:\n  a:\n    steps:\n      - name: nothing\n")
        assert wf.jobs["a"].steps[0].skipped is True

    @pytest.mark.parametrize(
        "payload",
        [
            b"jobs: [unclosed",
            b"- just\n- a list\n",
            b"name: no jobs\n",
            b"jobs: {}\n",
            b"jobs:\n  a: hello\n",
            b"jobs:\n  a:\n    steps: run\n",
            b"jobs:\n  a:\n    steps:\n      - run\n",
            b"jobs:\n  a:\n    needs: {x: 1}\n",
            b"jobs:\n  a:\n    steps:\n      - uses: x\n        with: [1]\n",
            b"\xff\xfe\x00",
        ],
    )
    def test_malformed_documents(self, payload):
        with pytest.raises(ParseFailure):
            parse_workflow(payload)

    def test_yaml_error_mentions_position(self):
        with pytest.raises(ParseFailure, match="line"):
            parse_workflow(b"jobs:\n  a:\n    steps: [\n")
