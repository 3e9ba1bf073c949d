"""Tests for cli.py module."""

from unittest.mock import MagicMock, patch

import yaml
from click.testing import CliRunner

from gha2argo.api_client import APIError
from gha2argo.cli import cli


class TestConvertCommand:
    """gha2argo convert"""

    def test_prints_yaml(self, tmp_path, ci_workflow):
        wf = tmp_path / "ci.yml"
        wf.write_bytes(ci_workflow)

        result = CliRunner().invoke(cli, ["convert", str(wf)])

        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)["spec"]["entrypoint"] == "main-dag"

    def test_writes_output_file(self, tmp_path, single_job_workflow):
        wf = tmp_path / "lint.yml"
        wf.write_bytes(single_job_workflow)
        out = tmp_path / "argo.yaml"

        result = CliRunner().invoke(cli, ["convert", str(wf), "-o", str(out), "--summary"])

        assert result.exit_code == 0
        assert yaml.safe_load(out.read_text())["spec"]["entrypoint"] == "lint-code"

    def test_reads_stdin(self, ci_workflow):
        result = CliRunner().invoke(cli, ["convert", "-"], input=ci_workflow)
        assert result.exit_code == 0
        assert "main-dag" in result.stdout

    def test_missing_file(self, tmp_path):
        result = CliRunner().invoke(cli, ["convert", str(tmp_path / "nope.yml")])
        assert result.exit_code == 1

    def test_parse_error(self, tmp_path):
        wf = tmp_path / "bad.yml"
        wf.write_text("jobs: [")

        result = CliRunner().invoke(cli, ["convert", str(wf)])
        assert result.exit_code == 1
        assert "Traceback" not in result.output

    def test_debug_prints_traceback(self, tmp_path):
        wf = tmp_path / "bad.yml"
        wf.write_text("jobs: [")

        result = CliRunner().invoke(cli, ["--debug", "convert", str(wf)])

        assert result.exit_code == 1
        assert "Traceback" in result.output
        assert "ParseFailure" in result.output

    def test_debug_shows_submit_url(self, tmp_path, ci_workflow):
        wf = tmp_path / "ci.yml"
        wf.write_bytes(ci_workflow)

        with patch("gha2argo.cli.ArgoClient") as client_cls:
            client_cls.return_value.submit.return_value = "ci-x7k2p"
            result = CliRunner().invoke(
                cli, ["--debug", "convert", str(wf), "--submit-to", "https://argo:2746"]
            )

        assert result.exit_code == 0
        assert "[DEBUG] Submitting to https://argo:2746/api/v1/workflows/argo" in result.output

    def test_submit_to_argo(self, tmp_path, ci_workflow):
        wf = tmp_path / "ci.yml"
        wf.write_bytes(ci_workflow)

        with patch("gha2argo.cli.ArgoClient") as client_cls:
            client_cls.return_value.submit.return_value = "ci-x7k2p"
            result = CliRunner().invoke(
                cli,
                ["convert", str(wf), "--submit-to", "https://argo:2746", "--namespace", "ci"],
            )

        assert result.exit_code == 0
        client_cls.assert_called_once_with("https://argo:2746", namespace="ci", token=None)
        submitted = client_cls.return_value.submit.call_args.args[0]
        assert submitted["kind"] == "Workflow"


class TestSubmitCommand:
    """gha2argo submit"""

    def _workflow(self, tmp_path, data):
        wf = tmp_path / "ci.yml"
        wf.write_bytes(data)
        return str(wf)

    def test_sync(self, tmp_path, ci_workflow):
        with patch("gha2argo.cli.ConverterClient") as client_cls:
            client_cls.return_value.convert.return_value = "kind: Workflow\n"
            result = CliRunner().invoke(
                cli, ["submit", "--api", "http://svc", self._workflow(tmp_path, ci_workflow)]
            )

        assert result.exit_code == 0
        assert result.stdout == "kind: Workflow\n"
        client_cls.return_value.convert.assert_called_once_with(ci_workflow)

    def test_async_poll(self, tmp_path, ci_workflow):
        with patch("gha2argo.cli.ConverterClient") as client_cls:
            client = client_cls.return_value
            client.base_url = "http://svc"
            client.submit.return_value = "job-1"
            client.wait.return_value = "kind: Workflow\n"
            result = CliRunner().invoke(
                cli,
                [
                    "submit",
                    "--api",
                    "http://svc",
                    "--no-wait",
                    "--poll",
                    self._workflow(tmp_path, ci_workflow),
                ],
            )

        assert result.exit_code == 0
        client.wait.assert_called_once_with("job-1", poll_interval=1.0)
        assert "kind: Workflow" in result.stdout

    def test_api_error(self, tmp_path, ci_workflow):
        with patch("gha2argo.cli.ConverterClient") as client_cls:
            client_cls.return_value.convert.side_effect = APIError("busy", status=503)
            result = CliRunner().invoke(
                cli, ["submit", "--api", "http://svc", self._workflow(tmp_path, ci_workflow)]
            )

        assert result.exit_code == 1

    def test_api_error_traceback_in_debug(self, tmp_path, ci_workflow):
        with patch("gha2argo.cli.ConverterClient") as client_cls:
            client_cls.return_value.convert.side_effect = APIError("busy", status=503)
            result = CliRunner().invoke(
                cli, ["--debug", "submit", "--api", "http://svc", self._workflow(tmp_path, ci_workflow)]
            )

        assert result.exit_code == 1
        assert "Traceback" in result.output
        assert "The service queue is full" in result.output


class TestServeCommand:
    """gha2argo serve"""

    def test_starts_uvicorn_with_service(self):
        with patch("uvicorn.run") as run:
            result = CliRunner().invoke(cli, ["serve", "--port", "9000", "--workers", "3", "--queue-size", "7"])

        assert result.exit_code == 0
        app = run.call_args.args[0]
        svc = app.state.service
        assert svc.pool.num_workers == 3
        assert svc.queue.capacity == 7
        assert run.call_args.kwargs["port"] == 9000
