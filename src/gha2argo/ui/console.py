"""Console output formatting utilities for gha2argo."""

from __future__ import annotations

import sys
import traceback
from typing import Optional

from gha2argo.model import DAGTemplate, ScriptTemplate, StepsTemplate, TargetDocument


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}", file=sys.stderr)
        print("-" * len(title), file=sys.stderr)

    def print_conversion_summary(self, source: str, doc: TargetDocument) -> None:
        """Print what a conversion produced (stderr, so stdout stays YAML)."""
        scripts = sum(isinstance(t, ScriptTemplate) for t in doc.templates)
        jobs = sum(isinstance(t, StepsTemplate) for t in doc.templates)
        dag = next((t for t in doc.templates if isinstance(t, DAGTemplate)), None)

        self.print_header("CONVERSION COMPLETE")
        print(f"Source: {source}", file=sys.stderr)
        print(f"Entrypoint: {doc.entrypoint}", file=sys.stderr)
        print(f"Jobs: {jobs}", file=sys.stderr)
        print(f"Scripts: {scripts}", file=sys.stderr)
        if dag is not None:
            for task in dag.tasks:
                deps = ", ".join(task.dependencies) or "-"
                print(f"  {task.name} (needs: {deps})", file=sys.stderr)

    def print_job_submitted(self, job_id: str, result_url: str) -> None:
        """Print async submission info."""
        print("\nJOB SUBMITTED", file=sys.stderr)
        print(f"Job ID: {job_id}", file=sys.stderr)
        print(f"Result: {result_url}", file=sys.stderr)

    def print_workflow_created(self, name: str, namespace: str) -> None:
        print(f"\nWORKFLOW CREATED: {namespace}/{name}", file=sys.stderr)

    def print_server_started(
        self,
        host: str,
        port: int,
        workers: int,
        queue_size: int,
    ) -> None:
        """Print server start information."""
        print("\nSERVER STARTING", file=sys.stderr)
        print(f"Listening on: http://{host}:{port}", file=sys.stderr)
        print(f"Workers: {workers}", file=sys.stderr)
        print(f"Queue size: {queue_size}", file=sys.stderr)
        print(file=sys.stderr)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print the exception's traceback (only if debug mode enabled)."""
        if self.debug:
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message, file=sys.stderr)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
