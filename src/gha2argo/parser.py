# parser.py
"""
GitHub Actions workflow loading.

Reads the YAML document and normalizes the handful of fields the translator
needs (name, jobs, steps, needs, runs-on) into a WorkflowModel. Triggers,
matrix strategies and `${{ }}` expressions are carried as opaque text and
never evaluated.
"""
from __future__ import annotations

from typing import Any, Dict, List, Protocol

import yaml

from .errors import ParseFailure
from .model import JobSpec, StepSpec, WorkflowModel


class WorkflowParser(Protocol):
    def __call__(self, data: bytes | str) -> WorkflowModel: ...


def _string_list(value: Any, field_name: str, job_id: str) -> List[str]:
    """`needs` and `runs-on` accept either one string or a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, (str, int, float)) for v in value):
        return [str(v) for v in value]
    # runs-on: {group: ..., labels: [...]}
    if field_name == "runs-on" and isinstance(value, dict):
        return _string_list(value.get("labels"), field_name, job_id)
    raise ParseFailure(f"job '{job_id}': '{field_name}' must be a string or a list of strings")


def _parse_step(raw: Any, job_id: str, index: int) -> StepSpec:
    if not isinstance(raw, dict):
        raise ParseFailure(f"job '{job_id}': step {index} must be a mapping")

    with_params = raw.get("with") or {}
    if not isinstance(with_params, dict):
        raise ParseFailure(f"job '{job_id}': step {index} 'with' must be a mapping")

    name = raw.get("name")
    run = raw.get("run")
    uses = raw.get("uses")
    return StepSpec(
        name=str(name) if name is not None else None,
        run=str(run) if run is not None else None,
        uses=str(uses) if uses is not None else None,
        with_=dict(with_params),
    )


def _parse_job(job_id: str, raw: Any) -> JobSpec:
    if not isinstance(raw, dict):
        raise ParseFailure(f"job '{job_id}' must be a mapping")

    raw_steps = raw.get("steps") or []
    if not isinstance(raw_steps, list):
        raise ParseFailure(f"job '{job_id}': 'steps' must be a list")

    return JobSpec(
        steps=[_parse_step(s, job_id, i) for i, s in enumerate(raw_steps)],
        needs=_string_list(raw.get("needs"), "needs", job_id),
        runs_on=_string_list(raw.get("runs-on"), "runs-on", job_id),
    )


def parse_workflow(data: bytes | str) -> WorkflowModel:
    """
    Parse a GitHub Actions workflow document.

    Args:
        data: Raw workflow YAML (bytes are decoded as UTF-8)

    Returns:
        WorkflowModel with jobs in document order

    Raises:
        ParseFailure: If the document is not YAML or lacks a jobs mapping
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseFailure(f"workflow is not valid UTF-8: {exc}") from exc

    try:
        doc = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        line_info = ""
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            line_info = f" at line {mark.line + 1}, column {mark.column + 1}"
        raise ParseFailure(f"failed to parse workflow YAML{line_info}: {exc}") from exc

    if not isinstance(doc, dict):
        raise ParseFailure("top-level workflow YAML must be a mapping")

    raw_jobs = doc.get("jobs")
    if not isinstance(raw_jobs, dict) or not raw_jobs:
        raise ParseFailure("workflow must define a non-empty 'jobs' mapping")

    jobs: Dict[str, JobSpec] = {}
    for job_id, raw_job in raw_jobs.items():
        jobs[str(job_id)] = _parse_job(str(job_id), raw_job)

    name = doc.get("name")
    return WorkflowModel(name=str(name) if name is not None else "", jobs=jobs)
