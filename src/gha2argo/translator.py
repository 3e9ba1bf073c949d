# translator.py
"""
GitHub Actions -> Argo Workflows translation.

Every GHA job becomes a `steps` template that runs one `script` template per
step, in order. A single-job workflow uses that job template as entrypoint;
with more jobs a `main-dag` template wires the jobs together from their
`needs`.
"""
from __future__ import annotations

import logging
import shlex
from typing import Any, List, Optional

import yaml

from .dag import MAIN_DAG_NAME, build_dag_template, build_dependencies
from .errors import BuildFailure
from .images import DEFAULT_IMAGE, image_for_job
from .model import (
    JobSpec,
    ScriptTemplate,
    StepRef,
    StepSpec,
    StepsTemplate,
    TargetDocument,
    Template,
    WorkflowModel,
)
from .parser import WorkflowParser, parse_workflow
from .sanitize import sanitize_name

logger = logging.getLogger(__name__)

# Cap on simultaneously running pods, whatever the job count
DEFAULT_PARALLELISM = 50

RUN_COMMAND = ["bash", "-c"]  # GHA runs `run:` with bash by default
PLACEHOLDER_COMMAND = ["sh", "-c"]
_BANNER = "*" * 64


# ---------------------------------------------------------------------
# Step templates
# ---------------------------------------------------------------------

def _step_name(step: StepSpec, index: int, used: set) -> str:
    base = sanitize_name(step.name) if step.name else f"step-{index}"
    name, suffix = base, index
    while name in used:
        name = f"{base}-{suffix}"
        suffix += 1
    used.add(name)
    return name


def placeholder_source(step: StepSpec) -> str:
    """
    Script standing in for a `uses:` action.

    Prints the action reference and its `with` parameters, then exits 1.
    """
    lines = [_BANNER, f"Manual migration required for GitHub Action: {step.uses}"]
    if step.with_:
        params = ", ".join(f"{k}={v}" for k, v in step.with_.items())
        lines.append(f"Parameters (with): {params}")
    lines.append(_BANNER)

    body = "\n".join(f"echo {shlex.quote(line)}" for line in lines)
    return f"{body}\nexit 1\n"


def _script_template(name: str, step: StepSpec, image: str) -> Optional[ScriptTemplate]:
    if step.run:
        return ScriptTemplate(name=name, image=image, command=list(RUN_COMMAND), source=step.run)
    if step.uses:
        return ScriptTemplate(
            name=name,
            image=DEFAULT_IMAGE,
            command=list(PLACEHOLDER_COMMAND),
            source=placeholder_source(step),
        )
    return None


def build_job_templates(job_name: str, job: JobSpec) -> List[Template]:
    """
    Returns the job's steps template followed by its script templates.

    Steps without `run` and `uses` are dropped; the steps template is
    emitted even when nothing is left.
    """
    image = image_for_job(job.runs_on)
    steps_tpl = StepsTemplate(name=job_name)
    scripts: List[Template] = []
    used: set = set()

    for i, step in enumerate(job.steps):
        if step.skipped:
            logger.debug("job %s: skipping empty step %d", job_name, i)
            continue
        step_name = _step_name(step, i, used)
        tpl_name = f"{job_name}-{step_name}"
        script = _script_template(tpl_name, step, image)
        steps_tpl.steps.append(StepRef(name=step_name, template=tpl_name))
        scripts.append(script)

    return [steps_tpl, *scripts]


# ---------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------

def translate(workflow: WorkflowModel, parallelism: int = DEFAULT_PARALLELISM) -> TargetDocument:
    """
    Build the Argo document for a parsed workflow.

    Raises:
        BuildFailure: If job names collide after sanitizing, or two
            templates end up with the same name
    """
    doc = TargetDocument(generate_name=sanitize_name(workflow.name) + "-")
    deps = build_dependencies(workflow.jobs)

    # deps preserves the jobs' order
    for job, job_name in zip(workflow.jobs.values(), deps):
        doc.templates.extend(build_job_templates(job_name, job))

    if len(deps) == 1:
        doc.entrypoint = next(iter(deps))
    else:
        if MAIN_DAG_NAME in deps:
            raise BuildFailure(f"Job name '{MAIN_DAG_NAME}' is reserved for the workflow DAG")
        dag = build_dag_template(deps)
        doc.templates.append(dag)
        doc.entrypoint = dag.name

    _check_unique_names(doc.templates)
    doc.parallelism = parallelism
    return doc


def _check_unique_names(templates: List[Template]) -> None:
    # a job template can clash with another job's "<job>-<step>" script
    seen: set = set()
    for tpl in templates:
        if tpl.name in seen:
            raise BuildFailure(f"Duplicate template name '{tpl.name}'")
        seen.add(tpl.name)


class _LiteralDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, data: str) -> Any:
    # scripts read better as block literals
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_LiteralDumper.add_representer(str, _represent_str)


def render_document(doc: TargetDocument) -> str:
    """Serialize to Argo YAML; raises BuildFailure if that is impossible."""
    try:
        return yaml.dump(doc.to_dict(), Dumper=_LiteralDumper, sort_keys=False)
    except yaml.YAMLError as exc:
        raise BuildFailure(f"failed to marshal Argo YAML: {exc}") from exc


def convert_document(
    payload: bytes | str,
    parser: WorkflowParser = parse_workflow,
) -> str:
    """Full pipeline used by the workers: parse -> translate -> render."""
    workflow = parser(payload)
    doc = translate(workflow)
    return render_document(doc)

