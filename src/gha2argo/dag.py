# dag.py
from __future__ import annotations

from typing import Dict, Iterable, Mapping, Tuple

from .errors import BuildFailure
from .model import DAGTask, DAGTemplate, JobSpec
from .sanitize import sanitize_name

# Reserved template name for the synthesized multi-job entrypoint
MAIN_DAG_NAME = "main-dag"


def _dependency_names(needs: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted({sanitize_name(n) for n in needs}))


def build_dependencies(jobs: Mapping[str, JobSpec]) -> Dict[str, Tuple[str, ...]]:
    """
    Map each job's template name to the template names it needs.

    `needs` are copied through as-is (after sanitizing): edges to unknown
    jobs and cycles are not rejected here, Argo reports them on submit.

    Raises:
        BuildFailure: If two job ids sanitize to the same template name
    """
    deps: Dict[str, Tuple[str, ...]] = {}
    origin: Dict[str, str] = {}

    for job_id, job in jobs.items():
        name = sanitize_name(job_id)
        if name in origin:
            raise BuildFailure(
                f"Job ids '{origin[name]}' and '{job_id}' both map to template name '{name}'"
            )
        origin[name] = job_id
        deps[name] = _dependency_names(job.needs)

    return deps


def build_dag_template(
    deps: Mapping[str, Tuple[str, ...]],
    name: str = MAIN_DAG_NAME,
) -> DAGTemplate:
    """One task per job; each task runs the job's steps template."""
    dag = DAGTemplate(name=name)
    for job_name, needs in deps.items():
        dag.tasks.append(DAGTask(name=job_name, template=job_name, dependencies=needs))
    return dag
