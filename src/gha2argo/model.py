# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


# ---------------------------------------------------------------------
# Source side: normalized GitHub Actions workflow
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class StepSpec:
    """A single step inside a workflow job: either `run` or `uses`."""
    name: Optional[str] = None
    run: Optional[str] = None
    uses: Optional[str] = None
    with_: Dict[str, Any] = field(default_factory=dict)

    @property
    def skipped(self) -> bool:
        # neither a shell command nor an action reference
        return not self.run and not self.uses


@dataclass
class JobSpec:
    """
    A workflow job: ordered steps + dependencies + run-environment labels.

    `needs` has set semantics; order and duplicates carry no meaning.
    """
    steps: List[StepSpec] = field(default_factory=list)
    needs: List[str] = field(default_factory=list)
    runs_on: List[str] = field(default_factory=list)


@dataclass
class WorkflowModel:
    name: str
    jobs: Dict[str, JobSpec] = field(default_factory=dict)


# ---------------------------------------------------------------------
# Target side: Argo Workflow document
# ---------------------------------------------------------------------

ARGO_API_VERSION = "argoproj.io/v1alpha1"
ARGO_KIND = "Workflow"


@dataclass(frozen=True)
class ScriptTemplate:
    name: str
    image: str
    command: List[str]
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "script": {
                "image": self.image,
                "command": list(self.command),
                "source": self.source,
            },
        }


@dataclass(frozen=True)
class StepRef:
    name: str
    template: str


@dataclass
class StepsTemplate:
    """Runs step references one after another (one parallel group per step)."""
    name: str
    steps: List[StepRef] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "steps": [[{"name": s.name, "template": s.template}] for s in self.steps],
        }


@dataclass(frozen=True)
class DAGTask:
    name: str
    template: str
    dependencies: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        task: Dict[str, Any] = {"name": self.name, "template": self.template}
        if self.dependencies:
            task["dependencies"] = list(self.dependencies)
        return task


@dataclass
class DAGTemplate:
    name: str
    tasks: List[DAGTask] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "dag": {"tasks": [t.to_dict() for t in self.tasks]}}


Template = Union[ScriptTemplate, StepsTemplate, DAGTemplate]


@dataclass
class TargetDocument:
    generate_name: str
    entrypoint: str = ""
    templates: List[Template] = field(default_factory=list)
    parallelism: Optional[int] = None

    def template(self, name: str) -> Optional[Template]:
        for t in self.templates:
            if t.name == name:
                return t
        return None

    def to_dict(self) -> Dict[str, Any]:
        spec: Dict[str, Any] = {"entrypoint": self.entrypoint}
        if self.parallelism is not None:
            spec["parallelism"] = self.parallelism
        spec["templates"] = [t.to_dict() for t in self.templates]
        return {
            "apiVersion": ARGO_API_VERSION,
            "kind": ARGO_KIND,
            "metadata": {"generateName": self.generate_name},
            "spec": spec,
        }
