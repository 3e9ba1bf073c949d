from .errors import BuildFailure, ConversionError, ParseFailure
from .images import map_image
from .model import JobSpec, StepSpec, TargetDocument, WorkflowModel
from .parser import parse_workflow
from .sanitize import sanitize_name
from .translator import convert_document, render_document, translate

__all__ = [
    "BuildFailure",
    "ConversionError",
    "ParseFailure",
    "map_image",
    "JobSpec",
    "StepSpec",
    "TargetDocument",
    "WorkflowModel",
    "parse_workflow",
    "sanitize_name",
    "convert_document",
    "render_document",
    "translate",
]
