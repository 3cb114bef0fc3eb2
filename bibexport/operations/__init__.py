"""Multi-record export operations."""

from bibexport.operations.export import ExportWorkflow
from bibexport.operations.results import StepResult, WorkflowResult

__all__ = [
    "ExportWorkflow",
    "StepResult",
    "WorkflowResult",
]
