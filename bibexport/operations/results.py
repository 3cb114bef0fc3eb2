"""Result types for export operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4


@dataclass
class StepResult:
    """Result of exporting one item."""

    step: str
    success: bool
    message: str

    entity_id: str | None = None
    errors: list[str] | None = None
    warnings: list[str] | None = None
    data: dict[str, Any] | None = None

    timestamp: datetime = field(default_factory=datetime.now)
    duration_ms: int | None = None


@dataclass
class WorkflowResult:
    """Result of a complete export run."""

    workflow: str
    steps: list[StepResult] = field(default_factory=list)

    workflow_id: UUID = field(default_factory=uuid4)
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None

    # Metadata
    source: str | None = None
    config: dict[str, Any] | None = None

    # Set when any exported name needs a comma before its suffix
    junior_comma: bool = False

    @property
    def success(self) -> bool:
        """Check if every step succeeded."""
        return all(step.success for step in self.steps)

    @property
    def partial_success(self) -> bool:
        """Check if some, but not all, steps succeeded."""
        successes = sum(1 for step in self.steps if step.success)
        return 0 < successes < len(self.steps)

    @property
    def failed_steps(self) -> list[StepResult]:
        """Get failed steps."""
        return [step for step in self.steps if not step.success]

    @property
    def successful_entities(self) -> list[str]:
        """Get keys of successfully exported records."""
        return [
            step.entity_id for step in self.steps if step.success and step.entity_id
        ]

    @property
    def warnings(self) -> list[str]:
        """Get all step warnings, prefixed with the record key."""
        return [
            f"{step.entity_id}: {warning}"
            for step in self.steps
            for warning in step.warnings or []
        ]

    @property
    def copy_requests(self) -> list[tuple[str, str]]:
        """Get the attachment copies the caller has to carry out."""
        requests = []
        for step in self.steps:
            if step.data:
                requests.extend(step.data.get("copy_requests", []))
        return requests

    def add_step(self, step: StepResult) -> None:
        """Add a step result."""
        self.steps.append(step)

    def complete(self) -> None:
        """Mark workflow as complete."""
        self.completed_at = datetime.now()

    def get_summary(self) -> dict[str, Any]:
        """Get workflow summary."""
        return {
            "workflow": self.workflow,
            "workflow_id": str(self.workflow_id),
            "success": self.success,
            "total_steps": len(self.steps),
            "successful_steps": sum(1 for s in self.steps if s.success),
            "failed_steps": sum(1 for s in self.steps if not s.success),
            "cached": sum(1 for s in self.steps if s.data and s.data.get("cached")),
            "warnings": len(self.warnings),
            "junior_comma": self.junior_comma,
            "duration_ms": int(
                (self.completed_at - self.started_at).total_seconds() * 1000
            )
            if self.completed_at
            else None,
            "entities_processed": len(self.successful_entities),
        }
