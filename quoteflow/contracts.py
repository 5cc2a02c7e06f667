"""Core records for quotes and their approval workflows."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StepStatus(str, Enum):
    WAITING = "waiting"
    PENDING = "pending"
    COMPLETED = "completed"


class QuoteStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkflowStep(CamelModel):
    """One stage of a quote's approval sequence."""

    id: str
    name: str
    assignee: str = "Unassigned"
    status: StepStatus = StepStatus.WAITING
    completed_date: Optional[date] = None


class StepDescriptor(CamelModel):
    """A step as submitted by a workflow editor.

    Only the persona id, display name and assignee are taken from the
    caller; status and completion date are recomputed on replace.
    """

    id: str
    name: Optional[str] = None
    assignee: Optional[str] = None


class Persona(CamelModel):
    """Catalog entry describing a reusable workflow-step type."""

    id: str
    name: str
    description: str = ""
    icon: str = ""
    color: str = ""
    default_assignee: str = "Unassigned"


class Quote(CamelModel):
    """A quote with its ordered approval workflow."""

    id: str
    customer: str = ""
    amount: float = 0
    discount: float = 0
    created_by: str = ""
    created_date: Optional[date] = None
    products: List[str] = Field(default_factory=list)
    workflow: List[WorkflowStep] = Field(default_factory=list)
    current_step: Optional[str] = None
    status: QuoteStatus = QuoteStatus.PENDING

    def find_step(self, step_id: str) -> Optional[WorkflowStep]:
        """Return the step with ``step_id`` or ``None``."""
        return next((s for s in self.workflow if s.id == step_id), None)

    def step_index(self, step_id: str) -> int:
        """Position of ``step_id`` in the workflow, ``-1`` when absent."""
        for index, step in enumerate(self.workflow):
            if step.id == step_id:
                return index
        return -1

    @property
    def active_step(self) -> Optional[WorkflowStep]:
        """The step currently awaiting action."""
        return self.find_step(self.current_step) if self.current_step else None

    def is_finished(self) -> bool:
        """Return ``True`` when every step has been completed."""
        return bool(self.workflow) and all(
            s.status == StepStatus.COMPLETED for s in self.workflow
        )

    def to_json(self) -> str:
        """Serialize quote to camelCase JSON."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str) -> "Quote":
        """Deserialize quote from JSON."""
        return cls.model_validate_json(data)
