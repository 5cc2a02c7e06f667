"""Quoteflow: approval workflows for sales quotes."""

__version__ = "0.1.0"

from .contracts import Persona, Quote, QuoteStatus, StepDescriptor, StepStatus, WorkflowStep
from .engine import WorkflowEngine, add_step
from .errors import (
    ConflictError,
    DuplicateStepError,
    NotFoundError,
    QuoteflowError,
    StoreError,
    ValidationError,
)
from .persistence import get_repository
from .personas import default_assignee, list_personas

__all__ = [
    "ConflictError",
    "DuplicateStepError",
    "NotFoundError",
    "Persona",
    "Quote",
    "QuoteStatus",
    "QuoteflowError",
    "StepDescriptor",
    "StepStatus",
    "StoreError",
    "ValidationError",
    "WorkflowEngine",
    "WorkflowStep",
    "add_step",
    "default_assignee",
    "get_repository",
    "list_personas",
]
