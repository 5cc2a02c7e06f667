"""Error hierarchy for quote workflow operations.

Each error carries the HTTP status code the API reports it with, so a
single handler can translate the whole hierarchy into ``{"error": ...}``
responses.
"""

from __future__ import annotations


class QuoteflowError(Exception):
    """Base class for all quoteflow errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(QuoteflowError):
    """Raised when a quote or workflow step does not exist."""

    status_code = 404


class ValidationError(QuoteflowError):
    """Raised when a replacement workflow is structurally invalid."""

    status_code = 400


class DuplicateStepError(ValidationError):
    """Raised when a persona is added to a workflow that already contains it."""

    def __init__(self, persona_id: str, persona_name: str | None = None) -> None:
        super().__init__(f"{persona_name or persona_id} is already in the workflow")
        self.persona_id = persona_id


class ConflictError(QuoteflowError):
    """Raised when a transition does not apply to the step's current status."""

    status_code = 409


class StoreError(QuoteflowError):
    """Raised when the quote store fails to read or write."""

    status_code = 500
