"""
Exception hierarchy for idbatch.

Item-level faults (`ItemGenerationError`) are caught by the orchestrator and
recorded on the affected identifier. Everything else surfaces to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from idbatch.domain.models import BatchValidation


class IdBatchError(Exception):
    """Base class for all idbatch errors."""


class SettingsValidationError(IdBatchError):
    """Generation settings failed validation; the job cannot start."""

    def __init__(self, validation: "BatchValidation") -> None:
        self.validation = validation
        messages = "; ".join(error.message for error in validation.errors)
        super().__init__(f"Invalid generation settings: {messages}")


class JobNotFoundError(IdBatchError, KeyError):
    """No job with the given id is tracked by the orchestrator."""

    def __str__(self) -> str:
        return f"Unknown batch job '{self.args[0]}'"


class InvalidTransitionError(IdBatchError):
    """A lifecycle operation is not permitted in the job's current state."""


class ItemGenerationError(IdBatchError):
    """A single identifier could not be generated or formatted."""


__all__ = [
    "IdBatchError",
    "SettingsValidationError",
    "JobNotFoundError",
    "InvalidTransitionError",
    "ItemGenerationError",
]
