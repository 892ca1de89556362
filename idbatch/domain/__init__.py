"""
Domain package for idbatch.

Exports the immutable data models shared by the registry, formatter, analyzer
and orchestrator, plus settings validation. Keep this package focused on data
definitions and validation concerns.
"""

from idbatch.domain.models import (
    KNOWN_KINDS,
    RFC_KINDS,
    Analysis,
    BatchError,
    BatchJob,
    BatchValidation,
    Compatibility,
    FilterCriteria,
    GenerationSettings,
    Identifier,
    IdentifierInspection,
    Metadata,
    Quality,
    Security,
    Statistics,
    Structure,
)
from idbatch.domain.validation import inspect_identifier, validate_settings

__all__ = [
    "KNOWN_KINDS",
    "RFC_KINDS",
    "Analysis",
    "BatchError",
    "BatchJob",
    "BatchValidation",
    "Compatibility",
    "FilterCriteria",
    "GenerationSettings",
    "Identifier",
    "IdentifierInspection",
    "Metadata",
    "Quality",
    "Security",
    "Statistics",
    "Structure",
    "inspect_identifier",
    "validate_settings",
]
