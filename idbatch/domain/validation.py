"""
Settings validation and identifier inspection.

`validate_settings` runs before a job is allowed to start and returns a
`BatchValidation`: errors block the job, warnings and suggestions only inform.
`inspect_identifier` checks an arbitrary string and guesses which family
produced it.
"""
from __future__ import annotations

import re
from typing import List, Optional

from idbatch.domain.models import (
    BatchError,
    BatchValidation,
    GenerationSettings,
    IdentifierInspection,
)

DEFAULT_MAX_COUNT = 100_000
ANALYSIS_WARNING_COUNT = 10_000
MEMORY_WARNING_COUNT = 50_000
MIN_CUSTOM_LENGTH = 4
MIN_CUSTOM_ALPHABET = 2

_RFC_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)
_NANOID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{21}$")
_ULID_PATTERN = re.compile(r"^[0-9A-Z]{26}$")
_CUID_PATTERN = re.compile(r"^c[0-9a-z]{24}$")
_COMPACT_HEX_PATTERN = re.compile(r"^[0-9a-f]{32}$", re.IGNORECASE)
_SAFE_CHARS_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_settings(
    settings: GenerationSettings, max_count: int = DEFAULT_MAX_COUNT
) -> BatchValidation:
    """
    Validate generation settings before a job starts.

    Parameters
    ----------
    settings : GenerationSettings
        Per-job configuration to check.
    max_count : int
        Upper bound on the requested count.

    Returns
    -------
    BatchValidation
        ``is_valid`` is False when any error was recorded.
    """
    errors: List[BatchError] = []
    warnings: List[str] = []
    suggestions: List[str] = []

    if settings.count <= 0:
        errors.append(BatchError(message="Count must be greater than 0", type="count"))
    if settings.count > max_count:
        errors.append(
            BatchError(message=f"Count exceeds maximum limit of {max_count:,}", type="count")
        )

    if settings.count > ANALYSIS_WARNING_COUNT and settings.enable_analysis:
        warnings.append("Large batch with analysis enabled may impact performance")
        suggestions.append("Consider disabling analysis for better performance")

    if settings.count > MEMORY_WARNING_COUNT:
        warnings.append("Very large batch may consume significant memory")
        suggestions.append("Consider processing in smaller chunks")

    if settings.chunk_size <= 0:
        errors.append(BatchError(message="Chunk size must be greater than 0", type="settings"))
    elif settings.chunk_size > max_count:
        errors.append(
            BatchError(
                message=f"Chunk size exceeds maximum limit of {max_count:,}", type="performance"
            )
        )
    elif settings.count > 0 and settings.chunk_size > settings.count:
        warnings.append("Chunk size is larger than total count")
        suggestions.append("Reduce chunk size for better progress tracking")

    # nanoid also honours custom_length, so a set length is checked for every kind
    length_missing = settings.kind == "custom" and not settings.custom_length
    if length_missing or (
        settings.custom_length is not None and settings.custom_length < MIN_CUSTOM_LENGTH
    ):
        errors.append(
            BatchError(
                message=f"Custom length must be at least {MIN_CUSTOM_LENGTH} characters",
                type="settings",
            )
        )

    if settings.kind == "custom":
        if (
            not settings.custom_alphabet
            or len(set(settings.custom_alphabet)) < MIN_CUSTOM_ALPHABET
        ):
            errors.append(
                BatchError(
                    message=(
                        f"Custom alphabet must contain at least {MIN_CUSTOM_ALPHABET} "
                        "distinct characters"
                    ),
                    type="settings",
                )
            )

    return BatchValidation(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        suggestions=suggestions,
    )


def _detect_kind(value: str) -> tuple[str, Optional[str]]:
    if _RFC_PATTERN.match(value):
        return "uuid_v4", None
    if _NANOID_PATTERN.match(value):
        return "nanoid", None
    if _ULID_PATTERN.match(value):
        return "ulid", None
    if _CUID_PATTERN.match(value):
        return "cuid", None
    if _COMPACT_HEX_PATTERN.match(value):
        return "uuid_v4", "Identifier appears to be in compact format (no hyphens)"
    return "custom", "Non-standard identifier format detected"


def inspect_identifier(value: str) -> IdentifierInspection:
    """Validate an arbitrary identifier string and detect its likely kind."""
    if not value or not value.strip():
        return IdentifierInspection(
            value=value or "", is_valid=False, errors=["Identifier cannot be empty"]
        )

    trimmed = value.strip()
    errors: List[str] = []
    warnings: List[str] = []
    suggestions: List[str] = []

    detected, note = _detect_kind(trimmed)
    if note:
        warnings.append(note)

    if len(trimmed) < 8:
        warnings.append("Identifier is very short, collision probability may be high")
    if len(trimmed) > 100:
        warnings.append("Identifier is very long, may impact performance")

    if not _SAFE_CHARS_PATTERN.match(trimmed.replace("-", "")):
        errors.append("Identifier contains invalid characters")

    if detected == "custom":
        suggestions.append("Consider using a standard identifier format for better compatibility")
    if "-" not in trimmed and len(trimmed) == 32:
        suggestions.append(
            "Add hyphens for better readability: xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx"
        )

    return IdentifierInspection(
        value=trimmed,
        is_valid=not errors,
        detected_kind=detected,
        errors=errors,
        warnings=warnings,
        suggestions=suggestions,
    )


__all__ = ["DEFAULT_MAX_COUNT", "validate_settings", "inspect_identifier"]
