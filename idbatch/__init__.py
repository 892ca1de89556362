"""
idbatch - batch generation and heuristic analysis of identifiers.

This package generates large batches of identifiers (RFC 4122 UUIDs, nanoid,
ULID, CUID, short and custom-alphabet codes) in cooperative chunks, and scores
each value for structure, security, quality and compatibility:

- Strategy registry mapping identifier kinds to generators
- Formatting pipeline (case, structural format, prefix/suffix)
- Heuristic analyzer and settings validation
- Async batch orchestrator with pause/resume/cancel and statistics
- Exporters (JSON, CSV, XML, text) and a Typer/Rich CLI
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from idbatch.analyzer import analyze, build_metadata
from idbatch.config import Settings, get_settings
from idbatch.domain.models import BatchJob, GenerationSettings, Identifier, Statistics
from idbatch.domain.validation import inspect_identifier, validate_settings
from idbatch.errors import (
    IdBatchError,
    InvalidTransitionError,
    JobNotFoundError,
    SettingsValidationError,
)
from idbatch.exporter import ExportPayload, export_identifiers, export_job
from idbatch.formatter import format_identifier
from idbatch.orchestrator import CANCELLED_MESSAGE, BatchOrchestrator, JobEvent, run_batch
from idbatch.selection import select_identifiers
from idbatch.strategies.registry import available_kinds, generate_raw
from idbatch.utils.logging import configure_logging, get_logger
from idbatch.utils.profiler import ProfileStats, profile_block

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "GenerationSettings",
    "Identifier",
    "BatchJob",
    "Statistics",
    "validate_settings",
    "inspect_identifier",
    # Errors
    "IdBatchError",
    "SettingsValidationError",
    "JobNotFoundError",
    "InvalidTransitionError",
    # Generation and analysis
    "available_kinds",
    "generate_raw",
    "format_identifier",
    "analyze",
    "build_metadata",
    # Orchestration
    "BatchOrchestrator",
    "JobEvent",
    "CANCELLED_MESSAGE",
    "run_batch",
    # Selection and export
    "select_identifiers",
    "ExportPayload",
    "export_job",
    "export_identifiers",
    # Logging
    "configure_logging",
    "get_logger",
    # Profiling
    "ProfileStats",
    "profile_block",
]
