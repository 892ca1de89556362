"""
Domain models for idbatch.

Every model here is a frozen Pydantic model: settings, identifiers, analysis
blocks, statistics and job snapshots are replaced wholesale, never mutated in
place. The orchestrator is the only component that produces new `BatchJob`
snapshots.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

IdentifierKind = Literal[
    "uuid_v1",
    "uuid_v4",
    "uuid_v5",
    "nanoid",
    "ulid",
    "cuid",
    "short_uuid",
    "custom",
]
KNOWN_KINDS: Tuple[str, ...] = (
    "uuid_v1",
    "uuid_v4",
    "uuid_v5",
    "nanoid",
    "ulid",
    "cuid",
    "short_uuid",
    "custom",
)
RFC_KINDS: Tuple[str, ...] = ("uuid_v1", "uuid_v4", "uuid_v5")

OutputFormat = Literal["standard", "compact", "braced", "urn", "base64", "hex"]
CasePolicy = Literal["preserve", "uppercase", "lowercase"]
SortOrder = Literal["none", "alphabetical", "timestamp", "quality", "security"]
ExportFormat = Literal["txt", "json", "csv", "xml"]
JobStatus = Literal["pending", "processing", "paused", "completed", "failed"]
SecurityLevel = Literal["low", "medium", "high", "very_high"]
Predictability = Literal["low", "medium", "high"]
CryptoStrength = Literal["weak", "moderate", "strong", "very_strong"]
CollisionResistance = Literal["low", "medium", "high", "very_high"]

TERMINAL_STATUSES: Tuple[str, ...] = ("completed", "failed")

_FROZEN = {"frozen": True, "populate_by_name": True}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FilterCriteria(BaseModel):
    """Optional view filter applied to a batch's identifiers."""

    min_quality: Optional[float] = None
    max_quality: Optional[float] = None
    min_security: Optional[float] = None
    max_security: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    security_levels: Optional[List[SecurityLevel]] = None
    kinds: Optional[List[str]] = None
    valid_only: bool = False

    model_config = _FROZEN


class GenerationSettings(BaseModel):
    """
    Immutable per-job configuration.

    Bounds are deliberately not enforced here: `validate_settings` reports them
    as a structured result so callers can show errors, warnings and suggestions
    together.
    """

    kind: str = Field("uuid_v4", description="Identifier family; unknown values generate v4.")
    count: int = Field(100, description="Number of identifiers to generate.")
    format: OutputFormat = "standard"
    case: CasePolicy = "preserve"
    chunk_size: int = Field(50, description="Identifiers generated between yield points.")
    custom_length: Optional[int] = None
    custom_alphabet: Optional[str] = None
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    enable_analysis: bool = True
    enable_validation: bool = True
    enable_deduplication: bool = True
    filter_criteria: Optional[FilterCriteria] = None
    sort_order: SortOrder = "none"
    export_format: ExportFormat = "txt"
    seed: Optional[int] = Field(None, description="Seed for a reproducible random stream.")

    model_config = _FROZEN


class Metadata(BaseModel):
    """Derived facts about one formatted value."""

    length: int
    format: str
    encoding: str = "UTF-8"
    entropy: float
    randomness: float
    collision_probability: float
    security_level: SecurityLevel
    use_cases: List[str] = Field(default_factory=list)
    standards_compliance: List[str] = Field(default_factory=list)

    model_config = _FROZEN


class Structure(BaseModel):
    segments: List[str]
    separators: List[str]
    character_set: str
    case_format: Literal["uppercase", "lowercase", "mixed"]
    has_hyphens: bool
    has_braces: bool
    total_length: int
    data_length: int

    model_config = _FROZEN


class Security(BaseModel):
    predictability: Predictability
    entropy_bits: int
    cryptographic_strength: CryptoStrength
    timing_attack_resistant: bool
    collision_resistance: CollisionResistance
    security_score: int = Field(..., ge=0, le=100)

    model_config = _FROZEN


class Quality(BaseModel):
    uniqueness_score: float = Field(..., ge=0, le=100)
    randomness_score: float = Field(..., ge=0, le=100)
    format_compliance: float = Field(..., ge=0, le=100)
    readability_score: float = Field(..., ge=0, le=100)
    overall_quality: float
    issues: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)

    model_config = _FROZEN


class Compatibility(BaseModel):
    database_systems: List[str] = Field(default_factory=list)
    programming_languages: List[str] = Field(default_factory=list)
    web_standards: List[str] = Field(default_factory=list)
    api_compatibility: List[str] = Field(default_factory=list)
    limitations: List[str] = Field(default_factory=list)

    model_config = _FROZEN


class Analysis(BaseModel):
    """Four-way heuristic breakdown of one identifier."""

    structure: Structure
    security: Security
    quality: Quality
    compatibility: Compatibility
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    model_config = _FROZEN


class Identifier(BaseModel):
    """One generated item. Created once by the orchestrator, never mutated."""

    id: str
    value: str
    kind: str
    version: Optional[int] = None
    timestamp: datetime = Field(default_factory=utc_now)
    is_valid: bool = True
    error: Optional[str] = None
    metadata: Optional[Metadata] = None
    analysis: Optional[Analysis] = None
    index: int = Field(..., ge=0)

    model_config = _FROZEN


class Statistics(BaseModel):
    """Batch-wide aggregates, computed once when a job reaches a terminal state."""

    total_generated: int = 0
    valid_count: int = 0
    invalid_count: int = 0
    unique_count: int = 0
    duplicate_count: int = 0
    average_entropy: float = 0.0
    average_quality: float = 0.0
    average_security: float = 0.0
    generation_time_seconds: float = 0.0
    collision_rate: float = 0.0
    security_distribution: Dict[str, int] = Field(default_factory=dict)
    quality_distribution: Dict[str, int] = Field(default_factory=dict)
    length_distribution: Dict[str, int] = Field(default_factory=dict)

    model_config = _FROZEN


class BatchJob(BaseModel):
    """
    Immutable snapshot of a batch generation job.

    `items` is a tuple so observers holding an older snapshot never see it grow.
    """

    id: str
    name: str
    kind: str
    count: int
    settings: GenerationSettings
    items: Tuple[Identifier, ...] = ()
    status: JobStatus = "pending"
    progress: float = Field(0.0, ge=0.0, le=1.0)
    error: Optional[str] = None
    statistics: Statistics = Field(default_factory=Statistics)
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None

    model_config = _FROZEN

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class BatchError(BaseModel):
    message: str
    type: Literal["count", "settings", "memory", "performance"]
    severity: Literal["error", "warning", "info"] = "error"

    model_config = _FROZEN


class BatchValidation(BaseModel):
    """Outcome of settings validation: blocking errors plus advisory notes."""

    is_valid: bool = True
    errors: List[BatchError] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    model_config = _FROZEN


class IdentifierInspection(BaseModel):
    """Result of inspecting an arbitrary identifier string."""

    value: str
    is_valid: bool
    detected_kind: Optional[str] = None
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    model_config = _FROZEN


__all__ = [
    "IdentifierKind",
    "KNOWN_KINDS",
    "RFC_KINDS",
    "OutputFormat",
    "CasePolicy",
    "SortOrder",
    "ExportFormat",
    "JobStatus",
    "SecurityLevel",
    "TERMINAL_STATUSES",
    "utc_now",
    "FilterCriteria",
    "GenerationSettings",
    "Metadata",
    "Structure",
    "Security",
    "Quality",
    "Compatibility",
    "Analysis",
    "Identifier",
    "Statistics",
    "BatchJob",
    "BatchError",
    "BatchValidation",
    "IdentifierInspection",
]
