"""
Heuristic analysis of identifier strings.

Four independent views are computed for a value: structure, security, quality
and compatibility. The scoring rubric is a fixed set of thresholds and
penalties, not a statistical test:

- entropy is approximated as ``data_length * 4`` bits (one nibble per data
  character, whatever the alphabet);
- randomness is a character-frequency skew measure;
- predictability, cryptographic strength and collision resistance come from a
  per-kind lookup table.

All functions are pure and deterministic for a given ``(value, kind)``.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from idbatch.domain.models import (
    Analysis,
    Compatibility,
    GenerationSettings,
    Metadata,
    Quality,
    Security,
    Structure,
)

_STRIP_CHARS = re.compile(r"[-{}]")
_HEX_CHARSET = re.compile(r"^[0-9a-fA-F\-{}]+$")
_ALNUM_CHARSET = re.compile(r"^[A-Za-z0-9_-]+$")
_ALNUM_NO_SPECIAL_CHARSET = re.compile(r"^[A-Za-z0-9]+$")
_UUID_V4_STRICT = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)

BITS_PER_CHAR = 4
FULL_UNIQUENESS_LENGTH = 32
MIN_ENTROPY_BITS = 64

PREDICTABILITY_PENALTY = {"high": 30, "medium": 15}
STRENGTH_PENALTY = {"weak": 40, "moderate": 20}
COLLISION_PENALTY = {"low": 25, "medium": 10}
LOW_ENTROPY_PENALTY = 20

SECURITY_RECOMMENDATION_THRESHOLD = 70
QUALITY_RECOMMENDATION_THRESHOLD = 80
SHORT_VALUE_THRESHOLD = 16


@dataclass(frozen=True)
class SecurityProfile:
    predictability: str = "low"
    cryptographic_strength: str = "strong"
    collision_resistance: str = "high"


_DEFAULT_PROFILE = SecurityProfile(collision_resistance="medium")

SECURITY_PROFILES: Mapping[str, SecurityProfile] = MappingProxyType(
    {
        "uuid_v1": SecurityProfile("high", "moderate", "medium"),
        "uuid_v4": SecurityProfile("low", "strong", "high"),
        "short_uuid": SecurityProfile("low", "strong", "medium"),
        "custom": SecurityProfile("low", "strong", "high"),
        "nanoid": SecurityProfile(),
        "ulid": SecurityProfile(),
        "cuid": SecurityProfile(),
    }
)

COMPATIBILITY: Mapping[str, Compatibility] = MappingProxyType(
    {
        "uuid_v4": Compatibility(
            database_systems=["PostgreSQL", "MySQL", "SQL Server", "Oracle", "MongoDB"],
            programming_languages=["JavaScript", "Python", "Java", "C#", "Go", "Rust", "PHP"],
            web_standards=["RFC 4122", "JSON", "XML", "REST APIs"],
            api_compatibility=["GraphQL", "REST", "gRPC", "OpenAPI"],
        ),
        "uuid_v1": Compatibility(
            database_systems=["PostgreSQL", "MySQL", "SQL Server", "Oracle"],
            programming_languages=["JavaScript", "Python", "Java", "C#"],
            web_standards=["RFC 4122"],
            limitations=["Contains timestamp", "May reveal system information"],
        ),
        "nanoid": Compatibility(
            database_systems=["PostgreSQL", "MySQL", "MongoDB", "Redis"],
            programming_languages=["JavaScript", "Python", "Go", "Rust"],
            web_standards=["URL-safe", "JSON"],
            api_compatibility=["REST", "GraphQL"],
        ),
        "ulid": Compatibility(
            database_systems=["PostgreSQL", "MySQL", "MongoDB"],
            programming_languages=["JavaScript", "Python", "Go"],
            web_standards=["Lexicographically sortable"],
            limitations=["Contains timestamp"],
        ),
        "short_uuid": Compatibility(
            database_systems=["Most databases as string"],
            programming_languages=["Most languages"],
            limitations=["Higher collision probability", "Not standard compliant"],
        ),
    }
)

USE_CASES: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "uuid_v4": ("Database primary keys", "API identifiers", "Session tokens", "General purpose IDs"),
        "uuid_v1": ("Time-ordered records", "Database clustering", "Distributed systems"),
        "nanoid": ("URL slugs", "File names", "Short links", "User-friendly IDs"),
        "ulid": ("Time-ordered records", "Log entries", "Event sourcing"),
        "cuid": ("Client-side generation", "Collision-resistant IDs"),
        "short_uuid": ("Temporary IDs", "Internal references", "Development"),
        "custom": ("Specialized applications", "Custom requirements"),
    }
)

STANDARDS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "uuid_v1": ("RFC 4122", "ISO/IEC 9834-8"),
        "uuid_v4": ("RFC 4122", "ISO/IEC 9834-8"),
        "uuid_v5": ("RFC 4122", "ISO/IEC 9834-8"),
        "nanoid": ("URL-safe", "Base64-compatible"),
        "ulid": ("Lexicographically sortable", "Crockford Base32"),
    }
)


def data_length(value: str) -> int:
    """Length of `value` with hyphens and braces removed."""
    return len(_STRIP_CHARS.sub("", value))


def entropy_bits(value: str) -> int:
    return data_length(value) * BITS_PER_CHAR


def randomness_score(value: str) -> float:
    """
    ``100 - share of the most frequent data character``, clamped at 0.

    A string of all-distinct characters scores highest for its length; an empty
    data portion scores 0.
    """
    chars = _STRIP_CHARS.sub("", value)
    if not chars:
        return 0.0
    most_common = Counter(chars).most_common(1)[0][1]
    return max(0.0, 100 - (most_common / len(chars)) * 100)


def collision_probability(value: str) -> float:
    return 2.0 ** (-entropy_bits(value) / 2)


def security_level(kind: str, length: int) -> str:
    if kind == "uuid_v1":
        return "medium"
    if kind == "short_uuid" or length < 16:
        return "low"
    if kind == "uuid_v4" and length >= 32:
        return "very_high"
    if kind in ("nanoid", "custom"):
        return "high"
    return "medium"


def analyze_structure(value: str) -> Structure:
    separators = ["-"] * value.count("-")

    if _HEX_CHARSET.match(value):
        character_set = "hexadecimal"
    elif _ALNUM_CHARSET.match(value):
        character_set = "alphanumeric"
    elif _ALNUM_NO_SPECIAL_CHARSET.match(value):
        character_set = "alphanumeric_no_special"
    else:
        character_set = "unknown"

    if value == value.upper():
        case_format = "uppercase"
    elif value == value.lower():
        case_format = "lowercase"
    else:
        case_format = "mixed"

    return Structure(
        segments=value.split("-"),
        separators=separators,
        character_set=character_set,
        case_format=case_format,
        has_hyphens=bool(separators),
        has_braces=value.startswith("{") and value.endswith("}"),
        total_length=len(value),
        data_length=data_length(value),
    )


def _security_profile(kind: str, length: int) -> SecurityProfile:
    profile = SECURITY_PROFILES.get(kind, _DEFAULT_PROFILE)
    if kind == "short_uuid" and length < 16:
        return SecurityProfile(profile.predictability, "moderate", profile.collision_resistance)
    if kind == "custom":
        if length < 12:
            return SecurityProfile(profile.predictability, "weak", "low")
        if length < 16:
            return SecurityProfile(profile.predictability, profile.cryptographic_strength, "medium")
        if length < 32:
            return SecurityProfile(profile.predictability, profile.cryptographic_strength, "high")
        return SecurityProfile(profile.predictability, profile.cryptographic_strength, "very_high")
    return profile


def analyze_security(value: str, kind: str) -> Security:
    length = data_length(value)
    bits = length * BITS_PER_CHAR
    profile = _security_profile(kind, length)

    score = 100
    score -= PREDICTABILITY_PENALTY.get(profile.predictability, 0)
    score -= STRENGTH_PENALTY.get(profile.cryptographic_strength, 0)
    score -= COLLISION_PENALTY.get(profile.collision_resistance, 0)
    if bits < MIN_ENTROPY_BITS:
        score -= LOW_ENTROPY_PENALTY

    return Security(
        predictability=profile.predictability,
        entropy_bits=bits,
        cryptographic_strength=profile.cryptographic_strength,
        timing_attack_resistant=kind != "uuid_v1",
        collision_resistance=profile.collision_resistance,
        security_score=max(0, score),
    )


def analyze_quality(value: str, kind: str) -> Quality:
    uniqueness = min(100.0, data_length(value) / FULL_UNIQUENESS_LENGTH * 100)
    randomness = randomness_score(value)
    compliance = 50.0 if kind == "uuid_v4" and not _UUID_V4_STRICT.match(value) else 100.0
    readability = 90.0 if "-" in value else 70.0
    overall = (uniqueness + randomness + compliance + readability) / 4

    issues: List[str] = []
    strengths: List[str] = []
    if uniqueness < 70:
        issues.append("Low uniqueness due to short length")
    if randomness < 70:
        issues.append("Poor randomness distribution")
    if compliance < 90:
        issues.append("Non-standard format")
    if uniqueness >= 90:
        strengths.append("High uniqueness")
    if randomness >= 80:
        strengths.append("Good randomness")
    if compliance >= 90:
        strengths.append("Standard compliant")

    return Quality(
        uniqueness_score=uniqueness,
        randomness_score=randomness,
        format_compliance=compliance,
        readability_score=readability,
        overall_quality=overall,
        issues=issues,
        strengths=strengths,
    )


def analyze_compatibility(kind: str) -> Compatibility:
    return COMPATIBILITY.get(kind, Compatibility()).model_copy(deep=True)


def analyze(value: str, kind: str) -> Analysis:
    """
    Compute the full four-way analysis of `value` as an identifier of `kind`.

    Recommendations and warnings are derived from the other views:
    security score below 70, overall quality below 80, total length below 16
    and high predictability each add one fixed message.
    """
    structure = analyze_structure(value)
    security = analyze_security(value, kind)
    quality = analyze_quality(value, kind)
    compatibility = analyze_compatibility(kind)

    recommendations: List[str] = []
    warnings: List[str] = []
    if security.security_score < SECURITY_RECOMMENDATION_THRESHOLD:
        recommendations.append(
            "Consider using a more secure identifier type for sensitive applications"
        )
    if quality.overall_quality < QUALITY_RECOMMENDATION_THRESHOLD:
        recommendations.append("Identifier quality could be improved with better randomness")
    if structure.total_length < SHORT_VALUE_THRESHOLD:
        warnings.append("Short identifiers may have higher collision probability")
    if security.predictability == "high":
        warnings.append("Identifier may be predictable, avoid for security-sensitive use cases")

    return Analysis(
        structure=structure,
        security=security,
        quality=quality,
        compatibility=compatibility,
        recommendations=recommendations,
        warnings=warnings,
    )


def build_metadata(value: str, kind: str, settings: GenerationSettings) -> Metadata:
    """Derive the metadata block for a formatted value."""
    return Metadata(
        length=len(value),
        format=settings.format,
        entropy=float(entropy_bits(value)),
        randomness=randomness_score(value),
        collision_probability=collision_probability(value),
        security_level=security_level(kind, len(value)),
        use_cases=list(USE_CASES.get(kind, ("General purpose",))),
        standards_compliance=list(STANDARDS.get(kind, ("Custom format",))),
    )


def score_breakdown(analysis: Analysis) -> Dict[str, float]:
    """Flatten the headline scores of an analysis, e.g. for tabular display."""
    return {
        "security": float(analysis.security.security_score),
        "quality": analysis.quality.overall_quality,
        "uniqueness": analysis.quality.uniqueness_score,
        "randomness": analysis.quality.randomness_score,
        "compliance": analysis.quality.format_compliance,
        "readability": analysis.quality.readability_score,
    }


__all__ = [
    "SecurityProfile",
    "SECURITY_PROFILES",
    "COMPATIBILITY",
    "USE_CASES",
    "STANDARDS",
    "data_length",
    "entropy_bits",
    "randomness_score",
    "collision_probability",
    "security_level",
    "analyze_structure",
    "analyze_security",
    "analyze_quality",
    "analyze_compatibility",
    "analyze",
    "build_metadata",
    "score_breakdown",
]
