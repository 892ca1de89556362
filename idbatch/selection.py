"""
Filtering and ordering of generated identifiers.

Selection never touches a job: it takes a sequence of identifiers and returns
a new list, so it can be applied to any snapshot (including a mid-run one).
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence

from idbatch.domain.models import FilterCriteria, Identifier


def _quality(item: Identifier) -> float:
    return item.analysis.quality.overall_quality if item.analysis else 0.0


def _security(item: Identifier) -> float:
    return float(item.analysis.security.security_score) if item.analysis else 0.0


def matches(item: Identifier, criteria: FilterCriteria) -> bool:
    """Whether one identifier passes every bound set on `criteria`."""
    if criteria.valid_only and not item.is_valid:
        return False
    if criteria.kinds and item.kind not in criteria.kinds:
        return False

    length = len(item.value)
    if criteria.min_length is not None and length < criteria.min_length:
        return False
    if criteria.max_length is not None and length > criteria.max_length:
        return False

    quality, security = _quality(item), _security(item)
    if criteria.min_quality is not None and quality < criteria.min_quality:
        return False
    if criteria.max_quality is not None and quality > criteria.max_quality:
        return False
    if criteria.min_security is not None and security < criteria.min_security:
        return False
    if criteria.max_security is not None and security > criteria.max_security:
        return False

    if criteria.security_levels:
        level = item.metadata.security_level if item.metadata else None
        if level not in criteria.security_levels:
            return False
    return True


def filter_identifiers(
    items: Iterable[Identifier], criteria: Optional[FilterCriteria]
) -> List[Identifier]:
    if criteria is None:
        return list(items)
    return [item for item in items if matches(item, criteria)]


# Scores sort best-first; ties keep generation order (sorted() is stable).
_SORT_KEYS: Dict[str, Callable[[Identifier], object]] = {
    "alphabetical": lambda item: item.value,
    "timestamp": lambda item: item.timestamp,
    "quality": lambda item: -_quality(item),
    "security": lambda item: -_security(item),
}


def sort_identifiers(items: Sequence[Identifier], sort_order: str = "none") -> List[Identifier]:
    key = _SORT_KEYS.get(sort_order)
    if key is None:
        return list(items)
    return sorted(items, key=key)


def select_identifiers(
    items: Sequence[Identifier],
    criteria: Optional[FilterCriteria] = None,
    sort_order: str = "none",
) -> List[Identifier]:
    """Filter then sort `items`; returns a new list."""
    return sort_identifiers(filter_identifiers(items, criteria), sort_order)


__all__ = ["matches", "filter_identifiers", "sort_identifiers", "select_identifiers"]
