"""
Strategies package for idbatch.

This module re-exports the abstract interfaces, the concrete identifier
strategies and the kind registry so downstream code can import from
`idbatch.strategies` directly.
"""

from idbatch.strategies.abstract import AbstractIdentifierStrategy, IdentifierStrategy
from idbatch.strategies.compact import CuidStrategy, NanoidStrategy, ShortUuidStrategy
from idbatch.strategies.custom import CustomAlphabetStrategy
from idbatch.strategies.registry import (
    FALLBACK_KIND,
    STRATEGIES,
    available_kinds,
    generate_raw,
    resolve_strategy,
    version_for,
)
from idbatch.strategies.rfc4122 import UuidV1Strategy, UuidV4Strategy, UuidV5Strategy
from idbatch.strategies.sortable import UlidStrategy

__all__ = [
    # Abstracts
    "AbstractIdentifierStrategy",
    "IdentifierStrategy",
    # Concrete strategies
    "CuidStrategy",
    "CustomAlphabetStrategy",
    "NanoidStrategy",
    "ShortUuidStrategy",
    "UlidStrategy",
    "UuidV1Strategy",
    "UuidV4Strategy",
    "UuidV5Strategy",
    # Registry
    "FALLBACK_KIND",
    "STRATEGIES",
    "available_kinds",
    "generate_raw",
    "resolve_strategy",
    "version_for",
]
