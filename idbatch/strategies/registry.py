"""
Registry mapping identifier kinds to their generation strategies.

The mapping is built once at import time and exposed read-only. Unknown kinds
resolve to the RFC 4122 v4 strategy: callers asking for a kind this registry
does not know still get a valid identifier rather than an error.
"""

from __future__ import annotations

import random
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from idbatch.domain.models import GenerationSettings
from idbatch.strategies.abstract import IdentifierStrategy
from idbatch.strategies.compact import CuidStrategy, NanoidStrategy, ShortUuidStrategy
from idbatch.strategies.custom import CustomAlphabetStrategy
from idbatch.strategies.rfc4122 import UuidV1Strategy, UuidV4Strategy, UuidV5Strategy
from idbatch.strategies.sortable import UlidStrategy
from idbatch.utils.logging import get_logger

log = get_logger(__name__)

FALLBACK_KIND = "uuid_v4"


def _strategy_factories() -> Dict[str, Callable[[], IdentifierStrategy]]:
    """Registry of available strategies."""
    return {
        "uuid_v1": lambda: UuidV1Strategy(),
        "uuid_v4": lambda: UuidV4Strategy(),
        "uuid_v5": lambda: UuidV5Strategy(),
        "nanoid": lambda: NanoidStrategy(),
        "ulid": lambda: UlidStrategy(),
        "cuid": lambda: CuidStrategy(),
        "short_uuid": lambda: ShortUuidStrategy(),
        "custom": lambda: CustomAlphabetStrategy(),
    }


STRATEGIES: Mapping[str, IdentifierStrategy] = MappingProxyType(
    {kind: factory() for kind, factory in _strategy_factories().items()}
)


def available_kinds() -> List[str]:
    """List registered identifier kinds."""
    return sorted(STRATEGIES.keys())


def resolve_strategy(kind: str) -> IdentifierStrategy:
    """Return the strategy for `kind`, falling back to v4 for unknown kinds."""
    strategy = STRATEGIES.get(kind)
    if strategy is None:
        log.debug(f"Unknown kind '{kind}', falling back to {FALLBACK_KIND}", extra={"kind": kind})
        return STRATEGIES[FALLBACK_KIND]
    return strategy


def version_for(kind: str) -> Optional[int]:
    """RFC version tag for `kind`; None for non-RFC families (and unknown kinds)."""
    strategy = STRATEGIES.get(kind)
    return strategy.version if strategy is not None else None


def generate_raw(
    kind: str, settings: GenerationSettings, rng: Optional[random.Random] = None
) -> str:
    """
    Generate one raw (unformatted) identifier of the given kind.

    Parameters
    ----------
    kind : str
        Identifier family; unknown values use the v4 rule.
    settings : GenerationSettings
        Job settings (custom length/alphabet are read from here).
    rng : random.Random | None
        Random stream; a fresh unseeded one is used when omitted.
    """
    return resolve_strategy(kind).generate(settings, rng or random.Random())


__all__ = [
    "FALLBACK_KIND",
    "STRATEGIES",
    "available_kinds",
    "resolve_strategy",
    "version_for",
    "generate_raw",
]
