"""
Per-item pipelines driven by the batch orchestrator.

The orchestrator owns chunking, progress, lifecycle and statistics; a pipeline
owns how one item is produced. `ItemPipeline` is that seam: `produce(index)`
builds the item at a position, `reject(index, exc)` records an item-level
failure in its place. `IdentifierPipeline` chains registry -> formatter ->
analyzer for identifier batches.
"""

from __future__ import annotations

import random
import uuid
from typing import Optional, Protocol, Set, runtime_checkable

from idbatch.analyzer import analyze, build_metadata
from idbatch.domain.models import GenerationSettings, Identifier, utc_now
from idbatch.errors import ItemGenerationError
from idbatch.formatter import format_identifier
from idbatch.strategies.registry import resolve_strategy, version_for
from idbatch.utils.logging import get_logger

log = get_logger(__name__)

DEDUP_MAX_ATTEMPTS = 3


@runtime_checkable
class ItemPipeline(Protocol):
    """Produces the items of one batch job, one position at a time."""

    def produce(self, index: int) -> Identifier:
        """Build the item at zero-based `index`; may raise for item-level faults."""
        ...

    def reject(self, index: int, exc: Exception) -> Identifier:
        """Build the invalid placeholder recorded when `produce` raised."""
        ...


def new_item_id() -> str:
    return uuid.uuid4().hex


class IdentifierPipeline:
    """
    Raw-generate, validate, format and (optionally) analyze one identifier.

    One instance serves exactly one job: it owns the job's random stream and,
    when deduplication tracking is on, the set of values already produced.
    """

    def __init__(self, settings: GenerationSettings, rng: Optional[random.Random] = None) -> None:
        self.settings = settings
        self.strategy = resolve_strategy(settings.kind)
        self.version = version_for(settings.kind)
        self._rng = rng or random.Random(settings.seed)
        self._seen: Set[str] = set()

    def _raw(self) -> str:
        raw = self.strategy.generate(self.settings, self._rng)
        if self.settings.enable_validation:
            self._validate_raw(raw)
        return raw

    def _validate_raw(self, raw: str) -> None:
        if not self.strategy.matches(raw):
            raise ItemGenerationError(
                f"Raw value '{raw}' does not match the {self.strategy.name} layout"
            )
        alphabet = self.settings.custom_alphabet
        if self.strategy.name == "custom" and alphabet and not set(raw) <= set(alphabet):
            raise ItemGenerationError(f"Raw value '{raw}' contains characters outside the alphabet")

    def _formatted(self) -> str:
        value = format_identifier(self._raw(), self.settings.format, self.settings)
        if not self.settings.enable_deduplication:
            return value

        attempts = 1
        while value in self._seen and attempts < DEDUP_MAX_ATTEMPTS:
            log.debug("Duplicate value redrawn", extra={"value": value, "attempt": attempts})
            value = format_identifier(self._raw(), self.settings.format, self.settings)
            attempts += 1
        self._seen.add(value)
        return value

    def produce(self, index: int) -> Identifier:
        value = self._formatted()
        metadata = analysis = None
        if self.settings.enable_analysis:
            metadata = build_metadata(value, self.settings.kind, self.settings)
            analysis = analyze(value, self.settings.kind)

        return Identifier(
            id=new_item_id(),
            value=value,
            kind=self.settings.kind,
            version=self.version,
            timestamp=utc_now(),
            is_valid=True,
            metadata=metadata,
            analysis=analysis,
            index=index,
        )

    def reject(self, index: int, exc: Exception) -> Identifier:
        return Identifier(
            id=new_item_id(),
            value="",
            kind=self.settings.kind,
            timestamp=utc_now(),
            is_valid=False,
            error=str(exc) or "Generation failed",
            index=index,
        )


__all__ = ["DEDUP_MAX_ATTEMPTS", "ItemPipeline", "IdentifierPipeline", "new_item_id"]
