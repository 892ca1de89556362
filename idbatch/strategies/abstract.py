"""
Abstract strategy interfaces for identifier generation.

Each identifier family implements the IdentifierStrategy protocol: a short
machine-friendly `name` (the kind), an optional RFC version tag, an optional raw
pattern used when validation is enabled, and `generate`, which returns one raw
(unformatted) value.
"""

from __future__ import annotations

import abc
import random
from typing import Optional, Pattern, Protocol, runtime_checkable

from idbatch.domain.models import GenerationSettings

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


@runtime_checkable
class IdentifierStrategy(Protocol):
    """
    Common interface all identifier strategies must implement.

    Attributes
    ----------
    name : str
        The identifier kind this strategy produces.
    description : str
        A human-friendly summary of the generation rule.
    version : int | None
        RFC 4122 version tag, for RFC-style kinds only.
    pattern : Pattern[str] | None
        Shape every raw value must match, when the family has a fixed one.
    """

    name: str
    description: str
    version: Optional[int]
    pattern: Optional[Pattern[str]]

    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:
        """
        Produce one raw identifier.

        Parameters
        ----------
        settings : GenerationSettings
            Job settings; only the custom length/alphabet fields are consulted.
        rng : random.Random
            Random stream owned by the calling job.
        """
        ...

    def matches(self, raw: str) -> bool:
        ...


class AbstractIdentifierStrategy(abc.ABC):
    """
    ABC helper for class-based implementations.

    Subclasses set `name` and `description` (plus `version`/`pattern` where they
    apply) and implement `generate`.
    """

    name: str
    description: str
    version: Optional[int] = None
    pattern: Optional[Pattern[str]] = None

    @abc.abstractmethod
    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:  # pragma: no cover - interface only
        """Return one raw identifier."""
        raise NotImplementedError

    def matches(self, raw: str) -> bool:
        """Whether `raw` has this family's shape; families without one accept anything."""
        if self.pattern is None:
            return True
        return self.pattern.fullmatch(raw) is not None


def random_string(rng: random.Random, alphabet: str, length: int) -> str:
    """Draw `length` characters independently and uniformly from `alphabet`."""
    return "".join(rng.choice(alphabet) for _ in range(length))


def to_base(value: int, alphabet: str) -> str:
    """Render a non-negative integer in the positional system spelled by `alphabet`."""
    if value < 0:
        raise ValueError("value must be non-negative")
    base = len(alphabet)
    if value == 0:
        return alphabet[0]
    digits = []
    while value:
        value, remainder = divmod(value, base)
        digits.append(alphabet[remainder])
    return "".join(reversed(digits))


__all__ = [
    "BASE36_ALPHABET",
    "BASE62_ALPHABET",
    "IdentifierStrategy",
    "AbstractIdentifierStrategy",
    "random_string",
    "to_base",
]
