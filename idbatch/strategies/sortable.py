"""
Time-sortable identifier strategy (ULID layout).

A 48-bit millisecond timestamp rendered as 10 Crockford base-32 characters,
followed by 80 random bits as 16 more. Values generated later sort after
values generated earlier, at millisecond resolution.
"""

from __future__ import annotations

import random
import re
import time

from idbatch.domain.models import GenerationSettings
from idbatch.strategies.abstract import AbstractIdentifierStrategy, random_string

CROCKFORD_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
TIME_LENGTH = 10
RANDOM_LENGTH = 16


def encode_time(epoch_ms: int) -> str:
    """Encode a millisecond timestamp as a fixed-width Crockford base-32 string."""
    chars = []
    for _ in range(TIME_LENGTH):
        epoch_ms, remainder = divmod(epoch_ms, 32)
        chars.append(CROCKFORD_ALPHABET[remainder])
    return "".join(reversed(chars))


class UlidStrategy(AbstractIdentifierStrategy):
    name: str = "ulid"
    description: str = "Lexicographically sortable: 10-char timestamp + 16-char random, Crockford base-32."
    pattern = re.compile(r"[0-9A-HJKMNP-TV-Z]{26}")

    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:
        return encode_time(time.time_ns() // 1_000_000) + random_string(
            rng, CROCKFORD_ALPHABET, RANDOM_LENGTH
        )


__all__ = ["CROCKFORD_ALPHABET", "encode_time", "UlidStrategy"]
