"""
Short alphanumeric identifier strategies: NanoID-style, short UUID and CUID.

These families trade the RFC grouping for compact, URL-friendly strings.
"""

from __future__ import annotations

import os
import random
import re
import time

from idbatch.domain.models import GenerationSettings
from idbatch.strategies.abstract import (
    BASE36_ALPHABET,
    BASE62_ALPHABET,
    AbstractIdentifierStrategy,
    random_string,
    to_base,
)

NANOID_ALPHABET = BASE62_ALPHABET + "_-"
NANOID_DEFAULT_LENGTH = 21
SHORT_UUID_LENGTH = 26
CUID_BLOCK = 4


class NanoidStrategy(AbstractIdentifierStrategy):
    """URL-safe random string, 21 characters unless a custom length is given."""

    name: str = "nanoid"
    description: str = "URL-safe random ID over A-Za-z0-9_- (default 21 chars)."

    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:
        length = settings.custom_length or NANOID_DEFAULT_LENGTH
        return random_string(rng, NANOID_ALPHABET, length)


class ShortUuidStrategy(AbstractIdentifierStrategy):
    name: str = "short_uuid"
    description: str = "26 lowercase base-36 characters."
    pattern = re.compile(r"[0-9a-z]{26}")

    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:
        return random_string(rng, BASE36_ALPHABET, SHORT_UUID_LENGTH)


def _pad(block: str, width: int = CUID_BLOCK) -> str:
    return block.rjust(width, "0")[-width:]


class CuidStrategy(AbstractIdentifierStrategy):
    """
    Collision-resistant ID: ``c`` + time + counter + fingerprint + random.

    The fingerprint is derived from the process id, so values from one process
    share it while values from different hosts/processes diverge.
    """

    name: str = "cuid"
    description: str = "'c' + base-36 timestamp, counter, process fingerprint and random block."
    pattern = re.compile(r"c[0-9a-z]{24}")

    def __init__(self) -> None:
        self._fingerprint = _pad(to_base(os.getpid(), BASE36_ALPHABET))

    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:
        timestamp = _pad(to_base(time.time_ns() // 1_000_000, BASE36_ALPHABET), 8)
        counter = _pad(to_base(rng.randrange(36**CUID_BLOCK), BASE36_ALPHABET))
        block = random_string(rng, BASE36_ALPHABET, 2 * CUID_BLOCK)
        return f"c{timestamp}{counter}{self._fingerprint}{block}"


__all__ = [
    "NANOID_ALPHABET",
    "NanoidStrategy",
    "ShortUuidStrategy",
    "CuidStrategy",
]
