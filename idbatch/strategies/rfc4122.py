"""
RFC 4122 identifier strategies (versions 1, 4 and 5).

All three render the canonical lowercase `8-4-4-4-12` grouping with the version
nibble fixed and the variant nibble in `{8,9,a,b}`. Values are built with the
standard library `uuid` module from the job's random stream, so a seeded job
reproduces its v4/v5 values exactly.
"""

from __future__ import annotations

import random
import re
import uuid

from idbatch.domain.models import GenerationSettings
from idbatch.strategies.abstract import BASE36_ALPHABET, AbstractIdentifierStrategy, random_string

UUID_V4_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}"
)
V5_NAMESPACE = uuid.NAMESPACE_DNS


class UuidV4Strategy(AbstractIdentifierStrategy):
    """128 random bits with the version and variant fields stamped in."""

    name: str = "uuid_v4"
    description: str = "Random RFC 4122 version 4 UUID."
    version = 4
    pattern = UUID_V4_PATTERN

    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:
        return str(uuid.UUID(int=rng.getrandbits(128), version=4))


class UuidV1Strategy(AbstractIdentifierStrategy):
    """
    Time-derived UUID.

    The 60-bit timestamp comes from the wall clock; node and clock sequence are
    drawn from the job's random stream so no hardware address leaks into values.
    The first segment holds ``time_low``, the low 32 bits of the timestamp, so
    values do not sort by creation time. Use ``ulid`` for a sortable prefix.
    """

    name: str = "uuid_v1"
    description: str = "Timestamp-based RFC 4122 version 1 UUID with a random node."
    version = 1
    pattern = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-1[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}")

    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:
        # multicast bit marks the node as random rather than a MAC address
        node = rng.getrandbits(48) | 0x010000000000
        return str(uuid.uuid1(node=node, clock_seq=rng.getrandbits(14)))


class UuidV5Strategy(AbstractIdentifierStrategy):
    """SHA-1 name-based UUID over a fixed namespace and a generated name."""

    name: str = "uuid_v5"
    description: str = "Name-based RFC 4122 version 5 UUID (DNS namespace, random name)."
    version = 5
    pattern = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-5[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}")

    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:
        name = "batch-" + random_string(rng, BASE36_ALPHABET, 6)
        return str(uuid.uuid5(V5_NAMESPACE, name))


__all__ = ["UUID_V4_PATTERN", "UuidV1Strategy", "UuidV4Strategy", "UuidV5Strategy"]
