from __future__ import annotations

import random
import re
import uuid

import pytest

from idbatch.domain.models import KNOWN_KINDS, GenerationSettings
from idbatch.strategies import registry
from idbatch.strategies.abstract import to_base
from idbatch.strategies.compact import NANOID_ALPHABET
from idbatch.strategies.registry import (
    FALLBACK_KIND,
    available_kinds,
    generate_raw,
    resolve_strategy,
    version_for,
)
from idbatch.strategies.sortable import CROCKFORD_ALPHABET, encode_time

V4_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")
SAMPLE_SIZE = 200
SEED = 1234


def test_available_kinds_covers_every_known_kind():
    kinds = available_kinds()
    assert kinds == sorted(kinds)
    assert set(kinds) == set(KNOWN_KINDS)


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        registry.STRATEGIES["uuid_v4"] = None  # type: ignore[index]


def test_uuid_v4_raw_values_match_rfc_layout():
    rng = random.Random(SEED)
    settings = GenerationSettings(kind="uuid_v4")
    for _ in range(SAMPLE_SIZE):
        assert V4_PATTERN.match(generate_raw("uuid_v4", settings, rng))


def test_unknown_kind_falls_back_to_v4():
    strategy = resolve_strategy("snowflake")
    assert strategy.name == FALLBACK_KIND
    value = generate_raw("snowflake", GenerationSettings(kind="snowflake"), random.Random(SEED))
    assert V4_PATTERN.match(value)
    assert version_for("snowflake") is None


@pytest.mark.parametrize(
    ("kind", "expected"),
    [("uuid_v1", 1), ("uuid_v4", 4), ("uuid_v5", 5), ("nanoid", None), ("ulid", None)],
)
def test_version_tags_only_for_rfc_kinds(kind, expected):
    assert version_for(kind) == expected


def test_rfc_versions_are_stamped_into_values():
    rng = random.Random(SEED)
    v1 = generate_raw("uuid_v1", GenerationSettings(kind="uuid_v1"), rng)
    v5 = generate_raw("uuid_v5", GenerationSettings(kind="uuid_v5"), rng)
    assert v1[14] == "1"
    assert v5[14] == "5"
    assert resolve_strategy("uuid_v1").matches(v1)
    assert resolve_strategy("uuid_v5").matches(v5)


def test_uuid_v1_leads_with_time_low():
    value = generate_raw("uuid_v1", GenerationSettings(kind="uuid_v1"), random.Random(SEED))
    parsed = uuid.UUID(value)
    assert parsed.version == 1
    assert int(value[:8], 16) == parsed.time_low == parsed.time & 0xFFFFFFFF


def test_custom_kind_uses_alphabet_and_length():
    settings = GenerationSettings(kind="custom", custom_length=8, custom_alphabet="01")
    rng = random.Random(SEED)
    for _ in range(SAMPLE_SIZE):
        value = generate_raw("custom", settings, rng)
        assert len(value) == 8
        assert set(value) <= {"0", "1"}


def test_nanoid_defaults_to_21_url_safe_chars():
    value = generate_raw("nanoid", GenerationSettings(kind="nanoid"), random.Random(SEED))
    assert len(value) == 21
    assert set(value) <= set(NANOID_ALPHABET)


def test_nanoid_respects_custom_length():
    settings = GenerationSettings(kind="nanoid", custom_length=10)
    assert len(generate_raw("nanoid", settings, random.Random(SEED))) == 10


def test_short_uuid_cuid_and_ulid_shapes():
    rng = random.Random(SEED)
    short = generate_raw("short_uuid", GenerationSettings(kind="short_uuid"), rng)
    cuid = generate_raw("cuid", GenerationSettings(kind="cuid"), rng)
    ulid = generate_raw("ulid", GenerationSettings(kind="ulid"), rng)

    assert re.fullmatch(r"[0-9a-z]{26}", short)
    assert cuid.startswith("c") and len(cuid) == 25
    assert len(ulid) == 26 and set(ulid) <= set(CROCKFORD_ALPHABET)


def test_ulid_time_prefix_sorts_with_time():
    assert encode_time(1_000) < encode_time(2_000)
    assert len(encode_time(0)) == 10
    assert encode_time(0) == "0" * 10


def test_seeded_streams_reproduce_random_kinds():
    for kind in ("uuid_v4", "uuid_v5", "nanoid", "short_uuid", "custom"):
        settings = GenerationSettings(kind=kind, custom_length=12, custom_alphabet="abcdef")
        first = [generate_raw(kind, settings, random.Random(SEED)) for _ in range(3)]
        second = [generate_raw(kind, settings, random.Random(SEED)) for _ in range(3)]
        assert first == second


def test_to_base_renders_positional_digits():
    assert to_base(0, "01") == "0"
    assert to_base(5, "01") == "101"
    assert to_base(35, "0123456789abcdefghijklmnopqrstuvwxyz") == "z"
    with pytest.raises(ValueError):
        to_base(-1, "01")
