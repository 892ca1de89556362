"""
Formatting pipeline for raw identifiers.

Steps always run in the same order: case policy, structural format, then
prefix and suffix. Every step is total: no input makes `format_identifier`
raise.
"""

from __future__ import annotations

import base64
import re
from typing import Callable, Dict, Optional

from idbatch.domain.models import GenerationSettings

BASE64_WIDTH = 22
URN_SCHEME = "urn:uuid:"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def apply_case(value: str, case: Optional[str]) -> str:
    if case == "uppercase":
        return value.upper()
    if case == "lowercase":
        return value.lower()
    return value


def _standard(value: str) -> str:
    return value


def _compact(value: str) -> str:
    return value.replace("-", "")


def _braced(value: str) -> str:
    return "{" + value + "}"


def _urn(value: str) -> str:
    return URN_SCHEME + value


def _base64(value: str) -> str:
    try:
        encoded = base64.b64encode(value.encode("latin-1")).decode("ascii")
    except UnicodeEncodeError:
        encoded = value
    return _NON_ALNUM.sub("", encoded)[:BASE64_WIDTH]


def _hex(value: str) -> str:
    return value.replace("-", "").lower()


STRUCTURAL_FORMATS: Dict[str, Callable[[str], str]] = {
    "standard": _standard,
    "compact": _compact,
    "braced": _braced,
    "urn": _urn,
    "base64": _base64,
    "hex": _hex,
}


def format_identifier(raw: str, target_format: str, settings: Optional[GenerationSettings] = None) -> str:
    """
    Apply case, structural format and affixes to a raw identifier.

    Parameters
    ----------
    raw : str
        Value produced by a strategy.
    target_format : str
        One of the keys of `STRUCTURAL_FORMATS`; unknown names behave like
        ``standard``.
    settings : GenerationSettings | None
        Source of the case policy and prefix/suffix. Omitted means no case
        change and no affixes.
    """
    formatted = apply_case(raw, settings.case if settings else None)
    formatted = STRUCTURAL_FORMATS.get(target_format, _standard)(formatted)

    if settings and settings.prefix:
        formatted = settings.prefix + formatted
    if settings and settings.suffix:
        formatted = formatted + settings.suffix
    return formatted


__all__ = ["BASE64_WIDTH", "URN_SCHEME", "STRUCTURAL_FORMATS", "apply_case", "format_identifier"]
