"""
Custom alphabet strategy: caller-supplied alphabet and length.
"""

from __future__ import annotations

import random

from idbatch.domain.models import GenerationSettings
from idbatch.strategies.abstract import BASE62_ALPHABET, AbstractIdentifierStrategy, random_string

CUSTOM_DEFAULT_LENGTH = 16


class CustomAlphabetStrategy(AbstractIdentifierStrategy):
    """
    Each character is drawn independently and uniformly from the alphabet.

    Repeated characters in the alphabet weight the draw towards them; settings
    validation only requires two distinct characters.
    """

    name: str = "custom"
    description: str = "Caller-supplied alphabet and length (default base-62, 16 chars)."

    def generate(self, settings: GenerationSettings, rng: random.Random) -> str:
        length = settings.custom_length or CUSTOM_DEFAULT_LENGTH
        alphabet = settings.custom_alphabet or BASE62_ALPHABET
        return random_string(rng, alphabet, length)


__all__ = ["CUSTOM_DEFAULT_LENGTH", "CustomAlphabetStrategy"]
