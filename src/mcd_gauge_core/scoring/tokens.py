"""
Token counting

Estimates the token count of a response with a word-length heuristic, so that
token efficiency is comparable across models regardless of their tokenizer.
"""

from __future__ import annotations

import math
import re

_NON_WORD = re.compile(r"[^\w]")


def _word_tokens(word: str) -> float:
    """Estimated tokens for a single whitespace-delimited unit"""
    clean = _NON_WORD.sub("", word)
    if not clean:
        return 0.25  # punctuation-only unit
    if len(clean) <= 3:
        return 1
    if len(clean) <= 8:
        return math.ceil(len(clean) / 4)
    return math.ceil(len(clean) / 3.5)


def count_tokens(text: str) -> int:
    """
    Estimate the number of tokens in a text

    Short words (3 chars or fewer) count as one token, medium words as
    ceil(len / 4), long words as ceil(len / 3.5), punctuation-only units as a
    quarter token. Non-empty text counts at least one token.

    Args:
        text: Text to measure

    Returns:
        Estimated token count (0 for empty or whitespace-only text)
    """
    if not text or not text.strip():
        return 0

    total = sum(_word_tokens(word) for word in text.split())
    # Round half up
    return max(1, math.floor(total + 0.5))
