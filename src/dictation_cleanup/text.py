"""Shared text helpers.

Punctuation is decided by Unicode category (any ``P*`` category), so
curly quotes, dashes and ellipses are treated the same as ASCII marks.
"""

from __future__ import annotations

import re
import unicodedata
from typing import NamedTuple

TOKEN_RE = re.compile(r"\S+")

SENTENCE_TERMINATORS = frozenset(".!?")


class Token(NamedTuple):
    """A whitespace-delimited token and its span in the source string."""

    text: str
    start: int
    end: int


def is_punctuation(char: str) -> bool:
    """Return True if a single character is Unicode punctuation."""
    return unicodedata.category(char).startswith("P")


def remove_punctuation(text: str) -> str:
    """Remove every punctuation character, wherever it appears."""
    return "".join(c for c in text if not is_punctuation(c))


def split_punctuation(word: str) -> tuple[str, str, str]:
    """Split a token into leading punctuation, core, trailing punctuation.

    Example:
        split_punctuation('"four,')  # ('"', 'four', ',')
    """
    start = 0
    end = len(word)
    while start < end and is_punctuation(word[start]):
        start += 1
    while end > start and is_punctuation(word[end - 1]):
        end -= 1
    return word[:start], word[start:end], word[end:]


def trim_punctuation(word: str) -> str:
    """Strip leading and trailing punctuation from a token."""
    return split_punctuation(word)[1]


def lookup_key(word: str) -> str:
    """Lowercased, edge-trimmed form of a token used for table lookups."""
    return trim_punctuation(word.lower())


def normalize_phrase(text: str) -> str:
    """Normalize a phrase for dictionary matching.

    Lowercases, removes all punctuation and trims surrounding whitespace.
    Interior whitespace is left as-is.

    Example:
        normalize_phrase("  Clawed! ")  # "clawed"
        normalize_phrase("test-123")    # "test123"
    """
    return remove_punctuation(text.lower()).strip()


def tokenize(text: str) -> list[Token]:
    """Split text on whitespace, keeping each token's offsets."""
    return [Token(m.group(0), m.start(), m.end()) for m in TOKEN_RE.finditer(text)]


def apply_sentence_case(text: str) -> str:
    """Capitalize the first letter of each sentence.

    The first letter of the string is capitalized, as is the first letter
    after any ``.``, ``!`` or ``?``. Non-letters between the terminator and
    the letter do not cancel the pending capitalization.
    """
    if not text:
        return text

    result = []
    capitalize_next = True

    for char in text:
        if capitalize_next and char.isalpha():
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char)
            if char in SENTENCE_TERMINATORS:
                capitalize_next = True

    return "".join(result)
