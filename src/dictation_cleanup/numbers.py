"""Spoken number normalization.

Converts number words in corrected transcript text into numerals:

    "two hundred and sixty five" -> "265"
    "four point five"            -> "4.5"
    "seventy-five"               -> "75"

Small numbers (zero to ten) stay spelled out when the words around them
suggest they are not counts ("the one that", "pick two"). "one" is kept
unless a multiplier follows it ("one hundred" -> "100").
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType

from dictation_cleanup.logging import get_logger
from dictation_cleanup.text import lookup_key, split_punctuation

logger = get_logger(__name__)

NUMBER_WORDS = MappingProxyType({
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4,
    "five": 5, "six": 6, "seven": 7, "eight": 8, "nine": 9,
    "ten": 10, "eleven": 11, "twelve": 12, "thirteen": 13,
    "fourteen": 14, "fifteen": 15, "sixteen": 16, "seventeen": 17,
    "eighteen": 18, "nineteen": 19, "twenty": 20, "thirty": 30,
    "forty": 40, "fifty": 50, "sixty": 60, "seventy": 70,
    "eighty": 80, "ninety": 90,
})

MULTIPLIERS = MappingProxyType({
    "hundred": 100,
    "thousand": 1_000,
    "million": 1_000_000,
    "billion": 1_000_000_000,
})

CONNECTIVE = "and"
DECIMAL_POINT = "point"

# Context exceptions only protect values up to this
MAX_CONTEXT_SENSITIVE = 10

# Longest alternatives first so "sixty-" is not read as "six" + "ty-"
_HYPHENATED_NUMBER_RE = re.compile(
    r"\b(" + "|".join(sorted(NUMBER_WORDS, key=len, reverse=True)) + r")-(?=\w)",
    re.IGNORECASE,
)

_SPACE_RE = re.compile(r"[ \t]")


@dataclass(frozen=True)
class ContextExceptionSet:
    """Neighbouring words that keep a small number spelled out.

    Attributes:
        keep_as_word_before: Words that, immediately before the number,
            keep it as a word ("the one", "pick two")
        keep_as_word_after: Words that, immediately after the number,
            keep it as a word ("one of", "two more")
    """

    keep_as_word_before: frozenset[str] = field(default_factory=frozenset)
    keep_as_word_after: frozenset[str] = field(default_factory=frozenset)


DEFAULT_CONTEXT_EXCEPTIONS = ContextExceptionSet(
    keep_as_word_before=frozenset({
        # Determiners/articles
        "the", "a", "an", "this", "that", "these", "those", "another", "other",
        # Quantifiers
        "each", "every", "any", "some", "no", "either", "neither",
        # Selection verbs
        "pick", "choose", "select", "find", "get", "want", "need", "see", "grab", "take",
        # Comparisons
        "only", "just", "even", "also",
        # Ordinal context
        "number", "option", "choice", "item", "step", "phase", "part", "chapter", "section",
        # Positional
        "next", "last", "first", "previous", "final", "same", "right", "wrong", "correct",
    }),
    keep_as_word_after=frozenset({
        # Partitive
        "of", "out",
        # Comparative
        "more", "less", "another", "other", "else",
        # Generic nouns where the number means "a single instance"
        "thing", "time", "way", "reason", "person", "day", "week", "month", "year",
        "moment", "second", "minute", "hour", "place", "side", "hand", "step",
        # Relative pronouns
        "who", "that", "which", "where", "when",
    }),
)


def expand_hyphenated_numbers(text: str) -> str:
    """Rewrite "<number>-<word>" as "<number> <word>".

    Chains expand fully: "twenty-one-hundred" -> "twenty one hundred".
    """
    return _HYPHENATED_NUMBER_RE.sub(r"\1 ", text)


class NumberNormalizer:
    """Converts spoken number sequences into numerals.

    Example:
        normalizer = NumberNormalizer()
        normalizer.convert_number_words("I have four apples")  # "I have 4 apples"
        normalizer.convert_number_words("pick one")            # "pick one"
    """

    def __init__(self, exceptions: ContextExceptionSet = DEFAULT_CONTEXT_EXCEPTIONS):
        self.exceptions = exceptions

    def convert_number_words(self, text: str) -> str:
        """Convert number words in text to numerals.

        Args:
            text: Corrected transcript text

        Returns:
            Text with number sequences replaced, tokens re-joined with
            single spaces
        """
        if not text:
            return text

        words = _SPACE_RE.split(expand_hyphenated_numbers(text))
        result: list[str] = []
        converted = 0
        i = 0

        while i < len(words):
            word = words[i]

            if lookup_key(word) in NUMBER_WORDS and self.should_keep_as_word(words, i):
                result.append(word)
                i += 1
                continue

            number, consumed = self.parse_number_sequence(words, i)
            if number is not None and consumed > 0:
                leading = split_punctuation(words[i])[0]
                trailing = split_punctuation(words[i + consumed - 1])[2]
                result.append(f"{leading}{number}{trailing}")
                converted += 1
                i += consumed
            else:
                result.append(word)
                i += 1

        if converted:
            logger.debug(f"Converted {converted} number sequence(s)")
        return " ".join(result)

    def should_keep_as_word(self, words: list[str], index: int) -> bool:
        """Check whether the number word at ``index`` stays spelled out.

        Only values up to ten are context-sensitive, and never when a
        multiplier follows ("pick two hundred"). "one" otherwise always
        stays a word.
        """
        value = NUMBER_WORDS.get(lookup_key(words[index]))
        if value is None or value > MAX_CONTEXT_SENSITIVE:
            return False

        after = lookup_key(words[index + 1]) if index + 1 < len(words) else ""
        if after in MULTIPLIERS:
            return False
        if value == 1:
            return True

        before = lookup_key(words[index - 1]) if index > 0 else ""
        return (
            before in self.exceptions.keep_as_word_before
            or after in self.exceptions.keep_as_word_after
        )

    def parse_number_sequence(self, words: list[str], start: int) -> tuple[str | None, int]:
        """Parse the longest number sequence beginning at ``start``.

        ``current`` holds the part below one thousand being built and
        ``total`` the groups already scaled by thousand/million/billion.
        A token carrying trailing punctuation ends the sequence, and one
        with leading punctuation cannot extend it.

        Args:
            words: Tokens of the text
            start: Index of the first token to consider

        Returns:
            Tuple of (numeral string or None, tokens consumed)
        """
        total = 0
        current = 0
        consumed = 0
        has_number = False
        is_zero = False
        last_group_scale: int | None = None
        decimal_digits = ""

        i = start
        while i < len(words):
            token = words[i]
            leading, _, trailing = split_punctuation(token)
            if i > start and leading:
                break
            word = lookup_key(token)

            # "two hundred and five", "twenty and five"
            if (
                word == CONNECTIVE
                and has_number
                and not trailing
                and i + 1 < len(words)
                and lookup_key(words[i + 1]) in NUMBER_WORDS
            ):
                i += 1
                continue

            if word == DECIMAL_POINT and has_number:
                if not trailing:
                    decimal_digits, j = self._parse_decimal_digits(words, i + 1)
                    if decimal_digits:
                        consumed = j - start
                break

            value = NUMBER_WORDS.get(word)
            scale = MULTIPLIERS.get(word)

            if value is not None:
                if is_zero or (value == 0 and has_number) or not self._extends(current, value):
                    break
                current += value
                is_zero = value == 0
            elif scale is not None:
                if is_zero:
                    break
                if scale == 100:
                    if current >= 100:
                        break
                    current = (current or 1) * scale
                else:
                    if last_group_scale is not None and scale >= last_group_scale:
                        break
                    total += (current or 1) * scale
                    current = 0
                    last_group_scale = scale
            else:
                break

            has_number = True
            consumed = i - start + 1
            i += 1
            if trailing:
                break

        if not has_number:
            return None, 0

        total += current
        if decimal_digits:
            return f"{total}.{decimal_digits}", consumed
        return str(total), consumed

    @staticmethod
    def _extends(current: int, value: int) -> bool:
        """Whether ``value`` can be added to the sub-hundred part of ``current``.

        Allowed when the sub-hundred part is empty, or when it is a bare
        tens value and ``value`` is a single digit ("twenty" + "five").
        """
        below_hundred = current % 100
        if below_hundred == 0:
            return True
        return below_hundred >= 20 and below_hundred % 10 == 0 and 0 < value < 10

    @staticmethod
    def _parse_decimal_digits(words: list[str], start: int) -> tuple[str, int]:
        """Collect single-digit words after "point"; returns (digits, next index)."""
        digits = []
        j = start
        while j < len(words):
            leading, _, trailing = split_punctuation(words[j])
            value = NUMBER_WORDS.get(lookup_key(words[j]))
            if value is None or value > 9 or (digits and leading):
                break
            digits.append(str(value))
            j += 1
            if trailing:
                break
        return "".join(digits), j


def convert_number_words(text: str) -> str:
    """Convert number words using the default context exceptions."""
    return NumberNormalizer().convert_number_words(text)
