"""Transcript correction engine.

Applies, in order:
1. Built-in contextual rules (``BUILTIN_RULES``)
2. User dictionary substitutions, longest phrase first
3. Sentence case

Every pattern is applied with a single ``re.sub`` over the current text,
with a callback deciding each replacement. Match offsets are never reused
against a string that has already been modified.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable

from dictation_cleanup.correction.rules import BUILTIN_RULES, CorrectionRule, compile_phrase_pattern
from dictation_cleanup.errors import MalformedRuleError
from dictation_cleanup.logging import get_logger
from dictation_cleanup.text import apply_sentence_case, lookup_key, tokenize

if TYPE_CHECKING:
    from dictation_cleanup.dictionary import DictionaryEntry, DictionaryStore

logger = get_logger(__name__)

DEFAULT_CONTEXT_WINDOW = 8

# Dictionary phrase words need whitespace or stray punctuation between them
DICTIONARY_WORD_SEPARATOR = r"(?:\s+|\s*[^\w\s]+\s*)"

TRAILING_PUNCTUATION = ".!?,;:"

# Phonetic collisions on these would corrupt ordinary speech
COMMON_WORD_GUARD = frozenset({
    "gonna", "wanna", "gotta", "kinda", "sorta", "done", "yeah", "okay",
    "ok", "um", "uh", "like", "so", "just", "the", "a", "an", "and", "i",
})


@dataclass
class Correction:
    """Represents a single correction made to a transcript."""

    original: str
    corrected: str
    match_type: str  # "rule" or "dictionary"
    position: int | None = None  # Character position in the text at that pass
    context: str = ""  # Surrounding text for reference

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original": self.original,
            "corrected": self.corrected,
            "match_type": self.match_type,
            "position": self.position,
            "context": self.context,
        }


@dataclass
class CorrectionLog:
    """Log of all corrections made during a correction pass."""

    corrections: list[Correction] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)
    skipped_rules: int = 0

    def add(self, correction: Correction) -> None:
        """Add a correction to the log."""
        self.corrections.append(correction)

    def __len__(self) -> int:
        """Return number of corrections."""
        return len(self.corrections)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "correction_count": len(self.corrections),
            "skipped_rules": self.skipped_rules,
            "corrections": [c.to_dict() for c in self.corrections],
        }


def _snippet(text: str, start: int, end: int, margin: int = 20) -> str:
    return text[max(0, start - margin):min(len(text), end + margin)]


def strip_trailing_punctuation(text: str) -> str:
    """Drop trailing sentence punctuation from a replacement."""
    return text.rstrip(TRAILING_PUNCTUATION)


class CorrectionEngine:
    """Applies built-in rules and user dictionary corrections to transcripts.

    Example:
        engine = CorrectionEngine(dictionary=store)
        engine.apply_corrections("i use clawed for ai work.")
        # "I use Claude for ai work."
    """

    def __init__(
        self,
        dictionary: DictionaryStore | None = None,
        rules: Iterable[CorrectionRule] = BUILTIN_RULES,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
        guard_common_words: bool = True,
        sentence_case: bool = True,
    ):
        """Initialize engine.

        Args:
            dictionary: User dictionary to read entries from (may be None)
            rules: Built-in rule table, applied in order
            context_window: Words inspected on each side of a rule match
            guard_common_words: Skip dictionary entries in COMMON_WORD_GUARD
            sentence_case: Capitalize sentence starts after correcting
        """
        self.dictionary = dictionary
        self.rules = tuple(rules)
        self.context_window = context_window
        self.guard_common_words = guard_common_words
        self.sentence_case = sentence_case
        self._rule_patterns = self._compile_rules(self.rules)

    @staticmethod
    def _compile_rules(rules: tuple[CorrectionRule, ...]) -> list[tuple[CorrectionRule, str, re.Pattern[str]]]:
        compiled = []
        for rule in rules:
            for phrase in rule.sorted_mishearings():
                try:
                    compiled.append((rule, phrase, compile_phrase_pattern(phrase)))
                except MalformedRuleError as e:
                    logger.warning(f"Skipping malformed rule: {e}", extra={"correction": rule.correction})
        return compiled

    def apply_corrections(self, raw_text: str) -> str:
        """Correct a raw transcript.

        Args:
            raw_text: Text from the speech recognizer (may be empty)

        Returns:
            Corrected, sentence-cased text
        """
        corrected, _ = self.correct_text(raw_text)
        return corrected

    def correct_text(self, raw_text: str) -> tuple[str, CorrectionLog]:
        """Correct a raw transcript and report what changed.

        Args:
            raw_text: Text from the speech recognizer (may be empty)

        Returns:
            Tuple of (corrected_text, correction_log)
        """
        log = CorrectionLog()
        if not raw_text:
            return "", log

        text = raw_text
        for rule, phrase, pattern in self._rule_patterns:
            text = self._apply_rule(text, rule, phrase, pattern, log)

        if self.dictionary is not None:
            text = self._apply_dictionary(text, self.dictionary.entries, log)

        if self.sentence_case:
            text = apply_sentence_case(text)

        if log.corrections:
            logger.debug(f"Applied {len(log)} correction(s)")
        return text, log

    def _apply_rule(
        self,
        text: str,
        rule: CorrectionRule,
        phrase: str,
        pattern: re.Pattern[str],
        log: CorrectionLog,
    ) -> str:
        """Apply one mishearing pattern of one rule across the whole text."""
        if not pattern.search(text):
            return text

        tokens = tokenize(text)
        starts = [token.start for token in tokens]
        words = [lookup_key(token.text) for token in tokens]

        def replace(match: re.Match[str]) -> str:
            first = bisect_right(starts, match.start()) - 1
            last = bisect_right(starts, match.end() - 1) - 1
            lo = max(0, first - self.context_window)
            hi = last + 1 + self.context_window
            window = words[lo:hi]

            if not rule.applies_in(window):
                logger.debug(
                    f"Context vetoed {phrase!r} -> {rule.correction!r}",
                    extra={"position": match.start()},
                )
                return match.group(0)

            log.add(Correction(
                original=match.group(0),
                corrected=rule.correction,
                match_type="rule",
                position=match.start(),
                context=_snippet(text, match.start(), match.end()),
            ))
            return rule.correction

        return pattern.sub(replace, text)

    def _apply_dictionary(
        self,
        text: str,
        entries: list[DictionaryEntry],
        log: CorrectionLog,
    ) -> str:
        """Apply user dictionary entries, longest phrase first."""
        # Stable sort: for equal lengths, insertion order wins
        ordered = sorted(entries, key=lambda entry: len(entry.incorrect), reverse=True)
        applied: set[str] = set()

        for entry in ordered:
            phrase = entry.incorrect
            if not phrase.strip():
                continue
            if phrase in applied:
                logger.debug(f"Ignoring duplicate dictionary entry {phrase!r}")
                continue
            applied.add(phrase)

            if self.guard_common_words and phrase in COMMON_WORD_GUARD:
                logger.debug(f"Guarded common word {phrase!r}; entry not applied")
                continue

            try:
                pattern = compile_phrase_pattern(phrase, separator=DICTIONARY_WORD_SEPARATOR)
            except MalformedRuleError as e:
                log.skipped_rules += 1
                logger.warning(f"Skipping dictionary entry: {e}")
                continue

            text = self._replace_all(text, pattern, strip_trailing_punctuation(entry.correct), log)

        return text

    @staticmethod
    def _replace_all(text: str, pattern: re.Pattern[str], replacement: str, log: CorrectionLog) -> str:
        def replace(match: re.Match[str]) -> str:
            log.add(Correction(
                original=match.group(0),
                corrected=replacement,
                match_type="dictionary",
                position=match.start(),
                context=_snippet(text, match.start(), match.end()),
            ))
            return replacement

        # Callable replacement: user text is never parsed as a template
        return pattern.sub(replace, text)
