"""Transcript cleanup pipeline.

raw transcript -> corrections (rules, dictionary, sentence case)
               -> number normalization -> final text

The pipeline never raises for transcript or dictionary content. If a
stage fails unexpectedly, its input passes through unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from dictation_cleanup.config import CleanupSettings, get_settings_store_path
from dictation_cleanup.correction import BUILTIN_RULES, CorrectionEngine, CorrectionLog, CorrectionRule
from dictation_cleanup.dictionary import DictionaryStore
from dictation_cleanup.logging import get_logger
from dictation_cleanup.numbers import NumberNormalizer
from dictation_cleanup.storage import SettingsStore

logger = get_logger(__name__)

REVIEW_PREFIX = "[REVIEW]"


class RouteKind(str, Enum):
    """Where finished text should go."""

    INJECT = "inject"  # Paste at cursor and submit
    DIRECT_ADDRESS = "direct_address"  # Addressed to the assistant by name
    REVIEW = "review"  # Paste at cursor without submitting


@dataclass
class RoutedText:
    """Final text with its routing decision."""

    kind: RouteKind
    text: str


def route_output(text: str, wake_name: str) -> RoutedText:
    """Decide how finished text should be delivered.

    - ``[REVIEW]`` prefix: strip it and trim; do not submit
    - Starts with "<wake_name>," or "<wake_name> ": route whole text to chat
    - Otherwise: inject

    Args:
        text: Final cleaned text
        wake_name: Assistant name that marks direct address

    Returns:
        RoutedText
    """
    if text.startswith(REVIEW_PREFIX):
        return RoutedText(RouteKind.REVIEW, text[len(REVIEW_PREFIX):].strip())

    lowered = text.lower()
    name = wake_name.lower()
    if lowered.startswith(f"{name},") or lowered.startswith(f"{name} "):
        return RoutedText(RouteKind.DIRECT_ADDRESS, text)

    return RoutedText(RouteKind.INJECT, text)


@dataclass
class PipelineResult:
    """Output of one pipeline run."""

    raw_text: str
    text: str
    log: CorrectionLog = field(default_factory=CorrectionLog)
    route: RoutedText | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "raw_text": self.raw_text,
            "text": self.text,
            "route": self.route.kind.value if self.route else None,
            "routed_text": self.route.text if self.route else None,
            "log": self.log.to_dict(),
        }


class TranscriptPipeline:
    """Runs correction and number normalization over raw transcripts.

    Example:
        pipeline = TranscriptPipeline.from_settings(load_settings())
        pipeline.process("i have four apples")  # "I have 4 apples"
    """

    def __init__(
        self,
        settings: CleanupSettings | None = None,
        dictionary: DictionaryStore | None = None,
        rules: Iterable[CorrectionRule] = BUILTIN_RULES,
        normalizer: NumberNormalizer | None = None,
    ):
        """Initialize pipeline.

        Args:
            settings: Pipeline settings (defaults if None)
            dictionary: Loaded user dictionary (None disables the dictionary pass)
            rules: Built-in rule table
            normalizer: Number normalizer (default exceptions if None)
        """
        self.settings = settings or CleanupSettings()
        self.dictionary = dictionary
        self.engine = CorrectionEngine(
            dictionary=dictionary if self.settings.dictionary_enabled else None,
            rules=rules if self.settings.builtin_rules_enabled else (),
            context_window=self.settings.context_window,
            guard_common_words=self.settings.guard_common_words,
            sentence_case=self.settings.sentence_case,
        )
        self.normalizer = normalizer or NumberNormalizer()

    @classmethod
    def from_settings(
        cls,
        settings: CleanupSettings,
        data_dir: Path | None = None,
    ) -> "TranscriptPipeline":
        """Build a pipeline with the persisted dictionary loaded.

        Args:
            settings: Pipeline settings
            data_dir: Directory holding settings.json (default data dir if None)
        """
        store = SettingsStore(get_settings_store_path(data_dir))
        dictionary = DictionaryStore(store, key=settings.dictionary_key)
        dictionary.load()
        return cls(settings=settings, dictionary=dictionary)

    def process(self, raw_text: str, convert_numbers: bool | None = None) -> str:
        """Clean a raw transcript.

        Args:
            raw_text: Transcript from the speech recognizer
            convert_numbers: Override the settings' number conversion flag

        Returns:
            Final text
        """
        return self.process_detailed(raw_text, convert_numbers=convert_numbers).text

    def process_detailed(self, raw_text: str, convert_numbers: bool | None = None) -> PipelineResult:
        """Clean a raw transcript, returning the correction log and route."""
        if convert_numbers is None:
            convert_numbers = self.settings.convert_numbers

        text = raw_text or ""
        log = CorrectionLog()

        try:
            text, log = self.engine.correct_text(text)
        except Exception:
            logger.exception("Correction stage failed; passing text through")

        if convert_numbers:
            try:
                text = self.normalizer.convert_number_words(text)
            except Exception:
                logger.exception("Number conversion failed; passing text through")

        return PipelineResult(
            raw_text=raw_text,
            text=text,
            log=log,
            route=route_output(text, self.settings.wake_name),
        )
