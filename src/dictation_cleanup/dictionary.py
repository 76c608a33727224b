"""User-trained correction dictionary.

Holds (mishearing -> correction) pairs the user has taught the app and
persists them as a JSON array under one key of a ``SettingsStore``.

The store does not enforce uniqueness. ``find``/``contains`` let callers
detect already-learned variants, and ``learn`` does so for a whole batch
of training transcriptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from pydantic import BaseModel, TypeAdapter, ValidationError

from dictation_cleanup.errors import PersistenceError, SampleIndexError
from dictation_cleanup.logging import get_logger
from dictation_cleanup.storage import SettingsStore
from dictation_cleanup.text import normalize_phrase

logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = "training_samples"


class DictionaryEntry(BaseModel):
    """A single user-trained correction.

    Attributes:
        incorrect: Normalized phrase as the recognizer transcribes it
        correct: Replacement text exactly as the user typed it
    """

    incorrect: str
    correct: str


_ENTRY_LIST = TypeAdapter(list[DictionaryEntry])


@dataclass
class TrainingOutcome:
    """Result of learning a batch of training transcriptions."""

    added: list[DictionaryEntry] = field(default_factory=list)
    already_known: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class DictionaryStore:
    """Persistent list of user-trained corrections.

    Example:
        store = DictionaryStore(SettingsStore(path))
        store.load()
        store.add_sample("Clawed!", "Claude")   # stored as ("clawed", "Claude")
    """

    def __init__(self, settings_store: SettingsStore, key: str = DEFAULT_STORAGE_KEY):
        """Initialize the store. Call ``load()`` to read persisted entries.

        Args:
            settings_store: Key-value store used for persistence
            key: Key the entries are stored under
        """
        self.settings_store = settings_store
        self.key = key
        self._entries: list[DictionaryEntry] = []

    @property
    def entries(self) -> list[DictionaryEntry]:
        """Snapshot of the current entries in insertion order."""
        return list(self._entries)

    def load(self) -> None:
        """Populate entries from the settings store.

        Missing, unreadable or malformed data leaves the store empty.
        """
        try:
            raw = self.settings_store.get(self.key)
        except PersistenceError as e:
            logger.warning(f"Could not read training samples, starting empty: {e}")
            self._entries = []
            return

        if raw is None:
            self._entries = []
            return

        try:
            self._entries = _ENTRY_LIST.validate_python(raw)
        except ValidationError as e:
            logger.warning(
                "Stored training samples are malformed, starting empty",
                extra={"key": self.key, "errors": e.error_count()},
            )
            self._entries = []
            return

        logger.info(f"Loaded {len(self._entries)} training samples")

    def save(self) -> bool:
        """Persist the current entries.

        Returns:
            True if written; False if the write failed (entries stay in memory)
        """
        payload = [entry.model_dump() for entry in self._entries]
        try:
            self.settings_store.set(self.key, payload)
        except PersistenceError as e:
            logger.error(f"Failed to save training samples: {e}", extra={"key": self.key})
            return False

        logger.debug(f"Saved {len(self._entries)} training samples")
        return True

    def add_sample(self, incorrect: str, correct: str) -> DictionaryEntry:
        """Add a training pair and persist.

        Args:
            incorrect: Phrase as transcribed; normalized before storing
            correct: Replacement; stored verbatim

        Returns:
            The stored entry
        """
        entry = DictionaryEntry(incorrect=normalize_phrase(incorrect), correct=correct)
        self._entries.append(entry)
        self.save()
        return entry

    def remove_sample(self, index: int) -> DictionaryEntry:
        """Remove the entry at ``index`` and persist.

        Raises:
            SampleIndexError: If index is not in ``0..len-1``
        """
        if not 0 <= index < len(self._entries):
            raise SampleIndexError(index, len(self._entries))

        entry = self._entries.pop(index)
        self.save()
        return entry

    def clear_all(self) -> None:
        """Remove all entries and persist."""
        self._entries.clear()
        self.save()

    def find(self, phrase: str) -> list[int]:
        """Indices of entries whose normalized phrase equals ``phrase`` normalized."""
        needle = normalize_phrase(phrase)
        return [i for i, entry in enumerate(self._entries) if entry.incorrect == needle]

    def contains(self, phrase: str) -> bool:
        """Check whether a phrase has already been learned."""
        return bool(self.find(phrase))

    def learn(self, correct: str, transcriptions: list[str]) -> TrainingOutcome:
        """Learn the variants a phrase was transcribed as.

        Each recording of ``correct`` yields one transcription; every
        distinct, not-yet-known variant becomes a new entry. Variants that
        already normalize to the correct phrase need no entry.

        Args:
            correct: What the user meant to say
            transcriptions: What the recognizer produced for each take

        Returns:
            TrainingOutcome describing what was added and what was skipped
        """
        outcome = TrainingOutcome()
        target = normalize_phrase(correct)
        seen: set[str] = set()

        for transcription in transcriptions:
            variant = normalize_phrase(transcription)
            if not variant or variant == target or variant in seen:
                outcome.skipped.append(transcription)
                continue
            seen.add(variant)

            if self.contains(variant):
                outcome.already_known.append(variant)
                continue

            entry = DictionaryEntry(incorrect=variant, correct=correct)
            self._entries.append(entry)
            outcome.added.append(entry)

        if outcome.added:
            self.save()
            logger.info(
                f"Learned {len(outcome.added)} new variant(s) for {correct!r}",
                extra={"already_known": len(outcome.already_known)},
            )
        return outcome

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DictionaryEntry]:
        return iter(list(self._entries))
