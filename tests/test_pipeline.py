"""Tests for the transcript pipeline and output routing."""

import pytest

from dictation_cleanup.config import CleanupSettings
from dictation_cleanup.dictionary import DictionaryStore
from dictation_cleanup.pipeline import REVIEW_PREFIX, RouteKind, TranscriptPipeline, route_output
from dictation_cleanup.storage import SettingsStore


@pytest.fixture
def store(tmp_path):
    dictionary = DictionaryStore(SettingsStore(tmp_path / "settings.json"))
    dictionary.load()
    return dictionary


class BrokenNormalizer:
    """Normalizer that always fails."""

    def convert_number_words(self, text):
        raise RuntimeError("boom")


class TestRouteOutput:
    """Tests for route_output."""

    def test_inject(self):
        """Test ordinary text is injected unchanged."""
        routed = route_output("Send the report", "midori")

        assert routed.kind == RouteKind.INJECT
        assert routed.text == "Send the report"

    def test_review_prefix(self):
        """Test the review prefix is stripped and the text trimmed."""
        routed = route_output(f"{REVIEW_PREFIX}  check this ", "midori")

        assert routed.kind == RouteKind.REVIEW
        assert routed.text == "check this"

    @pytest.mark.parametrize("text", ["Midori, what time is it", "midori open notes", "MIDORI, hi"])
    def test_direct_address(self, text):
        """Test text addressed to the wake name is routed whole."""
        routed = route_output(text, "midori")

        assert routed.kind == RouteKind.DIRECT_ADDRESS
        assert routed.text == text

    def test_name_inside_word_not_addressed(self):
        """Test a longer word starting with the name is not direct address."""
        assert route_output("Midorikawa called", "midori").kind == RouteKind.INJECT

    def test_custom_wake_name(self):
        """Test the wake name is configurable."""
        assert route_output("Jarvis, lights", "jarvis").kind == RouteKind.DIRECT_ADDRESS
        assert route_output("Midori, lights", "jarvis").kind == RouteKind.INJECT


class TestTranscriptPipeline:
    """Tests for TranscriptPipeline."""

    def test_numbers_after_correction(self):
        """Test sentence case runs before number conversion."""
        pipeline = TranscriptPipeline()

        assert pipeline.process("i have four apples") == "I have 4 apples"
        assert pipeline.process("two hundred and sixty five") == "265"

    def test_dictionary_and_numbers(self, store):
        """Test corrections and numbers together."""
        store.add_sample("clawed", "Claude")
        pipeline = TranscriptPipeline(dictionary=store)

        assert pipeline.process("ask clawed for three ideas.") == "Ask Claude for 3 ideas."

    def test_convert_numbers_override(self):
        """Test number conversion can be turned off per call."""
        pipeline = TranscriptPipeline()

        assert pipeline.process("i have four apples", convert_numbers=False) == "I have four apples"

    def test_convert_numbers_setting(self):
        """Test number conversion follows settings by default."""
        pipeline = TranscriptPipeline(settings=CleanupSettings(convert_numbers=False))

        assert pipeline.process("four apples") == "Four apples"

    def test_dictionary_disabled(self, store):
        """Test the dictionary pass can be switched off."""
        store.add_sample("clawed", "Claude")
        pipeline = TranscriptPipeline(
            settings=CleanupSettings(dictionary_enabled=False),
            dictionary=store,
        )

        assert pipeline.process("i like clawed") == "I like clawed"

    def test_rules_disabled(self):
        """Test built-in rules can be switched off."""
        pipeline = TranscriptPipeline(settings=CleanupSettings(builtin_rules_enabled=False))

        assert pipeline.process("push to git hub") == "Push to git hub"

    def test_empty_input(self):
        """Test empty input yields empty output."""
        assert TranscriptPipeline().process("") == ""

    def test_number_failure_passes_through(self):
        """Test a failing stage leaves its input unchanged."""
        pipeline = TranscriptPipeline(normalizer=BrokenNormalizer())

        assert pipeline.process("push to git hub four times") == "Push to GitHub four times"

    def test_process_detailed(self, store):
        """Test the detailed result carries the log and route."""
        store.add_sample("clawed", "Claude")
        pipeline = TranscriptPipeline(dictionary=store)

        result = pipeline.process_detailed("midori, ask clawed")

        assert result.raw_text == "midori, ask clawed"
        assert result.text == "Midori, ask Claude"
        assert result.route.kind == RouteKind.DIRECT_ADDRESS
        assert len(result.log) == 1

        data = result.to_dict()
        assert data["route"] == "direct_address"
        assert data["routed_text"] == "Midori, ask Claude"
        assert data["log"]["correction_count"] == 1

    def test_review_route(self):
        """Test review-prefixed dictation is routed for review."""
        result = TranscriptPipeline().process_detailed("[REVIEW] send two files")

        assert result.route.kind == RouteKind.REVIEW
        assert result.route.text == "send 2 files"

    def test_from_settings_loads_dictionary(self, tmp_path, store):
        """Test the pipeline reads the persisted dictionary."""
        store.add_sample("clawed", "Claude")

        pipeline = TranscriptPipeline.from_settings(CleanupSettings(), data_dir=tmp_path)

        assert pipeline.process("i like clawed") == "I like Claude"
        assert len(pipeline.dictionary) == 1
