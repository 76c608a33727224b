"""Tests for shared text helpers."""

from dictation_cleanup.text import (
    apply_sentence_case,
    is_punctuation,
    lookup_key,
    normalize_phrase,
    remove_punctuation,
    split_punctuation,
    tokenize,
)


class TestPunctuation:
    """Tests for punctuation helpers."""

    def test_ascii_and_unicode_punctuation(self):
        """Unicode punctuation is recognized, not just ASCII."""
        assert is_punctuation(".")
        assert is_punctuation("’")  # right single quote
        assert is_punctuation("…")  # ellipsis
        assert not is_punctuation("a")
        assert not is_punctuation(" ")

    def test_remove_punctuation(self):
        """All punctuation is removed, including interior marks."""
        assert remove_punctuation("don't, stop!") == "dont stop"

    def test_split_punctuation(self):
        """Leading and trailing punctuation are split from the core."""
        assert split_punctuation('"four,') == ('"', "four", ",")
        assert split_punctuation("plain") == ("", "plain", "")
        assert split_punctuation("...") == ("...", "", "")

    def test_lookup_key(self):
        """Lookup keys are lowercased and edge-trimmed."""
        assert lookup_key("Twenty,") == "twenty"
        assert lookup_key("(Hundred)") == "hundred"


class TestNormalizePhrase:
    """Tests for dictionary phrase normalization."""

    def test_lowercases_and_strips(self):
        """Test case and surrounding whitespace are removed."""
        assert normalize_phrase("  Clawed! ") == "clawed"

    def test_interior_punctuation_removed(self):
        """Test punctuation inside a word is dropped."""
        assert normalize_phrase("test-123") == "test123"

    def test_interior_whitespace_kept(self):
        """Test interior whitespace is left as-is."""
        assert normalize_phrase("git  hub") == "git  hub"

    def test_punctuation_only(self):
        """Test a phrase of only punctuation normalizes to empty."""
        assert normalize_phrase("?!.") == ""


class TestTokenize:
    """Tests for tokenize."""

    def test_offsets(self):
        """Test tokens carry their source offsets."""
        tokens = tokenize("hi  there")

        assert [t.text for t in tokens] == ["hi", "there"]
        assert tokens[1].start == 4
        assert tokens[1].end == 9


class TestSentenceCase:
    """Tests for apply_sentence_case."""

    def test_first_letter(self):
        """Test the first letter is capitalized."""
        assert apply_sentence_case("hello world") == "Hello world"

    def test_multiple_sentences(self):
        """Test letters after terminators are capitalized."""
        assert (
            apply_sentence_case("hello world. this is a test! another one? yes.")
            == "Hello world. This is a test! Another one? Yes."
        )

    def test_non_letters_keep_flag(self):
        """Test digits and quotes do not consume the pending capital."""
        assert apply_sentence_case('done. "ok then') == 'Done. "Ok then'
        assert apply_sentence_case("123 apples") == "123 Apples"

    def test_empty(self):
        """Test empty input."""
        assert apply_sentence_case("") == ""

    def test_existing_capitals_kept(self):
        """Test existing uppercase letters are not lowered."""
        assert apply_sentence_case("i use GitHub.") == "I use GitHub."
