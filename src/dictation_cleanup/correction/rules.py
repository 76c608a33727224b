"""Built-in contextual correction rules.

Each rule maps a set of known mishearings to one canonical spelling and
decides, from the words around a match, whether the replacement is safe.
Context terms may be single words or multi-word phrases; a phrase only
counts when its words appear contiguously in the window.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from dictation_cleanup.errors import MalformedRuleError


def _lowered(terms: Iterable[str]) -> frozenset[str]:
    return frozenset(" ".join(t.lower().split()) for t in terms if t.strip())


def _contains_term(window: list[str], term: str) -> bool:
    words = term.split(" ")
    if len(words) == 1:
        return term in window
    size = len(words)
    return any(window[i:i + size] == words for i in range(len(window) - size + 1))


@dataclass(frozen=True)
class CorrectionRule:
    """A built-in phonetic/contextual correction.

    Attributes:
        mishearings: Lowercase phrases that trigger the rule
        correction: Canonical replacement text
        positive_context: Terms that allow the rule when required
        negative_context: Terms that veto the rule
        requires_context: Apply only when a positive term is nearby;
            otherwise apply unless a negative term is nearby
    """

    mishearings: frozenset[str]
    correction: str
    positive_context: frozenset[str] = field(default_factory=frozenset)
    negative_context: frozenset[str] = field(default_factory=frozenset)
    requires_context: bool = False

    def __post_init__(self):
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "mishearings", _lowered(self.mishearings))
        object.__setattr__(self, "positive_context", _lowered(self.positive_context))
        object.__setattr__(self, "negative_context", _lowered(self.negative_context))

    def applies_in(self, window: list[str]) -> bool:
        """Decide whether the rule fires given the surrounding words.

        Args:
            window: Lowercased, punctuation-trimmed words around the match,
                including the matched words themselves

        Returns:
            True if the replacement should be made
        """
        if any(_contains_term(window, term) for term in self.negative_context):
            return False
        if self.requires_context:
            return any(_contains_term(window, term) for term in self.positive_context)
        return True

    def sorted_mishearings(self) -> list[str]:
        """Mishearings longest first, ties alphabetical for determinism."""
        return sorted(self.mishearings, key=lambda m: (-len(m), m))


def compile_phrase_pattern(phrase: str, separator: str = r"\s+") -> re.Pattern[str]:
    """Compile a case-insensitive, word-boundary-anchored pattern.

    Args:
        phrase: Space-separated words to match literally
        separator: Regex placed between consecutive words

    Returns:
        Compiled pattern

    Raises:
        MalformedRuleError: If the phrase is empty or does not compile
    """
    words = phrase.split()
    if not words:
        raise MalformedRuleError("Empty phrase", context={"phrase": phrase})

    body = separator.join(re.escape(word) for word in words)
    try:
        return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)
    except re.error as e:
        raise MalformedRuleError(
            f"Cannot compile pattern: {e}", context={"phrase": phrase}
        ) from e


_CODE_CONTEXT = frozenset({
    "code", "coding", "app", "api", "repo", "deploy", "build", "function",
    "file", "project", "commit", "branch", "server", "script", "library",
    "framework", "install", "package", "bug", "error", "test", "tests",
})

BUILTIN_RULES: tuple[CorrectionRule, ...] = (
    CorrectionRule(
        mishearings=frozenset({"clawed", "claud", "clod"}),
        correction="Claude",
        positive_context=frozenset({
            "ai", "anthropic", "model", "assistant", "chat", "ask", "asked",
            "prompt", "llm", "opus", "sonnet", "haiku", "gpt", "chatbot",
        }),
        negative_context=frozenset({"cat", "claws", "bear", "animal", "scratched"}),
        requires_context=True,
    ),
    CorrectionRule(
        mishearings=frozenset({"anthropics", "and thropic", "an thropic"}),
        correction="Anthropic",
        negative_context=frozenset({"principle"}),
    ),
    CorrectionRule(
        mishearings=frozenset({"git hub", "get hub", "good hub"}),
        correction="GitHub",
        negative_context=frozenset({"airport", "flight", "transit", "bus", "train"}),
    ),
    CorrectionRule(
        mishearings=frozenset({"open ai", "open a i"}),
        correction="OpenAI",
    ),
    CorrectionRule(
        mishearings=frozenset({"supa base", "super base", "soup a base"}),
        correction="Supabase",
        negative_context=frozenset({"military", "army", "navy"}),
    ),
    CorrectionRule(
        mishearings=frozenset({"type script"}),
        correction="TypeScript",
    ),
    CorrectionRule(
        mishearings=frozenset({"java script"}),
        correction="JavaScript",
    ),
    CorrectionRule(
        mishearings=frozenset({"next js", "next j s", "next jay s"}),
        correction="Next.js",
    ),
    CorrectionRule(
        mishearings=frozenset({"pie torch", "pi torch", "pytorch"}),
        correction="PyTorch",
    ),
    CorrectionRule(
        mishearings=frozenset({"x code", "ex code"}),
        correction="Xcode",
        negative_context=frozenset({"zip", "postal", "area", "dress"}),
    ),
    CorrectionRule(
        mishearings=frozenset({"swift ui", "swift you i"}),
        correction="SwiftUI",
    ),
    CorrectionRule(
        mishearings=frozenset({"vs code", "v s code", "vias code"}),
        correction="VS Code",
    ),
    CorrectionRule(
        mishearings=frozenset({"jason"}),
        correction="JSON",
        positive_context=frozenset({
            "file", "parse", "parsing", "format", "schema", "payload", "object",
            "yaml", "serialize", "api", "response", "key", "keys", "array",
        }),
        negative_context=frozenset({
            "my friend", "brother", "named", "called", "he", "his", "him",
            "said", "told", "says",
        }),
        requires_context=True,
    ),
    CorrectionRule(
        mishearings=frozenset({"sequel"}),
        correction="SQL",
        positive_context=frozenset({
            "database", "query", "queries", "table", "tables", "postgres",
            "server", "select", "schema", "lite", "injection", "join",
        }),
        negative_context=frozenset({"movie", "film", "book", "novel", "trilogy", "game", "sequel to"}),
        requires_context=True,
    ),
    CorrectionRule(
        mishearings=frozenset({"react"}),
        correction="React",
        positive_context=frozenset({"component", "components", "hooks", "jsx", "frontend", "native", "props", "state"}),
        negative_context=frozenset({"how", "did", "will", "would", "chemical", "quickly", "overreact"}),
        requires_context=True,
    ),
    CorrectionRule(
        mishearings=frozenset({"get"}),
        correction="git",
        positive_context=frozenset({
            "commit", "push", "pull", "rebase", "stash", "checkout", "merge",
            "branch", "clone", "repo", "repository",
        }),
        negative_context=frozenset({"to get", "get a", "get the", "get it", "get me", "got"}),
        requires_context=True,
    ),
    CorrectionRule(
        mishearings=frozenset({"pie", "pi"}),
        correction="Python",
        positive_context=frozenset({"script", "pip", "virtualenv", "venv", "django", "flask"}),
        negative_context=frozenset({"apple", "eat", "ate", "bake", "baked", "slice", "raspberry", "digits", "circle"}),
        requires_context=True,
    ),
    CorrectionRule(
        mishearings=frozenset({"dock er", "doc her"}),
        correction="Docker",
        positive_context=_CODE_CONTEXT | frozenset({"container", "image", "compose"}),
        requires_context=True,
    ),
)

