"""Correction module for raw transcripts.

Applies built-in contextual rules and user-trained dictionary entries,
then sentence-cases the result.
"""

from dictation_cleanup.correction.engine import (
    COMMON_WORD_GUARD,
    Correction,
    CorrectionEngine,
    CorrectionLog,
)
from dictation_cleanup.correction.rules import BUILTIN_RULES, CorrectionRule, compile_phrase_pattern

__all__ = [
    "BUILTIN_RULES",
    "COMMON_WORD_GUARD",
    "Correction",
    "CorrectionEngine",
    "CorrectionLog",
    "CorrectionRule",
    "compile_phrase_pattern",
]
