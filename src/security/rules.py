"""Field rules: immutable per-field validation constants.

Each rule bundles the length bounds, charset and danger patterns for one
semantic field type.  Rules are module-level constants, built once at
import time and never mutated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import regex

from src.security.graphemes import grapheme_length
from src.security.patterns import (
    DESCRIPTION_DANGER_PATTERNS,
    EXCEPTION_CONTEXT_CHARSET_PATTERN,
    NAME_CHARSET_PATTERN,
    PROMPT_DANGER_PATTERNS,
    SAFE_TEXT_PATTERN,
    DangerPatterns,
)


@dataclass(frozen=True)
class FieldRule:
    """Validation rule for a single field type.

    ``count_graphemes`` selects user-perceived characters over code points
    when measuring length.
    """

    field: str
    min_length: int
    max_length: int
    charset: re.Pattern[str] | regex.Pattern[str] | None = None
    danger_patterns: DangerPatterns = ()
    count_graphemes: bool = False

    def measure(self, text: str) -> int:
        """Length of *text* in the unit this rule is expressed in."""
        if self.count_graphemes:
            return grapheme_length(text)
        return len(text)

    def charset_ok(self, text: str) -> bool:
        """``True`` when *text* is entirely within the rule's charset."""
        if self.charset is None:
            return True
        return self.charset.fullmatch(text) is not None


PROJECT_NAME_RULE = FieldRule(
    field="name",
    min_length=1,
    max_length=100,
    charset=NAME_CHARSET_PATTERN,
    count_graphemes=True,
)

DESCRIPTION_RULE = FieldRule(
    field="description",
    min_length=0,
    max_length=1000,
    charset=SAFE_TEXT_PATTERN,
    danger_patterns=DESCRIPTION_DANGER_PATTERNS,
    count_graphemes=True,
)

PROMPT_RULE = FieldRule(
    field="initial_prompt",
    min_length=10,
    max_length=5000,
    danger_patterns=PROMPT_DANGER_PATTERNS,
)

EXCEPTION_CONTEXT_RULE = FieldRule(
    field="context",
    min_length=0,
    max_length=500,
    charset=EXCEPTION_CONTEXT_CHARSET_PATTERN,
)

# ── Advisory thresholds ─────────────────────────────────────────────────

NAME_SHORT_WARNING_LENGTH = 3
PROMPT_SHORT_WARNING_LENGTH = 50
PROMPT_MIN_WORDS_WARNING = 5
PROMPT_MIN_MEANINGFUL_CHARS = 5

# ── File-id list ────────────────────────────────────────────────────────

MAX_FILE_IDS = 50
FILE_IDS_WARNING_THRESHOLD = 20

# ── Opaque identifier heuristic ─────────────────────────────────────────
# Empirically chosen thresholds; revisit when accepting a new upstream
# identifier namespace.

FILE_ID_MIN_LENGTH = 8
FILE_ID_MAX_LENGTH = 50
MIN_ALNUM_CHARS = 4
MIN_ALNUM_RATIO = 0.4
MAX_SEPARATOR_RUN = 3

# ── Truncation ──────────────────────────────────────────────────────────

TRUNCATION_MARKER = "..."
