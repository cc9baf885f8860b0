"""Pattern library: precompiled structural and danger matchers.

Structural patterns are matched with ``fullmatch`` (never ``$``, which
would accept a trailing newline).  Danger patterns are ordered
``(label, pattern)`` pairs evaluated first-match-wins; callers only ever
see the label, never the matched text.
"""

from __future__ import annotations

import enum
import re

import regex

# ── Structural patterns ─────────────────────────────────────────────────

UUID_V4_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)

# Unicode letters, combining marks, decimal digits, whitespace, hyphen, underscore
NAME_CHARSET_PATTERN = regex.compile(r"[\p{L}\p{M}\p{Nd}\s\-_]+")

NAME_SEPARATORS_PATTERN = re.compile(r"[\s\-_]")

# Tab, LF and CR are allowed; other C0 controls, DEL and C1 are not
SAFE_TEXT_PATTERN = re.compile(r"[^<>\"'&\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]*")

OPAQUE_ID_PATTERN = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9\-_]{7,49}")

EXCEPTION_CONTEXT_CHARSET_PATTERN = re.compile(r"[a-zA-Z0-9\s\-_.,:;!?()\[\]]*")

# ── File-id heuristic helpers ───────────────────────────────────────────

ALNUM_PATTERN = re.compile(r"[a-zA-Z0-9]")
ID_SEPARATOR_PATTERN = re.compile(r"[\-_]")
ALL_DIGITS_PATTERN = re.compile(r"[0-9]+")
TRAILING_UNDERSCORES_PATTERN = re.compile(r"_{2,}\Z")

# 8-4-4-4 hex groups with the final group missing or cut short
TRUNCATED_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}(?:-[0-9a-f]{1,11})?",
    re.IGNORECASE,
)

# Placeholder literal rejected outright
REJECTED_FILE_ID_LITERALS: frozenset[str] = frozenset({"invalid-uuid"})

# One to three alphanumerics padded with separators (covers single digit/letter)
PADDED_FILE_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"[_\-]*[0-9][_\-]*"),
    re.compile(r"[_\-]*[a-zA-Z][_\-]*"),
    re.compile(r"[_\-]*[a-zA-Z0-9]{1,3}[_\-]*"),
)

# ── Danger patterns ─────────────────────────────────────────────────────

_FLAGS = re.IGNORECASE | re.DOTALL | re.MULTILINE

SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>.*?</script\s*>", _FLAGS)
STYLE_BLOCK = re.compile(r"<style\b[^>]*>.*?</style\s*>", _FLAGS)
IFRAME_TAG = re.compile(r"<iframe\b", _FLAGS)
OBJECT_TAG = re.compile(r"<object\b", _FLAGS)
EMBED_TAG = re.compile(r"<embed\b", _FLAGS)
HTML_TAG = re.compile(r"<[^>]*>", _FLAGS)
EVENT_HANDLER = re.compile(r"\bon\w+\s*=", _FLAGS)
DANGEROUS_SCHEME = re.compile(r"\b(?:javascript|vbscript|data|about|file|ftp):", _FLAGS)
SCRIPT_SCHEME = re.compile(r"\b(?:javascript|vbscript):", _FLAGS)
SQL_DDL = re.compile(
    r";\s*(?:DROP|DELETE|INSERT|UPDATE|CREATE|ALTER|TRUNCATE)\s+(?:TABLE|DATABASE|USER)",
    _FLAGS,
)
CODE_EXPRESSION = re.compile(r"eval\s*\(|expression\s*\(|\$\{", _FLAGS)

# Characters refused in project names on update payloads
UPDATE_NAME_FORBIDDEN_CHARS = re.compile(r"[<';&|`]")
# Characters refused in project names on create payloads
CREATE_NAME_FORBIDDEN_CHARS = re.compile(r"[<>'\";&|`${}\\]")

DangerPatterns = tuple[tuple[str, re.Pattern[str]], ...]

DANGER_PATTERNS: DangerPatterns = (
    ("script_block", SCRIPT_BLOCK),
    ("style_block", STYLE_BLOCK),
    ("iframe_tag", IFRAME_TAG),
    ("object_tag", OBJECT_TAG),
    ("embed_tag", EMBED_TAG),
    ("html_tag", HTML_TAG),
    ("event_handler", EVENT_HANDLER),
    ("dangerous_scheme", DANGEROUS_SCHEME),
    ("sql_ddl", SQL_DDL),
)

DESCRIPTION_DANGER_PATTERNS: DangerPatterns = DANGER_PATTERNS

PROMPT_DANGER_PATTERNS: DangerPatterns = (
    ("script_block", SCRIPT_BLOCK),
    ("html_tag", HTML_TAG),
    ("dangerous_scheme", DANGEROUS_SCHEME),
    ("event_handler", EVENT_HANDLER),
    ("code_expression", CODE_EXPRESSION),
)

UPDATE_NAME_DANGER_PATTERNS: DangerPatterns = (
    ("html_tag", HTML_TAG),
    ("dangerous_scheme", DANGEROUS_SCHEME),
    ("event_handler", EVENT_HANDLER),
    ("forbidden_chars", UPDATE_NAME_FORBIDDEN_CHARS),
)

CREATE_NAME_DANGER_PATTERNS: DangerPatterns = (
    ("forbidden_chars", CREATE_NAME_FORBIDDEN_CHARS),
    ("dangerous_scheme", DANGEROUS_SCHEME),
)

# Request-body descriptions are checked before any sanitization
REQUEST_DESCRIPTION_DANGER_PATTERNS: DangerPatterns = (
    ("html_tag", HTML_TAG),
    ("event_handler", EVENT_HANDLER),
    ("script_scheme", SCRIPT_SCHEME),
    ("sql_ddl", SQL_DDL),
)

EXCEPTION_CONTEXT_BLOCKLIST: tuple[str, ...] = (
    "<script",
    "javascript:",
    "data:",
    "vbscript:",
    "onload=",
    "onerror=",
)


def first_danger_match(text: str, patterns: DangerPatterns = DANGER_PATTERNS) -> str | None:
    """Return the label of the first pattern in *patterns* found in *text*.

    Returns ``None`` when nothing matches.  Evaluation stops at the first hit.
    """
    for label, pattern in patterns:
        if pattern.search(text):
            return label
    return None


# ── Enumerations ────────────────────────────────────────────────────────


class ResourceType(enum.Enum):
    """Resource kinds that may appear in access-denied contexts."""

    PROJECT = "project"
    STATISTICS = "statistics"
    EXPORT = "export"
    FILE = "file"
    TEMPLATE = "template"
    USER = "user"
    ORGANIZATION = "organization"
    REPORT = "report"
    AUDIT = "audit"
    CONFIG = "config"

    @classmethod
    def lookup(cls, value: str) -> "ResourceType | None":
        """Case-insensitive lookup; ``None`` when *value* is not a member."""
        try:
            return cls(value.lower())
        except ValueError:
            return None


class AccessAction(enum.Enum):
    """Actions that may appear in access-denied contexts."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    CREATE = "create"
    UPDATE = "update"
    VIEW = "view"
    EDIT = "edit"
    ADMIN = "admin"
    EXPORT = "export"
    IMPORT = "import"
    SHARE = "share"
    ARCHIVE = "archive"
    RESTORE = "restore"
    DUPLICATE = "duplicate"

    @classmethod
    def lookup(cls, value: str) -> "AccessAction | None":
        """Case-insensitive lookup; ``None`` when *value* is not a member."""
        try:
            return cls(value.lower())
        except ValueError:
            return None
