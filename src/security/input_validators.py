"""Field validators: one validator per semantic field type.

Every validator accepts any value and never raises for malformed input:
non-strings are rejected as a structural error, length violations name the
bound that was crossed, and charset or danger-pattern violations are
reported generically without echoing the offending text.

``is_valid_*`` functions return a bool; ``validate_*`` functions return a
``ValidationResult`` with ordered errors and advisory warnings.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from src.models.validation import ValidationResult
from src.security.audit import log_danger_pattern
from src.security.patterns import (
    ALL_DIGITS_PATTERN,
    ALNUM_PATTERN,
    EXCEPTION_CONTEXT_BLOCKLIST,
    ID_SEPARATOR_PATTERN,
    NAME_SEPARATORS_PATTERN,
    OPAQUE_ID_PATTERN,
    PADDED_FILE_ID_PATTERNS,
    REJECTED_FILE_ID_LITERALS,
    TRAILING_UNDERSCORES_PATTERN,
    TRUNCATED_UUID_PATTERN,
    UUID_V4_PATTERN,
    AccessAction,
    DangerPatterns,
    ResourceType,
    first_danger_match,
)
from src.security.rules import (
    DESCRIPTION_RULE,
    EXCEPTION_CONTEXT_RULE,
    FILE_ID_MAX_LENGTH,
    FILE_ID_MIN_LENGTH,
    FILE_IDS_WARNING_THRESHOLD,
    MAX_FILE_IDS,
    MAX_SEPARATOR_RUN,
    MIN_ALNUM_CHARS,
    MIN_ALNUM_RATIO,
    NAME_SHORT_WARNING_LENGTH,
    PROJECT_NAME_RULE,
    PROMPT_MIN_MEANINGFUL_CHARS,
    PROMPT_MIN_WORDS_WARNING,
    PROMPT_RULE,
    PROMPT_SHORT_WARNING_LENGTH,
)

logger = logging.getLogger("input_guard.validators")

_SEPARATOR_RUN_PATTERN = re.compile(rf"[\-_]{{{MAX_SEPARATOR_RUN + 1},}}")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_TERMINAL_PUNCTUATION_PATTERN = re.compile(r"[.!?]\Z")


def _has_danger(field: str, text: str, patterns: DangerPatterns) -> bool:
    """Check *text* against *patterns*, logging a security event on a hit."""
    label = first_danger_match(text, patterns)
    if label is None:
        return False
    log_danger_pattern(field, label, text)
    return True


def _is_utf8_encodable(text: str) -> bool:
    """Lone surrogates cannot be encoded and are treated as invalid characters."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _only_separators(text: str) -> bool:
    return NAME_SEPARATORS_PATTERN.sub("", text) == ""


# ── Project name ────────────────────────────────────────────────────────


def is_valid_project_name(name: Any) -> bool:
    """Return ``True`` if *name* is a valid project name.

    1–100 graphemes after trimming, letters/digits/spaces/hyphens/underscores
    only, and at least one letter or digit.
    """
    if not isinstance(name, str):
        return False

    trimmed = name.strip()
    length = PROJECT_NAME_RULE.measure(trimmed)
    if length < PROJECT_NAME_RULE.min_length or length > PROJECT_NAME_RULE.max_length:
        return False

    if not PROJECT_NAME_RULE.charset_ok(trimmed):
        return False

    return not _only_separators(trimmed)


def validate_project_name(name: Any) -> ValidationResult:
    """Validate a project name with detailed errors and warnings."""
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(name, str):
        errors.append("Project name is required and must be a string")
        return ValidationResult.from_messages(errors, warnings)

    trimmed = name.strip()
    length = PROJECT_NAME_RULE.measure(trimmed)

    if length < PROJECT_NAME_RULE.min_length:
        errors.append("Project name cannot be empty")
    elif length > PROJECT_NAME_RULE.max_length:
        errors.append(
            f"Project name cannot exceed {PROJECT_NAME_RULE.max_length} characters"
        )

    if trimmed:
        if not PROJECT_NAME_RULE.charset_ok(trimmed):
            errors.append(
                "Project name can only contain letters, numbers, spaces, hyphens, and underscores"
            )
        if _only_separators(trimmed):
            errors.append("Project name must contain at least one alphanumeric character")

    if length < NAME_SHORT_WARNING_LENGTH:
        warnings.append(
            f"Project names with less than {NAME_SHORT_WARNING_LENGTH} characters may be too short"
        )

    if trimmed != name:
        warnings.append("Project name will be trimmed of leading/trailing whitespace")

    return ValidationResult.from_messages(errors, warnings)


# ── Description ─────────────────────────────────────────────────────────


def is_valid_description(description: Any) -> bool:
    """Return ``True`` if *description* is acceptable.

    The field is optional: ``None`` and the empty string are valid.
    """
    return validate_description(description).is_valid


def validate_description(description: Any) -> ValidationResult:
    """Validate an optional description with detailed errors."""
    errors: list[str] = []

    if description is None or description == "":
        return ValidationResult.from_messages()

    if not isinstance(description, str):
        errors.append("Description must be a string")
        return ValidationResult.from_messages(errors)

    trimmed = description.strip()

    if DESCRIPTION_RULE.measure(trimmed) > DESCRIPTION_RULE.max_length:
        errors.append(
            f"Description cannot exceed {DESCRIPTION_RULE.max_length} characters"
        )

    if not DESCRIPTION_RULE.charset_ok(trimmed):
        errors.append("Description contains unsafe characters")

    if _has_danger(DESCRIPTION_RULE.field, trimmed, DESCRIPTION_RULE.danger_patterns):
        errors.append("Description contains potentially dangerous content")

    return ValidationResult.from_messages(errors)


# ── Prompt ──────────────────────────────────────────────────────────────


def is_valid_prompt(prompt: Any) -> bool:
    """Return ``True`` if *prompt* is a usable initial prompt.

    10–5000 characters after trimming, at least 5 non-whitespace
    characters, encodable as UTF-8 and free of danger patterns.
    """
    if not isinstance(prompt, str) or not prompt:
        return False

    trimmed = prompt.strip()
    if len(trimmed) < PROMPT_RULE.min_length or len(trimmed) > PROMPT_RULE.max_length:
        return False

    if len(_WHITESPACE_PATTERN.sub("", trimmed)) < PROMPT_MIN_MEANINGFUL_CHARS:
        return False

    if not _is_utf8_encodable(trimmed):
        return False

    return not _has_danger(PROMPT_RULE.field, trimmed, PROMPT_RULE.danger_patterns)


def validate_prompt(prompt: Any) -> ValidationResult:
    """Validate an initial prompt with detailed errors and warnings."""
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(prompt, str) or not prompt:
        errors.append("Initial prompt is required and must be a string")
        return ValidationResult.from_messages(errors, warnings)

    trimmed = prompt.strip()

    if len(trimmed) < PROMPT_RULE.min_length:
        errors.append(f"Prompt must be at least {PROMPT_RULE.min_length} characters long")
    elif len(trimmed) > PROMPT_RULE.max_length:
        errors.append(f"Prompt cannot exceed {PROMPT_RULE.max_length} characters")

    if len(_WHITESPACE_PATTERN.sub("", trimmed)) < PROMPT_MIN_MEANINGFUL_CHARS:
        errors.append(
            "Prompt must contain meaningful content "
            f"(at least {PROMPT_MIN_MEANINGFUL_CHARS} non-whitespace characters)"
        )

    if not _is_utf8_encodable(trimmed):
        errors.append("Prompt contains invalid characters")
    elif _has_danger(PROMPT_RULE.field, trimmed, PROMPT_RULE.danger_patterns):
        errors.append("Prompt contains potentially dangerous content")

    if len(trimmed) < PROMPT_SHORT_WARNING_LENGTH:
        warnings.append("Short prompts may not provide enough context for optimal results")

    if len(trimmed.split()) < PROMPT_MIN_WORDS_WARNING:
        warnings.append(
            f"Prompts with fewer than {PROMPT_MIN_WORDS_WARNING} words may be too brief"
        )

    if not _TERMINAL_PUNCTUATION_PATTERN.search(trimmed):
        warnings.append("Consider ending your prompt with proper punctuation")

    return ValidationResult.from_messages(errors, warnings)


# ── Identifiers ─────────────────────────────────────────────────────────


def is_valid_uuid(value: Any) -> bool:
    """Return ``True`` if *value* is a UUID v4 (case-insensitive)."""
    if not isinstance(value, str):
        return False
    return UUID_V4_PATTERN.fullmatch(value) is not None


def file_id_rejection_reason(value: str) -> str | None:
    """Score a non-UUID identifier against the opaque-id heuristic.

    Returns a short reason label for the first failed rule, or ``None``
    when the identifier is acceptable.
    """
    length = len(value)
    if length < FILE_ID_MIN_LENGTH or length > FILE_ID_MAX_LENGTH:
        return "length"

    if not ALNUM_PATTERN.match(value):
        return "leading_separator"

    if OPAQUE_ID_PATTERN.fullmatch(value) is None:
        return "charset"

    if value in REJECTED_FILE_ID_LITERALS:
        return "rejected_literal"

    if TRAILING_UNDERSCORES_PATTERN.search(value):
        return "trailing_underscores"

    alnum_count = len(ALNUM_PATTERN.findall(value))
    if alnum_count < MIN_ALNUM_CHARS:
        return "too_few_alphanumerics"

    if ALL_DIGITS_PATTERN.fullmatch(value):
        return "all_digits"

    if len(ID_SEPARATOR_PATTERN.findall(value)) > alnum_count:
        return "separator_dominated"

    if any(pattern.fullmatch(value) for pattern in PADDED_FILE_ID_PATTERNS):
        return "padded"

    if alnum_count / length < MIN_ALNUM_RATIO:
        return "low_alnum_ratio"

    if _SEPARATOR_RUN_PATTERN.search(value):
        return "separator_run"

    if TRUNCATED_UUID_PATTERN.fullmatch(value):
        return "truncated_uuid"

    return None


def is_valid_file_id(file_id: Any) -> bool:
    """Return ``True`` if *file_id* is a UUID v4 or an acceptable opaque id.

    Surrounding whitespace is ignored, as for project ids.
    """
    if not isinstance(file_id, str):
        return False

    trimmed = file_id.strip()
    if not trimmed:
        return False

    if is_valid_uuid(trimmed):
        return True

    reason = file_id_rejection_reason(trimmed)
    if reason is not None:
        logger.debug("File id rejected: reason=%s", reason)
        return False
    return True


def validate_file_ids(file_ids: Any) -> ValidationResult:
    """Validate a list of file ids.

    Reports invalid entries and duplicated entries by position, as two
    separate errors.  Ids that differ only in surrounding whitespace are
    duplicates.  More than 50 ids is an error; more than 20 a warning.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(file_ids, list):
        errors.append("File IDs must be provided as a list")
        return ValidationResult.from_messages(errors, warnings)

    if not file_ids:
        return ValidationResult.from_messages(errors, warnings)

    if len(file_ids) > MAX_FILE_IDS:
        errors.append(f"Cannot upload more than {MAX_FILE_IDS} files per project")

    invalid_positions: list[int] = []
    duplicate_positions: list[int] = []
    seen: set[str] = set()

    for index, file_id in enumerate(file_ids):
        if not is_valid_file_id(file_id):
            invalid_positions.append(index)

        if isinstance(file_id, str):
            key = file_id.strip()
            if key in seen:
                duplicate_positions.append(index)
            else:
                seen.add(key)

    if invalid_positions:
        errors.append(
            f"Invalid file IDs at positions: {', '.join(str(i) for i in invalid_positions)}"
        )

    if duplicate_positions:
        errors.append(
            f"Duplicate file IDs at positions: {', '.join(str(i) for i in duplicate_positions)}"
        )

    if len(file_ids) > FILE_IDS_WARNING_THRESHOLD:
        warnings.append("Large number of files may impact performance")

    return ValidationResult.from_messages(errors, warnings)


def is_valid_project_id(project_id: Any) -> bool:
    """Return ``True`` if *project_id* is a UUID v4 or an 8–50 char opaque id.

    Looser than the file-id heuristic; surrounding whitespace is ignored.
    """
    if not isinstance(project_id, str) or not project_id:
        return False

    trimmed = project_id.strip()
    return is_valid_uuid(trimmed) or OPAQUE_ID_PATTERN.fullmatch(trimmed) is not None


# ── Enumerations ────────────────────────────────────────────────────────


def is_valid_resource_type(resource_type: Any) -> bool:
    """Case-insensitive membership in ``ResourceType``."""
    if not isinstance(resource_type, str):
        return False
    return ResourceType.lookup(resource_type) is not None


def is_valid_action(action: Any) -> bool:
    """Case-insensitive membership in ``AccessAction``."""
    if not isinstance(action, str):
        return False
    return AccessAction.lookup(action) is not None


# ── Free text ───────────────────────────────────────────────────────────


def is_valid_exception_context(context: Any) -> bool:
    """Return ``True`` if *context* is safe to attach to an exception.

    At most 500 characters after trimming, restricted charset, and none of
    the blocklisted script/scheme substrings.
    """
    if not isinstance(context, str):
        return False

    trimmed = context.strip()
    if len(trimmed) > EXCEPTION_CONTEXT_RULE.max_length:
        return False

    if not EXCEPTION_CONTEXT_RULE.charset_ok(trimmed):
        return False

    lowered = trimmed.lower()
    return not any(blocked in lowered for blocked in EXCEPTION_CONTEXT_BLOCKLIST)


def validate_text_length(text: Any, min_length: int, max_length: int) -> bool:
    """Check the trimmed length of *text* against inclusive bounds.

    Missing or empty text satisfies the check only when *min_length* is 0.
    """
    if not isinstance(text, str) or not text:
        return min_length == 0

    length = len(text.strip())
    return min_length <= length <= max_length


# ── Error formatting ────────────────────────────────────────────────────


def format_validation_errors(exc: Any) -> list[dict[str, str]]:
    """Convert a Pydantic ``ValidationError`` into a structured list.

    Returns a list of ``{"field": ..., "message": ...}`` dicts suitable for
    a 400/422 JSON response.  Never includes stack traces or the rejected input.
    """
    errors: list[dict[str, str]] = []
    for err in exc.errors(include_input=False, include_url=False):
        loc = err.get("loc", ())
        field = ".".join(str(part) for part in loc) if loc else "unknown"
        errors.append({
            "field": field,
            "message": err.get("msg", "Validation error"),
        })
    return errors
