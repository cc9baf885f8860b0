"""Project request Pydantic models.

Create and update payload schemas with field-level constraints:
whitespace trimming, grapheme-aware length bounds and danger-pattern
rejection for every user-facing string field.  Error messages never echo
the rejected value.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.security.audit import log_danger_pattern
from src.security.composite import extract_defined_fields
from src.security.graphemes import grapheme_length
from src.security.input_validators import is_valid_uuid
from src.security.patterns import (
    CREATE_NAME_DANGER_PATTERNS,
    PROMPT_DANGER_PATTERNS,
    REQUEST_DESCRIPTION_DANGER_PATTERNS,
    UPDATE_NAME_DANGER_PATTERNS,
    DangerPatterns,
    first_danger_match,
)
from src.security.rules import DESCRIPTION_RULE, PROJECT_NAME_RULE, PROMPT_RULE

MAX_UPLOADED_FILES = 10


# ── Shared field helpers ────────────────────────────────────────────────


def _strip_if_str(v: Any) -> Any:
    """Trim strings; leave other types for Pydantic to reject."""
    if isinstance(v, str):
        return v.strip()
    return v


def _reject_danger(field: str, value: str, patterns: DangerPatterns, message: str) -> None:
    label = first_danger_match(value, patterns)
    if label is not None:
        log_danger_pattern(field, label, value)
        raise ValueError(message)


def _check_name(value: str, patterns: DangerPatterns) -> str:
    length = grapheme_length(value)
    if length < PROJECT_NAME_RULE.min_length or length > PROJECT_NAME_RULE.max_length:
        raise ValueError(
            f"name must be between {PROJECT_NAME_RULE.min_length} and "
            f"{PROJECT_NAME_RULE.max_length} characters"
        )
    _reject_danger("name", value, patterns, "name cannot contain potentially dangerous content")
    return value


def _check_description(value: str) -> str:
    if grapheme_length(value) > DESCRIPTION_RULE.max_length:
        raise ValueError(f"description must not exceed {DESCRIPTION_RULE.max_length} characters")
    _reject_danger(
        "description",
        value,
        REQUEST_DESCRIPTION_DANGER_PATTERNS,
        "description cannot contain HTML tags or potentially dangerous scripts",
    )
    return value


# ── Create ──────────────────────────────────────────────────────────────


class CreateProjectRequest(BaseModel):
    """Payload for creating a project."""

    name: str
    description: str | None = None
    initial_prompt: str
    uploaded_file_ids: list[str] | None = Field(default=None, max_length=MAX_UPLOADED_FILES)

    @field_validator("name", "initial_prompt", mode="before")
    @classmethod
    def strip_required(cls, v: Any) -> Any:
        return _strip_if_str(v)

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v: Any) -> Any:
        """Blank descriptions are treated as absent."""
        v = _strip_if_str(v)
        if v == "":
            return None
        return v

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_name(v, CREATE_NAME_DANGER_PATTERNS)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_description(v)

    @field_validator("initial_prompt")
    @classmethod
    def check_prompt(cls, v: str) -> str:
        if len(v) < PROMPT_RULE.min_length or len(v) > PROMPT_RULE.max_length:
            raise ValueError(
                f"initial_prompt must be between {PROMPT_RULE.min_length} and "
                f"{PROMPT_RULE.max_length} characters"
            )
        _reject_danger(
            "initial_prompt",
            v,
            PROMPT_DANGER_PATTERNS,
            "initial_prompt cannot contain HTML, dangerous protocols or expressions",
        )
        return v

    @field_validator("uploaded_file_ids")
    @classmethod
    def check_file_ids(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        for file_id in v:
            if not is_valid_uuid(file_id):
                raise ValueError("each uploaded file id must be a valid UUID v4")
        return v

    def uploaded_files_count(self) -> int:
        return len(self.uploaded_file_ids or [])

    def has_uploaded_files(self) -> bool:
        return self.uploaded_files_count() > 0

    def prompt_complexity(self) -> str:
        """Rough size class of the prompt: ``low``, ``medium`` or ``high``."""
        length = len(self.initial_prompt)
        word_count = len(self.initial_prompt.split())
        if length < 100 or word_count < 15:
            return "low"
        if length < 300 or word_count < 50:
            return "medium"
        return "high"

    def to_log_safe_string(self) -> str:
        """Summary for logs with lengths and counts only, no user content."""
        return (
            f"CreateProjectRequest[name_length={len(self.name)}, "
            f"prompt_length={len(self.initial_prompt)}, "
            f"files_count={self.uploaded_files_count()}]"
        )


# ── Update ──────────────────────────────────────────────────────────────


class UpdateProjectRequest(BaseModel):
    """Partial update of a project.

    ``name=None`` means "leave unchanged"; ``description=None`` clears the
    description (stored as ``""``).  Unknown keys are ignored.
    """

    name: str | None = None
    description: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return _strip_if_str(v)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, v: Any) -> Any:
        if v is None:
            return ""
        return _strip_if_str(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v:
            raise ValueError("name cannot be empty when provided")
        return _check_name(v, UPDATE_NAME_DANGER_PATTERNS)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_description(v)

    def defined_fields(self) -> dict[str, Any]:
        """The fields this update actually changes, as a fresh dict."""
        return extract_defined_fields(self)

    def has_valid_updates(self) -> bool:
        return self.name is not None or self.description is not None

    def update_fields_count(self) -> int:
        return sum(1 for value in (self.name, self.description) if value is not None)

    def is_clearing_description(self) -> bool:
        return self.description == ""

    def to_log_safe_string(self) -> str:
        """Summary for logs with lengths only, no user content."""
        if not self.has_valid_updates():
            return "UpdateProjectRequest[no_updates]"

        updates: list[str] = []
        if self.name is not None:
            updates.append(f"name_length={len(self.name)}")
        if self.description is not None:
            action = "clearing" if self.is_clearing_description() else "updating"
            updates.append(f"description={action}({len(self.description)})")
        return f"UpdateProjectRequest[fields={self.update_fields_count()}, {', '.join(updates)}]"
