"""Validation result and sanitizer option models.

``ValidationResult`` is the structured outcome every detailed validator
returns: blocking ``errors`` and advisory ``warnings`` in the order they
were checked.  ``SanitizeOptions`` configures ``sanitize_text``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)


class ValidationResult(BaseModel):
    """Outcome of a validation: ``is_valid`` is true iff ``errors`` is empty.

    Messages are stored as tuples so a returned result cannot be edited
    into an inconsistent state.
    """

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: tuple[str, ...] = Field(default_factory=tuple)
    warnings: tuple[str, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _check_consistency(self) -> "ValidationResult":
        if self.is_valid != (len(self.errors) == 0):
            raise ValueError("is_valid must be true exactly when errors is empty")
        return self

    @classmethod
    def from_messages(
        cls, errors: list[str] | None = None, warnings: list[str] | None = None
    ) -> "ValidationResult":
        """Build a result whose validity is derived from *errors*."""
        errors = list(errors or [])
        return cls(is_valid=not errors, errors=errors, warnings=list(warnings or []))


class SanitizedInputResult(ValidationResult):
    """Validation result carrying the sanitized projection of the input.

    ``sanitized`` only holds the fields that were present and passed, and
    is ``None`` whenever the overall result is invalid.
    """

    sanitized: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _check_no_partial_leak(self) -> "SanitizedInputResult":
        if not self.is_valid and self.sanitized is not None:
            raise ValueError("sanitized must be None when validation failed")
        return self

    @classmethod
    def from_projection(
        cls,
        errors: list[str],
        warnings: list[str],
        sanitized: dict[str, Any],
    ) -> "SanitizedInputResult":
        """Build a result, exposing *sanitized* only when *errors* is empty."""
        errors = list(errors)
        return cls(
            is_valid=not errors,
            errors=errors,
            warnings=list(warnings),
            sanitized=dict(sanitized) if not errors else None,
        )


class SanitizeOptions(BaseModel):
    """Options for ``sanitize_text``.

    Accepts snake_case names or the camelCase aliases used by JSON clients
    (``allowHtml``, ``maxLength``, ``trimWhitespace``, ``removeSpecialChars``).
    Unrecognized keys are ignored, and a recognized option whose value has
    the wrong type falls back to that option's default.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    allow_html: bool = Field(default=False, alias="allowHtml")
    max_length: int | None = Field(default=None, alias="maxLength")
    trim_whitespace: bool = Field(default=True, alias="trimWhitespace")
    remove_special_chars: bool = Field(default=False, alias="removeSpecialChars")

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_bad_value(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].default

    @classmethod
    def coerce(cls, options: "SanitizeOptions | Mapping[str, Any] | None") -> "SanitizeOptions":
        """Return *options* as a ``SanitizeOptions`` instance.

        Never raises: anything that is not a mapping yields the defaults.
        """
        if isinstance(options, cls):
            return options
        if not isinstance(options, Mapping):
            return cls()
        return cls.model_validate(dict(options))
