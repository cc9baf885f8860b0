"""Structured error responses.

Custom exception hierarchy for the input guard.  Validators never raise
for malformed input (they return a ``ValidationResult``); these exceptions
are for callers that want to abort a request on a failed result or on an
oversized payload.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from src.models.validation import ValidationResult


class InputGuardError(Exception):
    """Base exception for all input-guard errors."""


class InputTooLargeError(InputGuardError):
    """Raised when a payload field exceeds the pre-validation size ceiling.

    The offending value is never included in the message.
    """

    def __init__(self, field: str, size: int, limit: int) -> None:
        self.field = field
        self.size = size
        self.limit = limit
        super().__init__(f"Input too large: {field} ({size} > {limit})")


class ValidationFailedError(InputGuardError):
    """Raised by callers that turn a failed ``ValidationResult`` into an error."""

    def __init__(self, errors: list[str], warnings: list[str] | None = None) -> None:
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        msg = "Validation failed"
        if self.errors:
            msg += f": {'; '.join(self.errors)}"
        super().__init__(msg)

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationFailedError":
        return cls(result.errors, result.warnings)


def raise_for_result(result: ValidationResult) -> ValidationResult:
    """Return *result* unchanged when valid, raise ``ValidationFailedError`` otherwise."""
    if not result.is_valid:
        raise ValidationFailedError.from_result(result)
    return result


class StructuredErrorResponse(BaseModel):
    """Structured error response.

    Returns ``{"error": str, "code": str, "request_id": str, "details": [...]}``
    with no stack traces.  Status-code mapping is the caller's concern.
    """

    error: str
    code: str
    request_id: str
    details: list[str] = Field(default_factory=list)

    @classmethod
    def from_exception(cls, exc: Exception, request_id: str) -> "StructuredErrorResponse":
        """Create from an exception, mapping to machine-readable codes.

        Never leaks internal details for unhandled exceptions.
        """
        if isinstance(exc, InputTooLargeError):
            return cls(
                error=str(exc),
                code="INPUT_TOO_LARGE",
                request_id=request_id,
            )
        if isinstance(exc, ValidationFailedError):
            return cls(
                error="Validation failed",
                code="VALIDATION_FAILED",
                request_id=request_id,
                details=exc.errors,
            )
        if isinstance(exc, InputGuardError):
            return cls(
                error=str(exc),
                code="GUARD_ERROR",
                request_id=request_id,
            )
        # Unhandled: never expose internal details
        return cls(
            error="An internal error occurred",
            code="INTERNAL_ERROR",
            request_id=request_id,
        )
