"""Security event logging.

Rejections caused by danger patterns are logged as security events with a
severity, the field and pattern label, and a SHA-256 fingerprint of the
input.  The raw input is never written to the log.
"""

from __future__ import annotations

import enum
import hashlib
import json
import logging
from typing import Any

_security_logger = logging.getLogger("input_guard.security")


class SecuritySeverity(enum.Enum):
    """Severity levels for security events."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Pattern labels that indicate an active injection attempt rather than a
# stray character
_HIGH_SEVERITY_LABELS: frozenset[str] = frozenset(
    {
        "script_block",
        "iframe_tag",
        "object_tag",
        "embed_tag",
        "event_handler",
        "dangerous_scheme",
        "script_scheme",
        "code_expression",
        "sql_ddl",
    }
)


def hash_input(data: Any) -> str:
    """SHA-256 hex digest of *data* (no raw input in logs).

    Strings are hashed directly; anything else is hashed through its
    canonical JSON form.
    """
    if isinstance(data, str):
        canonical = data
    else:
        canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8", errors="surrogatepass")).hexdigest()


def severity_for(label: str) -> SecuritySeverity:
    """Map a danger-pattern label to a severity."""
    if label in _HIGH_SEVERITY_LABELS:
        return SecuritySeverity.HIGH
    return SecuritySeverity.MEDIUM


def log_security_event(
    event_type: str,
    severity: SecuritySeverity,
    detail: str,
    field: str = "",
) -> None:
    """Log a security event with severity.

    CRITICAL severity logs at ERROR level; others at WARNING.
    """
    msg = f"SECURITY_EVENT event={event_type} severity={severity.value} field={field} detail='{detail}'"
    if severity == SecuritySeverity.CRITICAL:
        _security_logger.error(msg)
    else:
        _security_logger.warning(msg)


def log_danger_pattern(field: str, label: str, value: str) -> None:
    """Record that *value* in *field* was rejected by the *label* pattern."""
    log_security_event(
        "danger_pattern",
        severity_for(label),
        f"pattern={label} input_sha256={hash_input(value)}",
        field=field,
    )
