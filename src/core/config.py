"""Settings.

Centralized configuration for the input guard.
All settings are loaded from environment variables with the INPUT_GUARD_ prefix.

Validation rules themselves (length bounds, charsets, danger patterns) are
constants in ``src.security.rules`` and ``src.security.patterns`` and are
not configurable here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic_settings import BaseSettings

from src.core.errors import InputTooLargeError

_PACKAGE_LOGGER = "input_guard"
_SECURITY_LOGGER = "input_guard.security"


class Settings(BaseSettings):
    """Input guard configuration.

    All fields can be overridden by environment variables prefixed with
    ``INPUT_GUARD_``.  For example, ``INPUT_GUARD_LOG_LEVEL=DEBUG`` raises
    the verbosity of the package loggers.
    """

    # ── Service identity ────────────────────────────────────────────
    SERVICE_NAME: str = "input-guard"
    SERVICE_VERSION: str = "0.1.0"

    # ── Logging ─────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    SECURITY_EVENTS_ENABLED: bool = True  # Log rejected danger patterns

    # ── Pre-validation ceilings ─────────────────────────────────────
    MAX_INPUT_CHARS: int = 100_000  # Per string field, checked before validation
    MAX_LIST_ITEMS: int = 1_000  # Per list field, checked before validation

    model_config = {
        "env_prefix": "INPUT_GUARD_",
    }


def configure_logging(settings: Settings) -> None:
    """Apply ``LOG_LEVEL`` to the package loggers.

    When ``SECURITY_EVENTS_ENABLED`` is false the security logger is
    disabled entirely; validation outcomes are unaffected.
    """
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.LOG_LEVEL}")

    logging.getLogger(_PACKAGE_LOGGER).setLevel(level)
    security_logger = logging.getLogger(_SECURITY_LOGGER)
    security_logger.disabled = not settings.SECURITY_EVENTS_ENABLED


def enforce_input_ceiling(data: Mapping[str, Any], settings: Settings) -> None:
    """Reject oversized payloads before they reach the validators.

    Checks every top-level string value against ``MAX_INPUT_CHARS`` and
    every list value against ``MAX_LIST_ITEMS`` (and its string items
    against ``MAX_INPUT_CHARS``).  Non-mapping *data* is left for the
    validators to report.

    Raises ``InputTooLargeError`` on the first violation.
    """
    if not isinstance(data, Mapping):
        return

    for key, value in data.items():
        field = str(key)
        if isinstance(value, str):
            if len(value) > settings.MAX_INPUT_CHARS:
                raise InputTooLargeError(field, len(value), settings.MAX_INPUT_CHARS)
        elif isinstance(value, (list, tuple)):
            if len(value) > settings.MAX_LIST_ITEMS:
                raise InputTooLargeError(field, len(value), settings.MAX_LIST_ITEMS)
            for index, item in enumerate(value):
                if isinstance(item, str) and len(item) > settings.MAX_INPUT_CHARS:
                    raise InputTooLargeError(
                        f"{field}[{index}]", len(item), settings.MAX_INPUT_CHARS
                    )
