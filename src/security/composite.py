"""Composite orchestrator: whole-object validation and safe field extraction.

``validate_and_sanitize_input`` validates every field present in an input
record, aggregates errors and warnings in a fixed field order, and returns
a sanitized projection only when the whole record is valid.

``extract_defined_fields`` builds a fresh dict from an allow-list of field
names, reading only a payload's own keys or instance attributes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from src.models.validation import SanitizedInputResult
from src.security.input_validators import (
    is_valid_action,
    is_valid_description,
    is_valid_exception_context,
    is_valid_project_id,
    is_valid_resource_type,
    is_valid_uuid,
    validate_file_ids,
    validate_project_name,
    validate_prompt,
)
from src.security.sanitizers import sanitize_description, sanitize_exception_context

logger = logging.getLogger("input_guard.composite")

UPDATE_FIELDS: tuple[str, ...] = ("name", "description")


def validate_and_sanitize_input(data: Any) -> SanitizedInputResult:
    """Validate a project input record and build its sanitized projection.

    Fields are processed in the order ``name``, ``description``,
    ``initial_prompt``, ``uploaded_file_ids``.  A field is processed when
    its key is present, whatever the value.

    - ``name`` and ``initial_prompt`` are validated, then trimmed.
    - ``description`` is sanitized first and the sanitized value validated.
    - ``uploaded_file_ids`` is validated as a list and copied with each id trimmed.

    ``sanitized`` is ``None`` unless every field passed.
    """
    errors: list[str] = []
    warnings: list[str] = []
    sanitized: dict[str, Any] = {}

    if not isinstance(data, Mapping):
        errors.append("Input must be an object")
        return SanitizedInputResult.from_projection(errors, warnings, sanitized)

    if "name" in data:
        name = data["name"]
        result = validate_project_name(name)
        errors.extend(result.errors)
        warnings.extend(result.warnings)
        if result.is_valid:
            sanitized["name"] = name.strip()

    if "description" in data:
        description = data["description"]
        if description is not None and not isinstance(description, str):
            errors.append("Description must be a string")
        else:
            cleaned = sanitize_description(description)
            if is_valid_description(cleaned):
                sanitized["description"] = cleaned
            else:
                errors.append("Invalid description format")

    if "initial_prompt" in data:
        prompt = data["initial_prompt"]
        result = validate_prompt(prompt)
        errors.extend(result.errors)
        warnings.extend(result.warnings)
        if result.is_valid:
            sanitized["initial_prompt"] = prompt.strip()

    if "uploaded_file_ids" in data:
        file_ids = data["uploaded_file_ids"]
        result = validate_file_ids(file_ids)
        errors.extend(result.errors)
        warnings.extend(result.warnings)
        if result.is_valid:
            sanitized["uploaded_file_ids"] = [file_id.strip() for file_id in file_ids]

    if errors:
        logger.debug("Input rejected: %d error(s), %d warning(s)", len(errors), len(warnings))

    return SanitizedInputResult.from_projection(errors, warnings, sanitized)


def _own_fields(payload: Any) -> Mapping[str, Any]:
    """Return the payload's own keys/attributes without touching its class."""
    if isinstance(payload, Mapping):
        return {key: payload[key] for key in list(payload.keys()) if isinstance(key, str)}
    return vars(payload)


def extract_defined_fields(payload: Any, fields: tuple[str, ...] = UPDATE_FIELDS) -> dict[str, Any]:
    """Copy the allow-listed *fields* that *payload* defines into a new dict.

    Reads mapping keys, or the instance ``__dict__`` for objects, so class
    attributes, properties and ``__getattr__`` hooks are never consulted.
    Fields whose value is ``None`` are treated as not defined.  Falls back
    to plain attribute access of the allow-listed names if the payload
    cannot be read that way, and to ``{}`` if that fails too.
    """
    if payload is None:
        return {}

    extracted: dict[str, Any] = {}
    try:
        own = _own_fields(payload)
        for name in fields:
            if name in own and own[name] is not None:
                extracted[name] = own[name]
        return extracted
    except Exception:
        logger.debug("Own-field read failed for %s; using direct access", type(payload).__name__)

    extracted = {}
    try:
        for name in fields:
            value = getattr(payload, name, None)
            if value is not None:
                extracted[name] = value
    except Exception:
        logger.debug("Direct field access failed for %s", type(payload).__name__)
        return {}
    return extracted


def validate_unauthorized_access_params(params: Any) -> SanitizedInputResult:
    """Validate the parameters of an access-denied report.

    ``resource_type`` and ``action`` are required to be known values when
    present (errors otherwise) and are lower-cased.  Invalid
    ``resource_id``/``user_id`` values only produce warnings and are left
    out of the sanitized output so they never reach the logs.
    """
    errors: list[str] = []
    warnings: list[str] = []
    sanitized: dict[str, Any] = {}

    if not isinstance(params, Mapping):
        errors.append("Access parameters must be an object")
        return SanitizedInputResult.from_projection(errors, warnings, sanitized)

    if "resource_type" in params:
        resource_type = params["resource_type"]
        if is_valid_resource_type(resource_type):
            sanitized["resource_type"] = resource_type.lower()
        else:
            errors.append("Invalid resource type")

    if "resource_id" in params:
        resource_id = params["resource_id"]
        if is_valid_project_id(resource_id):
            sanitized["resource_id"] = resource_id.strip()
        else:
            warnings.append("Invalid resource ID provided (excluded from logs for security)")

    if "user_id" in params:
        user_id = params["user_id"]
        if is_valid_uuid(user_id):
            sanitized["user_id"] = user_id
        else:
            warnings.append("Invalid user ID provided (excluded from logs for security)")

    if "action" in params:
        action = params["action"]
        if is_valid_action(action):
            sanitized["action"] = action.lower()
        else:
            errors.append("Invalid action type")

    return SanitizedInputResult.from_projection(errors, warnings, sanitized)


def create_safe_not_found_params(project_id: Any, context: Any = None) -> dict[str, str] | None:
    """Build the parameters of a not-found report, or ``None`` for a bad id.

    *context* is included (sanitized) only when it is a non-empty, valid
    exception context.
    """
    if not is_valid_project_id(project_id):
        return None

    result = {"project_id": project_id.strip()}
    if context and is_valid_exception_context(context):
        result["context"] = sanitize_exception_context(context)
    return result
