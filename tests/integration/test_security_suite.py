"""Integration security test suite.

Runs known injection vectors through every validation path end to end:

- XSS and dangerous-scheme vectors: 100% rejected by names, descriptions,
  prompts, file ids and exception contexts
- SQL DDL injection vectors: 100% rejected by descriptions and names
- Sanitizer output never contains a complete tag or a script scheme
- Every validator and sanitizer is total over hostile non-string input
- Rejections are logged as security events without the raw payload
"""

import logging

import pytest
from pydantic import ValidationError

from src.models.schemas import UpdateProjectRequest
from src.security.composite import (
    create_safe_not_found_params,
    extract_defined_fields,
    validate_and_sanitize_input,
    validate_unauthorized_access_params,
)
from src.security.input_validators import (
    is_valid_action,
    is_valid_description,
    is_valid_exception_context,
    is_valid_file_id,
    is_valid_project_id,
    is_valid_project_name,
    is_valid_prompt,
    is_valid_resource_type,
    is_valid_uuid,
    validate_description,
    validate_file_ids,
    validate_project_name,
    validate_prompt,
    validate_text_length,
)
from src.security.patterns import HTML_TAG
from src.security.sanitizers import (
    OutputSanitizer,
    sanitize_description,
    sanitize_exception_context,
    sanitize_text,
)

pytestmark = pytest.mark.integration


# ═══════════════════════════════════════════════════════════════════════
# Attack corpora
# ═══════════════════════════════════════════════════════════════════════

XSS_VECTORS = [
    # ── Script and markup ───────────────────────────────────────────
    "<script>alert('xss')</script>",
    "<SCRIPT SRC=//evil.example/x.js></SCRIPT>",
    "<img src=x onerror=alert(1)>",
    "<svg onload=alert(1)>",
    "<body onload=alert(1)>",
    "<iframe src='javascript:alert(1)'></iframe>",
    "<object data='x.swf'></object>",
    "<embed src='x.swf'>",
    "<style>body{background:url(x)}</style>",
    "<a href='x' onclick='steal()'>x</a>",

    # ── Bare handlers and schemes ───────────────────────────────────
    "onmouseover=alert(1)",
    "javascript:alert(document.cookie)",
    "JaVaScRiPt:alert(1)",
    "vbscript:msgbox(1)",
    "data:text/html;base64,PHNjcmlwdD4=",
]

SQL_DDL_VECTORS = [
    "'; DROP TABLE users; --",
    "x; DROP DATABASE prod",
    "a;\tTRUNCATE TABLE logs",
    "name; ALTER USER admin",
    "z; create table t(x int)",
]

HOSTILE_VALUES = [
    None,
    0,
    -1,
    3.14,
    True,
    [],
    {},
    (),
    b"bytes",
    object(),
    "\x00",
    "\ud800",
    "😀" * 5000,
    "<" * 2_000,
]


def _prompt_with(vector):
    return f"Please build this feature: {vector} for the homepage."


# ═══════════════════════════════════════════════════════════════════════
# XSS and dangerous schemes
# ═══════════════════════════════════════════════════════════════════════


class TestXSSVectorsBlocked:
    """Every XSS vector is rejected by every field that could carry it."""

    @pytest.mark.parametrize("vector", XSS_VECTORS)
    def test_prompt(self, vector):
        assert is_valid_prompt(_prompt_with(vector)) is False
        assert "Prompt contains potentially dangerous content" in validate_prompt(
            _prompt_with(vector)
        ).errors

    @pytest.mark.parametrize("vector", XSS_VECTORS)
    def test_project_name(self, vector):
        assert is_valid_project_name(vector) is False

    @pytest.mark.parametrize("vector", XSS_VECTORS)
    def test_update_name(self, vector):
        with pytest.raises(ValidationError):
            UpdateProjectRequest(name=vector)

    @pytest.mark.parametrize("vector", XSS_VECTORS)
    def test_description(self, vector):
        assert is_valid_description(vector) is False

    @pytest.mark.parametrize("vector", XSS_VECTORS)
    def test_file_id(self, vector):
        assert is_valid_file_id(vector) is False
        assert list(validate_file_ids([vector]).errors) == ["Invalid file IDs at positions: 0"]

    @pytest.mark.parametrize("vector", XSS_VECTORS)
    def test_exception_context(self, vector):
        assert is_valid_exception_context(vector) is False
        assert create_safe_not_found_params("proj_12345", vector) == {"project_id": "proj_12345"}

    @pytest.mark.parametrize("vector", XSS_VECTORS)
    def test_composite_rejects_without_projection(self, vector):
        result = validate_and_sanitize_input(
            {"name": vector, "initial_prompt": _prompt_with(vector)}
        )
        assert result.is_valid is False
        assert result.sanitized is None
        assert all(vector not in message for message in result.errors)


class TestSQLVectorsBlocked:
    @pytest.mark.parametrize("vector", SQL_DDL_VECTORS)
    def test_description(self, vector):
        assert is_valid_description(vector) is False

    @pytest.mark.parametrize("vector", SQL_DDL_VECTORS)
    def test_request_description(self, vector):
        with pytest.raises(ValidationError, match="description cannot contain HTML tags"):
            UpdateProjectRequest(description=vector)

    @pytest.mark.parametrize("vector", SQL_DDL_VECTORS)
    def test_project_name(self, vector):
        assert is_valid_project_name(vector) is False


class TestSecurityEventsLogged:
    def test_rejections_logged_without_payload(self, caplog):
        with caplog.at_level(logging.WARNING, logger="input_guard.security"):
            for vector in XSS_VECTORS:
                validate_prompt(_prompt_with(vector))

        events = [r for r in caplog.records if r.name == "input_guard.security"]
        assert len(events) == len(XSS_VECTORS)
        for record in events:
            message = record.getMessage()
            assert message.startswith("SECURITY_EVENT event=danger_pattern")
            assert "alert" not in message
            assert "<" not in message


# ═══════════════════════════════════════════════════════════════════════
# Sanitizer guarantees
# ═══════════════════════════════════════════════════════════════════════


class TestSanitizerGuarantees:
    @pytest.mark.parametrize("vector", XSS_VECTORS + SQL_DDL_VECTORS)
    def test_sanitize_text_leaves_no_tags(self, vector):
        assert HTML_TAG.search(sanitize_text(vector)) is None

    @pytest.mark.parametrize("vector", XSS_VECTORS)
    def test_sanitize_description_leaves_no_tags(self, vector):
        assert HTML_TAG.search(sanitize_description(vector)) is None

    @pytest.mark.parametrize("vector", XSS_VECTORS + SQL_DDL_VECTORS)
    def test_sanitize_exception_context_neutralizes(self, vector):
        result = sanitize_exception_context(vector)
        assert not set(result) & set("<>\"'&")
        lowered = result.lower()
        for token in ("javascript:", "vbscript:", "data:"):
            assert token not in lowered

    @pytest.mark.parametrize("vector", XSS_VECTORS + SQL_DDL_VECTORS)
    @pytest.mark.parametrize(
        "options",
        [None, {"removeSpecialChars": True}, {"maxLength": 12}, {"allowHtml": True}],
        ids=["default", "special", "truncate", "html"],
    )
    def test_sanitize_text_idempotent(self, vector, options):
        once = sanitize_text(vector, options)
        assert sanitize_text(once, options) == once

    def test_output_sanitizer_nested(self):
        payload = {"items": [{"title": vector} for vector in XSS_VECTORS]}
        cleaned = OutputSanitizer().sanitize(payload)
        for item in cleaned["items"]:
            assert HTML_TAG.search(item["title"]) is None


# ═══════════════════════════════════════════════════════════════════════
# Totality and determinism
# ═══════════════════════════════════════════════════════════════════════


class TestTotality:
    """No validator or sanitizer raises for hostile input."""

    @pytest.mark.parametrize("value", HOSTILE_VALUES)
    def test_predicates_return_bool(self, value):
        for predicate in (
            is_valid_project_name,
            is_valid_description,
            is_valid_prompt,
            is_valid_uuid,
            is_valid_file_id,
            is_valid_project_id,
            is_valid_resource_type,
            is_valid_action,
            is_valid_exception_context,
        ):
            assert isinstance(predicate(value), bool)

    @pytest.mark.parametrize("value", HOSTILE_VALUES)
    def test_detailed_validators_consistent(self, value):
        for validator in (validate_project_name, validate_description, validate_prompt, validate_file_ids):
            result = validator(value)
            assert result.is_valid == (len(result.errors) == 0)

    @pytest.mark.parametrize("value", HOSTILE_VALUES)
    def test_sanitizers_return_str(self, value):
        for sanitizer in (sanitize_text, sanitize_description, sanitize_exception_context):
            assert isinstance(sanitizer(value), str)

    @pytest.mark.parametrize("value", [v for v in HOSTILE_VALUES if not isinstance(v, dict)])
    def test_composite_entry_points(self, value):
        assert validate_and_sanitize_input(value).is_valid is False
        assert isinstance(extract_defined_fields(value), dict)
        assert validate_unauthorized_access_params(value).sanitized is None
        assert create_safe_not_found_params(value) is None
        assert isinstance(validate_text_length(value, 0, 10), bool)

    @pytest.mark.parametrize("vector", XSS_VECTORS + SQL_DDL_VECTORS)
    def test_deterministic(self, vector):
        record = {"name": vector, "description": vector, "initial_prompt": _prompt_with(vector)}
        assert validate_and_sanitize_input(record) == validate_and_sanitize_input(record)
