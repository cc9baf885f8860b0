"""Security event logging tests.

Covers input fingerprinting, severity mapping and the SECURITY_EVENT log
line emitted when a danger pattern rejects input.
"""

import hashlib
import json
import logging

import pytest

from src.security.audit import (
    SecuritySeverity,
    hash_input,
    log_danger_pattern,
    log_security_event,
    severity_for,
)


class TestHashInput:
    def test_string_hashed_directly(self) -> None:
        assert hash_input("abc") == hashlib.sha256(b"abc").hexdigest()

    def test_mapping_hashed_canonically(self) -> None:
        expected = hashlib.sha256(
            json.dumps({"a": 1, "b": 2}, sort_keys=True).encode()
        ).hexdigest()
        assert hash_input({"b": 2, "a": 1}) == expected

    def test_key_order_irrelevant(self) -> None:
        assert hash_input({"x": 1, "y": [1, 2]}) == hash_input({"y": [1, 2], "x": 1})

    def test_lone_surrogate_does_not_raise(self) -> None:
        assert len(hash_input("bad \ud800 text")) == 64


class TestSeverity:
    @pytest.mark.parametrize(
        "label",
        ["script_block", "event_handler", "dangerous_scheme", "code_expression", "sql_ddl"],
    )
    def test_injection_labels_high(self, label) -> None:
        assert severity_for(label) is SecuritySeverity.HIGH

    @pytest.mark.parametrize("label", ["html_tag", "style_block", "forbidden_chars"])
    def test_other_labels_medium(self, label) -> None:
        assert severity_for(label) is SecuritySeverity.MEDIUM


class TestLogSecurityEvent:
    def test_warning_level(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="input_guard.security"):
            log_security_event("danger_pattern", SecuritySeverity.HIGH, "pattern=x", field="name")
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.name == "input_guard.security"
        assert "SECURITY_EVENT event=danger_pattern severity=high field=name" in record.getMessage()

    def test_critical_logs_error(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="input_guard.security"):
            log_security_event("tamper", SecuritySeverity.CRITICAL, "detail")
        assert caplog.records[-1].levelno == logging.ERROR


class TestLogDangerPattern:
    def test_fingerprint_not_payload(self, caplog) -> None:
        payload = "<script>steal()</script>"
        with caplog.at_level(logging.WARNING, logger="input_guard.security"):
            log_danger_pattern("description", "script_block", payload)
        message = caplog.records[-1].getMessage()
        assert f"input_sha256={hash_input(payload)}" in message
        assert "pattern=script_block" in message
        assert "severity=high" in message
        assert payload not in message
        assert "steal" not in message
