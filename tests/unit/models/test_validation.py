"""Tests for ValidationResult, SanitizedInputResult and SanitizeOptions."""

import pytest
from pydantic import ValidationError

from src.models.validation import SanitizedInputResult, SanitizeOptions, ValidationResult


class TestValidationResult:
    def test_from_messages_valid(self):
        result = ValidationResult.from_messages(warnings=["note"])
        assert result.is_valid is True
        assert list(result.errors) == []
        assert list(result.warnings) == ["note"]

    def test_from_messages_invalid(self):
        result = ValidationResult.from_messages(["bad"])
        assert result.is_valid is False

    def test_inconsistent_flag_rejected(self):
        with pytest.raises(ValidationError):
            ValidationResult(is_valid=True, errors=["bad"])
        with pytest.raises(ValidationError):
            ValidationResult(is_valid=False, errors=[])

    def test_frozen(self):
        result = ValidationResult.from_messages()
        with pytest.raises(ValidationError):
            result.is_valid = False

    def test_inputs_copied(self):
        errors = ["bad"]
        result = ValidationResult.from_messages(errors)
        errors.append("later")
        assert list(result.errors) == ["bad"]

    def test_messages_are_immutable(self):
        result = ValidationResult.from_messages(["bad"], ["note"])
        assert isinstance(result.errors, tuple)
        assert isinstance(result.warnings, tuple)
        with pytest.raises(AttributeError):
            result.errors.append("later")
        assert result.errors == ("bad",)
        assert result.is_valid is False

    def test_direct_construction_stores_tuples(self):
        result = ValidationResult(is_valid=False, errors=["bad"])
        assert result.errors == ("bad",)
        assert result.warnings == ()


class TestSanitizedInputResult:
    def test_projection_exposed_when_valid(self):
        result = SanitizedInputResult.from_projection([], [], {"name": "A"})
        assert result.sanitized == {"name": "A"}

    def test_projection_withheld_when_invalid(self):
        result = SanitizedInputResult.from_projection(["bad"], [], {"name": "A"})
        assert result.sanitized is None
        assert result.is_valid is False


class TestSanitizeOptions:
    def test_defaults(self):
        opts = SanitizeOptions()
        assert opts.allow_html is False
        assert opts.max_length is None
        assert opts.trim_whitespace is True
        assert opts.remove_special_chars is False

    def test_aliases(self):
        opts = SanitizeOptions.coerce(
            {"allowHtml": True, "maxLength": 20, "trimWhitespace": False, "removeSpecialChars": True}
        )
        assert opts == SanitizeOptions(
            allow_html=True, max_length=20, trim_whitespace=False, remove_special_chars=True
        )

    def test_coerce_none(self):
        assert SanitizeOptions.coerce(None) == SanitizeOptions()

    def test_coerce_instance_identity(self):
        opts = SanitizeOptions(max_length=5)
        assert SanitizeOptions.coerce(opts) is opts

    def test_extra_keys_ignored(self):
        assert SanitizeOptions.coerce({"unknown": 1}) == SanitizeOptions()

    @pytest.mark.parametrize("max_length", ["ten", "abc", 5.5, [], {}])
    def test_bad_max_length_falls_back_to_default(self, max_length):
        assert SanitizeOptions.coerce({"maxLength": max_length}).max_length is None

    def test_bad_flag_falls_back_to_default(self):
        opts = SanitizeOptions.coerce({"trimWhitespace": None, "allowHtml": "maybe"})
        assert opts.trim_whitespace is True
        assert opts.allow_html is False

    def test_bad_value_keeps_other_options(self):
        opts = SanitizeOptions.coerce({"maxLength": "abc", "removeSpecialChars": True})
        assert opts.max_length is None
        assert opts.remove_special_chars is True

    @pytest.mark.parametrize("options", ["maxLength=5", 5, ["allowHtml"]])
    def test_non_mapping_gives_defaults(self, options):
        assert SanitizeOptions.coerce(options) == SanitizeOptions()
