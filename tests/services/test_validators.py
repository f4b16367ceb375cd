"""
Field Validator Tests
Tests for sanitization, shape checks and per-field validation.
"""
import time

import pytest

from backend.services.validators import (
    MAX_FIELD_LENGTH,
    is_valid_email,
    is_valid_phone,
    normalize_phone,
    sanitize_text,
    strip_markup,
    validate_business_email,
    validate_business_email_strict,
    validate_field,
    validate_industry,
    validate_pain_points,
)


# =============================================================================
# Sanitization Tests
# =============================================================================


class TestSanitizeText:
    """Tests for sanitize_text."""

    def test_trims_whitespace(self):
        assert sanitize_text("  John Doe \n") == "John Doe"

    def test_none_becomes_empty(self):
        assert sanitize_text(None) == ""

    def test_strips_tags(self):
        assert sanitize_text("<b>Acme</b> Corp") == "Acme Corp"

    def test_strips_script_blocks_with_content(self):
        assert sanitize_text("<script>alert('x')</script>Acme") == "Acme"

    def test_nested_markup_is_fully_removed(self):
        cleaned = sanitize_text("<scr<script>x</script>ipt>alert(1)</script>")

        assert "<script" not in cleaned.lower()
        assert "</script" not in cleaned.lower()

    def test_keeps_comparison_characters(self):
        """Option labels like "<$5M" are not markup."""
        assert sanitize_text("<$5M") == "<$5M"
        assert sanitize_text(">$50M") == ">$50M"

    def test_truncates_to_max_length(self):
        assert len(sanitize_text("a" * 1500)) == MAX_FIELD_LENGTH

    def test_truncation_does_not_leave_trailing_space(self):
        value = "a" * (MAX_FIELD_LENGTH - 1) + " b"

        cleaned = sanitize_text(value)

        assert cleaned == "a" * (MAX_FIELD_LENGTH - 1)

    def test_custom_max_length(self):
        assert sanitize_text("abcdef", max_length=3) == "abc"

    @pytest.mark.parametrize(
        "value",
        [
            "  John Doe  ",
            "<p>Hello</p>   world",
            "a" * (MAX_FIELD_LENGTH - 1) + " b",
            "<scr<script>x</script>ipt>alert(1)</script>",
            "x" * 3000,
            "<$5M",
        ],
    )
    def test_idempotent(self, value):
        once = sanitize_text(value)
        assert sanitize_text(once) == once

    def test_strip_markup_leaves_plain_text(self):
        assert strip_markup("Plain text") == "Plain text"

    @pytest.mark.parametrize(
        "value",
        [
            "<script>" * 25_000,
            "<s" * 50_000 + ">" * 50_000,
        ],
    )
    def test_large_hostile_input_is_bounded(self, value):
        """Oversized markup is capped before it is scanned."""
        started = time.perf_counter()

        cleaned = sanitize_text(value)

        assert time.perf_counter() - started < 1.0
        assert len(cleaned) <= MAX_FIELD_LENGTH
        assert "<script" not in cleaned

    def test_cap_applies_before_markup_is_stripped(self):
        value = "a" * MAX_FIELD_LENGTH + "<b>tail</b>"

        assert sanitize_text(value) == "a" * MAX_FIELD_LENGTH


# =============================================================================
# Shape Check Tests
# =============================================================================


class TestPhoneShape:
    """Tests for phone number shape checks."""

    @pytest.mark.parametrize(
        "value",
        ["(555) 123-4567", "+1 555 123 4567", "555.123.4567", "+44 20 7946 0958", "1234567"],
    )
    def test_valid_numbers(self, value):
        assert is_valid_phone(value)

    @pytest.mark.parametrize("value", ["", "123", "555-CALL-NOW", "+" + "1" * 17, "++15551234567"])
    def test_invalid_numbers(self, value):
        assert not is_valid_phone(value)

    def test_normalize_phone(self):
        assert normalize_phone("+1 (555) 123-4567") == "+15551234567"

    def test_non_ascii_digits_are_rejected(self):
        assert not is_valid_phone("\u0665\u0665\u0665\u0661\u0662\u0663\u0664\u0665\u0666\u0667")


class TestEmailShape:
    """Tests for email shape checks."""

    def test_shape_only(self):
        assert is_valid_email("john@example.com")
        assert is_valid_email("john@example.zz")

    @pytest.mark.parametrize("value", ["", "john", "john@example", "jo hn@example.com", "john@@example.com"])
    def test_invalid_shape(self, value):
        assert not is_valid_email(value)

    def test_too_long(self):
        assert not is_valid_email("a" * 250 + "@example.com")

    def test_strict_requires_recognized_suffix(self):
        assert is_valid_email("john@example.co", strict=True)
        assert not is_valid_email("john@example.zz", strict=True)


# =============================================================================
# Field Validator Tests
# =============================================================================


class TestFieldValidators:
    """Tests for per-field validators."""

    def test_full_name_too_short(self):
        assert validate_field("full_name", {"full_name": "J"}) == "Full name must be at least 2 characters long"

    def test_full_name_valid(self):
        assert validate_field("full_name", {"full_name": "Jo"}) is None

    def test_company_name_whitespace_only(self):
        message = validate_field("company_name", {"company_name": "   "})
        assert message == "Company name must be at least 2 characters long"

    def test_server_email_message(self):
        assert validate_business_email("not-an-email", {}) == "Please provide a valid business email address"

    def test_strict_email_invalid_characters(self):
        assert validate_business_email_strict("jo!hn@example.com", {}) == "Please enter a valid email address"

    def test_strict_email_unrecognized_suffix(self):
        message = validate_business_email_strict("john@example.zz", {})
        assert message == "Please enter an email with a recognized domain extension"

    def test_validate_field_selects_email_policy(self):
        values = {"business_email": "john@example.zz"}

        assert validate_field("business_email", values) is None
        assert validate_field("business_email", values, strict_email=True) is not None

    def test_phone_message(self):
        assert validate_field("phone_number", {"phone_number": "12"}) == "Please provide a valid phone number"

    def test_industry_missing(self):
        assert validate_industry("", {}) == "Please select an industry"

    def test_industry_unknown(self):
        assert validate_industry("Aerospace", {}) == "Please select a valid industry"

    def test_revenue_range_options(self):
        assert validate_field("revenue_range", {"revenue_range": "$5–10M"}) is None
        assert validate_field("revenue_range", {"revenue_range": ""}) == "Please select a revenue range"

    def test_exit_timeline_missing(self):
        assert validate_field("exit_timeline", {}) == "Please select an exit timeline"

    def test_custom_industry_required(self):
        assert validate_field("custom_industry", {"custom_industry": " "}) == "Please specify your industry"

    def test_custom_pain_point_required(self):
        message = validate_field("custom_pain_point", {"custom_pain_point": None})
        assert message == "Please specify a particular pain point"

    def test_pain_points_empty(self):
        assert validate_pain_points([], {}) == "Please select at least one pain point"
        assert validate_pain_points(None, {}) == "Please select at least one pain point"

    def test_pain_points_unknown_option(self):
        assert validate_pain_points(["Legacy IT", "Nope"], {}) == "Please select valid pain points"

    def test_pain_points_valid(self):
        assert validate_pain_points(("Legacy IT", "Other"), {}) is None

    def test_unregistered_field_has_no_rule(self):
        assert validate_field("additional_notes", {"additional_notes": ""}) is None
