"""
Submission Validator Tests
Tests for whole-submission sanitization and validation.
"""
import pytest

from backend.schemas.intake import IntakeSubmission
from backend.services.intake_rules import STEP_RULES, get_step_rule, validate_step
from backend.services.submission_validator import (
    payload_to_dict,
    sanitize_submission,
    validate_submission,
)


REQUIRED_KEYS = [
    "fullName",
    "businessEmail",
    "phoneNumber",
    "companyName",
    "industry",
    "revenueRange",
    "exitTimeline",
    "painPoints",
]


class TestValidSubmission:
    """Tests for accepted submissions."""

    def test_scenario_payload_is_accepted(self, valid_payload):
        result = validate_submission(valid_payload)

        assert result.is_valid
        assert result.errors == ()
        submission = result.submission
        assert submission.full_name == "John Doe"
        assert submission.business_email == "john@example.com"
        assert submission.phone_number == "+1 555 123 4567"
        assert submission.company_name == "Test Co"
        assert submission.industry == "IT Services"
        assert submission.revenue_range == "$5–10M"
        assert submission.exit_timeline == "12–24 months"
        assert submission.pain_points == ("Legacy IT",)
        assert submission.custom_industry is None
        assert submission.custom_pain_point is None

    def test_email_is_lowercased(self, valid_payload):
        valid_payload["businessEmail"] = "  John@Example.COM "

        result = validate_submission(valid_payload)

        assert result.submission.business_email == "john@example.com"

    def test_accepts_model_payload(self, valid_payload):
        result = validate_submission(IntakeSubmission(**valid_payload))

        assert result.is_valid

    def test_accepts_snake_case_mapping(self, valid_values):
        assert validate_submission(valid_values).is_valid

    def test_unknown_keys_are_ignored(self, valid_payload):
        valid_payload["utmSource"] = "newsletter"

        assert validate_submission(valid_payload).is_valid

    def test_server_accepts_any_email_shape(self, valid_payload):
        valid_payload["businessEmail"] = "john@example.zz"

        assert validate_submission(valid_payload).is_valid
        assert not validate_submission(valid_payload, strict_email=True).is_valid


class TestMissingFields:
    """Payloads missing a required field are rejected."""

    @pytest.mark.parametrize("key", REQUIRED_KEYS)
    def test_missing_required_field(self, valid_payload, key):
        del valid_payload[key]

        result = validate_submission(valid_payload)

        assert not result.is_valid
        assert len(result.errors) > 0
        assert result.submission is None

    @pytest.mark.parametrize("key", REQUIRED_KEYS[:-1])
    def test_blank_required_field(self, valid_payload, key):
        valid_payload[key] = "   "

        assert not validate_submission(valid_payload).is_valid

    def test_markup_only_name_is_rejected(self, valid_payload):
        valid_payload["fullName"] = "<b></b>"

        result = validate_submission(valid_payload)

        assert result.first_error == "Full name must be at least 2 characters long"

    def test_all_errors_collected_in_step_order(self):
        result = validate_submission({})

        fields = [error.field for error in result.errors]
        assert fields == [
            "full_name",
            "business_email",
            "phone_number",
            "company_name",
            "industry",
            "revenue_range",
            "exit_timeline",
            "pain_points",
        ]
        assert result.first_error == "Full name must be at least 2 characters long"
        assert len(result.messages) == 8


class TestConditionalFields:
    """Tests for the "Other" industry and pain point rules."""

    def test_other_industry_without_custom_industry(self, valid_payload):
        valid_payload["industry"] = "Other"
        valid_payload["customIndustry"] = ""

        result = validate_submission(valid_payload)

        assert not result.is_valid
        assert result.first_error == "Please specify your industry"
        assert [e.field for e in result.errors] == ["custom_industry"]

    def test_other_industry_with_custom_industry(self, valid_payload):
        valid_payload["industry"] = "Other"
        valid_payload["customIndustry"] = "Logistics"

        result = validate_submission(valid_payload)

        assert result.is_valid
        assert result.submission.custom_industry == "Logistics"

    def test_other_pain_point_without_custom_pain_point(self, valid_payload):
        valid_payload["painPoints"] = ["Legacy IT", "Other"]

        result = validate_submission(valid_payload)

        assert not result.is_valid
        assert result.first_error == "Please specify a particular pain point"

    def test_other_pain_point_with_custom_pain_point(self, valid_payload):
        valid_payload["painPoints"] = ["Other"]
        valid_payload["customPainPoint"] = "Key person risk"

        result = validate_submission(valid_payload)

        assert result.is_valid
        assert result.submission.custom_pain_point == "Key person risk"

    def test_custom_fields_dropped_without_trigger(self, valid_payload):
        valid_payload["customIndustry"] = "Logistics"
        valid_payload["customPainPoint"] = "Key person risk"

        result = validate_submission(valid_payload)

        assert result.submission.custom_industry is None
        assert result.submission.custom_pain_point is None


class TestSanitizeSubmission:
    """Tests for sanitize_submission."""

    @pytest.fixture
    def messy_payload(self, valid_payload):
        valid_payload.update(
            {
                "fullName": "  <b>John</b> Doe  ",
                "companyName": "<script>alert(1)</script>Test Co",
                "painPoints": ["Legacy IT", " Legacy IT ", "Other", ""],
                "customPainPoint": "  <i>Key person</i> risk ",
                "additionalNotes": "n" * 1500,
            }
        )
        return valid_payload

    def test_sanitizes_every_field(self, messy_payload):
        data = sanitize_submission(messy_payload)

        assert data["full_name"] == "John Doe"
        assert data["company_name"] == "Test Co"
        assert data["pain_points"] == ("Legacy IT", "Other")
        assert data["custom_pain_point"] == "Key person risk"
        assert len(data["additional_notes"]) == 1000

    def test_blank_optionals_become_none(self, valid_payload):
        valid_payload["additionalNotes"] = "   "

        assert sanitize_submission(valid_payload)["additional_notes"] is None

    def test_idempotent(self, messy_payload):
        once = sanitize_submission(messy_payload)
        twice = sanitize_submission(once)

        assert twice == once

    def test_revalidating_sanitized_submission_is_stable(self, messy_payload):
        first = validate_submission(messy_payload).submission
        second = validate_submission(first).submission

        assert second == first

    def test_payload_to_dict_covers_every_field(self):
        data = payload_to_dict({"fullName": "John"})

        assert data["full_name"] == "John"
        assert data["business_email"] is None
        assert "pain_points" in data


class TestStepRules:
    """Tests for the declarative step table."""

    def test_nine_steps(self):
        assert [rule.number for rule in STEP_RULES] == list(range(1, 10))

    def test_out_of_range_step(self):
        with pytest.raises(ValueError):
            get_step_rule(10)
        with pytest.raises(ValueError):
            get_step_rule(0)

    def test_notes_step_has_no_required_fields(self):
        assert validate_step(9, {}) == {}

    def test_industry_step_adds_custom_industry(self):
        errors = validate_step(5, {"industry": "Other", "custom_industry": ""})

        assert errors == {"custom_industry": "Please specify your industry"}

    def test_pain_point_step_adds_custom_pain_point(self):
        errors = validate_step(8, {"pain_points": ("Other",)})

        assert errors == {"custom_pain_point": "Please specify a particular pain point"}
