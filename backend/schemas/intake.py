"""Intake form schemas."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IntakeSubmission(BaseModel):
    """
    Intake form submission as posted by the wizard.

    Fields are deliberately permissive: missing or blank values are reported
    by the submission validator with a user-facing message instead of a
    schema error.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    full_name: Optional[str] = ""
    business_email: Optional[str] = ""
    phone_number: Optional[str] = ""
    company_name: Optional[str] = ""
    industry: Optional[str] = ""
    custom_industry: Optional[str] = None
    revenue_range: Optional[str] = ""
    exit_timeline: Optional[str] = ""
    pain_points: Optional[list[str]] = Field(default_factory=list)
    custom_pain_point: Optional[str] = None
    additional_notes: Optional[str] = None


class SanitizedIntake(BaseModel):
    """Validated, sanitized and immutable copy of a submission."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    full_name: str
    business_email: str
    phone_number: str
    company_name: str
    industry: str
    custom_industry: Optional[str] = None
    revenue_range: str
    exit_timeline: str
    pain_points: tuple[str, ...]
    custom_pain_point: Optional[str] = None
    additional_notes: Optional[str] = None

    @property
    def first_name(self) -> str:
        return self.full_name.split()[0] if self.full_name.split() else self.full_name

    @property
    def industry_label(self) -> str:
        if self.custom_industry:
            return f"{self.industry} - {self.custom_industry}"
        return self.industry

    @property
    def pain_points_label(self) -> str:
        labels = list(self.pain_points)
        if self.custom_pain_point:
            labels.append(self.custom_pain_point)
        return ", ".join(labels)


class IntakeResponse(BaseModel):
    """Intake submission response."""

    success: bool
    message: str
