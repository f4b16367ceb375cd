"""
FRAQTIV Intake Test Configuration and Fixtures
Shared pytest fixtures for all test modules.
"""
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from backend.delivery.channels import EmailChannel
from backend.delivery.models import DeliveryStatus
from backend.schemas.intake import SanitizedIntake
from backend.services.email import IntakeEmailRenderer
from backend.services.notifications import NotificationDispatcher


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    """A complete submission as the wizard posts it (camelCase keys)."""
    return {
        "fullName": "John Doe",
        "businessEmail": "john@example.com",
        "phoneNumber": "+1 555 123 4567",
        "companyName": "Test Co",
        "industry": "IT Services",
        "revenueRange": "$5–10M",
        "exitTimeline": "12–24 months",
        "painPoints": ["Legacy IT"],
    }


@pytest.fixture
def valid_values() -> dict[str, Any]:
    """The same submission keyed by field name, as the wizard holds it."""
    return {
        "full_name": "John Doe",
        "business_email": "john@example.com",
        "phone_number": "+1 555 123 4567",
        "company_name": "Test Co",
        "industry": "IT Services",
        "custom_industry": "",
        "revenue_range": "$5–10M",
        "exit_timeline": "12–24 months",
        "pain_points": ("Legacy IT",),
        "custom_pain_point": "",
        "additional_notes": "",
    }


@pytest.fixture
def sanitized_intake() -> SanitizedIntake:
    """A validated submission ready for notification."""
    return SanitizedIntake(
        full_name="Jane Smith",
        business_email="jane@acme.com",
        phone_number="(555) 123-4567",
        company_name="Acme Holdings",
        industry="Other",
        custom_industry="Logistics",
        revenue_range="$10–25M",
        exit_timeline="6–12 months",
        pain_points=("Messy Ops", "Other"),
        custom_pain_point="Key person risk",
        additional_notes="Founder-led, two locations.",
    )


# =============================================================================
# Time Fixtures
# =============================================================================


class FakeClock:
    """Manually advanced clock for time-dependent tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Notification Fixtures
# =============================================================================


@pytest.fixture
def mock_channel() -> MagicMock:
    """Email channel that reports every send as delivered."""
    channel = MagicMock(spec=EmailChannel)
    channel.send = AsyncMock(return_value=DeliveryStatus(status="sent"))
    channel.is_configured.return_value = True
    return channel


@pytest.fixture
def dispatcher(mock_channel) -> NotificationDispatcher:
    """Dispatcher wired to the mock channel and the real templates."""
    return NotificationDispatcher(
        channel=mock_channel,
        renderer=IntakeEmailRenderer(),
        admin_email="team@fraqtiv.com",
        send_timeout=1.0,
    )
