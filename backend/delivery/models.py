"""
FRAQTIV Notification Delivery Models
Pydantic models for outbound email content and delivery tracking.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class DeliveryChannel(str, Enum):
    """Available delivery channels."""

    EMAIL = "email"


class EmailContent(BaseModel):
    """Rendered email ready to hand to a channel."""

    subject: str = Field(..., max_length=150)
    body_html: str
    body_text: str
    from_email: str
    from_name: str
    to_email: str
    to_name: Optional[str] = None
    reply_to: Optional[str] = None
    category: Optional[str] = None


class DeliveryStatus(BaseModel):
    """Track delivery status for a single outbound message."""

    message_id: UUID = Field(default_factory=uuid4)
    channel: DeliveryChannel = DeliveryChannel.EMAIL
    status: str = "pending"  # pending, sent, skipped, failed
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None
    provider_message_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status in ("sent", "skipped")
