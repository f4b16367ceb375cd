"""
FRAQTIV Notification Delivery Channels
Email channel implementations used by the notification dispatcher.
"""
import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Category, Content, Email, Mail, To

from backend.core.config import settings
from backend.delivery.models import DeliveryChannel, DeliveryStatus, EmailContent


logger = structlog.get_logger(__name__)


def mask_email(address: Optional[str]) -> str:
    """Shorten an address for logs, e.g. ``joh***``."""
    if not address:
        return "***"
    return f"{address[:3]}***"


class EmailChannel(ABC):
    """Abstract base class for email delivery channels."""

    @abstractmethod
    async def send(self, content: EmailContent) -> DeliveryStatus:
        """Send content through this channel."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Check if this channel is properly configured."""
        pass


class SendGridChannel(EmailChannel):
    """
    SendGrid email delivery channel.

    Each message gets exactly one attempt; a failure is terminal for that
    message. Without an API key the channel simulates delivery outside
    production and reports a failure in production.
    """

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = api_key
        self._client: Optional[SendGridAPIClient] = None
        self.logger = structlog.get_logger().bind(channel="sendgrid")

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key or settings.sendgrid_api_key

    @property
    def client(self) -> SendGridAPIClient:
        """Lazy-loaded SendGrid client."""
        if self._client is None:
            if not self.api_key:
                raise ValueError("SendGrid API key not configured")
            self._client = SendGridAPIClient(api_key=self.api_key)
        return self._client

    def is_configured(self) -> bool:
        """Check if SendGrid is configured."""
        return bool(self.api_key)

    def _build_message(self, content: EmailContent) -> Mail:
        """
        Build a SendGrid Mail object from EmailContent.

        Args:
            content: Email content to build message from

        Returns:
            Configured Mail object ready to send
        """
        message = Mail()
        message.from_email = Email(content.from_email, content.from_name)
        message.subject = content.subject
        message.add_to(To(content.to_email, content.to_name))

        # Plain text should come first for proper fallback
        message.add_content(Content("text/plain", content.body_text or " "))
        message.add_content(Content("text/html", content.body_html))

        if content.category:
            message.category = Category(content.category)

        if content.reply_to:
            message.reply_to = Email(content.reply_to)

        return message

    def _send_sync(self, message: Mail) -> Any:
        """Synchronous send operation for use with asyncio.to_thread."""
        return self.client.send(message)

    async def send(self, content: EmailContent) -> DeliveryStatus:
        """
        Send email via SendGrid.

        Args:
            content: Email content to send

        Returns:
            DeliveryStatus describing the outcome
        """
        status = DeliveryStatus(channel=DeliveryChannel.EMAIL)

        if not self.is_configured():
            if settings.is_production:
                status.status = "failed"
                status.error_message = "SendGrid not configured"
                self.logger.error("sendgrid_not_configured", to=mask_email(content.to_email))
            else:
                status.status = "skipped"
                self.logger.info("email_simulated", to=mask_email(content.to_email))
            return status

        try:
            message = self._build_message(content)
        except Exception as e:
            status.status = "failed"
            status.error_message = f"Failed to build message: {str(e)}"
            self.logger.error("email_build_failed", to=mask_email(content.to_email), error=str(e))
            return status

        try:
            # The SendGrid client is blocking
            response = await asyncio.to_thread(self._send_sync, message)
        except Exception as e:
            status.status = "failed"
            status.error_message = str(e)
            self.logger.error("email_send_failed", to=mask_email(content.to_email), error=str(e))
            return status

        status.status = "sent"
        status.sent_at = datetime.now(timezone.utc)
        status.provider_message_id = response.headers.get("X-Message-Id", str(status.message_id))

        self.logger.info(
            "email_sent",
            to=mask_email(content.to_email),
            message_id=status.provider_message_id,
            status_code=response.status_code,
        )
        return status


# Global channel instance
_sendgrid_channel: Optional[SendGridChannel] = None


def get_sendgrid_channel() -> SendGridChannel:
    """Get or create SendGrid channel instance."""
    global _sendgrid_channel
    if _sendgrid_channel is None:
        _sendgrid_channel = SendGridChannel()
    return _sendgrid_channel
