"""
FRAQTIV Intake Notifications
Formats and sends the two notification emails for an accepted submission.

Delivery is best-effort and at-most-once: the acknowledgment to the
submitter and the alert to the internal recipient are sent concurrently,
each bounded by a timeout, with no retry. A failed or timed-out send is
logged and reported in the returned DispatchReport; it never raises and
never changes the response given to the submitter.
"""
import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from backend.core.config import settings
from backend.delivery.channels import EmailChannel, get_sendgrid_channel, mask_email
from backend.delivery.models import DeliveryStatus, EmailContent
from backend.schemas.intake import SanitizedIntake
from backend.services.email import IntakeEmailRenderer


logger = structlog.get_logger(__name__)

ACKNOWLEDGMENT_TEMPLATE = "intake_acknowledgment"
ALERT_TEMPLATE = "intake_alert"
MAX_SUBJECT_LENGTH = 150


@dataclass(frozen=True)
class DispatchReport:
    """Delivery outcome of both notification emails."""

    acknowledgment: DeliveryStatus
    alert: DeliveryStatus

    @property
    def all_delivered(self) -> bool:
        return self.acknowledgment.succeeded and self.alert.succeeded


def _subject(text: str) -> str:
    collapsed = " ".join(text.split())
    if len(collapsed) <= MAX_SUBJECT_LENGTH:
        return collapsed
    return collapsed[: MAX_SUBJECT_LENGTH - 3].rstrip() + "..."


class NotificationDispatcher:
    """
    Sends the acknowledgment and internal alert for a submission.

    Args:
        channel: Transport used for both emails.
        renderer: Template renderer producing HTML and text bodies.
        admin_email: Internal recipient of the alert.
        send_timeout: Seconds allowed for each send.
    """

    def __init__(
        self,
        channel: EmailChannel,
        renderer: IntakeEmailRenderer,
        admin_email: str,
        send_timeout: float = 10.0,
    ):
        self.channel = channel
        self.renderer = renderer
        self.admin_email = admin_email
        self.send_timeout = send_timeout

    def build_acknowledgment(self, submission: SanitizedIntake) -> EmailContent:
        html_content, text_content = self.renderer.render_email(
            ACKNOWLEDGMENT_TEMPLATE, {"submission": submission}
        )
        return EmailContent(
            subject=_subject(f"Thank you for your interest in {settings.app_name}"),
            body_html=html_content,
            body_text=text_content,
            from_email=settings.from_email,
            from_name=settings.from_name,
            to_email=submission.business_email,
            to_name=submission.full_name,
            category="intake_acknowledgment",
        )

    def build_alert(self, submission: SanitizedIntake) -> EmailContent:
        html_content, text_content = self.renderer.render_email(ALERT_TEMPLATE, {"submission": submission})
        return EmailContent(
            subject=_subject(f"New Intake Form Submission - {submission.company_name}"),
            body_html=html_content,
            body_text=text_content,
            from_email=settings.from_email,
            from_name=settings.from_name,
            to_email=self.admin_email,
            reply_to=submission.business_email,
            category="intake_alert",
        )

    async def _deliver(
        self,
        kind: str,
        build: Callable[[SanitizedIntake], EmailContent],
        submission: SanitizedIntake,
    ) -> DeliveryStatus:
        """Build and send one email; every failure becomes a failed status."""
        recipient: Optional[str] = None
        try:
            content = build(submission)
            recipient = content.to_email
            status = await asyncio.wait_for(self.channel.send(content), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.error(
                "notification_timed_out",
                kind=kind,
                to=mask_email(recipient),
                timeout_seconds=self.send_timeout,
            )
            return DeliveryStatus(status="failed", error_message="Timed out")
        except Exception as e:
            logger.error("notification_failed", kind=kind, to=mask_email(recipient), error=str(e))
            return DeliveryStatus(status="failed", error_message=str(e))

        if status.succeeded:
            logger.info("notification_delivered", kind=kind, to=mask_email(recipient), status=status.status)
        else:
            logger.warning(
                "notification_not_delivered",
                kind=kind,
                to=mask_email(recipient),
                status=status.status,
                error=status.error_message,
            )
        return status

    async def dispatch(self, submission: SanitizedIntake) -> DispatchReport:
        """
        Send both notifications and wait for both to finish.

        Returns:
            DispatchReport with one DeliveryStatus per email.
        """
        acknowledgment, alert = await asyncio.gather(
            self._deliver("acknowledgment", self.build_acknowledgment, submission),
            self._deliver("alert", self.build_alert, submission),
        )
        return DispatchReport(acknowledgment=acknowledgment, alert=alert)


# Global dispatcher instance
_dispatcher: Optional[NotificationDispatcher] = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """Get or create the notification dispatcher."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher(
            channel=get_sendgrid_channel(),
            renderer=IntakeEmailRenderer(),
            admin_email=settings.admin_email,
            send_timeout=settings.notification_send_timeout,
        )
    return _dispatcher
