"""
FRAQTIV Notification Delivery
Outbound email channels for intake notifications.
"""
from backend.delivery.channels import EmailChannel, SendGridChannel, get_sendgrid_channel, mask_email
from backend.delivery.models import DeliveryChannel, DeliveryStatus, EmailContent

__all__ = [
    "DeliveryChannel",
    "DeliveryStatus",
    "EmailChannel",
    "EmailContent",
    "SendGridChannel",
    "get_sendgrid_channel",
    "mask_email",
]
