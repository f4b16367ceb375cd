"""Intake form API endpoints."""

import logging

from fastapi import APIRouter, Depends, Response, status

from backend.core.exceptions import ValidationError
from backend.core.rate_limit import IntakeRateLimit
from backend.delivery.channels import mask_email
from backend.schemas.intake import IntakeResponse, IntakeSubmission
from backend.services.notifications import NotificationDispatcher, get_notification_dispatcher
from backend.services.submission_validator import validate_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/submit-intake", tags=["intake"])

SUCCESS_MESSAGE = "Thank you! Your information has been sent to our team."

intake_rate_limit = IntakeRateLimit()


@router.options("", status_code=status.HTTP_200_OK)
async def intake_preflight() -> Response:
    """Answer bare preflight requests with an empty 200."""
    return Response(status_code=status.HTTP_200_OK)


@router.post("", response_model=IntakeResponse, dependencies=[Depends(intake_rate_limit)])
async def submit_intake(
    data: IntakeSubmission,
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Submit a completed intake form.

    The submission is sanitized and validated; the first failure is returned
    as a 400. Once valid, both notification emails are sent and the intake is
    reported as received regardless of their delivery.
    """
    result = validate_submission(data)
    if not result.is_valid:
        logger.info(f"Intake rejected: {len(result.errors)} validation error(s)")
        raise ValidationError(result.first_error)

    submission = result.submission
    logger.info(f"Intake accepted from {mask_email(submission.business_email)}")

    report = await dispatcher.dispatch(submission)
    if not report.all_delivered:
        logger.warning(
            f"Intake notifications incomplete: acknowledgment={report.acknowledgment.status}, "
            f"alert={report.alert.status}"
        )

    return IntakeResponse(success=True, message=SUCCESS_MESSAGE)
