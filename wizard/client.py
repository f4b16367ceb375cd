"""
HTTP client for the intake submission endpoint.
"""
from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

from backend.schemas.intake import SanitizedIntake
from wizard.state import SUBMIT_ERROR_MESSAGE


logger = structlog.get_logger(__name__)

SUBMIT_PATH = "/api/submit-intake"


@dataclass(frozen=True)
class SubmitResult:
    success: bool
    message: str


class IntakeClient:
    """
    Posts completed submissions to the backend.

    Any non-2xx response or transport failure is reported as the same
    generic, retryable error so the wizard can keep the entered data and
    let the user try again.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def submit(self, submission: SanitizedIntake) -> SubmitResult:
        payload = submission.model_dump(mode="json", by_alias=True)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(SUBMIT_PATH, json=payload)
        except httpx.HTTPError as e:
            logger.warning("intake_submit_transport_error", error=str(e))
            return SubmitResult(success=False, message=SUBMIT_ERROR_MESSAGE)

        if not response.is_success:
            logger.warning("intake_submit_rejected", status_code=response.status_code)
            return SubmitResult(success=False, message=SUBMIT_ERROR_MESSAGE)

        try:
            body = response.json()
        except ValueError:
            logger.warning("intake_submit_invalid_body", status_code=response.status_code)
            return SubmitResult(success=False, message=SUBMIT_ERROR_MESSAGE)

        if not isinstance(body, dict) or not body.get("success"):
            return SubmitResult(success=False, message=SUBMIT_ERROR_MESSAGE)
        return SubmitResult(success=True, message=body.get("message") or "")
