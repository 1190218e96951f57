"""
Submission client for the host application's backend.

Sends a completed draft to ``POST {base_url}/wizards/{wizard}/submissions`` and
normalizes the reply into `SubmissionContract`. Includes:
- Config management (constructor args, env fallback)
- Error mapping to `SubmissionErrorKind` (no exceptions escape `submit`)
- Logging without draft contents at info level
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from formflow.integrations.contracts.submission import (
    SubmissionContract,
    SubmissionErrorKind,
    SubmissionGateway,
    SubmissionOutcome,
)

logger = logging.getLogger(__name__)


class HttpSubmissionClient(SubmissionGateway):
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Config management: load from env if not provided
        self.base_url = (base_url or os.getenv("SUBMISSION_API_URL", "")).rstrip("/")
        self.api_key = api_key if api_key is not None else os.getenv("SUBMISSION_API_KEY", "")
        self.timeout = timeout
        self._transport = transport
        if not self.base_url:
            logger.warning("Submission API URL is not set.")

    async def submit(self, wizard, values: Dict[str, Any]) -> SubmissionOutcome:
        """
        Posts the draft once. Network, HTTP and contract errors are returned as
        failed outcomes so the session can offer a manual retry.
        """
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        url = f"{self.base_url}/wizards/{wizard.name}/submissions"
        body = {
            "wizard": wizard.name,
            "values": values,
            "submitted_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            logger.info("Submitting %s draft to %s", wizard.name, url)
            logger.debug("Submission payload: %s", body)
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=body, headers=headers)
                response.raise_for_status()
                data = response.json()
            logger.info("Received submission response: status=%s", response.status_code)
            return SubmissionOutcome.accepted(self._normalize_response(data))
        except httpx.TimeoutException as e:
            logger.warning("Submission to %s timed out: %s", url, e)
            return SubmissionOutcome.failed(SubmissionErrorKind.TIMEOUT, "The insurance company did not respond in time.")
        except httpx.HTTPStatusError as e:
            logger.warning("HTTP error from submission API: %s %s", e.response.status_code, e.response.text)
            return SubmissionOutcome.failed(
                SubmissionErrorKind.REJECTED,
                self._rejection_message(e.response),
                {"status_code": e.response.status_code},
            )
        except httpx.RequestError as e:
            logger.warning("Request error connecting to submission API: %s", e)
            return SubmissionOutcome.failed(SubmissionErrorKind.NETWORK, "Could not reach the insurance company.")
        except (ValueError, ValidationError) as e:
            logger.warning("Submission API returned an unusable response: %s", e)
            return SubmissionOutcome.failed(SubmissionErrorKind.INVALID_RESPONSE, "The insurance company sent an unexpected response.")

    def _normalize_response(self, data: Any) -> SubmissionContract:
        """
        Normalize backend response to the internal contract format.
        """
        if not isinstance(data, dict):
            raise ValueError("submission response must be a JSON object")
        reference = data.get("reference_id") or data.get("referenceId") or data.get("reference_number") or data.get("id")
        normalized = {
            "reference_id": str(reference) if reference is not None else "",
            "status": data.get("status") or "SUBMITTED",
            "message": data.get("message") or "",
            "next_steps": data.get("next_steps") or data.get("nextSteps") or [],
        }
        return SubmissionContract(**normalized)

    @staticmethod
    def _rejection_message(response: httpx.Response) -> str:
        try:
            detail = response.json()
        except ValueError:
            detail = None
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        return f"The submission was rejected (HTTP {response.status_code})."
