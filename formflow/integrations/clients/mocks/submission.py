"""Mock submission gateway.

Stands in for the backend with a fixed delay and returns a generated reference
number shaped by the wizard (``SUPP-123456``, ``POL-12345678`` ...). Failures can
be scripted with `fail_next` or injected at random with `failure_rate`.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from formflow.integrations.contracts.submission import (
    SubmissionContract,
    SubmissionErrorKind,
    SubmissionGateway,
    SubmissionOutcome,
)

logger = logging.getLogger(__name__)

_NEXT_STEPS: Dict[str, List[str]] = {
    "supplementary_claim": ["Insurance Company Review", "Additional Assessment", "Settlement Process"],
    "nil_endorsement": ["Insurance Company Review", "Endorsement Issued"],
    "non_nil_endorsement": ["Premium Collection", "Insurance Company Review", "Endorsement Issued"],
    "customer_proposal": ["Policy certificate sent to your email"],
    "health_quotation": ["Compare quotes", "Choose a plan"],
}

_FAILURE_MESSAGES: Dict[SubmissionErrorKind, str] = {
    SubmissionErrorKind.NETWORK: "Could not reach the insurance company. Please try again.",
    SubmissionErrorKind.TIMEOUT: "The insurance company did not respond in time. Please try again.",
    SubmissionErrorKind.REJECTED: "The submission was rejected by the insurance company.",
    SubmissionErrorKind.INVALID_RESPONSE: "The insurance company sent an unexpected response.",
    SubmissionErrorKind.UNEXPECTED: "Submission failed unexpectedly.",
}


class MockSubmissionClient(SubmissionGateway):
    """Timer-backed fake backend that records every call it receives."""

    def __init__(self, delay_seconds: float = 2.0, failure_rate: float = 0.0, rng: Optional[random.Random] = None) -> None:
        self.delay_seconds = delay_seconds
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()
        self._scripted_failures: List[SubmissionErrorKind] = []
        self.calls: List[Dict[str, Any]] = []

    def fail_next(self, kind: SubmissionErrorKind = SubmissionErrorKind.NETWORK, times: int = 1) -> None:
        """Make the next `times` submissions fail with `kind`."""
        self._scripted_failures.extend([kind] * times)

    async def submit(self, wizard, values: Dict[str, Any]) -> SubmissionOutcome:
        self.calls.append(
            {
                "wizard": wizard.name,
                "values": copy.deepcopy(values),
                "submitted_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        logger.info("Mock submission received for %s (call #%d)", wizard.name, len(self.calls))

        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        if self._scripted_failures:
            kind = self._scripted_failures.pop(0)
            return SubmissionOutcome.failed(kind, _FAILURE_MESSAGES[kind], {"mock": True})
        if self.failure_rate and self._rng.random() < self.failure_rate:
            kind = SubmissionErrorKind.NETWORK
            return SubmissionOutcome.failed(kind, _FAILURE_MESSAGES[kind], {"mock": True})

        contract = SubmissionContract(
            reference_id=self._generate_reference_id(wizard),
            status="SUBMITTED",
            message=f"{wizard.title} submitted successfully",
            next_steps=_NEXT_STEPS.get(wizard.name, []),
        )
        return SubmissionOutcome.accepted(contract)

    @staticmethod
    def _generate_reference_id(wizard) -> str:
        digits = wizard.reference_digits
        return f"{wizard.reference_prefix}{uuid4().int % 10 ** digits:0{digits}d}"
