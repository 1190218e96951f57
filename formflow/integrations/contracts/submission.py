"""
Submission contracts.

Defines the boundary between a completed form session and the backend that
records it (policy issuance, claim registration, endorsement processing):
- `SubmissionGateway`: the async interface every client implements
- `SubmissionContract`: normalized backend success response
- `SubmissionOutcome`: what the step sequencer receives, success or failure

These contracts must be used by both:
- clients/mocks/submission.py (fake backend for development/testing)
- clients/real_http/submission.py (real backend calls)

Gateways never retry on their own. Without idempotency keys on the backend an
automatic retry could create a duplicate policy or claim, so a retry is always
a user action.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pydantic import BaseModel, Field

if TYPE_CHECKING:  # pragma: no cover
    from formflow.wizard.steps import WizardDefinition


class SubmissionErrorKind(str, Enum):
    NETWORK = "network"
    TIMEOUT = "timeout"
    REJECTED = "rejected"
    INVALID_RESPONSE = "invalid_response"
    UNEXPECTED = "unexpected"


class SubmissionContract(BaseModel):
    """Normalized backend response for an accepted submission."""

    reference_id: str = Field(min_length=1)
    status: str = "SUBMITTED"
    message: str = ""
    next_steps: List[str] = Field(default_factory=list)


@dataclass
class SubmissionOutcome:
    success: bool
    reference_id: Optional[str] = None
    status: Optional[str] = None
    error_kind: Optional[SubmissionErrorKind] = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def accepted(cls, contract: SubmissionContract) -> "SubmissionOutcome":
        return cls(
            success=True,
            reference_id=contract.reference_id,
            status=contract.status,
            message=contract.message,
            details={"next_steps": list(contract.next_steps)},
        )

    @classmethod
    def failed(cls, kind: SubmissionErrorKind, message: str, details: Optional[Dict[str, Any]] = None) -> "SubmissionOutcome":
        return cls(success=False, error_kind=kind, message=message, details=details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "reference_id": self.reference_id,
            "status": self.status,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
            "details": dict(self.details),
        }


class SubmissionGateway(ABC):
    """Every submission client must implement this interface."""

    @abstractmethod
    async def submit(self, wizard: "WizardDefinition", values: Dict[str, Any]) -> SubmissionOutcome:
        """Forward a completed draft; report failures as outcomes rather than raising."""
