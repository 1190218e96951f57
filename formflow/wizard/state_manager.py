"""
Step sequencing and session state for stepped form sessions.

A `FormSession` owns one `FormDraft` and one `SessionState` for a single
wizard run. It only moves forward through a validation gate, hands the
completed draft to a `SubmissionGateway` on the last step, and keeps the draft
in a `DraftStore` so a reloaded page can resume.

Calls that are not legal in the current state (a second "Next" while a
submission is in flight, navigation after submission) are ignored rather than
rejected, so double-clicks in the UI are harmless.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Set

from formflow.error_handler import SubmissionError
from formflow.integrations.contracts.submission import SubmissionErrorKind, SubmissionGateway, SubmissionOutcome

from .drafts import DraftStore
from .steps import StepDefinition, WizardDefinition
from .validation import ValidationResult, first_invalid_step, validate_all, validate_step

logger = logging.getLogger(__name__)

DRAFT_VERSION = 1


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"


@dataclass
class FormDraft:
    values: Dict[str, Any] = field(default_factory=dict)
    touched_steps: Set[int] = field(default_factory=lambda: {1})


@dataclass
class SessionState:
    current_step_id: int = 1
    status: SessionStatus = SessionStatus.IN_PROGRESS
    last_error: Optional[SubmissionError] = None
    field_errors: Dict[str, str] = field(default_factory=dict)
    reference_id: Optional[str] = None


class FormSession:
    def __init__(
        self,
        wizard: WizardDefinition,
        draft_store: DraftStore,
        gateway: SubmissionGateway,
        session_id: Optional[str] = None,
        on_abandon: Optional[Callable[["FormSession"], None]] = None,
    ):
        self.wizard = wizard
        self.draft_store = draft_store
        self.gateway = gateway
        self.session_id = session_id or str(uuid.uuid4())
        self.session_key = wizard.session_key(self.session_id)
        self.on_abandon = on_abandon
        self.state = SessionState()
        self.draft = FormDraft()
        self.last_outcome: Optional[SubmissionOutcome] = None
        # Bumped by reset(); a submission result from an older generation is stale.
        self._generation = 0

    @classmethod
    def start(
        cls,
        wizard: WizardDefinition,
        draft_store: DraftStore,
        gateway: SubmissionGateway,
        session_id: Optional[str] = None,
        on_abandon: Optional[Callable[["FormSession"], None]] = None,
    ) -> "FormSession":
        """Create a session, resuming from a stored draft when a compatible one exists."""
        session = cls(wizard, draft_store, gateway, session_id=session_id, on_abandon=on_abandon)
        session._restore()
        return session

    # --- read side -----------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def current_step_id(self) -> int:
        return self.state.current_step_id

    @property
    def current_step(self) -> StepDefinition:
        return self.wizard.get_step(self.state.current_step_id)

    @property
    def values(self) -> Dict[str, Any]:
        return copy.deepcopy(self.draft.values)

    @property
    def is_locked(self) -> bool:
        return self.state.status in (SessionStatus.SUBMITTING, SessionStatus.SUBMITTED)

    def step_status(self, step_id: int) -> str:
        """completed / current / upcoming, for progress indicators."""
        if self.state.status == SessionStatus.SUBMITTED or step_id < self.state.current_step_id:
            return "completed"
        if step_id == self.state.current_step_id:
            return "current"
        return "upcoming"

    def snapshot(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "wizard": self.wizard.name,
            "title": self.wizard.title,
            "current_step_id": self.state.current_step_id,
            "current_step": self.current_step.name,
            "status": self.state.status.value,
            "steps": [
                {
                    "id": step.id,
                    "name": step.name,
                    "status": self.step_status(step.id),
                    "touched": step.id in self.draft.touched_steps,
                }
                for step in self.wizard.steps
            ],
            "values": self.values,
            "field_errors": dict(self.state.field_errors),
            "last_error": self.state.last_error.to_dict() if self.state.last_error else None,
            "reference_id": self.state.reference_id,
            "confirmation": self.last_outcome.to_dict() if self.last_outcome and self.last_outcome.success else None,
        }

    # --- edits -----------------------------------------------------------------

    def set_field(self, key: str, value: Any) -> bool:
        return self.update_fields({key: value})

    def update_fields(self, updates: Mapping[str, Any]) -> bool:
        """Apply edits in order; refused while submitting or after submission."""
        if self.is_locked:
            logger.info("Ignoring edit on %s session %s (%s)", self.wizard.name, self.session_id, self.state.status.value)
            return False
        self.draft.values.update(copy.deepcopy(dict(updates)))
        self.draft.touched_steps.add(self.state.current_step_id)
        self._persist()
        return True

    # --- navigation ------------------------------------------------------------

    async def next(self) -> ValidationResult:
        """Advance past the current step, or submit from the last one.

        Returns the validation result for the gate; an invalid result means the
        session did not move. Ignored calls return an empty result.
        """
        if self.is_locked:
            logger.info("Ignoring next() on %s session %s (%s)", self.wizard.name, self.session_id, self.state.status.value)
            return ValidationResult()

        step_id = self.state.current_step_id
        result = validate_step(self.wizard, step_id, self.draft.values)
        if not result.is_valid:
            self.state.field_errors = dict(result.field_errors)
            return result

        if step_id < self.wizard.last_step_id:
            self._move_to(step_id + 1)
            return result
        return await self._submit()

    def previous(self) -> bool:
        if self.is_locked:
            return False
        step_id = self.state.current_step_id
        if step_id <= self.wizard.first_step_id:
            if self.on_abandon is not None:
                self.on_abandon(self)
            return False
        self._move_to(step_id - 1)
        return True

    def go_to(self, step_id: int) -> bool:
        """Jump to a step: backward freely, forward only through valid steps.

        A forward jump stops at the first invalid step and surfaces its errors.
        """
        if self.is_locked or not self.wizard.has_step(step_id):
            return False
        current = self.state.current_step_id
        if step_id == current:
            return False
        if step_id < current:
            self._move_to(step_id)
            return True

        for sid in range(current, step_id):
            result = validate_step(self.wizard, sid, self.draft.values)
            if not result.is_valid:
                if sid != current:
                    self._move_to(sid)
                self.state.field_errors = dict(result.field_errors)
                return False
        self._move_to(step_id)
        return True

    def reset(self) -> None:
        """Start over: empty draft at step 1, stored draft removed.

        Usable from any state; a submission still in flight is orphaned and its
        result will be ignored.
        """
        self._generation += 1
        self.draft_store.clear(self.session_key)
        self.state = SessionState()
        self.draft = FormDraft()
        self.last_outcome = None
        logger.info("Reset %s session %s", self.wizard.name, self.session_id)

    # --- submission ------------------------------------------------------------

    async def _submit(self) -> ValidationResult:
        full = validate_all(self.wizard, self.draft.values)
        if not full.is_valid:
            # An earlier step was invalidated after the user moved past it.
            target = first_invalid_step(self.wizard, self.draft.values) or self.state.current_step_id
            step_result = validate_step(self.wizard, target, self.draft.values)
            self._move_to(target)
            self.state.field_errors = dict(step_result.field_errors)
            logger.info("Final check sent %s session %s back to step %s", self.wizard.name, self.session_id, target)
            return step_result

        self.state.status = SessionStatus.SUBMITTING
        self.state.last_error = None
        self.state.field_errors = {}
        generation = self._generation
        payload = copy.deepcopy(self.draft.values)
        self.draft_store.flush(self.session_key)
        logger.info("Submitting %s session %s", self.wizard.name, self.session_id)

        try:
            outcome = await self.gateway.submit(self.wizard, payload)
        except asyncio.CancelledError:
            self.on_submission_result(
                SubmissionOutcome.failed(SubmissionErrorKind.UNEXPECTED, "Submission was cancelled."),
                generation=generation,
            )
            raise
        except Exception:
            logger.exception("Submission gateway raised for %s session %s", self.wizard.name, self.session_id)
            outcome = SubmissionOutcome.failed(SubmissionErrorKind.UNEXPECTED, "Submission failed unexpectedly.")

        self.on_submission_result(outcome, generation=generation)
        return full

    def on_submission_result(self, outcome: SubmissionOutcome, generation: Optional[int] = None) -> bool:
        """Apply a gateway result; returns False when the result was stale and ignored."""
        if generation is not None and generation != self._generation:
            logger.info("Ignoring late submission result for %s session %s after reset", self.wizard.name, self.session_id)
            return False
        if self.state.status != SessionStatus.SUBMITTING:
            return False

        if outcome.success:
            self.state.status = SessionStatus.SUBMITTED
            self.state.reference_id = outcome.reference_id
            self.state.last_error = None
            self.last_outcome = outcome
            self.draft_store.clear(self.session_key)
            logger.info("Submitted %s session %s as %s", self.wizard.name, self.session_id, outcome.reference_id)
            return True

        kind = outcome.error_kind.value if outcome.error_kind else SubmissionErrorKind.UNEXPECTED.value
        self.state.status = SessionStatus.FAILED
        self.state.current_step_id = self.wizard.last_step_id
        self.state.last_error = SubmissionError(kind=kind, message=outcome.message or "Submission failed.")
        self.last_outcome = outcome
        self._persist()
        logger.warning("Submission failed for %s session %s: %s", self.wizard.name, self.session_id, kind)
        return True

    # --- internals ---------------------------------------------------------------

    def _move_to(self, step_id: int) -> None:
        self.state.current_step_id = step_id
        self.state.field_errors = {}
        if self.state.status == SessionStatus.FAILED:
            self.state.status = SessionStatus.IN_PROGRESS
            self.state.last_error = None
        self.draft.touched_steps.add(step_id)
        self._persist()

    def _persist(self) -> None:
        self.draft_store.save(
            self.session_key,
            {
                "version": DRAFT_VERSION,
                "wizard": self.wizard.name,
                "session_id": self.session_id,
                "current_step": self.state.current_step_id,
                "touched_steps": sorted(self.draft.touched_steps),
                "values": self.draft.values,
                "status": self.state.status.value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
        )

    def _restore(self) -> bool:
        stored = self.draft_store.load(self.session_key)
        if stored is None:
            return False
        values = stored.get("values")
        touched_steps = stored.get("touched_steps") or []
        if (
            stored.get("version") != DRAFT_VERSION
            or stored.get("wizard") != self.wizard.name
            or not isinstance(values, dict)
            or not isinstance(touched_steps, list)
        ):
            logger.warning("Ignoring incompatible draft stored under %s", self.session_key)
            return False

        step_id = stored.get("current_step")
        if not self.wizard.has_step(step_id):
            step_id = self.wizard.first_step_id
        # Never resume past a step whose data no longer validates.
        for sid in range(self.wizard.first_step_id, step_id):
            if not validate_step(self.wizard, sid, values).is_valid:
                step_id = sid
                break

        touched = {s for s in touched_steps if self.wizard.has_step(s)}
        touched.add(step_id)
        self.draft = FormDraft(values=values, touched_steps=touched)
        self.state.current_step_id = step_id
        logger.info("Restored %s draft %s at step %s", self.wizard.name, self.session_id, step_id)
        return True
