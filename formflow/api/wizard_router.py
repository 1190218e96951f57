"""
APIRouter for stepped form sessions.

Endpoints:
- GET   /wizards
- POST  /wizards/{wizard_name}/sessions
- GET   /wizards/{wizard_name}/sessions/{session_id}
- PATCH /wizards/{wizard_name}/sessions/{session_id}/fields
- POST  /wizards/{wizard_name}/sessions/{session_id}/next
- POST  /wizards/{wizard_name}/sessions/{session_id}/previous
- POST  /wizards/{wizard_name}/sessions/{session_id}/steps/{step_id}
- POST  /wizards/{wizard_name}/sessions/{session_id}/reset

Session handlers are `async def` so sessions and their draft timers only run on
the event loop. A session is released from the registry once it is submitted.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from formflow.api.dependencies import SessionRegistry, get_draft_store, get_gateway, get_registry
from formflow.wizard.drafts import DraftStore
from formflow.wizard.state_manager import FormSession, SessionStatus
from formflow.wizard.steps import WizardDefinition
from formflow.wizard.validation import FormValidationError, ValidationResult, raise_if_errors
from formflow.wizards import get_wizard, list_wizards

api = APIRouter()


def _wizard_or_404(wizard_name: str) -> WizardDefinition:
    try:
        return get_wizard(wizard_name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown wizard: {wizard_name}")


def _session_or_404(
    wizard_name: str,
    session_id: str,
    registry: SessionRegistry,
    draft_store: DraftStore,
    gateway,
) -> FormSession:
    wizard = _wizard_or_404(wizard_name)
    session = registry.get(wizard, session_id, draft_store, gateway)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _raise_for_validation(session: FormSession, result: ValidationResult) -> None:
    try:
        raise_if_errors(result.field_errors)
    except FormValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "validation_error",
                "message": e.message,
                "field_errors": e.field_errors,
                "session": session.snapshot(),
            },
        )


@api.get("/wizards", tags=["Wizards"])
def list_wizard_definitions():
    return {"wizards": [w.describe() for w in list_wizards()]}


@api.post("/wizards/{wizard_name}/sessions", tags=["Wizards"])
async def start_session(
    wizard_name: str,
    body: Optional[Dict[str, Any]] = Body(default=None),
    registry: SessionRegistry = Depends(get_registry),
    draft_store: DraftStore = Depends(get_draft_store),
    gateway=Depends(get_gateway),
):
    """
    Start a session, or resume one when body carries a known session_id.
    Body (optional): { "session_id": "..." }
    """
    wizard = _wizard_or_404(wizard_name)
    session_id = str((body or {}).get("session_id") or "").strip() or None
    session = registry.open(wizard, draft_store, gateway, session_id=session_id)
    return session.snapshot()


@api.get("/wizards/{wizard_name}/sessions/{session_id}", tags=["Wizards"])
async def get_session(
    wizard_name: str,
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    draft_store: DraftStore = Depends(get_draft_store),
    gateway=Depends(get_gateway),
):
    return _session_or_404(wizard_name, session_id, registry, draft_store, gateway).snapshot()


@api.patch("/wizards/{wizard_name}/sessions/{session_id}/fields", tags=["Wizards"])
async def update_fields(
    wizard_name: str,
    session_id: str,
    body: Dict[str, Any],
    registry: SessionRegistry = Depends(get_registry),
    draft_store: DraftStore = Depends(get_draft_store),
    gateway=Depends(get_gateway),
):
    """Merge field edits into the draft. 409 while submitting or once submitted."""
    session = _session_or_404(wizard_name, session_id, registry, draft_store, gateway)
    if not session.update_fields(body):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Session is {session.status.value}")
    return session.snapshot()


@api.post("/wizards/{wizard_name}/sessions/{session_id}/next", tags=["Wizards"])
async def next_step(
    wizard_name: str,
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    draft_store: DraftStore = Depends(get_draft_store),
    gateway=Depends(get_gateway),
):
    """Validate the current step and advance; submits from the last step."""
    session = _session_or_404(wizard_name, session_id, registry, draft_store, gateway)
    result = await session.next()
    _raise_for_validation(session, result)
    snapshot = session.snapshot()
    if session.status == SessionStatus.SUBMITTED:
        registry.discard(session)
    return snapshot


@api.post("/wizards/{wizard_name}/sessions/{session_id}/previous", tags=["Wizards"])
async def previous_step(
    wizard_name: str,
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    draft_store: DraftStore = Depends(get_draft_store),
    gateway=Depends(get_gateway),
):
    session = _session_or_404(wizard_name, session_id, registry, draft_store, gateway)
    session.previous()
    return session.snapshot()


@api.post("/wizards/{wizard_name}/sessions/{session_id}/steps/{step_id}", tags=["Wizards"])
async def go_to_step(
    wizard_name: str,
    session_id: str,
    step_id: int,
    registry: SessionRegistry = Depends(get_registry),
    draft_store: DraftStore = Depends(get_draft_store),
    gateway=Depends(get_gateway),
):
    session = _session_or_404(wizard_name, session_id, registry, draft_store, gateway)
    if not session.wizard.has_step(step_id):
        raise HTTPException(status_code=400, detail="Invalid step id")
    moved = session.go_to(step_id)
    return {"moved": moved, **session.snapshot()}


@api.post("/wizards/{wizard_name}/sessions/{session_id}/reset", tags=["Wizards"])
async def reset_session(
    wizard_name: str,
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    draft_store: DraftStore = Depends(get_draft_store),
    gateway=Depends(get_gateway),
):
    session = _session_or_404(wizard_name, session_id, registry, draft_store, gateway)
    session.reset()
    return session.snapshot()
