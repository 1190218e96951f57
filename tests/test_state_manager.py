import asyncio

import pytest

from formflow.integrations.clients.mocks.submission import MockSubmissionClient
from formflow.integrations.contracts.submission import SubmissionErrorKind, SubmissionGateway
from formflow.wizard.state_manager import FormSession, SessionStatus
from formflow.wizards.health_quotation import HEALTH_QUOTATION
from formflow.wizards.supplementary_claim import SUPPLEMENTARY_CLAIM


class ExplodingGateway(SubmissionGateway):
    async def submit(self, wizard, values):
        raise RuntimeError("backend client bug")


async def _walk_to_last_step(session):
    while session.current_step_id < session.wizard.last_step_id:
        result = await session.next()
        assert result.is_valid, result.field_errors


@pytest.fixture
def session(draft_store, gateway):
    return FormSession.start(HEALTH_QUOTATION, draft_store, gateway)


@pytest.mark.asyncio
async def test_next_is_blocked_by_invalid_step(session):
    result = await session.next()

    assert not result.is_valid
    assert session.current_step_id == 1
    assert session.status == SessionStatus.IN_PROGRESS
    assert session.state.field_errors == result.field_errors
    assert "customer_name" in session.state.field_errors


@pytest.mark.asyncio
async def test_next_advances_one_step_when_valid(session, valid_values):
    session.update_fields(valid_values["health_quotation"])

    result = await session.next()

    assert result.is_valid
    assert session.current_step_id == 2
    assert session.state.field_errors == {}
    assert session.step_status(1) == "completed"
    assert session.step_status(2) == "current"
    assert session.step_status(3) == "upcoming"


@pytest.mark.asyncio
async def test_successful_submission_locks_session_and_clears_draft(session, draft_store, gateway, valid_values):
    session.update_fields(valid_values["health_quotation"])
    await _walk_to_last_step(session)

    await session.next()

    assert session.status == SessionStatus.SUBMITTED
    assert session.state.reference_id.startswith("HQ-")
    assert draft_store.load(session.session_key) is None
    assert len(gateway.calls) == 1
    assert gateway.calls[0]["values"] == valid_values["health_quotation"]

    snap = session.snapshot()
    assert snap["status"] == "submitted"
    assert snap["confirmation"]["message"] == "Health Insurance Quotation submitted successfully"
    assert all(step["status"] == "completed" for step in snap["steps"])


@pytest.mark.asyncio
async def test_submitted_session_ignores_edits_and_navigation(session, gateway, valid_values):
    session.update_fields(valid_values["health_quotation"])
    await _walk_to_last_step(session)
    await session.next()

    assert session.set_field("email", "other@example.com") is False
    assert session.values["email"] == "asha@example.com"
    assert session.previous() is False
    assert session.go_to(1) is False
    result = await session.next()
    assert result.is_valid
    assert len(gateway.calls) == 1
    assert session.status == SessionStatus.SUBMITTED


@pytest.mark.asyncio
async def test_double_next_during_submission_submits_once(draft_store, valid_values):
    gateway = MockSubmissionClient(delay_seconds=0.05)
    session = FormSession.start(HEALTH_QUOTATION, draft_store, gateway)
    session.update_fields(valid_values["health_quotation"])
    await _walk_to_last_step(session)

    await asyncio.gather(session.next(), session.next())

    assert len(gateway.calls) == 1
    assert session.status == SessionStatus.SUBMITTED


@pytest.mark.asyncio
async def test_edits_are_refused_while_submitting(draft_store, valid_values):
    gateway = MockSubmissionClient(delay_seconds=0.05)
    session = FormSession.start(HEALTH_QUOTATION, draft_store, gateway)
    session.update_fields(valid_values["health_quotation"])
    await _walk_to_last_step(session)

    task = asyncio.create_task(session.next())
    await asyncio.sleep(0.01)

    assert session.status == SessionStatus.SUBMITTING
    assert session.is_locked
    assert session.set_field("mobile", "9999999999") is False
    await task
    assert gateway.calls[0]["values"]["mobile"] == "9876543210"


@pytest.mark.asyncio
async def test_failed_submission_keeps_draft_and_allows_retry(session, draft_store, gateway, valid_values):
    gateway.fail_next(SubmissionErrorKind.NETWORK)
    session.update_fields(valid_values["health_quotation"])
    await _walk_to_last_step(session)

    await session.next()

    assert session.status == SessionStatus.FAILED
    assert session.current_step_id == HEALTH_QUOTATION.last_step_id
    assert session.state.last_error.kind == "network"
    assert session.values == valid_values["health_quotation"]
    stored = draft_store.load(session.session_key)
    assert stored["status"] == "failed"
    assert stored["values"] == valid_values["health_quotation"]

    await session.next()

    assert session.status == SessionStatus.SUBMITTED
    assert session.state.last_error is None
    assert len(gateway.calls) == 2
    assert gateway.calls[0]["values"] == gateway.calls[1]["values"]


@pytest.mark.asyncio
async def test_leaving_the_last_step_after_failure_returns_to_in_progress(session, gateway, valid_values):
    gateway.fail_next(SubmissionErrorKind.TIMEOUT)
    session.update_fields(valid_values["health_quotation"])
    await _walk_to_last_step(session)
    await session.next()

    assert session.previous() is True
    assert session.status == SessionStatus.IN_PROGRESS
    assert session.state.last_error is None


@pytest.mark.asyncio
async def test_gateway_exception_becomes_unexpected_failure(draft_store, valid_values):
    session = FormSession.start(HEALTH_QUOTATION, draft_store, ExplodingGateway())
    session.update_fields(valid_values["health_quotation"])
    await _walk_to_last_step(session)

    await session.next()

    assert session.status == SessionStatus.FAILED
    assert session.state.last_error.kind == "unexpected"


@pytest.mark.asyncio
async def test_final_check_sends_user_back_to_invalidated_step(session, gateway, valid_values):
    session.update_fields(valid_values["health_quotation"])
    await _walk_to_last_step(session)
    session.set_field("mobile", "123")

    result = await session.next()

    assert not result.is_valid
    assert session.current_step_id == 1
    assert "mobile" in session.state.field_errors
    assert session.status == SessionStatus.IN_PROGRESS
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_reset_ignores_result_of_orphaned_submission(draft_store, valid_values):
    gateway = MockSubmissionClient(delay_seconds=0.05)
    session = FormSession.start(HEALTH_QUOTATION, draft_store, gateway)
    session.update_fields(valid_values["health_quotation"])
    await _walk_to_last_step(session)

    task = asyncio.create_task(session.next())
    await asyncio.sleep(0.01)
    session.reset()
    await task

    assert session.status == SessionStatus.IN_PROGRESS
    assert session.current_step_id == 1
    assert session.values == {}
    assert session.state.reference_id is None
    assert draft_store.load(session.session_key) is None


@pytest.mark.asyncio
async def test_reset_starts_over_from_any_step(session, draft_store, valid_values):
    session.update_fields(valid_values["health_quotation"])
    await session.next()

    session.reset()

    assert session.current_step_id == 1
    assert session.values == {}
    assert session.state.field_errors == {}
    assert draft_store.load(session.session_key) is None


@pytest.mark.asyncio
async def test_previous_never_validates(session, valid_values):
    session.update_fields(valid_values["health_quotation"])
    await session.next()
    session.set_field("plan_type", "Platinum")

    assert session.previous() is True
    assert session.current_step_id == 1


def test_previous_on_first_step_calls_abandon_hook(draft_store, gateway):
    abandoned = []
    session = FormSession.start(HEALTH_QUOTATION, draft_store, gateway, on_abandon=abandoned.append)

    assert session.previous() is False
    assert abandoned == [session]
    assert session.current_step_id == 1


def test_go_to_forward_stops_at_first_invalid_step(session, valid_values):
    values = valid_values["health_quotation"]
    del values["members"]
    session.update_fields(values)

    assert session.go_to(3) is False
    assert session.current_step_id == 2
    assert "members" in session.state.field_errors

    assert session.go_to(1) is True
    assert session.current_step_id == 1
    assert session.go_to(7) is False


@pytest.mark.asyncio
async def test_reload_resumes_saved_step_and_values(session, draft_store, gateway, valid_values):
    session.update_fields(valid_values["health_quotation"])
    await session.next()

    resumed = FormSession.start(HEALTH_QUOTATION, draft_store, gateway, session_id=session.session_id)

    assert resumed.current_step_id == 2
    assert resumed.values == valid_values["health_quotation"]
    assert resumed.status == SessionStatus.IN_PROGRESS


def test_resume_never_lands_past_an_invalid_step(draft_store, gateway, valid_values):
    values = valid_values["health_quotation"]
    values["mobile"] = "12"
    draft_store.save(
        HEALTH_QUOTATION.session_key("s1"),
        {"version": 1, "wizard": "health_quotation", "current_step": 3, "touched_steps": [1, 2, 3], "values": values},
    )

    session = FormSession.start(HEALTH_QUOTATION, draft_store, gateway, session_id="s1")

    assert session.current_step_id == 1
    assert session.values["mobile"] == "12"


def test_incompatible_draft_starts_fresh(draft_store, gateway):
    draft_store.save(
        HEALTH_QUOTATION.session_key("s1"),
        {"version": 1, "wizard": "supplementary_claim", "current_step": 2, "values": {"x": 1}},
    )

    session = FormSession.start(HEALTH_QUOTATION, draft_store, gateway, session_id="s1")

    assert session.current_step_id == 1
    assert session.values == {}


@pytest.mark.parametrize("touched_steps", [5, "123", {"1": True}])
def test_draft_with_malformed_touched_steps_starts_fresh(draft_store, gateway, touched_steps):
    draft_store.save(
        HEALTH_QUOTATION.session_key("s1"),
        {"version": 1, "wizard": "health_quotation", "current_step": 1, "touched_steps": touched_steps, "values": {}},
    )

    session = FormSession.start(HEALTH_QUOTATION, draft_store, gateway, session_id="s1")

    assert session.current_step_id == 1
    assert session.values == {}
    assert session.draft.touched_steps == {1}


def test_drafts_are_namespaced_per_wizard(draft_store, gateway, valid_values):
    hq = FormSession.start(HEALTH_QUOTATION, draft_store, gateway, session_id="shared")
    hq.update_fields(valid_values["health_quotation"])

    claim = FormSession.start(SUPPLEMENTARY_CLAIM, draft_store, gateway, session_id="shared")

    assert claim.values == {}
    assert hq.session_key != claim.session_key


@pytest.mark.asyncio
async def test_supplementary_claim_reference_format(draft_store, gateway, valid_values):
    session = FormSession.start(SUPPLEMENTARY_CLAIM, draft_store, gateway)
    session.update_fields(valid_values["supplementary_claim"])
    await _walk_to_last_step(session)

    await session.next()

    reference = session.state.reference_id
    assert reference.startswith("SUPP-")
    assert len(reference) == len("SUPP-") + 6
    assert reference[len("SUPP-"):].isdigit()
