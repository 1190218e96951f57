import json
import random

import httpx
import pytest

from formflow.integrations.clients.mocks.submission import MockSubmissionClient
from formflow.integrations.clients.real_http.submission import HttpSubmissionClient
from formflow.integrations.contracts.submission import SubmissionErrorKind
from formflow.wizards.customer_proposal import CUSTOMER_PROPOSAL
from formflow.wizards.endorsements import NON_NIL_ENDORSEMENT
from formflow.wizards.supplementary_claim import SUPPLEMENTARY_CLAIM


def _client(handler, **kwargs):
    return HttpSubmissionClient(
        base_url="https://backend.test/api/",
        api_key="secret",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_mock_reference_matches_wizard_format():
    client = MockSubmissionClient(delay_seconds=0)

    claim = await client.submit(SUPPLEMENTARY_CLAIM, {"original_claim_id": "CLM-1"})
    policy = await client.submit(CUSTOMER_PROPOSAL, {"first_name": "Asha"})

    assert claim.success
    assert claim.reference_id.startswith("SUPP-") and len(claim.reference_id) == 11
    assert claim.details["next_steps"][0] == "Insurance Company Review"
    assert policy.reference_id.startswith("POL-") and len(policy.reference_id) == 12
    assert policy.message == "Policy Proposal submitted successfully"


@pytest.mark.asyncio
async def test_mock_records_a_copy_of_each_call():
    client = MockSubmissionClient(delay_seconds=0)
    values = {"supporting_documents": ["bill.pdf"]}

    await client.submit(SUPPLEMENTARY_CLAIM, values)
    values["supporting_documents"].append("late.pdf")

    assert client.calls[0]["wizard"] == "supplementary_claim"
    assert client.calls[0]["values"] == {"supporting_documents": ["bill.pdf"]}


@pytest.mark.asyncio
async def test_mock_scripted_failures_are_consumed_in_order():
    client = MockSubmissionClient(delay_seconds=0)
    client.fail_next(SubmissionErrorKind.TIMEOUT)
    client.fail_next(SubmissionErrorKind.REJECTED)

    first = await client.submit(NON_NIL_ENDORSEMENT, {})
    second = await client.submit(NON_NIL_ENDORSEMENT, {})
    third = await client.submit(NON_NIL_ENDORSEMENT, {})

    assert (first.success, first.error_kind) == (False, SubmissionErrorKind.TIMEOUT)
    assert (second.success, second.error_kind) == (False, SubmissionErrorKind.REJECTED)
    assert third.success and third.reference_id.startswith("END-")


@pytest.mark.asyncio
async def test_mock_failure_rate_of_one_always_fails():
    client = MockSubmissionClient(delay_seconds=0, failure_rate=1.0, rng=random.Random(7))

    outcome = await client.submit(SUPPLEMENTARY_CLAIM, {})

    assert not outcome.success
    assert outcome.error_kind == SubmissionErrorKind.NETWORK


@pytest.mark.asyncio
async def test_http_client_posts_draft_and_normalizes_reply():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"referenceId": "SUPP-004211", "nextSteps": ["Review"]})

    outcome = await _client(handler).submit(SUPPLEMENTARY_CLAIM, {"additional_amount": 100})

    assert outcome.success
    assert outcome.reference_id == "SUPP-004211"
    assert outcome.status == "SUBMITTED"
    assert outcome.details == {"next_steps": ["Review"]}
    assert seen["url"] == "https://backend.test/api/wizards/supplementary_claim/submissions"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"]["wizard"] == "supplementary_claim"
    assert seen["body"]["values"] == {"additional_amount": 100}


@pytest.mark.asyncio
async def test_http_rejection_uses_backend_message():
    def handler(request):
        return httpx.Response(400, json={"message": "Original claim is closed"})

    outcome = await _client(handler).submit(SUPPLEMENTARY_CLAIM, {})

    assert not outcome.success
    assert outcome.error_kind == SubmissionErrorKind.REJECTED
    assert outcome.message == "Original claim is closed"
    assert outcome.details == {"status_code": 400}


@pytest.mark.asyncio
async def test_http_server_error_without_body():
    def handler(request):
        return httpx.Response(503, text="Service Unavailable")

    outcome = await _client(handler).submit(SUPPLEMENTARY_CLAIM, {})

    assert outcome.error_kind == SubmissionErrorKind.REJECTED
    assert outcome.message == "The submission was rejected (HTTP 503)."


@pytest.mark.asyncio
async def test_http_connection_error_maps_to_network():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    outcome = await _client(handler).submit(SUPPLEMENTARY_CLAIM, {})

    assert outcome.error_kind == SubmissionErrorKind.NETWORK


@pytest.mark.asyncio
async def test_http_timeout_maps_to_timeout():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    outcome = await _client(handler).submit(SUPPLEMENTARY_CLAIM, {})

    assert outcome.error_kind == SubmissionErrorKind.TIMEOUT


@pytest.mark.parametrize(
    "reply",
    [
        {"text": "<html>ok</html>"},
        {"json": {"status": "SUBMITTED"}},
        {"json": ["SUPP-1"]},
    ],
)
@pytest.mark.asyncio
async def test_http_unusable_reply_maps_to_invalid_response(reply):
    def handler(request):
        return httpx.Response(200, **reply)

    outcome = await _client(handler).submit(SUPPLEMENTARY_CLAIM, {})

    assert outcome.error_kind == SubmissionErrorKind.INVALID_RESPONSE


def test_http_client_reads_env_when_not_configured(monkeypatch):
    monkeypatch.setenv("SUBMISSION_API_URL", "https://env.test/")
    monkeypatch.setenv("SUBMISSION_API_KEY", "env-key")

    client = HttpSubmissionClient()

    assert client.base_url == "https://env.test"
    assert client.api_key == "env-key"
