"""Pytest fixtures for form session tests."""

import copy

import pytest

from formflow.database.redis import RedisCache
from formflow.integrations.clients.mocks.submission import MockSubmissionClient
from formflow.wizard.drafts import DraftStore

_VALID_VALUES = {
    "health_quotation": {
        "customer_name": "Asha Verma",
        "mobile": "9876543210",
        "email": "asha@example.com",
        "pincode": "560001",
        "plan_type": "Family Floater",
        "members": [
            {"relationship": "Self", "age": 30},
            {"relationship": "Spouse", "age": 28},
        ],
        "total_sum_insured": 100000,
        "declaration_accepted": True,
    },
    "supplementary_claim": {
        "original_claim_id": "CLM-1001",
        "supplementary_claim_id": "SUPP-2001",
        "claim_date": "2024-01-15",
        "supplementary_reason": "Additional hospital bills",
        "additional_amount": 25000,
        "supplementary_description": "Post-discharge treatment",
        "api_integration_enabled": True,
    },
    "nil_endorsement": {
        "policy_number": "POL-12345678",
        "endorsement_id": "END-1",
        "policy_holder_name": "Ravi Kumar",
        "change_type": "NAME_CORRECTION",
        "change_description": "Spelling of the surname",
        "current_value": "Ravi Kumr",
        "new_value": "Ravi Kumar",
        "endorsement_reason": "Typo at issuance",
        "endorsement_date": "2024-05-01",
        "kyc_required": False,
    },
    "non_nil_endorsement": {
        "policy_number": "POL-12345678",
        "endorsement_id": "END-2",
        "policy_holder_name": "Ravi Kumar",
        "change_type": "COVERAGE_INCREASE",
        "change_description": "Raise sum insured",
        "current_value": "200000",
        "new_value": "300000",
        "endorsement_reason": "Customer request",
        "endorsement_date": "2024-05-01",
        "additional_premium": 1500,
        "premium_payment_method": "UPI",
        "kyc_required": "no",
    },
    "customer_proposal": {
        "first_name": "Asha",
        "last_name": "Verma",
        "email": "asha@example.com",
        "phone": "98765 43210",
        "date_of_birth": "1990-04-12",
        "address": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "zip_code": "560001",
        "nominee_name": "Rohan Verma",
        "nominee_relation": "Spouse",
        "nominee_phone": "9123456780",
        "terms_accepted": True,
    },
}


@pytest.fixture
def valid_values():
    """Fully valid draft values per wizard name (fresh copy per test)."""
    return copy.deepcopy(_VALID_VALUES)


@pytest.fixture
def storage():
    """In-memory session storage slot."""
    return RedisCache()


@pytest.fixture
def draft_store(storage):
    """Draft store that writes through immediately."""
    return DraftStore(storage, debounce_seconds=0)


@pytest.fixture
def gateway():
    """Mock submission gateway without the artificial delay."""
    return MockSubmissionClient(delay_seconds=0)
