"""NIL and non-NIL endorsement wizards.

Both share policy, correction and document steps; a non-NIL endorsement also
captures the additional premium and how it will be paid.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from formflow.wizard.steps import FieldSpec, StepDefinition, WizardDefinition
from formflow.wizard.validation import add_error, is_empty, parse_bool

NIL_CHANGE_TYPES = (
    "NAME_CORRECTION",
    "ADDRESS_CORRECTION",
    "PHONE_CORRECTION",
    "EMAIL_CORRECTION",
    "BENEFICIARY_CORRECTION",
    "NOMINEE_CORRECTION",
    "OTHER",
)

NON_NIL_CHANGE_TYPES = (
    "COVERAGE_INCREASE",
    "COVERAGE_DECREASE",
    "PREMIUM_INCREASE",
    "PREMIUM_DECREASE",
    "BENEFICIARY_CHANGE",
    "NOMINEE_CHANGE",
    "OTHER",
)

PAYMENT_METHODS = ("CARD", "NETBANKING", "UPI", "CHEQUE", "DD")

POLICY_FIELDS = (
    FieldSpec("policy_number", "Policy number"),
    FieldSpec("endorsement_id", "Endorsement ID"),
    FieldSpec("policy_holder_name", "Policy holder name"),
)

DOCUMENT_FIELDS = (
    FieldSpec("kyc_required", "KYC required", kind="boolean", required=False),
    FieldSpec("kyc_documents", "KYC documents", kind="list", required=False),
)


def _kyc_documents_rule(values: Dict[str, Any], errors: Dict[str, str]) -> None:
    if parse_bool(values.get("kyc_required")) and is_empty(values.get("kyc_documents")):
        add_error(errors, "kyc_documents", "KYC documents are required when KYC verification is needed")


def _change_fields(change_types: Tuple[str, ...]) -> Tuple[FieldSpec, ...]:
    return (
        FieldSpec("change_type", "Change type", kind="choice", choices=change_types),
        FieldSpec("change_description", "Change description"),
        FieldSpec("current_value", "Current value"),
        FieldSpec("new_value", "New value"),
        FieldSpec("endorsement_reason", "Endorsement reason"),
        FieldSpec("endorsement_date", "Endorsement date", kind="date"),
    )


NIL_ENDORSEMENT = WizardDefinition(
    name="nil_endorsement",
    title="NIL Endorsement",
    draft_namespace="nil_endorsement_draft",
    reference_prefix="END-",
    steps=(
        StepDefinition(id=1, name="Policy Details", description="Enter policy information", fields=POLICY_FIELDS),
        StepDefinition(
            id=2,
            name="Endorsement Details",
            description="Enter correction details",
            fields=_change_fields(NIL_CHANGE_TYPES),
        ),
        StepDefinition(
            id=3,
            name="Documents",
            description="Upload required documents",
            fields=DOCUMENT_FIELDS,
            rules=(_kyc_documents_rule,),
        ),
        StepDefinition(id=4, name="Review & Submit", description="Review and submit endorsement"),
    ),
)

NON_NIL_ENDORSEMENT = WizardDefinition(
    name="non_nil_endorsement",
    title="Non-NIL Endorsement",
    draft_namespace="non_nil_endorsement_draft",
    reference_prefix="END-",
    steps=(
        StepDefinition(id=1, name="Policy Details", description="Enter policy information", fields=POLICY_FIELDS),
        StepDefinition(
            id=2,
            name="Endorsement Details",
            description="Enter change details",
            fields=_change_fields(NON_NIL_CHANGE_TYPES),
        ),
        StepDefinition(
            id=3,
            name="Premium",
            description="Additional premium and payment method",
            fields=(
                FieldSpec("additional_premium", "Additional premium", kind="number", min_value=0),
                FieldSpec("premium_payment_method", "Payment method", kind="choice", choices=PAYMENT_METHODS),
            ),
        ),
        StepDefinition(
            id=4,
            name="Documents",
            description="Upload required documents",
            fields=DOCUMENT_FIELDS,
            rules=(_kyc_documents_rule,),
        ),
        StepDefinition(id=5, name="Review & Submit", description="Review and submit endorsement"),
    ),
)
