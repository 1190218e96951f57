"""Customer proposal wizard: proposer details, nominee, review and issue."""

from __future__ import annotations

from formflow.wizard.steps import FieldSpec, StepDefinition, WizardDefinition

NOMINEE_RELATIONS = ("Spouse", "Son", "Daughter", "Father", "Mother", "Brother", "Sister", "Other")

CUSTOMER_PROPOSAL = WizardDefinition(
    name="customer_proposal",
    title="Policy Proposal",
    draft_namespace="customer_proposal_draft",
    reference_prefix="POL-",
    steps=(
        StepDefinition(
            id=1,
            name="Customer Details",
            description="Proposer contact and address",
            fields=(
                FieldSpec("first_name", "First Name", min_length=2, max_length=50),
                FieldSpec("last_name", "Last Name", min_length=2, max_length=50),
                FieldSpec("email", "Email", kind="email", max_length=100),
                FieldSpec("phone", "Phone", kind="phone"),
                FieldSpec("date_of_birth", "Date of Birth", kind="date", not_future=True),
                FieldSpec("address", "Address", max_length=200),
                FieldSpec("city", "City"),
                FieldSpec("state", "State"),
                FieldSpec("zip_code", "ZIP Code", pattern=r"[0-9]{6}", pattern_message="ZIP Code must be 6 digits"),
            ),
        ),
        StepDefinition(
            id=2,
            name="Nominee Details",
            description="Who receives the benefit",
            fields=(
                FieldSpec("nominee_name", "Nominee Name", min_length=2, max_length=100),
                FieldSpec("nominee_relation", "Nominee Relation", kind="choice", choices=NOMINEE_RELATIONS),
                FieldSpec("nominee_phone", "Nominee Phone", kind="phone"),
                FieldSpec("nominee_email", "Nominee Email", kind="email", required=False),
            ),
        ),
        StepDefinition(
            id=3,
            name="Review",
            description="Confirm and issue the policy",
            fields=(FieldSpec("terms_accepted", "Terms and conditions", kind="boolean", must_be_true=True),),
        ),
    ),
)
