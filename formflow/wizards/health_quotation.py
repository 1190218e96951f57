"""Health quotation wizard: customer details, plan & members, review."""

from __future__ import annotations

from formflow.wizard.family_floater import PLAN_TYPES, RELATIONSHIPS, plan_members_rule
from formflow.wizard.steps import FieldSpec, StepDefinition, WizardDefinition

SUM_INSURED_OPTIONS = (
    10000,
    20000,
    25000,
    50000,
    75000,
    100000,
    150000,
    200000,
    250000,
    300000,
    350000,
    400000,
    450000,
    500000,
)

PAN_PATTERN = r"[A-Z]{5}[0-9]{4}[A-Z]"
PINCODE_PATTERN = r"[0-9]{6}"

MEMBER_FIELDS = (
    FieldSpec("relationship", "Relationship", kind="choice", choices=RELATIONSHIPS),
    FieldSpec("age", "Age", kind="integer", min_value=1, max_value=120),
)

HEALTH_QUOTATION = WizardDefinition(
    name="health_quotation",
    title="Health Insurance Quotation",
    draft_namespace="health_quotation_draft",
    reference_prefix="HQ-",
    steps=(
        StepDefinition(
            id=1,
            name="Customer Details",
            description="Who is the quotation for",
            fields=(
                FieldSpec("customer_name", "Customer Name", min_length=2, max_length=100, pattern=r"[A-Za-z\s.']+", pattern_message="Customer Name should contain letters only"),
                FieldSpec("mobile", "Mobile Number", kind="phone"),
                FieldSpec("email", "Email", kind="email", max_length=100),
                FieldSpec("pincode", "Pincode", pattern=PINCODE_PATTERN, pattern_message="Pincode must be 6 digits"),
                FieldSpec("pan_number", "PAN", required=False, pattern=PAN_PATTERN, pattern_message="Invalid PAN format"),
            ),
        ),
        StepDefinition(
            id=2,
            name="Plan & Members",
            description="Plan type, insured members and sum insured",
            fields=(
                FieldSpec("plan_type", "Plan Type", kind="choice", choices=PLAN_TYPES),
                FieldSpec("members", "Members", kind="group", min_items=1, item_fields=MEMBER_FIELDS),
                FieldSpec("total_sum_insured", "Sum Insured", kind="choice", choices=SUM_INSURED_OPTIONS),
            ),
            rules=(plan_members_rule,),
        ),
        StepDefinition(
            id=3,
            name="Review",
            description="Confirm the details and request quotes",
            fields=(FieldSpec("declaration_accepted", "Declaration", kind="boolean", must_be_true=True),),
        ),
    ),
)
