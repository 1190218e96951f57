"""Supplementary claim wizard: claim details, supplementary details, submission."""

from __future__ import annotations

from formflow.wizard.steps import FieldSpec, StepDefinition, WizardDefinition

SUPPLEMENTARY_CLAIM = WizardDefinition(
    name="supplementary_claim",
    title="Supplementary Claim",
    draft_namespace="supplementary_claim_draft",
    reference_prefix="SUPP-",
    reference_digits=6,
    steps=(
        StepDefinition(
            id=1,
            name="Claim Details",
            description="Enter claim information",
            fields=(
                FieldSpec("original_claim_id", "Original claim ID"),
                FieldSpec("supplementary_claim_id", "Supplementary claim ID"),
                FieldSpec("claim_date", "Claim date", kind="date", not_future=True),
            ),
        ),
        StepDefinition(
            id=2,
            name="Supplementary Details",
            description="Enter supplementary information",
            fields=(
                FieldSpec("supplementary_reason", "Supplementary reason"),
                FieldSpec("additional_amount", "Additional amount", kind="number", min_value=0),
                FieldSpec("supplementary_description", "Supplementary description", max_length=2000),
                FieldSpec("supporting_documents", "Supporting documents", kind="list", required=False),
            ),
        ),
        StepDefinition(
            id=3,
            name="API Integration",
            description="Submit to insurance company",
            fields=(FieldSpec("api_integration_enabled", "API integration", kind="boolean", required=False),),
        ),
    ),
)
