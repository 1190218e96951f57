"""Registry of wizard definitions available to the host application."""

from __future__ import annotations

from typing import Dict, List

from formflow.wizard.steps import WizardDefinition

from .customer_proposal import CUSTOMER_PROPOSAL
from .endorsements import NIL_ENDORSEMENT, NON_NIL_ENDORSEMENT
from .health_quotation import HEALTH_QUOTATION
from .supplementary_claim import SUPPLEMENTARY_CLAIM

_REGISTRY: Dict[str, WizardDefinition] = {
    w.name: w
    for w in (
        HEALTH_QUOTATION,
        SUPPLEMENTARY_CLAIM,
        NIL_ENDORSEMENT,
        NON_NIL_ENDORSEMENT,
        CUSTOMER_PROPOSAL,
    )
}

if len({w.draft_namespace for w in _REGISTRY.values()}) != len(_REGISTRY):
    raise RuntimeError("Wizard draft namespaces must be unique")


def get_wizard(name: str) -> WizardDefinition:
    """Return the wizard definition; raises KeyError for unknown names."""
    return _REGISTRY[name]


def list_wizards() -> List[WizardDefinition]:
    return list(_REGISTRY.values())
