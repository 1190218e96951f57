"""Static wizard configuration: fields, steps and wizard definitions.

A concrete wizard (health quotation, supplementary claim, endorsement, ...) is
nothing more than a `WizardDefinition`: an ordered tuple of `StepDefinition`s,
each listing the `FieldSpec`s that must validate before the user may move past
that step. Definitions are built once at import time and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple

FIELD_KINDS = frozenset(
    {
        "string",
        "number",
        "integer",
        "boolean",
        "date",
        "choice",
        "email",
        "phone",
        "list",
        "group",
    }
)

# Cross-field rule: inspects the draft values and records errors via add_error.
Rule = Callable[[Dict[str, Any], Dict[str, str]], None]


@dataclass(frozen=True)
class FieldSpec:
    """Declarative validation rule for a single draft field."""

    key: str
    label: str = ""
    kind: str = "string"
    required: bool = True
    # string
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    pattern_message: Optional[str] = None
    # number / integer
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    # choice
    choices: Tuple[Any, ...] = ()
    # date
    not_future: bool = False
    not_past: bool = False
    # boolean
    must_be_true: bool = False
    # list / group cardinality
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    # group
    item_fields: Tuple["FieldSpec", ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"Unknown field kind {self.kind!r} for field {self.key!r}")
        if self.kind == "choice" and not self.choices:
            raise ValueError(f"Choice field {self.key!r} declares no choices")

    @property
    def display_label(self) -> str:
        return self.label or self.key


@dataclass(frozen=True)
class StepDefinition:
    """One screen of a wizard."""

    id: int
    name: str
    fields: Tuple[FieldSpec, ...] = ()
    rules: Tuple[Rule, ...] = ()
    description: str = ""

    @property
    def required_fields(self) -> FrozenSet[str]:
        return frozenset(f.key for f in self.fields if f.required)

    @property
    def field_keys(self) -> Tuple[str, ...]:
        return tuple(f.key for f in self.fields)


@dataclass(frozen=True)
class WizardDefinition:
    """Ordered, 1-based, contiguous list of steps plus draft/reference settings."""

    name: str
    title: str
    steps: Tuple[StepDefinition, ...]
    draft_namespace: str
    reference_prefix: str = "REF-"
    reference_digits: int = 8

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError(f"Wizard {self.name!r} has no steps")
        ids = [s.id for s in self.steps]
        if ids != list(range(1, len(ids) + 1)):
            raise ValueError(f"Wizard {self.name!r} step ids must be 1..N in order, got {ids}")
        if not self.draft_namespace.strip():
            raise ValueError(f"Wizard {self.name!r} needs a draft namespace")

    @property
    def first_step_id(self) -> int:
        return 1

    @property
    def last_step_id(self) -> int:
        return len(self.steps)

    def has_step(self, step_id: Any) -> bool:
        return isinstance(step_id, int) and not isinstance(step_id, bool) and 1 <= step_id <= len(self.steps)

    def get_step(self, step_id: int) -> StepDefinition:
        if not self.has_step(step_id):
            raise KeyError(f"Wizard {self.name!r} has no step {step_id!r}")
        return self.steps[step_id - 1]

    def session_key(self, session_id: str) -> str:
        """Storage slot key; namespaced so distinct wizards never share a draft."""
        return f"{self.draft_namespace}:{session_id}"

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "steps": [
                {
                    "id": s.id,
                    "name": s.name,
                    "description": s.description,
                    "required_fields": sorted(s.required_fields),
                }
                for s in self.steps
            ],
        }
