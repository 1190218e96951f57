"""Field Validator for stepped form sessions.

`validate_step` checks the fields of one step against the current draft and
`validate_all` re-checks every step before final submission. Neither raises:
problems come back as a `ValidationResult` whose `field_errors` maps a field
key to a human-readable message, so the caller can render them inline.

`FormValidationError` and `raise_if_errors` exist for the HTTP boundary, which
turns a failed result into a 422 response.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from .steps import FieldSpec, WizardDefinition

logger = logging.getLogger(__name__)


@dataclass
class FormValidationError(Exception):
    """Exception raised for form validation failures at the API boundary.

    Attributes:
        field_errors: mapping of field name -> human-readable error message.
        message: optional top-level message.
    """

    field_errors: Dict[str, str]
    message: str = "Validation failed"

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass
class ValidationResult:
    field_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.field_errors

    def to_dict(self) -> Dict[str, Any]:
        return {"is_valid": self.is_valid, "field_errors": dict(self.field_errors)}


def _as_str(v: Any) -> str:
    return "" if v is None else str(v)


def _strip(v: Any) -> str:
    return _as_str(v).strip()


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def add_error(errors: Dict[str, str], field: str, message: str) -> None:
    if field not in errors:
        errors[field] = message


_TRUE = ("true", "1", "yes", "y", "on")
_FALSE = ("false", "0", "no", "n", "off")


def parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    s = _strip(value).lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    return None


def parse_number(value: Any) -> Optional[float]:
    """Parse to a finite float; returns None for anything else (bools included)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        raw = _strip(value).replace(",", "")
        try:
            num = float(raw)
        except ValueError:
            return None
    return num if math.isfinite(num) else None


def parse_iso_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    s = _strip(value)
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^[0-9]{10}$")


def normalize_phone(value: Any) -> str:
    """Strip spaces, dashes and brackets; drop a leading +91 / 0 trunk prefix."""
    s = re.sub(r"[\s\-\(\)]", "", _strip(value))
    if s.startswith("+91") and len(s) == 13:
        s = s[3:]
    elif s.startswith("0") and len(s) == 11:
        s = s[1:]
    return s


# --- per-kind checks ---------------------------------------------------------


def _check_string(spec: FieldSpec, value: Any, errors: Dict[str, str], key: str) -> None:
    label = spec.display_label
    s = _strip(value)
    if spec.min_length is not None and len(s) < spec.min_length:
        add_error(errors, key, f"{label} must be at least {spec.min_length} characters")
    if spec.max_length is not None and len(s) > spec.max_length:
        add_error(errors, key, f"{label} must be at most {spec.max_length} characters")
    if spec.pattern and not re.fullmatch(spec.pattern, s):
        add_error(errors, key, spec.pattern_message or f"{label} format is not valid")


def _check_number(spec: FieldSpec, value: Any, errors: Dict[str, str], key: str) -> None:
    label = spec.display_label
    num = parse_number(value)
    if num is None:
        add_error(errors, key, f"{label} must be a number")
        return
    if spec.kind == "integer" and not num.is_integer():
        add_error(errors, key, f"{label} must be a whole number")
        return
    if spec.min_value is not None and num < spec.min_value:
        add_error(errors, key, f"{label} must be at least {_fmt(spec.min_value)}")
    if spec.max_value is not None and num > spec.max_value:
        add_error(errors, key, f"{label} must be at most {_fmt(spec.max_value)}")


def _fmt(n: float) -> str:
    return str(int(n)) if float(n).is_integer() else str(n)


def _check_boolean(spec: FieldSpec, value: Any, errors: Dict[str, str], key: str) -> None:
    parsed = parse_bool(value)
    if parsed is None:
        add_error(errors, key, f"{spec.display_label} must be true/false")
    elif spec.must_be_true and not parsed:
        add_error(errors, key, f"{spec.display_label} must be accepted")


def _check_date(spec: FieldSpec, value: Any, errors: Dict[str, str], key: str) -> None:
    label = spec.display_label
    d = parse_iso_date(value)
    if d is None:
        add_error(errors, key, f"{label} must be a valid date (YYYY-MM-DD)")
        return
    today = date.today()
    if spec.not_future and d > today:
        add_error(errors, key, f"{label} cannot be in the future")
    if spec.not_past and d < today:
        add_error(errors, key, f"{label} cannot be in the past")


def _check_choice(spec: FieldSpec, value: Any, errors: Dict[str, str], key: str) -> None:
    if value in spec.choices:
        return
    # numeric choices arrive as strings from form inputs
    num = parse_number(value)
    if num is not None and any(parse_number(c) == num for c in spec.choices if not isinstance(c, str)):
        return
    add_error(errors, key, f"{spec.display_label} has an invalid value")


def _check_email(spec: FieldSpec, value: Any, errors: Dict[str, str], key: str) -> None:
    if not _EMAIL_RE.match(_strip(value)):
        add_error(errors, key, f"{spec.display_label} is not valid")
    else:
        _check_string(spec, value, errors, key)


def _check_phone(spec: FieldSpec, value: Any, errors: Dict[str, str], key: str) -> None:
    if not _PHONE_RE.match(normalize_phone(value)):
        add_error(errors, key, f"{spec.display_label} must be a 10 digit number")


def _check_cardinality(spec: FieldSpec, count: int, errors: Dict[str, str], key: str) -> None:
    label = spec.display_label
    if spec.min_items is not None and count < spec.min_items:
        add_error(errors, key, f"{label} requires at least {spec.min_items} entries")
    if spec.max_items is not None and count > spec.max_items:
        add_error(errors, key, f"{label} allows at most {spec.max_items} entries")


def _check_list(spec: FieldSpec, value: Any, errors: Dict[str, str], key: str) -> None:
    if isinstance(value, str):
        items = [v.strip() for v in value.split(",") if v.strip()]
    elif isinstance(value, (list, tuple)):
        items = [_strip(v) for v in value if _strip(v)]
    else:
        add_error(errors, key, f"{spec.display_label} must be a list")
        return
    if spec.choices:
        allowed = set(spec.choices)
        if any(v not in allowed for v in items):
            add_error(errors, key, f"{spec.display_label} contains invalid selection(s)")
    _check_cardinality(spec, len(items), errors, key)


def _check_group(spec: FieldSpec, value: Any, errors: Dict[str, str], key: str) -> None:
    if not isinstance(value, (list, tuple)):
        add_error(errors, key, f"{spec.display_label} must be a list")
        return
    for idx, item in enumerate(value):
        item_key = f"{key}[{idx}]"
        if not isinstance(item, Mapping):
            add_error(errors, item_key, f"{spec.display_label} entry {idx + 1} is not valid")
            continue
        for sub in spec.item_fields:
            validate_field(sub, item.get(sub.key), errors, key=f"{item_key}.{sub.key}")
    _check_cardinality(spec, len(value), errors, key)


_CHECKS: Dict[str, Callable[[FieldSpec, Any, Dict[str, str], str], None]] = {
    "string": _check_string,
    "number": _check_number,
    "integer": _check_number,
    "boolean": _check_boolean,
    "date": _check_date,
    "choice": _check_choice,
    "email": _check_email,
    "phone": _check_phone,
    "list": _check_list,
    "group": _check_group,
}


def validate_field(spec: FieldSpec, value: Any, errors: Dict[str, str], *, key: Optional[str] = None) -> None:
    """Record at most one error for `value` under `key` (defaults to the field key)."""
    key = key or spec.key
    if is_empty(value):
        if spec.required:
            add_error(errors, key, f"{spec.display_label} is required")
        return
    _CHECKS[spec.kind](spec, value, errors, key)


# --- repeating-group categories ----------------------------------------------


def count_by_category(items: Iterable[Mapping[str, Any]], classify: Callable[[Mapping[str, Any]], str]) -> Counter:
    return Counter(classify(item) for item in items)


# --- step / wizard validation ------------------------------------------------


def _validate_step_into(wizard: WizardDefinition, step_id: int, values: Mapping[str, Any], errors: Dict[str, str]) -> None:
    step = wizard.get_step(step_id)
    for spec in step.fields:
        validate_field(spec, values.get(spec.key), errors)
    for rule in step.rules:
        try:
            rule(dict(values), errors)
        except Exception:
            logger.exception("Validation rule %s failed on %s step %s", getattr(rule, "__name__", rule), wizard.name, step_id)
            add_error(errors, "_form", f"{step.name} could not be validated")


def validate_step(wizard: WizardDefinition, step_id: int, values: Optional[Mapping[str, Any]]) -> ValidationResult:
    """Validate only the fields belonging to `step_id`."""
    if not wizard.has_step(step_id):
        return ValidationResult({"_step": f"Unknown step {step_id!r}"})
    errors: Dict[str, str] = {}
    _validate_step_into(wizard, step_id, values or {}, errors)
    return ValidationResult(errors)


def validate_all(wizard: WizardDefinition, values: Optional[Mapping[str, Any]]) -> ValidationResult:
    """Re-run every step's rules; used once before the final submission."""
    errors: Dict[str, str] = {}
    for step in wizard.steps:
        _validate_step_into(wizard, step.id, values or {}, errors)
    return ValidationResult(errors)


def first_invalid_step(wizard: WizardDefinition, values: Optional[Mapping[str, Any]]) -> Optional[int]:
    for step in wizard.steps:
        if not validate_step(wizard, step.id, values).is_valid:
            return step.id
    return None


def raise_if_errors(errors: Dict[str, str], message: str = "Please correct the highlighted fields") -> None:
    if errors:
        raise FormValidationError(field_errors=errors, message=message)
