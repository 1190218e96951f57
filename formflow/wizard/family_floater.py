"""
Family Floater member classification and cardinality rule.

A Family Floater plan covers several named family members under one policy:
2..10 members in total, at most 4 adults and at most 6 children. Whether a
member counts as a child depends on the relationship: a Son or Daughter is a
child up to and including age 25, everyone else only below 18.

Everything here is a pure function of the member list.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .validation import add_error, count_by_category, parse_number

RELATIONSHIPS = (
    "Self",
    "Spouse",
    "Father",
    "Mother",
    "Father-in-law",
    "Mother-in-law",
    "Son",
    "Daughter",
)

PLAN_INDIVIDUAL = "Individual"
PLAN_FAMILY_FLOATER = "Family Floater"
PLAN_TYPES = (PLAN_INDIVIDUAL, PLAN_FAMILY_FLOATER)

DEPENDANT_RELATIONSHIPS = frozenset({"Son", "Daughter"})
DEPENDANT_CHILD_MAX_AGE = 25  # inclusive
CHILD_AGE_LIMIT = 18  # exclusive

MIN_MEMBERS = 2
MAX_MEMBERS = 10
MAX_ADULTS = 4
MAX_CHILDREN = 6

ADULT = "adult"
CHILD = "child"
UNKNOWN = "unknown"


def classify_member(member: Mapping[str, Any]) -> str:
    """Return "adult" or "child"; "unknown" when the age does not parse."""
    age = parse_number(member.get("age"))
    if age is None:
        return UNKNOWN
    if member.get("relationship") in DEPENDANT_RELATIONSHIPS:
        return CHILD if age <= DEPENDANT_CHILD_MAX_AGE else ADULT
    return CHILD if age < CHILD_AGE_LIMIT else ADULT


def count_members(members: Iterable[Mapping[str, Any]]) -> Tuple[int, int]:
    """(adults, children)"""
    counts = count_by_category(members, classify_member)
    return counts.get(ADULT, 0), counts.get(CHILD, 0)


def family_floater_error(members: Sequence[Mapping[str, Any]]) -> Optional[str]:
    """First cardinality violation for a Family Floater member list, or None."""
    total = len(members)
    if total < MIN_MEMBERS:
        return f"Family Floater requires at least {MIN_MEMBERS} members"
    if total > MAX_MEMBERS:
        return f"Maximum {MAX_MEMBERS} family members allowed"
    adults, children = count_members(members)
    if adults > MAX_ADULTS:
        return f"Maximum {MAX_ADULTS} adults allowed. You have {adults} adults."
    if children > MAX_CHILDREN:
        return f"Maximum {MAX_CHILDREN} children allowed. You have {children} children."
    return None


def is_valid_family_floater(members: Sequence[Mapping[str, Any]]) -> bool:
    return family_floater_error(members) is None


def plan_members_rule(values: Dict[str, Any], errors: Dict[str, str]) -> None:
    """Step rule tying `plan_type` to the `members` group."""
    if values.get("plan_type") != PLAN_FAMILY_FLOATER:
        return
    members = values.get("members")
    if not isinstance(members, list):
        return
    records = [m for m in members if isinstance(m, Mapping)]
    message = family_floater_error(records)
    if message:
        add_error(errors, "members", message)
