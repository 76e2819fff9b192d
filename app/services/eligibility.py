from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence


@dataclass(frozen=True)
class CandidateProfile:
    department: Optional[str] = None
    level: Optional[str] = None
    gender: Optional[str] = None
    cgpa: Optional[float] = None


@dataclass(frozen=True)
class PositionRules:
    min_cgpa: float = 0.0
    eligible_departments: Sequence[str] = field(default_factory=tuple)
    eligible_levels: Sequence[str] = field(default_factory=tuple)
    eligible_gender: Optional[str] = None

    @classmethod
    def from_position(cls, position) -> "PositionRules":
        return cls(
            min_cgpa=float(position.min_cgpa or 0.0),
            eligible_departments=tuple(position.eligible_departments or ()),
            eligible_levels=tuple(position.eligible_levels or ()),
            eligible_gender=position.eligible_gender or None,
        )


def _fmt(value: float) -> str:
    return f"{value:g}"


def check_eligibility(profile: CandidateProfile, rules: PositionRules) -> list[str]:
    """
    Violations in a fixed order: CGPA, department, level, gender.
    Unset profile fields are not judged. Empty department/level lists mean
    "any"; a gender rule applies only when one gender is declared.
    """
    violations: list[str] = []

    if profile.cgpa is not None and rules.min_cgpa and profile.cgpa < rules.min_cgpa:
        violations.append(
            f"Minimum CGPA required: {_fmt(rules.min_cgpa)} (Your CGPA: {_fmt(profile.cgpa)})"
        )

    if profile.department and rules.eligible_departments and profile.department not in rules.eligible_departments:
        violations.append(f"Your department ({profile.department}) is not eligible for this position")

    if profile.level and rules.eligible_levels and profile.level not in rules.eligible_levels:
        violations.append(f"Your level ({profile.level}) is not eligible for this position")

    if rules.eligible_gender and profile.gender and profile.gender != rules.eligible_gender:
        violations.append(f"This position is only open to {rules.eligible_gender} candidates")

    return violations


def is_eligible(profile: CandidateProfile, rules: PositionRules) -> bool:
    return not check_eligibility(profile, rules)
