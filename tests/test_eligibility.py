from types import SimpleNamespace

from app.services.eligibility import CandidateProfile, PositionRules, check_eligibility, is_eligible

STRICT = PositionRules(
    min_cgpa=3.0,
    eligible_departments=("Nursing Sciences",),
    eligible_levels=("300L", "400L"),
    eligible_gender="female",
)


def test_all_violations_in_order():
    profile = CandidateProfile(department="Human Anatomy", level="100L", gender="male", cgpa=2.8)

    assert check_eligibility(profile, STRICT) == [
        "Minimum CGPA required: 3 (Your CGPA: 2.8)",
        "Your department (Human Anatomy) is not eligible for this position",
        "Your level (100L) is not eligible for this position",
        "This position is only open to female candidates",
    ]


def test_eligible_profile():
    profile = CandidateProfile(department="Nursing Sciences", level="300L", gender="female", cgpa=3.0)
    assert check_eligibility(profile, STRICT) == []
    assert is_eligible(profile, STRICT)


def test_unrestricted_position_accepts_anyone():
    profile = CandidateProfile(department="Human Anatomy", level="100L", gender="male", cgpa=2.0)
    assert is_eligible(profile, PositionRules())


def test_missing_profile_fields_are_not_judged():
    assert check_eligibility(CandidateProfile(), STRICT) == []
    assert check_eligibility(CandidateProfile(cgpa=2.5), STRICT) == [
        "Minimum CGPA required: 3 (Your CGPA: 2.5)",
    ]


def test_rules_from_position_row():
    position = SimpleNamespace(
        min_cgpa=3.5,
        eligible_departments=["Medicine and Surgery"],
        eligible_levels=[],
        eligible_gender=None,
    )
    rules = PositionRules.from_position(position)

    assert rules.min_cgpa == 3.5
    assert rules.eligible_departments == ("Medicine and Surgery",)
    assert rules.eligible_levels == ()
    assert check_eligibility(CandidateProfile(department="Medicine and Surgery", cgpa=3.25), rules) == [
        "Minimum CGPA required: 3.5 (Your CGPA: 3.25)",
    ]
