import pytest

from app.core.error_messages import ERROR_CATALOG, SUPPORT_CONTACT, find_hint
from app.core.errors import AlreadyVoted, InvalidOrExpiredCode, TooManyAttempts, ValidationError


@pytest.mark.parametrize(
    "message, title",
    [
        ("Invalid login credentials", "Login Failed"),
        ("invalid LOGIN credentials", "Login Failed"),
        ("Matric not found in the student list", "Matric Number Not Registered"),
        ("Account locked. Please try again in 3 minute(s).", "Account Temporarily Locked"),
        ("This matric number or email is already registered", "Already Registered"),
        ("Already voted", "Vote Already Cast"),
    ],
)
def test_find_hint(message, title):
    assert find_hint(message).title == title


@pytest.mark.parametrize("message", [None, "", "Something nobody catalogued"])
def test_no_hint(message):
    assert find_hint(message) is None


def test_catalog_phrases_are_unique():
    phrases = [phrase.lower() for phrase, _ in ERROR_CATALOG]
    assert len(phrases) == len(set(phrases))


def test_support_contact():
    assert set(SUPPORT_CONTACT) == {"whatsapp", "email", "help_desk_url"}


def test_error_payloads():
    assert InvalidOrExpiredCode().to_payload() == {
        "error": "Invalid or expired code",
        "code": "INVALID_OR_EXPIRED_CODE",
        "valid": False,
    }
    assert TooManyAttempts("Account locked.").status_code == 429
    assert AlreadyVoted().status_code == 409
    assert ValidationError(errors=["a", "b"]).to_payload() == {
        "error": "a",
        "code": "VALIDATION_ERROR",
        "errors": ["a", "b"],
    }
