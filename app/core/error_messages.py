"""
User-facing hints for error messages.

The catalog is matched by case-insensitive substring against the error
text, first match wins, so more specific phrases come first.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass

SUPPORT_CONTACT = {
    "whatsapp": "+234 704 064 0646",
    "email": "cohssahuiiseco@gmail.com",
    "help_desk_url": "/voter/help",
}


@dataclass(frozen=True)
class ErrorHint:
    title: str
    description: str
    solution: str
    contact_support: bool = False

    def as_dict(self) -> dict:
        return asdict(self)


ERROR_CATALOG: list[tuple[str, ErrorHint]] = [
    # Authentication
    ("Invalid login credentials", ErrorHint(
        "Login Failed",
        "The email or password you entered is incorrect.",
        "Please check your credentials and try again. Use 'Forgot Password' if you need to reset.",
    )),
    ("Email not confirmed", ErrorHint(
        "Email Not Verified",
        "Your email address hasn't been confirmed yet.",
        "Check your inbox for a verification email. Click the link to verify your account.",
    )),
    ("User not found", ErrorHint(
        "Account Not Found",
        "No account exists with this email or matric number.",
        "Please register first or check if you entered the correct information.",
    )),
    ("Matric not found", ErrorHint(
        "Matric Number Not Registered",
        "This matric number is not in our voter database.",
        "Please register as a voter first, or contact the Electoral Committee if you believe this is an error.",
        contact_support=True,
    )),
    # OTP
    ("Invalid or expired code", ErrorHint(
        "Invalid Code",
        "The OTP code you entered is incorrect or has expired.",
        "Request a new code and enter it within 5 minutes.",
    )),
    ("Too many requests", ErrorHint(
        "Too Many Attempts",
        "You've made too many requests in a short time.",
        "Please wait 15 minutes before trying again.",
        contact_support=True,
    )),
    ("Rate limit exceeded", ErrorHint(
        "Request Limit Reached",
        "Too many OTP requests from this email.",
        "Wait at least 1 hour before requesting another code. Contact support if urgent.",
        contact_support=True,
    )),
    ("Account locked", ErrorHint(
        "Account Temporarily Locked",
        "Your account has been locked due to multiple failed attempts.",
        "Wait 15 minutes for automatic unlock, or contact the Electoral Committee for immediate assistance.",
        contact_support=True,
    )),
    # Registration
    ("already registered", ErrorHint(
        "Already Registered",
        "An account with this matric number or email already exists.",
        "Try logging in instead, or use 'Forgot Password' to recover your account.",
    )),
    ("pending verification", ErrorHint(
        "Verification Pending",
        "Your account is awaiting admin verification.",
        "Please wait for the Electoral Committee to verify your registration. This usually takes 1-2 hours.",
        contact_support=True,
    )),
    # Voting
    ("Already voted", ErrorHint(
        "Vote Already Cast",
        "You have already voted in this election.",
        "Each voter can only vote once. If you believe this is an error, contact the Electoral Committee immediately.",
        contact_support=True,
    )),
    ("Voting not open", ErrorHint(
        "Voting Not Available",
        "Voting is not currently open.",
        "Check the election timeline for voting hours. Voting will be available during the scheduled period.",
    )),
    # Network
    ("Failed to fetch", ErrorHint(
        "Connection Error",
        "Unable to connect to the server.",
        "Check your internet connection and try again. If the problem persists, the server may be temporarily unavailable.",
    )),
    ("Network error", ErrorHint(
        "Network Problem",
        "A network error occurred while processing your request.",
        "Please check your internet connection and refresh the page.",
    )),
    # Permissions
    ("Permission denied", ErrorHint(
        "Access Denied",
        "You don't have permission to perform this action.",
        "Make sure you're logged in with the correct account. Contact support if you need access.",
        contact_support=True,
    )),
    ("Not authorized", ErrorHint(
        "Unauthorized",
        "Your session may have expired or you're not authorized.",
        "Please log in again to continue.",
    )),
    ("Unauthorized", ErrorHint(
        "Session Required",
        "Your session is missing or has expired.",
        "Please log in again to continue.",
    )),
]


def find_hint(message: str | None) -> ErrorHint | None:
    if not message:
        return None
    lowered = message.lower()
    for phrase, hint in ERROR_CATALOG:
        if phrase.lower() in lowered:
            return hint
    return None
