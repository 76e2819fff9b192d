from __future__ import annotations

from typing import Any

from fastapi import status


class ElectionError(Exception):
    """Base for every error the API turns into a JSON error payload."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    message: str = "Something went wrong"

    def __init__(self, message: str | None = None, **extra: Any) -> None:
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        payload.update(self.extra)
        return payload


class ValidationError(ElectionError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Invalid request"

    def __init__(self, message: str | None = None, errors: list[str] | None = None, **extra: Any) -> None:
        if errors:
            extra["errors"] = list(errors)
        super().__init__(message or (errors[0] if errors else None), **extra)


class Unauthorized(ElectionError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    message = "Unauthorized: Invalid token"


class Forbidden(ElectionError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Permission denied"


class StageClosed(Forbidden):
    code = "STAGE_CLOSED"
    message = "This stage of the election is not open"


class NotFound(ElectionError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Not found"


class Conflict(ElectionError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    message = "Conflict"


class InvalidTransition(Conflict):
    code = "INVALID_TRANSITION"
    message = "Invalid status transition"


class AlreadyVoted(Conflict):
    code = "ALREADY_VOTED"
    message = "Already voted"


# ── OTP ───────────────────────────────────────────────────────────────
# Verification failures always answer with valid=false.

class InvalidOrExpiredCode(ElectionError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_OR_EXPIRED_CODE"
    message = "Invalid or expired code"

    def to_payload(self) -> dict[str, Any]:
        return {**super().to_payload(), "valid": False}


class IdentityNotFound(NotFound):
    code = "IDENTITY_NOT_FOUND"
    message = "Voter profile not found. Please register first."

    def to_payload(self) -> dict[str, Any]:
        return {**super().to_payload(), "valid": False}


class TooManyAttempts(ElectionError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "TOO_MANY_ATTEMPTS"
    message = "Too many failed attempts. Account locked."

    def to_payload(self) -> dict[str, Any]:
        return {**super().to_payload(), "valid": False}


# ── Infrastructure ────────────────────────────────────────────────────

class ConfigurationError(ElectionError):
    code = "CONFIGURATION_ERROR"
    message = "Email service not configured"


class PersistenceError(ElectionError):
    code = "PERSISTENCE_ERROR"
    message = "Failed to save record"


class DeliveryError(ElectionError):
    code = "DELIVERY_ERROR"
    message = "Failed to send email"
