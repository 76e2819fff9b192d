# =========================================================
# app/schemas/application.py: aspirant application wizard
# =========================================================
"""
Each wizard step is its own tagged model (``step`` is the discriminator).
A step reports its own problems; the service only merges a step into the
draft once that list is empty. Drafts are frozen: merging returns a copy.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.models.aspirant import ApplicationStatus, Department, Gender, Level

MATRIC_RE = re.compile(r"^\d{2}/\d{2}[A-Za-z]{3}\d{3}$")
PHONE_RE = re.compile(r"^0[789]\d{9}$")

MIN_STATEMENT_WORDS = 50
MAX_STATEMENT_WORDS = 200
MIN_LEADERSHIP_CHARS = 50
CGPA_FLOOR = 2.0
CGPA_CEILING = 5.0


class _Step(BaseModel):
    model_config = ConfigDict(frozen=True)

    def problems(self) -> list[str]:
        raise NotImplementedError


# ------------------ STEPS ------------------

class PersonalInfoStep(_Step):
    step: Literal["personal"] = "personal"
    full_name: str = ""
    matric: str = ""
    department: Optional[Department] = None
    level: Optional[Level] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    phone: str = ""
    photo_url: Optional[str] = None

    def problems(self) -> list[str]:
        errors: list[str] = []

        if not self.full_name.strip():
            errors.append("Full name is required")

        matric = self.matric.strip()
        if not matric:
            errors.append("Matric number is required")
        elif not MATRIC_RE.match(matric):
            errors.append("Invalid matric number format. Use: XX/XXaaa000 (e.g., 21/08nus014)")

        if self.department is None:
            errors.append("Department is required")
        if self.level is None:
            errors.append("Level is required")
        if self.date_of_birth is None:
            errors.append("Date of birth is required")
        if self.gender is None:
            errors.append("Gender is required")

        phone = self.phone.strip()
        if not phone:
            errors.append("Phone number is required")
        elif not PHONE_RE.match(phone):
            errors.append("Invalid phone number (must be 11 digits starting with 07, 08, or 09)")

        if not self.photo_url:
            errors.append("Profile photo is required")

        return errors


class PositionStep(_Step):
    step: Literal["position"] = "position"
    position_id: Optional[str] = None
    why_running: str = ""

    def problems(self) -> list[str]:
        errors: list[str] = []

        if not self.position_id:
            errors.append("Please select a position")

        statement = self.why_running.strip()
        if not statement:
            errors.append("Please explain why you are running for this position")
        else:
            words = len(statement.split())
            if words < MIN_STATEMENT_WORDS:
                errors.append(f"Your statement must be at least {MIN_STATEMENT_WORDS} words")
            if words > MAX_STATEMENT_WORDS:
                errors.append(f"Your statement must not exceed {MAX_STATEMENT_WORDS} words")

        return errors


class AcademicStep(_Step):
    step: Literal["academic"] = "academic"
    cgpa: Optional[float] = None

    def problems(self) -> list[str]:
        if self.cgpa is None:
            return ["CGPA is required"]
        if self.cgpa < CGPA_FLOOR or self.cgpa > CGPA_CEILING:
            return [f"CGPA must be between {CGPA_FLOOR:.2f} and {CGPA_CEILING:.2f}"]
        return []


class LeadershipStep(_Step):
    step: Literal["leadership"] = "leadership"
    leadership_history: str = ""

    def problems(self) -> list[str]:
        history = self.leadership_history.strip()
        if not history:
            return ["Leadership history is required"]
        if len(history) < MIN_LEADERSHIP_CHARS:
            return [f"Leadership history must be at least {MIN_LEADERSHIP_CHARS} characters"]
        return []


class RefereeStep(_Step):
    step: Literal["referee"] = "referee"
    referee_declaration_accepted: bool = False

    def problems(self) -> list[str]:
        return [] if self.referee_declaration_accepted else ["Please accept the referee declaration"]


class PaymentStep(_Step):
    step: Literal["payment"] = "payment"
    payment_proof_url: Optional[str] = None

    def problems(self) -> list[str]:
        return [] if self.payment_proof_url else ["Payment proof is required"]


ApplicationStep = Annotated[
    Union[PersonalInfoStep, PositionStep, AcademicStep, LeadershipStep, RefereeStep, PaymentStep],
    Field(discriminator="step"),
]

STEP_ORDER = ("personal", "position", "academic", "leadership", "referee", "payment")


# ------------------ DRAFT ------------------

class ApplicationDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    personal: Optional[PersonalInfoStep] = None
    position: Optional[PositionStep] = None
    academic: Optional[AcademicStep] = None
    leadership: Optional[LeadershipStep] = None
    referee: Optional[RefereeStep] = None
    payment: Optional[PaymentStep] = None

    def merged(self, step: _Step) -> "ApplicationDraft":
        return self.model_copy(update={step.step: step})

    @property
    def missing_steps(self) -> list[str]:
        return [name for name in STEP_ORDER if getattr(self, name) is None]

    @property
    def is_complete(self) -> bool:
        return not self.missing_steps


# ------------------ API ------------------

class ApplicationSubmitIn(BaseModel):
    steps: List[ApplicationStep] = Field(..., min_length=1)


class ApplicationOut(BaseModel):
    id: str
    full_name: str
    matric: str
    department: str
    level: str
    position_id: str
    cgpa: float
    status: ApplicationStatus
    admin_notes: Optional[str] = None
    submitted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StatusUpdateIn(BaseModel):
    status: ApplicationStatus
    admin_notes: Optional[str] = None
    force: bool = False


class EligibilityIn(BaseModel):
    department: Optional[str] = None
    level: Optional[str] = None
    gender: Optional[str] = None
    cgpa: Optional[float] = None


class EligibilityOut(BaseModel):
    eligible: bool
    violations: List[str] = Field(default_factory=list)


class AspirantPositionIn(BaseModel):
    position_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    fee: int = Field(0, ge=0)
    min_cgpa: float = Field(0.0, ge=0.0, le=5.0)
    eligible_departments: List[Department] = Field(default_factory=list)
    eligible_levels: List[Level] = Field(default_factory=list)
    eligible_gender: Optional[Gender] = None
    display_order: int = 0


class AspirantPositionOut(BaseModel):
    id: str
    position_name: str
    description: Optional[str] = None
    fee: int
    min_cgpa: float
    eligible_departments: List[str]
    eligible_levels: List[str]
    eligible_gender: Optional[str] = None
    is_active: bool
    display_order: int

    model_config = {"from_attributes": True}
