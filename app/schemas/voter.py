from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from app.models.aspirant import Department, Level


class VoterRegisterIn(BaseModel):
    matric: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: EmailStr


class VoterOut(BaseModel):
    id: str
    matric: str
    name: str
    email: str
    verified: bool
    voted: bool
    registered_at: datetime

    model_config = {"from_attributes": True}


class StudentRecordIn(BaseModel):
    matric: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    department: Department
    level: Optional[Level] = None


class StudentImportIn(BaseModel):
    students: List[StudentRecordIn] = Field(..., min_length=1)


class StudentImportOut(BaseModel):
    created: int
    skipped: int
