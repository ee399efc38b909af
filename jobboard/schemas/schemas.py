"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from enum import Enum
from bson import ObjectId


# ============================================================
# ENUMS
# ============================================================

class CandidateStatus(str, Enum):
    applied = "applied"
    withdraw = "withdraw"
    interview = "interview"
    interviewing = "interviewing"
    hired = "hired"
    declined = "declined"


class JobStatus(str, Enum):
    active = "active"
    closed = "closed"


class TemplateDatabase(str, Enum):
    candidates = "Candidates"
    job = "Job"
    admin = "Admin"


def _check_object_id(value: Optional[str]) -> Optional[str]:
    if value is not None and not ObjectId.is_valid(value):
        raise ValueError("must be a valid id")
    return value


def _check_single_line(value: Optional[str]) -> Optional[str]:
    # Template names become email subjects
    if value is not None and ("\r" in value or "\n" in value):
        raise ValueError("must not contain line breaks")
    return value


# ============================================================
# ACCOUNT SCHEMAS (organizations and job seekers)
# ============================================================

class OrganizationRegisterRequest(BaseModel):
    fullname: str = Field(..., min_length=1)
    email: EmailStr
    company_name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    confirm_password: str

class UserRegisterRequest(BaseModel):
    fullname: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    confirm_password: str

class CompleteRegistrationRequest(BaseModel):
    fullname: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class LoginResponse(BaseModel):
    message: str
    full_name: Optional[str] = None
    user_id: str

class OtpVerifyRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1)

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class UpdatePasswordRequest(BaseModel):
    email: EmailStr
    new_password: str = Field(..., min_length=1)


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    position: str = Field(..., min_length=1)
    office: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    job_type: str = Field(..., min_length=1)
    seats: int = Field(..., ge=1)
    salary_from: float = Field(..., ge=0)
    salary_to: float = Field(..., ge=0)
    description: str = Field(..., min_length=1)
    organization_id: str

    @field_validator("organization_id")
    @classmethod
    def check_organization_id(cls, value: str) -> str:
        return _check_object_id(value)

class JobUpdate(BaseModel):
    position: Optional[str] = None
    office: Optional[str] = None
    department: Optional[str] = None
    job_type: Optional[str] = None
    seats: Optional[int] = Field(None, ge=1)
    salary_from: Optional[float] = Field(None, ge=0)
    salary_to: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    status: Optional[JobStatus] = None


# ============================================================
# CANDIDATE SCHEMAS
# ============================================================

class WithdrawRequest(BaseModel):
    user_id: str

class CandidateStatusUpdate(BaseModel):
    status: CandidateStatus

class CandidateUpdate(BaseModel):
    """Interview fields are checked as a group by the route, like SendTemplateRequest."""
    status: Optional[CandidateStatus] = None
    interview_date: Optional[str] = None
    interview_time: Optional[str] = None
    interview_link: Optional[str] = None


# ============================================================
# TEMPLATE SCHEMAS
# ============================================================

class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1)
    database: List[TemplateDatabase] = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    admin_id: str
    organization_id: str

    @field_validator("admin_id", "organization_id")
    @classmethod
    def check_ids(cls, value: str) -> str:
        return _check_object_id(value)

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _check_single_line(value)

class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    database: Optional[List[TemplateDatabase]] = None
    content: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: Optional[str]) -> Optional[str]:
        return _check_single_line(value)

class SendTemplateRequest(BaseModel):
    """
    Interview fields stay plain strings here: their format and
    all-or-nothing rule are checked by the notification service.
    """
    candidate_id: Optional[str] = None
    template_id: Optional[str] = None
    interview_date: Optional[str] = None
    interview_time: Optional[str] = None
    interview_link: Optional[str] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
