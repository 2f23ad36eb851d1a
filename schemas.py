from pydantic import BaseModel, ConfigDict, EmailStr, Field, AliasChoices, constr, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID

from models import UserRole, JobType, ExperienceLevel, JobStatus, ApplicationStatus


# ======================
# Base response schemas
# ======================
class BaseResponse(BaseModel):
    success: bool
    message: str
    object: Optional[Dict[str, Any]] = None
    errors: Optional[List[str]] = None


class ListResponse(BaseModel):
    success: bool
    message: str
    object: Dict[str, Any]  # { "items": [...], "total": int } plus "page", "size", "pages" when paginated
    errors: Optional[List[str]] = None


# ======================
# User sub-documents
# ======================
class Profile(BaseModel):
    name: Optional[constr(strip_whitespace=True)] = None
    contact_number: Optional[constr(strip_whitespace=True)] = None
    location: Optional[constr(strip_whitespace=True)] = None
    resume_url: Optional[str] = None
    skills: Optional[List[constr(strip_whitespace=True)]] = None
    experience: Optional[constr(strip_whitespace=True)] = None
    education: Optional[constr(strip_whitespace=True)] = None


class CompanyDetails(BaseModel):
    company_name: Optional[constr(strip_whitespace=True)] = None
    description: Optional[constr(strip_whitespace=True)] = None
    website: Optional[constr(strip_whitespace=True)] = None
    logo_url: Optional[str] = None


# ======================
# Auth schemas
# ======================
class UserRegister(BaseModel):
    username: constr(strip_whitespace=True, min_length=1)
    email: EmailStr
    password: constr(min_length=6)
    role: UserRole
    profile: Optional[Profile] = None
    company_details: Optional[CompanyDetails] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.strip().lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.strip().lower()


class UserUpdate(BaseModel):
    username: Optional[constr(strip_whitespace=True)] = None
    email: Optional[EmailStr] = None
    password: Optional[constr(min_length=6)] = None
    profile: Optional[Profile] = None
    company_details: Optional[CompanyDetails] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.strip().lower() if v else v


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    role: UserRole
    profile: Dict[str, Any] = {}
    company_details: Dict[str, Any] = {}


class PosterSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    company_details: Dict[str, Any] = {}

    def to_summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "company_name": self.company_details.get("company_name"),
        }


class ApplicantSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    profile: Dict[str, Any] = {}

    def to_summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "name": self.profile.get("name"),
            "contact_number": self.profile.get("contact_number"),
            "resume_url": self.profile.get("resume_url"),
        }


# ======================
# Job schemas
# ======================
class JobCreate(BaseModel):
    title: constr(strip_whitespace=True, min_length=1)
    description: constr(strip_whitespace=True, min_length=1)
    company_name: constr(strip_whitespace=True, min_length=1)
    location: constr(strip_whitespace=True, min_length=1)
    salary_range: Optional[constr(strip_whitespace=True)] = None
    requirements: List[constr(strip_whitespace=True)] = []
    responsibilities: List[constr(strip_whitespace=True)] = []
    job_type: JobType = JobType.full_time
    experience_level: ExperienceLevel = ExperienceLevel.entry
    application_deadline: Optional[datetime] = None
    status: JobStatus = JobStatus.active


class JobUpdate(BaseModel):
    title: Optional[constr(strip_whitespace=True)] = None
    description: Optional[constr(strip_whitespace=True)] = None
    company_name: Optional[constr(strip_whitespace=True)] = None
    location: Optional[constr(strip_whitespace=True)] = None
    salary_range: Optional[constr(strip_whitespace=True)] = None
    requirements: Optional[List[constr(strip_whitespace=True)]] = None
    responsibilities: Optional[List[constr(strip_whitespace=True)]] = None
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    application_deadline: Optional[datetime] = None
    status: Optional[JobStatus] = None


class JobDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    company_name: str
    location: str
    salary_range: Optional[str] = None
    requirements: List[str] = []
    responsibilities: List[str] = []
    job_type: JobType
    experience_level: ExperienceLevel
    posted_by: str
    application_deadline: Optional[datetime] = None
    status: JobStatus
    created_at: datetime
    updated_at: datetime


# ======================
# Application schemas
# ======================
class ApplicationCreate(BaseModel):
    job_id: UUID = Field(validation_alias=AliasChoices("job_id", "jobId"))
    cover_letter_text: constr(strip_whitespace=True) = ""
    resume_url: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    # checked against ApplicationStatus by the handler, after ownership
    status: str


class ApplicationDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    applicant_id: str
    status: ApplicationStatus
    cover_letter_text: str
    resume_url: str
    applied_at: datetime
    updated_at: datetime
