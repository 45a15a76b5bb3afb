"""API request/response schemas."""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from jobboard.db.enums import ApplicationStatus, JobStatus, Role
from jobboard.services.scoring import ScoreResult

T = TypeVar("T")


# Envelope
class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T | None = None
    message: str | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedResponse(ApiResponse[list[T]], Generic[T]):
    pagination: Pagination


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: str | None = None


# Users
class EmployerProfile(BaseModel):
    """What applicants may see about a job's owner."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    bio: str | None = None


class CandidateProfile(BaseModel):
    """What a job owner may see about an applicant."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    bio: str | None = None
    skills: list[str] = Field(default_factory=list)
    experience: str | None = None
    education: str | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: Role
    first_name: str
    last_name: str
    phone: str | None = None
    bio: str | None = None
    skills: list[str] = Field(default_factory=list)
    experience: str | None = None
    education: str | None = None
    created_at: datetime
    updated_at: datetime


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)
    role: Role
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=40)
    bio: str | None = None


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=40)
    bio: str | None = None
    skills: list[str] | None = None
    experience: str | None = None
    education: str | None = None


class AuthData(BaseModel):
    user: UserResponse
    token: str


# Jobs
class JobCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    requirements: str = Field(min_length=1)
    location: str = Field(min_length=1, max_length=255)
    salary: str | None = Field(default=None, max_length=100)
    status: JobStatus | None = Field(default=None, description="active/closed/draft, defaults to active")


class JobUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    requirements: str | None = Field(default=None, min_length=1)
    location: str | None = Field(default=None, min_length=1, max_length=255)
    salary: str | None = Field(default=None, max_length=100)
    status: JobStatus | None = None


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    requirements: str
    location: str
    salary: str | None
    owner_id: str
    status: JobStatus
    created_at: datetime
    updated_at: datetime
    employer: EmployerProfile | None = None


# Applications
class ApplicationCreate(BaseModel):
    job_id: str = Field(min_length=1)
    resume: str = Field(min_length=1, description="Resume as plain text")
    cover_letter: str | None = None


class StatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    candidate_id: str
    resume: str
    cover_letter: str | None
    status: ApplicationStatus
    score: float | None = None
    score_detail: ScoreResult | None = None
    created_at: datetime
    updated_at: datetime
    job: JobResponse | None = None
    candidate: CandidateProfile | None = None


# Health
class ScoringStatus(BaseModel):
    enabled: bool
    provider: str


class HealthResponse(BaseModel):
    status: str
    scoring: ScoringStatus
