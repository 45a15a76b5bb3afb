"""Closed value sets stored as strings."""

from enum import Enum


class Role(str, Enum):
    EMPLOYER = "employer"
    CANDIDATE = "candidate"


class JobStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    DRAFT = "draft"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
