"""Database package."""

from jobboard.db.base import Base, Database
from jobboard.db.enums import ApplicationStatus, JobStatus, Role
from jobboard.db.tables import Application, Job, User

__all__ = [
    "Base",
    "Database",
    "Role",
    "JobStatus",
    "ApplicationStatus",
    "User",
    "Job",
    "Application",
]
