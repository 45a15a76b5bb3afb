"""
Business services.

- identity: bearer token -> Actor, role guard
- policy: allow/deny checks
- accounts: registration, login, profile
- jobs: JobCatalog
- scoring: ScoringEngine and ScoringDispatcher
- applications: ApplicationWorkflow
"""

from jobboard.services.accounts import AccountService
from jobboard.services.applications import ApplicationWorkflow
from jobboard.services.identity import IdentityContext, TokenService, require_role
from jobboard.services.jobs import JobCatalog, JobFilters, JobPage, JobSort
from jobboard.services.policy import Actor
from jobboard.services.scoring import JobBrief, ScoreResult, ScoringDispatcher, ScoringEngine

__all__ = [
    "AccountService",
    "Actor",
    "ApplicationWorkflow",
    "IdentityContext",
    "JobBrief",
    "JobCatalog",
    "JobFilters",
    "JobPage",
    "JobSort",
    "ScoreResult",
    "ScoringDispatcher",
    "ScoringEngine",
    "TokenService",
    "require_role",
]
