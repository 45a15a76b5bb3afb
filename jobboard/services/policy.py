"""Permission policy.

Each check takes the acting user and the resource and answers allow/deny.
Services decide which error a denial becomes.
"""

from dataclasses import dataclass

from jobboard.db.enums import Role
from jobboard.db.tables import Application, Job


@dataclass(frozen=True)
class Actor:
    """Authenticated identity, resolved once per request."""

    id: str
    role: Role

    @property
    def is_employer(self) -> bool:
        return self.role is Role.EMPLOYER

    @property
    def is_candidate(self) -> bool:
        return self.role is Role.CANDIDATE


def has_role(actor: Actor, allowed: set[Role] | frozenset[Role]) -> bool:
    return actor.role in allowed


def owns_job(actor: Actor, job: Job | None) -> bool:
    return job is not None and actor.is_employer and job.owner_id == actor.id


def can_view_application(actor: Actor, application: Application | None) -> bool:
    """Candidates see their own; employers see those on jobs they own."""
    if application is None:
        return False
    if actor.is_candidate:
        return application.candidate_id == actor.id
    if actor.is_employer:
        return owns_job(actor, application.job)
    return False


def can_review_application(actor: Actor, application: Application | None) -> bool:
    """Only the owner of the application's job may change its status."""
    return application is not None and owns_job(actor, application.job)
