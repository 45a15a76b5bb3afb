"""
Application submission and review.

Submission is synchronous up to the insert; scoring is handed to the
dispatcher and can never change the outcome of the submit call.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from jobboard.db.enums import ApplicationStatus, Role
from jobboard.db.tables import Application, Job
from jobboard.errors import (
    DuplicateSubmission,
    Forbidden,
    JobNotFound,
    NotFoundOrForbidden,
    ValidationError,
)
from jobboard.services.policy import Actor, can_review_application, can_view_application, owns_job
from jobboard.services.scoring import JobBrief, ScoringDispatcher

logger = logging.getLogger(__name__)


def _employer(employer_id: str) -> Actor:
    return Actor(id=employer_id, role=Role.EMPLOYER)


class ApplicationWorkflow:
    def __init__(self, db: Session, dispatcher: ScoringDispatcher | None = None):
        self.db = db
        self.dispatcher = dispatcher

    def submit(
        self,
        candidate_id: str,
        job_id: str,
        resume_text: str,
        cover_letter: str | None = None,
    ) -> Application:
        if not resume_text or not resume_text.strip():
            raise ValidationError("Missing required fields: job_id, resume")

        if self._find_existing(job_id, candidate_id) is not None:
            raise DuplicateSubmission()

        job = self.db.get(Job, job_id)
        if job is None:
            raise JobNotFound()
        brief = JobBrief(title=job.title, description=job.description, requirements=job.requirements)

        application = Application(
            job_id=job_id,
            candidate_id=candidate_id,
            resume_text=resume_text,
            cover_letter=cover_letter or None,
            status=ApplicationStatus.PENDING,
        )
        self.db.add(application)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # The unique constraint is what actually closes the race
            if self._find_existing(job_id, candidate_id) is not None:
                raise DuplicateSubmission() from e
            if self.db.get(Job, job_id) is None:
                raise JobNotFound() from e
            raise

        logger.info(f"Candidate {candidate_id} applied to job {job_id} ({application.id})")
        # Snapshot before scheduling: the caller sees the row as created
        created = self._load(application.id)
        self._schedule_scoring(created, brief)
        return created

    def list_for_candidate(self, candidate_id: str) -> list[Application]:
        return (
            self.db.query(Application)
            .options(joinedload(Application.job).joinedload(Job.owner))
            .filter(Application.candidate_id == candidate_id)
            .order_by(Application.created_at.desc(), Application.id)
            .all()
        )

    def list_for_job(self, job_id: str, employer_id: str) -> list[Application]:
        """Scored applications first, best score first; unscored last."""
        if not owns_job(_employer(employer_id), self.db.get(Job, job_id)):
            raise Forbidden("Job not found or access denied")

        return (
            self.db.query(Application)
            .options(joinedload(Application.candidate), joinedload(Application.job))
            .filter(Application.job_id == job_id)
            .order_by(
                Application.score.is_(None),
                Application.score.desc(),
                Application.created_at.desc(),
            )
            .all()
        )

    def get(self, application_id: str, actor: Actor) -> Application:
        application = self._load(application_id)
        if not can_view_application(actor, application):
            raise NotFoundOrForbidden("Application not found or you do not have permission to view it")
        return application

    def set_status(self, application_id: str, employer_id: str, new_status: ApplicationStatus | str) -> Application:
        """Any status may follow any other; only the job owner may change it."""
        try:
            status = ApplicationStatus(new_status)
        except ValueError as e:
            raise ValidationError("Invalid status. Must be: pending, reviewed, accepted, or rejected") from e

        application = self._load(application_id)
        if not can_review_application(_employer(employer_id), application):
            raise NotFoundOrForbidden("Application not found or you do not have permission to update it")

        # Touch only status so a concurrent score merge survives
        (
            self.db.query(Application)
            .filter(Application.id == application_id)
            .update(
                {Application.status: status, Application.updated_at: datetime.now(UTC)},
                synchronize_session=False,
            )
        )
        self.db.commit()
        self.db.expire_all()

        logger.info(f"Employer {employer_id} set application {application_id} to {status.value}")
        return self._load(application_id)

    def _schedule_scoring(self, application: Application, brief: JobBrief) -> None:
        if self.dispatcher is None:
            return
        try:
            self.dispatcher.schedule(application.id, application.resume_text, application.cover_letter, brief)
        except Exception:
            logger.exception(f"[{application.id}] Could not schedule scoring")

    def _find_existing(self, job_id: str, candidate_id: str) -> Application | None:
        return (
            self.db.query(Application)
            .filter(Application.job_id == job_id, Application.candidate_id == candidate_id)
            .first()
        )

    def _load(self, application_id: str) -> Application | None:
        return (
            self.db.query(Application)
            .options(
                joinedload(Application.job).joinedload(Job.owner),
                joinedload(Application.candidate),
            )
            .filter(Application.id == application_id)
            .first()
        )
