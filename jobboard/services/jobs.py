"""
Job catalog.

Public read path (active jobs only, filtered/sorted/paginated) and the
owner-scoped write path.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, joinedload

from jobboard.db.enums import JobStatus
from jobboard.db.tables import Job
from jobboard.errors import NotFoundOrForbidden, ValidationError

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": Job.created_at,
    "updated_at": Job.updated_at,
    "title": Job.title,
    "location": Job.location,
    "salary": Job.salary,
}

UPDATABLE_FIELDS = ("title", "description", "requirements", "location", "salary", "status")


@dataclass(frozen=True)
class JobFilters:
    text: str | None = None
    location: str | None = None


@dataclass(frozen=True)
class JobSort:
    field: str = "created_at"
    direction: str = "desc"


@dataclass
class JobPage:
    items: list[Job] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0


def _like(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.lower()}%"


class JobCatalog:
    def __init__(self, db: Session, max_page_size: int = 100):
        self.db = db
        self.max_page_size = max_page_size

    # Read path

    def search(
        self,
        filters: JobFilters | None = None,
        sort: JobSort | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> JobPage:
        """List active jobs.

        Count and page are separate queries over the same filter, so under
        concurrent writes the page can be marginally out of step with the
        total.
        """
        filters = filters or JobFilters()
        self._check_paging(page, page_size)
        order = self._order_by(sort or JobSort())

        conditions = [Job.status == JobStatus.ACTIVE]
        if filters.text:
            pattern = _like(filters.text)
            conditions.append(
                or_(
                    func.lower(Job.title).like(pattern, escape="\\"),
                    func.lower(Job.description).like(pattern, escape="\\"),
                )
            )
        if filters.location:
            conditions.append(func.lower(Job.location).like(_like(filters.location), escape="\\"))

        total = self.db.query(func.count(Job.id)).filter(*conditions).scalar() or 0
        items = self._page(self.db.query(Job).filter(*conditions), order, page, page_size)
        return JobPage(items=items, total=total, page=page, page_size=page_size)

    def list_for_owner(
        self,
        employer_id: str,
        sort: JobSort | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> JobPage:
        """All of an employer's jobs regardless of status."""
        self._check_paging(page, page_size)
        order = self._order_by(sort or JobSort())

        total = self.db.query(func.count(Job.id)).filter(Job.owner_id == employer_id).scalar() or 0
        items = self._page(self.db.query(Job).filter(Job.owner_id == employer_id), order, page, page_size)
        return JobPage(items=items, total=total, page=page, page_size=page_size)

    def get_by_id(self, job_id: str) -> Job | None:
        return self.db.query(Job).options(joinedload(Job.owner)).filter(Job.id == job_id).first()

    # Write path

    def create(self, employer_id: str, data: dict[str, Any]) -> Job:
        job = Job(
            title=data["title"],
            description=data["description"],
            requirements=data["requirements"],
            location=data["location"],
            salary=data.get("salary"),
            status=data.get("status") or JobStatus.ACTIVE,
            owner_id=employer_id,
        )
        self.db.add(job)
        self.db.commit()
        logger.info(f"Employer {employer_id} created job {job.id}")
        return self.get_by_id(job.id)

    def update(self, job_id: str, employer_id: str, changes: dict[str, Any]) -> Job:
        job = self._owned(job_id, employer_id)
        for name, value in changes.items():
            # salary is the only field that may be cleared
            if name in UPDATABLE_FIELDS and (value is not None or name == "salary"):
                setattr(job, name, value)
        job.updated_at = datetime.now(UTC)
        self.db.commit()
        return self.get_by_id(job.id)

    def delete(self, job_id: str, employer_id: str) -> None:
        job = self._owned(job_id, employer_id)
        self.db.delete(job)
        self.db.commit()
        logger.info(f"Employer {employer_id} deleted job {job_id}")

    # Helpers

    def _owned(self, job_id: str, employer_id: str) -> Job:
        job = self.db.get(Job, job_id)
        if job is None or job.owner_id != employer_id:
            raise NotFoundOrForbidden("Job not found or you do not have permission to modify it")
        return job

    def _check_paging(self, page: int, page_size: int) -> None:
        if page < 1:
            raise ValidationError("page must be 1 or greater")
        if page_size < 1 or page_size > self.max_page_size:
            raise ValidationError(f"limit must be between 1 and {self.max_page_size}")

    @staticmethod
    def _order_by(sort: JobSort):
        column = SORTABLE_FIELDS.get(sort.field)
        if column is None:
            raise ValidationError(f"Cannot sort by '{sort.field}'. Use one of: {', '.join(SORTABLE_FIELDS)}")
        direction = sort.direction.lower()
        if direction not in ("asc", "desc"):
            raise ValidationError("sort order must be 'asc' or 'desc'")
        return column.asc() if direction == "asc" else column.desc()

    @staticmethod
    def _page(query: Query, order, page: int, page_size: int) -> list[Job]:
        return (
            query.options(joinedload(Job.owner))
            .order_by(order, Job.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
