"""Job endpoints."""

from fastapi import APIRouter, Depends, Query, status

from jobboard.api.deps import get_catalog, get_settings, require_employer
from jobboard.api.schemas import (
    ApiResponse,
    EmployerProfile,
    JobCreate,
    JobResponse,
    JobUpdate,
    PaginatedResponse,
    Pagination,
)
from jobboard.config import Settings
from jobboard.db.tables import Job
from jobboard.errors import NotFound
from jobboard.services.jobs import JobCatalog, JobFilters, JobPage, JobSort
from jobboard.services.policy import Actor

router = APIRouter()


def job_response(job: Job) -> JobResponse:
    return JobResponse(
        id=job.id,
        title=job.title,
        description=job.description,
        requirements=job.requirements,
        location=job.location,
        salary=job.salary,
        owner_id=job.owner_id,
        status=job.status,
        created_at=job.created_at,
        updated_at=job.updated_at,
        employer=EmployerProfile.model_validate(job.owner) if job.owner else None,
    )


def _paginated(result: JobPage) -> PaginatedResponse[JobResponse]:
    return PaginatedResponse[JobResponse](
        data=[job_response(job) for job in result.items],
        pagination=Pagination(
            page=result.page,
            limit=result.page_size,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get("", response_model=PaginatedResponse[JobResponse])
def list_jobs(
    search: str | None = Query(None, description="Matches title or description"),
    location: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int | None = None,
    catalog: JobCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
):
    """Search active jobs."""
    result = catalog.search(
        JobFilters(text=search or None, location=location or None),
        JobSort(field=sort_by, direction=sort_order),
        page=page,
        page_size=settings.default_page_size if limit is None else limit,
    )
    return _paginated(result)


@router.get("/employer/my-jobs", response_model=PaginatedResponse[JobResponse])
def list_my_jobs(
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int | None = None,
    actor: Actor = Depends(require_employer),
    catalog: JobCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
):
    """Jobs posted by the current employer, any status."""
    result = catalog.list_for_owner(
        actor.id,
        JobSort(field=sort_by, direction=sort_order),
        page=page,
        page_size=settings.default_page_size if limit is None else limit,
    )
    return _paginated(result)


@router.get("/{job_id}", response_model=ApiResponse[JobResponse])
def get_job(job_id: str, catalog: JobCatalog = Depends(get_catalog)):
    """Get a job by ID."""
    job = catalog.get_by_id(job_id)
    if job is None:
        raise NotFound("Job not found")
    return ApiResponse(data=job_response(job))


@router.post("", response_model=ApiResponse[JobResponse], status_code=status.HTTP_201_CREATED)
def create_job(
    data: JobCreate,
    actor: Actor = Depends(require_employer),
    catalog: JobCatalog = Depends(get_catalog),
):
    """Post a new job."""
    job = catalog.create(actor.id, data.model_dump())
    return ApiResponse(data=job_response(job), message="Job created successfully")


@router.put("/{job_id}", response_model=ApiResponse[JobResponse])
def update_job(
    job_id: str,
    data: JobUpdate,
    actor: Actor = Depends(require_employer),
    catalog: JobCatalog = Depends(get_catalog),
):
    """Update one of the current employer's jobs."""
    job = catalog.update(job_id, actor.id, data.model_dump(exclude_unset=True))
    return ApiResponse(data=job_response(job), message="Job updated successfully")


@router.delete("/{job_id}", response_model=ApiResponse[None])
def delete_job(
    job_id: str,
    actor: Actor = Depends(require_employer),
    catalog: JobCatalog = Depends(get_catalog),
):
    """Delete one of the current employer's jobs."""
    catalog.delete(job_id, actor.id)
    return ApiResponse(message="Job deleted successfully")
