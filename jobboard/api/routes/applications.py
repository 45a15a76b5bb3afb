"""Application endpoints."""

from fastapi import APIRouter, Depends, status

from jobboard.api.deps import get_current_actor, get_workflow, require_candidate, require_employer
from jobboard.api.limiter import rate_limit
from jobboard.api.routes.jobs import job_response
from jobboard.api.schemas import (
    ApiResponse,
    ApplicationCreate,
    ApplicationResponse,
    CandidateProfile,
    StatusUpdate,
)
from jobboard.db.tables import Application
from jobboard.services.applications import ApplicationWorkflow
from jobboard.services.policy import Actor
from jobboard.services.scoring import ScoreResult

router = APIRouter()


def application_response(
    application: Application,
    *,
    with_job: bool = True,
    with_candidate: bool = True,
) -> ApplicationResponse:
    return ApplicationResponse(
        id=application.id,
        job_id=application.job_id,
        candidate_id=application.candidate_id,
        resume=application.resume_text,
        cover_letter=application.cover_letter,
        status=application.status,
        score=application.score,
        score_detail=ScoreResult.model_validate(application.score_detail) if application.score_detail else None,
        created_at=application.created_at,
        updated_at=application.updated_at,
        job=job_response(application.job) if with_job and application.job else None,
        candidate=(
            CandidateProfile.model_validate(application.candidate)
            if with_candidate and application.candidate
            else None
        ),
    )


@router.post(
    "",
    response_model=ApiResponse[ApplicationResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("apply_rate_limit"))],
)
def create_application(
    data: ApplicationCreate,
    actor: Actor = Depends(require_candidate),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    """Apply for a job. Scoring happens in the background."""
    application = workflow.submit(actor.id, data.job_id, data.resume, data.cover_letter)
    return ApiResponse(data=application_response(application), message="Application submitted successfully")


@router.get("/my-applications", response_model=ApiResponse[list[ApplicationResponse]])
def list_my_applications(
    actor: Actor = Depends(require_candidate),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    """The current candidate's applications, newest first."""
    applications = workflow.list_for_candidate(actor.id)
    return ApiResponse(data=[application_response(a, with_candidate=False) for a in applications])


@router.get("/job/{job_id}", response_model=ApiResponse[list[ApplicationResponse]])
def list_job_applications(
    job_id: str,
    actor: Actor = Depends(require_employer),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    """Applications to one of the employer's jobs, best score first."""
    applications = workflow.list_for_job(job_id, actor.id)
    return ApiResponse(data=[application_response(a, with_job=False) for a in applications])


@router.put("/{application_id}/status", response_model=ApiResponse[ApplicationResponse])
def update_application_status(
    application_id: str,
    data: StatusUpdate,
    actor: Actor = Depends(require_employer),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    """Set the review status of an application."""
    application = workflow.set_status(application_id, actor.id, data.status)
    return ApiResponse(data=application_response(application), message="Application status updated successfully")


@router.get("/{application_id}", response_model=ApiResponse[ApplicationResponse])
def get_application(
    application_id: str,
    actor: Actor = Depends(get_current_actor),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    """Get one application: candidates see their own, employers those on their jobs."""
    application = workflow.get(application_id, actor)
    return ApiResponse(data=application_response(application))
