from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from jobboard.config import settings
from jobboard.database import get_db
from jobboard.dependencies import require_principal
from jobboard.schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ReviewRequest,
)
from jobboard.schemas.dashboard import StatusCounts
from jobboard.services.application_service import application_service, application_to_response
from jobboard.services.dashboard_service import count_statuses
from jobboard.services.filters import total_pages
from jobboard.utils.security import Principal

router = APIRouter(prefix="/applications", tags=["applications"])
job_applications_router = APIRouter(prefix="/jobs/{job_id}/applications", tags=["applications"])


@job_applications_router.post("", response_model=ApplicationResponse, status_code=201)
async def submit_application(
    job_id: str,
    req: ApplicationCreate,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    app = application_service.submit_application(db, principal, job_id, req)
    return application_to_response(app)


@job_applications_router.get("", response_model=ApplicationListResponse)
async def list_job_applications(
    job_id: str,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=settings.max_page_size),
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    apps, total = application_service.list_applications_for_job(
        db, principal, job_id, page=page, page_size=page_size
    )
    return ApplicationListResponse(
        applications=[application_to_response(a) for a in apps],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size or total),
    )


@job_applications_router.get("/stats", response_model=StatusCounts)
async def job_application_stats(
    job_id: str,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    apps, _ = application_service.list_applications_for_job(db, principal, job_id)
    return count_statuses({"status": a.status} for a in apps)


@router.get("/mine", response_model=ApplicationListResponse)
async def my_applications(
    limit: int = Query(settings.applied_hydration_limit, ge=1, le=settings.applied_hydration_limit),
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    apps = application_service.list_applications_for_candidate(db, principal, limit=limit)
    return ApplicationListResponse(
        applications=[application_to_response(a, include_job=True) for a in apps],
        total=len(apps),
        total_pages=total_pages(len(apps), len(apps)),
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: str,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    app = application_service.get_application(db, principal, application_id)
    return application_to_response(app, include_job=True)


@router.put("/{application_id}/status", response_model=ApplicationResponse)
async def review_application(
    application_id: str,
    req: ReviewRequest,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    app = application_service.review_application(
        db, principal, application_id, req.status, req.review_notes
    )
    return application_to_response(app)


@router.delete("/{application_id}")
async def delete_application(
    application_id: str,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    application_service.delete_application(db, principal, application_id)
    return {"message": "Application deleted"}
