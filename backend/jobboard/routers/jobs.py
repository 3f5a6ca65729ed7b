from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from jobboard.config import settings
from jobboard.database import get_db
from jobboard.dependencies import require_principal, throttle_listing
from jobboard.schemas.job import (
    JobCreate,
    JobListResponse,
    JobResponse,
    JobStatsResponse,
    JobUpdate,
    Pagination,
    SaveToggleResponse,
)
from jobboard.services.filters import ALL, FilterSpec, total_pages
from jobboard.services.job_service import job_service, job_to_response
from jobboard.utils.security import Principal

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=JobListResponse)
async def list_jobs(
    q: str = "",
    location: str = ALL,
    type_: str = Query(ALL, alias="type"),
    experience: str = ALL,
    industry: str = ALL,
    salary: str = ALL,
    remote_mode: str = ALL,
    vacancies: str = ALL,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    principal: Principal = Depends(throttle_listing),
    db: Session = Depends(get_db),
):
    spec = FilterSpec(
        search_text=q,
        location=location,
        type=type_,
        experience=experience,
        industry=industry,
        salary_bucket=salary,
        remote_mode=remote_mode,
        vacancy_bucket=vacancies,
        page=page,
        page_size=page_size,
    )
    jobs, total = job_service.list_jobs(db, principal, spec)
    return JobListResponse(
        jobs=[job_to_response(j, db) for j in jobs],
        pagination=Pagination(
            page=spec.page,
            page_size=spec.page_size,
            total=total,
            total_pages=total_pages(total, spec.page_size),
        ),
    )


@router.get("/mine", response_model=list[JobResponse])
async def my_jobs(principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    return [job_to_response(j, db) for j in job_service.list_my_jobs(db, principal)]


@router.get("/saved", response_model=list[JobResponse])
async def saved_jobs(principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    return [job_to_response(j, db) for j in job_service.list_saved(db, principal)]


@router.get("/stats", response_model=JobStatsResponse)
async def job_stats(principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    return job_service.job_stats(db, principal)


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    req: JobCreate,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    job = job_service.create_job(db, principal, req)
    return job_to_response(job, db)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    return job_to_response(job_service.get_job(db, principal, job_id), db)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    req: JobUpdate,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
):
    job = job_service.update_job(db, principal, job_id, req)
    return job_to_response(job, db)


@router.delete("/{job_id}")
async def delete_job(job_id: str, principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    job_service.delete_job(db, principal, job_id)
    return {"message": "Job deleted"}


@router.put("/{job_id}/save", response_model=SaveToggleResponse)
async def save_job(job_id: str, principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    return SaveToggleResponse(job_id=job_id, saved=job_service.save_job(db, principal, job_id))


@router.delete("/{job_id}/save", response_model=SaveToggleResponse)
async def unsave_job(job_id: str, principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    return SaveToggleResponse(job_id=job_id, saved=job_service.unsave_job(db, principal, job_id))
