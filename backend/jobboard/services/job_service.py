import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import and_, func, not_, or_
from sqlalchemy.orm import Session

from jobboard.errors import NotFound, ValidationError
from jobboard.models.application import Application
from jobboard.models.job import Job, JobTag
from jobboard.models.saved_job import SavedJob
from jobboard.schemas.job import (
    CountBucket,
    JobCreate,
    JobResponse,
    JobStatsResponse,
    JobUpdate,
    Poster,
    Salary,
)
from jobboard.services.filters import (
    EXPERIENCE_LEVELS,
    INDUSTRIES,
    JOB_TYPES,
    SALARY_BUCKETS,
    VACANCY_BUCKETS,
    FilterSpec,
    is_active,
)
from jobboard.utils.security import Capability, Principal, authorize

logger = logging.getLogger(__name__)

JOB_STATUSES = ("active", "pending", "closed", "draft")
LISTED_STATUSES = ("active", "pending")
_REQUIRED_FIELDS = {
    "company", "position", "location", "type", "experience", "industry",
    "remote", "requirements", "benefits", "description", "status",
}


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _ilike(column, term: str):
    return column.ilike(_like(term), escape="\\")


def _between(column, bounds: tuple[int, int | None]):
    low, high = bounds
    clause = and_(column.isnot(None), column >= low)
    if high is not None:
        clause = and_(clause, column <= high)
    return clause


def filter_clauses(spec: FilterSpec) -> list:
    """SQL rendition of ``filters.matches_job`` for the same FilterSpec."""
    clauses = []
    if spec.query_text:
        text = spec.query_text
        clauses.append(or_(
            _ilike(Job.position, text),
            _ilike(Job.company, text),
            _ilike(Job.description, text),
            _ilike(Job.location, text),
            Job.tags.any(_ilike(JobTag.name, text)),
        ))
    if is_active(spec.location):
        location = spec.location.lower()
        if location == "remote":
            clauses.append(Job.remote.is_(True))
        else:
            clauses.append(_ilike(Job.location, location))
    if is_active(spec.type):
        clauses.append(Job.type == spec.type)
    if is_active(spec.experience):
        clauses.append(Job.experience == spec.experience)
    if is_active(spec.industry):
        clauses.append(Job.industry == spec.industry)
    if is_active(spec.remote_mode):
        hybrid = _ilike(Job.location, "hybrid")
        if spec.remote_mode == "remote":
            clauses.append(Job.remote.is_(True))
        elif spec.remote_mode == "hybrid":
            clauses.append(hybrid)
        else:
            clauses.append(and_(Job.remote.is_(False), not_(hybrid)))
    if is_active(spec.salary_bucket):
        clauses.append(_between(Job.salary_min, SALARY_BUCKETS[spec.salary_bucket]))
    if is_active(spec.vacancy_bucket):
        clauses.append(_between(Job.vacancies, VACANCY_BUCKETS[spec.vacancy_bucket]))
    return clauses


def _validate_facets(data: dict) -> None:
    errors: dict[str, str] = {}
    if data.get("type") is not None and data["type"] not in JOB_TYPES:
        errors["type"] = f"must be one of {JOB_TYPES}"
    if data.get("experience") is not None and data["experience"] not in EXPERIENCE_LEVELS:
        errors["experience"] = f"must be one of {EXPERIENCE_LEVELS}"
    if data.get("industry") is not None and data["industry"] not in INDUSTRIES:
        errors["industry"] = f"must be one of {INDUSTRIES}"
    if data.get("status") is not None and data["status"] not in JOB_STATUSES:
        errors["status"] = f"must be one of {JOB_STATUSES}"
    if errors:
        raise ValidationError("Invalid job post", errors)


def _set_tags(job: Job, tags: list[str]) -> None:
    names = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in names:
            names.append(tag)
    # Reuse rows for kept names; the (job_id, name) key would clash otherwise.
    current = {t.name: t for t in job.tags}
    job.tags = [current.get(name) or JobTag(name=name) for name in names]


def _apply_salary(job: Job, salary: Salary | None) -> None:
    job.salary_min = salary.min if salary else None
    job.salary_max = salary.max if salary else None
    job.salary_currency = salary.currency if salary else None


def job_to_response(job: Job, db: Session) -> JobResponse:
    applications_count = (
        db.query(func.count(Application.id)).filter(Application.job_id == job.id).scalar()
    )
    salary = None
    if job.salary_min is not None and job.salary_max is not None:
        salary = Salary(min=job.salary_min, max=job.salary_max, currency=job.salary_currency or "USD")

    return JobResponse(
        id=job.id,
        tenant_id=job.tenant_id,
        company=job.company,
        position=job.position,
        location=job.location,
        type=job.type,
        experience=job.experience,
        industry=job.industry,
        remote=bool(job.remote),
        salary=salary,
        vacancies=job.vacancies,
        requirements=list(job.requirements or []),
        benefits=list(job.benefits or []),
        tags=job.tag_names,
        description=job.description,
        deadline=job.deadline,
        application_url=job.application_url,
        status=job.status,
        posted_by=Poster(id=job.posted_by, name=job.posted_by_name),
        created_at=job.created_at,
        updated_at=job.updated_at,
        applications_count=applications_count,
    )


class JobCatalogService:
    def scoped_query(self, db: Session, principal: Principal):
        query = db.query(Job)
        if not principal.is_platform_wide:
            query = query.filter(Job.tenant_id == principal.tenant_id)
        return query

    def get_job(self, db: Session, principal: Principal, job_id: str) -> Job:
        job = self.scoped_query(db, principal).filter(Job.id == job_id).first()
        if not job:
            raise NotFound("Job not found")
        return job

    def list_jobs(self, db: Session, principal: Principal, spec: FilterSpec) -> tuple[list[Job], int]:
        query = self.scoped_query(db, principal).filter(Job.status.in_(LISTED_STATUSES))
        for clause in filter_clauses(spec):
            query = query.filter(clause)

        total = query.count()
        jobs = (
            query.order_by(Job.created_at.desc(), Job.id)
            .offset(spec.offset)
            .limit(spec.page_size)
            .all()
        )
        return jobs, total

    def list_my_jobs(self, db: Session, principal: Principal) -> list[Job]:
        return (
            self.scoped_query(db, principal)
            .filter(Job.posted_by == principal.user_id)
            .order_by(Job.created_at.desc(), Job.id)
            .all()
        )

    def create_job(self, db: Session, principal: Principal, req: JobCreate) -> Job:
        authorize(principal, Capability.CREATE_JOBS, None, "create jobs")
        data = req.model_dump()
        _validate_facets(data)

        now = _now()
        job = Job(
            id=str(uuid.uuid4()),
            tenant_id=principal.tenant_id,
            posted_by=principal.user_id,
            posted_by_name=principal.display_name,
            company=req.company.strip(),
            position=req.position.strip(),
            location=req.location.strip(),
            type=req.type,
            experience=req.experience,
            industry=req.industry,
            remote=req.remote,
            vacancies=req.vacancies,
            requirements=req.requirements,
            benefits=req.benefits,
            description=req.description.strip(),
            deadline=req.deadline,
            application_url=req.application_url,
            status="pending",
            created_at=now,
            updated_at=now,
        )
        _apply_salary(job, req.salary)
        _set_tags(job, req.tags)
        db.add(job)
        db.commit()
        db.refresh(job)
        logger.info("job created id=%s by=%s tenant=%s", job.id, principal.user_id, job.tenant_id)
        return job

    def update_job(self, db: Session, principal: Principal, job_id: str, req: JobUpdate) -> Job:
        job = self.get_job(db, principal, job_id)
        authorize(principal, Capability.EDIT_ALL_JOBS, job.posted_by, "update this job post")

        update_data = req.model_dump(exclude_unset=True)
        _validate_facets(update_data)
        if "salary" in update_data:
            _apply_salary(job, req.salary)
            update_data.pop("salary")
        if "tags" in update_data:
            _set_tags(job, update_data.pop("tags") or [])
        for key, value in update_data.items():
            if value is None and key in _REQUIRED_FIELDS:
                continue
            setattr(job, key, value)
        job.updated_at = _now()

        db.commit()
        db.refresh(job)
        return job

    def delete_job(self, db: Session, principal: Principal, job_id: str) -> None:
        job = self.get_job(db, principal, job_id)
        authorize(principal, Capability.DELETE_ALL_JOBS, job.posted_by, "delete this job post")
        db.query(SavedJob).filter(SavedJob.job_id == job_id).delete()
        db.delete(job)
        db.commit()
        logger.info("job deleted id=%s by=%s", job_id, principal.user_id)

    def save_job(self, db: Session, principal: Principal, job_id: str) -> bool:
        self.get_job(db, principal, job_id)
        existing = db.query(SavedJob).filter_by(user_id=principal.user_id, job_id=job_id).first()
        if not existing:
            db.add(SavedJob(user_id=principal.user_id, job_id=job_id, saved_at=_now()))
            db.commit()
        return True

    def unsave_job(self, db: Session, principal: Principal, job_id: str) -> bool:
        self.get_job(db, principal, job_id)
        db.query(SavedJob).filter_by(user_id=principal.user_id, job_id=job_id).delete()
        db.commit()
        return False

    def list_saved(self, db: Session, principal: Principal) -> list[Job]:
        return (
            self.scoped_query(db, principal)
            .join(SavedJob, SavedJob.job_id == Job.id)
            .filter(SavedJob.user_id == principal.user_id)
            .order_by(SavedJob.saved_at.desc(), Job.id)
            .all()
        )

    def job_stats(self, db: Session, principal: Principal) -> JobStatsResponse:
        base = self.scoped_query(db, principal)
        by_status = dict(
            base.with_entities(Job.status, func.count(Job.id)).group_by(Job.status).all()
        )

        def _top(column) -> list[CountBucket]:
            rows = (
                base.with_entities(column, func.count(Job.id).label("n"))
                .group_by(column)
                .order_by(func.count(Job.id).desc(), column)
                .limit(10)
                .all()
            )
            return [CountBucket(name=name, count=n) for name, n in rows]

        by_type = dict(base.with_entities(Job.type, func.count(Job.id)).group_by(Job.type).all())
        return JobStatsResponse(
            total_jobs=sum(by_status.values()),
            active_jobs=by_status.get("active", 0),
            pending_jobs=by_status.get("pending", 0),
            top_companies=_top(Job.company),
            top_locations=_top(Job.location),
            by_type=by_type,
        )


job_service = JobCatalogService()
