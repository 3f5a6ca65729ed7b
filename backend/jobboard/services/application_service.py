"""
Application lifecycle: submission, review and withdrawal.

States are Applied, Shortlisted, Rejected and Hired. Submission always lands
in Applied. Under the default "permissive" policy an authorized reviewer may
move an application to any state; the "strict" policy only refuses Hired
unless the application is currently Shortlisted.
"""
import logging
import re
import uuid
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.config import settings
from jobboard.errors import (
    DuplicateApplication,
    Forbidden,
    InvalidTransition,
    NotFound,
    UploadError,
    ValidationError,
)
from jobboard.models.application import Application
from jobboard.models.job import Job
from jobboard.schemas.application import (
    ApplicationCreate,
    ApplicationResponse,
    ContactDetails,
    JobSnapshot,
    ResumeUpload,
)
from jobboard.services.job_service import job_service
from jobboard.utils.security import Capability, Principal, authorize, is_permitted

logger = logging.getLogger(__name__)

APPLIED = "Applied"
SHORTLISTED = "Shortlisted"
REJECTED = "Rejected"
HIRED = "Hired"
APPLICATION_STATUSES = (APPLIED, SHORTLISTED, REJECTED, HIRED)

OPEN_JOB_STATUSES = ("active", "pending")
PERMISSIVE = "permissive"
STRICT = "strict"

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def validate_resume(resume: ResumeUpload | None) -> None:
    if resume is None:
        return
    if resume.size_bytes > settings.max_resume_bytes:
        raise UploadError(f"Résumé too large (max {settings.max_resume_bytes} bytes)")
    if resume.mime_type not in settings.allowed_resume_mime_types:
        raise UploadError("Résumé must be a PDF, DOC or DOCX file")


def validate_submission(req: ApplicationCreate) -> None:
    errors: dict[str, str] = {}
    if not [s for s in req.skills if s.strip()]:
        errors["skills"] = "At least one skill is required"
    if len(req.experience.strip()) < settings.min_experience_chars:
        errors["experience"] = f"Experience must be at least {settings.min_experience_chars} characters"
    contact = req.contact_details
    if len(contact.name.strip()) < 2:
        errors["contact_details.name"] = "Name must be at least 2 characters"
    if not EMAIL_RE.match(contact.email.strip()):
        errors["contact_details.email"] = "Enter a valid email address"
    if len(contact.phone.strip()) < 10:
        errors["contact_details.phone"] = "Phone must be at least 10 characters"
    if req.message is not None and len(req.message) > settings.max_message_chars:
        errors["message"] = f"Message cannot exceed {settings.max_message_chars} characters"
    if errors:
        raise ValidationError("Invalid application", errors)
    validate_resume(req.resume)


def check_transition(current: str, new_status: str, policy: str) -> None:
    if new_status not in APPLICATION_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(APPLICATION_STATUSES)}")
    if policy == STRICT and new_status == HIRED and current not in (SHORTLISTED, HIRED):
        raise InvalidTransition("Only shortlisted applications can be marked as hired")


def application_to_response(app: Application, include_job: bool = False) -> ApplicationResponse:
    job = None
    if include_job and app.job is not None:
        job = JobSnapshot(
            id=app.job.id,
            position=app.job.position,
            company=app.job.company,
            location=app.job.location,
            type=app.job.type,
            posted_by=app.job.posted_by,
            posted_by_name=app.job.posted_by_name,
        )
    return ApplicationResponse(
        id=app.id,
        job_id=app.job_id,
        applicant_id=app.applicant_id,
        contact_details=ContactDetails(
            name=app.contact_name,
            email=app.contact_email,
            phone=app.contact_phone,
        ),
        skills=list(app.skills or []),
        experience=app.experience,
        message=app.message,
        resume_ref=app.resume_ref,
        status=app.status,
        applied_at=app.applied_at,
        updated_at=app.updated_at,
        reviewed_by=app.reviewed_by,
        reviewed_at=app.reviewed_at,
        review_notes=app.review_notes,
        job=job,
    )


class ApplicationLifecycleManager:
    def __init__(self, policy: str | None = None):
        self._policy = policy

    @property
    def policy(self) -> str:
        return self._policy or settings.review_transition_policy

    def _get(self, db: Session, principal: Principal, application_id: str) -> Application:
        query = db.query(Application).filter(Application.id == application_id)
        if not principal.is_platform_wide:
            query = query.filter(Application.tenant_id == principal.tenant_id)
        app = query.first()
        if not app:
            raise NotFound("Application not found")
        return app

    def _can_review(self, principal: Principal, job: Job) -> bool:
        return is_permitted(principal, Capability.REVIEW_ALL_APPLICATIONS, job.posted_by)

    def submit_application(
        self, db: Session, principal: Principal, job_id: str, req: ApplicationCreate
    ) -> Application:
        job = job_service.get_job(db, principal, job_id)
        if job.status not in OPEN_JOB_STATUSES:
            raise ValidationError("Job post is not accepting applications")
        if job.posted_by == principal.user_id:
            raise ValidationError("You cannot apply to your own job post")

        existing = db.query(Application.id).filter_by(
            job_id=job_id, applicant_id=principal.user_id
        ).first()
        if existing:
            raise DuplicateApplication("You have already applied for this job")

        validate_submission(req)

        now = _now()
        contact = req.contact_details
        app = Application(
            id=str(uuid.uuid4()),
            job_id=job_id,
            applicant_id=principal.user_id,
            tenant_id=job.tenant_id,
            contact_name=contact.name.strip(),
            contact_email=contact.email.strip(),
            contact_phone=contact.phone.strip(),
            skills=[s.strip() for s in req.skills if s.strip()],
            experience=req.experience.strip(),
            message=req.message,
            resume_ref=req.resume.reference if req.resume else None,
            status=APPLIED,
            applied_at=now,
            updated_at=now,
        )
        db.add(app)
        try:
            db.commit()
        except IntegrityError as exc:
            # Lost a race against a concurrent submission for the same pair.
            db.rollback()
            raise DuplicateApplication("You have already applied for this job") from exc
        db.refresh(app)
        logger.info("application submitted id=%s job=%s applicant=%s", app.id, job_id, principal.user_id)
        return app

    def get_application(self, db: Session, principal: Principal, application_id: str) -> Application:
        app = self._get(db, principal, application_id)
        if app.applicant_id != principal.user_id and not self._can_review(principal, app.job):
            logger.warning("forbidden application view id=%s user=%s", application_id, principal.user_id)
            raise Forbidden("You can only view your own applications or applications for your job posts")
        return app

    def review_application(
        self,
        db: Session,
        principal: Principal,
        application_id: str,
        new_status: str,
        notes: str | None = None,
    ) -> Application:
        app = self._get(db, principal, application_id)
        authorize(
            principal,
            Capability.REVIEW_ALL_APPLICATIONS,
            app.job.posted_by,
            "review applications for this job post",
        )
        check_transition(app.status, new_status, self.policy)

        now = _now()
        if new_status == app.status:
            # Same status again: only refresh the review timestamp of an already reviewed application.
            if app.reviewed_by is not None:
                app.reviewed_at = now
                db.commit()
                db.refresh(app)
            return app

        previous = app.status
        app.status = new_status
        app.reviewed_by = principal.user_id
        app.reviewed_at = now
        app.review_notes = notes
        app.updated_at = now
        db.commit()
        db.refresh(app)
        logger.info(
            "application reviewed id=%s %s -> %s by=%s",
            app.id, previous, new_status, principal.user_id,
        )
        return app

    def delete_application(self, db: Session, principal: Principal, application_id: str) -> None:
        app = self._get(db, principal, application_id)
        if app.applicant_id != principal.user_id:
            authorize(
                principal,
                Capability.REVIEW_ALL_APPLICATIONS,
                app.job.posted_by,
                "delete this application",
            )
        db.delete(app)
        db.commit()
        logger.info("application deleted id=%s by=%s", application_id, principal.user_id)

    def list_applications_for_job(
        self,
        db: Session,
        principal: Principal,
        job_id: str,
        page: int = 1,
        page_size: int | None = None,
    ) -> tuple[list[Application], int]:
        """Newest first. Without ``page_size`` every row is returned on one page."""
        job = job_service.get_job(db, principal, job_id)
        authorize(
            principal,
            Capability.REVIEW_ALL_APPLICATIONS,
            job.posted_by,
            "view applications for this job post",
        )
        query = (
            db.query(Application)
            .filter(Application.job_id == job_id)
            .order_by(Application.applied_at.desc(), Application.id)
        )
        total = query.count()
        if page_size is not None:
            query = query.offset((page - 1) * page_size).limit(page_size)
        return query.all(), total

    def list_applications_for_candidate(
        self, db: Session, principal: Principal, limit: int | None = None
    ) -> list[Application]:
        query = (
            db.query(Application)
            .filter(Application.applicant_id == principal.user_id)
            .order_by(Application.applied_at.desc(), Application.id)
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()


application_service = ApplicationLifecycleManager()
