from pydantic import BaseModel


class ContactDetails(BaseModel):
    name: str
    email: str
    phone: str


class ResumeUpload(BaseModel):
    """Metadata of a résumé already accepted by the file collaborator."""
    reference: str
    filename: str | None = None
    size_bytes: int
    mime_type: str


class ApplicationCreate(BaseModel):
    skills: list[str]
    experience: str
    contact_details: ContactDetails
    message: str | None = None
    resume: ResumeUpload | None = None


class ReviewRequest(BaseModel):
    status: str
    review_notes: str | None = None


class JobSnapshot(BaseModel):
    id: str
    position: str
    company: str
    location: str
    type: str
    posted_by: str
    posted_by_name: str | None = None


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    applicant_id: str
    contact_details: ContactDetails
    skills: list[str]
    experience: str
    message: str | None
    resume_ref: str | None
    status: str
    applied_at: str
    updated_at: str
    reviewed_by: str | None
    reviewed_at: str | None
    review_notes: str | None
    job: JobSnapshot | None = None


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]
    total: int
    page: int = 1
    page_size: int | None = None
    total_pages: int = 0
