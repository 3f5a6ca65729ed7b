from pydantic import BaseModel

from jobboard.schemas.application import ApplicationResponse


class StatusCounts(BaseModel):
    applied: int = 0
    shortlisted: int = 0
    rejected: int = 0
    hired: int = 0
    total: int = 0


class CandidateDashboardResponse(BaseModel):
    applications: list[ApplicationResponse]
    counts: StatusCounts


class PosterJobSummary(BaseModel):
    id: str
    position: str
    company: str
    location: str
    status: str
    applications_count: int
    counts: StatusCounts


class PosterDashboardResponse(BaseModel):
    jobs: list[PosterJobSummary]
    counts: StatusCounts


class DashboardViewResponse(BaseModel):
    role: str
    title: str
    panels: list[str]
