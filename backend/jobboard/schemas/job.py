from pydantic import BaseModel, Field, model_validator


class Salary(BaseModel):
    min: int = Field(ge=0)
    max: int = Field(ge=0)
    currency: str = "USD"

    @model_validator(mode="after")
    def _check_range(self):
        if self.max < self.min:
            raise ValueError("salary.max must be >= salary.min")
        return self


class Poster(BaseModel):
    id: str
    name: str | None = None


class JobCreate(BaseModel):
    company: str = Field(min_length=1, max_length=100)
    position: str = Field(min_length=1, max_length=100)
    location: str = Field(min_length=1, max_length=100)
    type: str
    experience: str = "mid"
    industry: str = "technology"
    remote: bool = False
    salary: Salary | None = None
    vacancies: int | None = Field(default=None, ge=1)
    requirements: list[str] = []
    benefits: list[str] = []
    tags: list[str] = []
    description: str = Field(min_length=1, max_length=2000)
    deadline: str | None = None
    application_url: str | None = None


class JobUpdate(BaseModel):
    company: str | None = None
    position: str | None = None
    location: str | None = None
    type: str | None = None
    experience: str | None = None
    industry: str | None = None
    remote: bool | None = None
    salary: Salary | None = None
    vacancies: int | None = Field(default=None, ge=1)
    requirements: list[str] | None = None
    benefits: list[str] | None = None
    tags: list[str] | None = None
    description: str | None = None
    deadline: str | None = None
    application_url: str | None = None
    status: str | None = None


class JobResponse(BaseModel):
    id: str
    tenant_id: str
    company: str
    position: str
    location: str
    type: str
    experience: str
    industry: str
    remote: bool
    salary: Salary | None
    vacancies: int | None
    requirements: list[str]
    benefits: list[str]
    tags: list[str]
    description: str
    deadline: str | None
    application_url: str | None
    status: str
    posted_by: Poster
    created_at: str
    updated_at: str
    applications_count: int = 0


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class JobListResponse(BaseModel):
    jobs: list[JobResponse]
    pagination: Pagination


class SaveToggleResponse(BaseModel):
    job_id: str
    saved: bool


class CountBucket(BaseModel):
    name: str
    count: int


class JobStatsResponse(BaseModel):
    total_jobs: int
    active_jobs: int
    pending_jobs: int
    top_companies: list[CountBucket]
    top_locations: list[CountBucket]
    by_type: dict[str, int]
