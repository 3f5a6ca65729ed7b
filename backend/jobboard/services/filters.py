"""
Job listing facets.

FilterSpec is the immutable input to a catalog query. The bucket tables and
``matches_job`` below are the single definition of facet semantics: the API
translates them into SQL clauses and the client re-applies ``matches_job`` to
an already-fetched page, so both passes agree.
"""
import math
from dataclasses import dataclass, replace
from typing import Any, Mapping

from jobboard.errors import ValidationError

ALL = "all"

JOB_TYPES = ("full-time", "part-time", "internship", "contract")
EXPERIENCE_LEVELS = ("entry", "mid", "senior", "lead")
INDUSTRIES = (
    "technology", "finance", "healthcare", "education", "consulting",
    "marketing", "sales", "operations", "other",
)
REMOTE_MODES = ("remote", "hybrid", "onsite")

# Inclusive (low, high) bounds; high=None is open-ended.
SALARY_BUCKETS: dict[str, tuple[int, int | None]] = {
    "0-50k": (0, 50_000),
    "50k-75k": (50_000, 75_000),
    "75k-100k": (75_000, 100_000),
    "100k-150k": (100_000, 150_000),
    "150k+": (150_000, None),
}

VACANCY_BUCKETS: dict[str, tuple[int, int | None]] = {
    "1": (1, 1),
    "2-5": (2, 5),
    "6-10": (6, 10),
    "10+": (10, None),
}


def is_active(value: str | None) -> bool:
    return bool(value) and value != ALL


@dataclass(frozen=True)
class FilterSpec:
    search_text: str = ""
    location: str = ALL
    type: str = ALL
    experience: str = ALL
    industry: str = ALL
    salary_bucket: str = ALL
    remote_mode: str = ALL
    vacancy_bucket: str = ALL
    page: int = 1
    page_size: int = 12

    def __post_init__(self):
        errors: dict[str, str] = {}
        if is_active(self.type) and self.type not in JOB_TYPES:
            errors["type"] = f"must be one of {JOB_TYPES}"
        if is_active(self.experience) and self.experience not in EXPERIENCE_LEVELS:
            errors["experience"] = f"must be one of {EXPERIENCE_LEVELS}"
        if is_active(self.industry) and self.industry not in INDUSTRIES:
            errors["industry"] = f"must be one of {INDUSTRIES}"
        if is_active(self.remote_mode) and self.remote_mode not in REMOTE_MODES:
            errors["remote_mode"] = f"must be one of {REMOTE_MODES}"
        if is_active(self.salary_bucket) and self.salary_bucket not in SALARY_BUCKETS:
            errors["salary_bucket"] = f"must be one of {tuple(SALARY_BUCKETS)}"
        if is_active(self.vacancy_bucket) and self.vacancy_bucket not in VACANCY_BUCKETS:
            errors["vacancy_bucket"] = f"must be one of {tuple(VACANCY_BUCKETS)}"
        if self.page < 1:
            errors["page"] = "must be >= 1"
        if self.page_size < 1:
            errors["page_size"] = "must be >= 1"
        if errors:
            raise ValidationError("Invalid job filters", errors)

    @property
    def query_text(self) -> str:
        return self.search_text.strip()

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def with_filters(self, **changes) -> "FilterSpec":
        """Copy with facet or search changes; always lands back on page 1."""
        if "page" in changes:
            raise ValueError("use with_page() to move between pages")
        return replace(self, page=1, **changes)

    def with_page(self, page: int) -> "FilterSpec":
        return replace(self, page=page)

    def to_params(self) -> dict[str, Any]:
        """Query-string form understood by ``GET /jobs``; inactive facets are omitted."""
        params: dict[str, Any] = {"page": self.page, "page_size": self.page_size}
        if self.query_text:
            params["q"] = self.query_text
        for name, key in _PARAM_NAMES.items():
            value = getattr(self, name)
            if is_active(value):
                params[key] = value
        return params


_PARAM_NAMES = {
    "location": "location",
    "type": "type",
    "experience": "experience",
    "industry": "industry",
    "salary_bucket": "salary",
    "remote_mode": "remote_mode",
    "vacancy_bucket": "vacancies",
}


def in_bounds(value: int | float | None, bounds: tuple[int, int | None]) -> bool:
    if value is None:
        return False
    low, high = bounds
    return value >= low and (high is None or value <= high)


def _contains(haystack: str | None, needle: str) -> bool:
    return needle in (haystack or "").lower()


def matches_text(job: Mapping[str, Any], text: str) -> bool:
    needle = text.lower()
    fields = (job.get("position"), job.get("company"), job.get("description"), job.get("location"))
    if any(_contains(f, needle) for f in fields):
        return True
    return any(_contains(tag, needle) for tag in job.get("tags") or [])


def matches_location(job: Mapping[str, Any], location: str) -> bool:
    value = location.lower()
    if value == "remote":
        return bool(job.get("remote"))
    if value == "hybrid":
        return _contains(job.get("location"), "hybrid")
    return _contains(job.get("location"), value)


def matches_remote_mode(job: Mapping[str, Any], mode: str) -> bool:
    hybrid = _contains(job.get("location"), "hybrid")
    if mode == "remote":
        return bool(job.get("remote"))
    if mode == "hybrid":
        return hybrid
    return not job.get("remote") and not hybrid


def matches_job(job: Mapping[str, Any], spec: FilterSpec) -> bool:
    """AND across every active facet of ``spec``; ``job`` is the API's JSON shape."""
    if spec.query_text and not matches_text(job, spec.query_text):
        return False
    if is_active(spec.location) and not matches_location(job, spec.location):
        return False
    for facet in ("type", "experience", "industry"):
        value = getattr(spec, facet)
        if is_active(value) and job.get(facet) != value:
            return False
    if is_active(spec.remote_mode) and not matches_remote_mode(job, spec.remote_mode):
        return False
    if is_active(spec.salary_bucket):
        salary = job.get("salary") or {}
        if not in_bounds(salary.get("min"), SALARY_BUCKETS[spec.salary_bucket]):
            return False
    if is_active(spec.vacancy_bucket):
        if not in_bounds(job.get("vacancies"), VACANCY_BUCKETS[spec.vacancy_bucket]):
            return False
    return True


def filter_jobs(jobs: list[Mapping[str, Any]], spec: FilterSpec) -> list[Mapping[str, Any]]:
    return [job for job in jobs if matches_job(job, spec)]


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size > 0 else 0
