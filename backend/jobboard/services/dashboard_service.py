"""
Read-only dashboard projections.

The status counting and row filtering helpers work on plain application
mappings (the API's JSON shape) so the client-side dashboard state can reuse
them on whatever it last fetched.
"""
from typing import Any, Iterable, Mapping

from sqlalchemy.orm import Session

from jobboard.schemas.dashboard import (
    CandidateDashboardResponse,
    DashboardViewResponse,
    PosterDashboardResponse,
    PosterJobSummary,
    StatusCounts,
)
from jobboard.services.application_service import (
    APPLICATION_STATUSES,
    application_service,
    application_to_response,
)
from jobboard.services.job_service import job_service
from jobboard.utils.security import Principal, Role


def count_statuses(applications: Iterable[Mapping[str, Any]]) -> StatusCounts:
    """Single pass over an application list."""
    counts = {status: 0 for status in APPLICATION_STATUSES}
    total = 0
    for app in applications:
        total += 1
        status = app.get("status")
        if status in counts:
            counts[status] += 1
    return StatusCounts(
        applied=counts["Applied"],
        shortlisted=counts["Shortlisted"],
        rejected=counts["Rejected"],
        hired=counts["Hired"],
        total=total,
    )


def merge_counts(parts: Iterable[StatusCounts]) -> StatusCounts:
    merged = StatusCounts()
    for part in parts:
        merged.applied += part.applied
        merged.shortlisted += part.shortlisted
        merged.rejected += part.rejected
        merged.hired += part.hired
        merged.total += part.total
    return merged


def search_candidate_rows(
    rows: Iterable[Mapping[str, Any]],
    query: str = "",
    status: str | None = None,
) -> list[Mapping[str, Any]]:
    """Substring search over the joined job's position/company plus exact status match."""
    needle = query.strip().lower()
    result = []
    for row in rows:
        if status and status != "all" and row.get("status") != status:
            continue
        if needle:
            job = row.get("job") or {}
            fields = (job.get("position"), job.get("company"))
            if not any(needle in (f or "").lower() for f in fields):
                continue
        result.append(row)
    return result


def sort_by_status(rows: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    order = {status: i for i, status in enumerate(APPLICATION_STATUSES)}
    return sorted(rows, key=lambda r: order.get(r.get("status"), len(order)))


def candidate_dashboard(db: Session, principal: Principal) -> CandidateDashboardResponse:
    apps = application_service.list_applications_for_candidate(db, principal)
    responses = [application_to_response(a, include_job=True) for a in apps]
    return CandidateDashboardResponse(
        applications=responses,
        counts=count_statuses(r.model_dump() for r in responses),
    )


def poster_dashboard(db: Session, principal: Principal) -> PosterDashboardResponse:
    summaries = []
    for job in job_service.list_my_jobs(db, principal):
        counts = count_statuses({"status": a.status} for a in job.applications)
        summaries.append(PosterJobSummary(
            id=job.id,
            position=job.position,
            company=job.company,
            location=job.location,
            status=job.status,
            applications_count=counts.total,
            counts=counts,
        ))
    return PosterDashboardResponse(
        jobs=summaries,
        counts=merge_counts(s.counts for s in summaries),
    )


class DashboardView:
    role: Role = Role.UNKNOWN
    title = "Dashboard"
    panels: tuple[str, ...] = ()

    def describe(self) -> DashboardViewResponse:
        return DashboardViewResponse(role=self.role.value, title=self.title, panels=list(self.panels))


class SuperAdminDashboard(DashboardView):
    role = Role.SUPER_ADMIN
    title = "Platform administration"
    panels = ("tenants", "job_moderation", "job_stats", "received_applications")


class CollegeAdminDashboard(DashboardView):
    role = Role.COLLEGE_ADMIN
    title = "College administration"
    panels = ("job_moderation", "job_stats", "received_applications")


class HodDashboard(DashboardView):
    role = Role.HOD
    title = "Department"
    panels = ("job_stats", "received_applications")


class StaffDashboard(DashboardView):
    role = Role.STAFF
    title = "Staff"
    panels = ("received_applications", "saved_jobs")


class AlumniDashboard(DashboardView):
    role = Role.ALUMNI
    title = "Alumni portal"
    panels = ("my_applications", "saved_jobs", "received_applications")


class UnknownRoleDashboard(DashboardView):
    role = Role.UNKNOWN
    title = "Limited access"
    panels = ("job_board",)


_VIEWS: dict[Role, DashboardView] = {
    view.role: view
    for view in (
        SuperAdminDashboard(),
        CollegeAdminDashboard(),
        HodDashboard(),
        StaffDashboard(),
        AlumniDashboard(),
        UnknownRoleDashboard(),
    )
}


def dashboard_for(role: Role) -> DashboardView:
    return _VIEWS[role]
