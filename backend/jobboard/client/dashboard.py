from __future__ import annotations

import logging
from typing import Any

from jobboard.client.api import JobBoardClient
from jobboard.client.cache import CacheReconciler
from jobboard.errors import NotFound
from jobboard.schemas.dashboard import StatusCounts
from jobboard.services.dashboard_service import count_statuses, search_candidate_rows, sort_by_status

logger = logging.getLogger(__name__)


class CandidateDashboard:
    """My applications, each row joined with a snapshot of its job."""

    def __init__(self, api: JobBoardClient, reconciler: CacheReconciler | None = None) -> None:
        self.api = api
        self.reconciler = reconciler
        self.rows: list[dict[str, Any]] = []

    async def load(self) -> list[dict[str, Any]]:
        self.rows = await self.api.my_applications()
        if self.reconciler is not None:
            self.reconciler.replace_applied(r["job_id"] for r in self.rows)
        return self.rows

    @property
    def counts(self) -> StatusCounts:
        return count_statuses(self.rows)

    def view(self, query: str = "", status: str | None = None, group_by_status: bool = False) -> list[dict[str, Any]]:
        rows = search_candidate_rows(self.rows, query, status)
        return sort_by_status(rows) if group_by_status else rows

    async def withdraw(self, application_id: str) -> None:
        row = next((r for r in self.rows if r["id"] == application_id), None)
        if row is None:
            raise NotFound("Application not found")
        await self.api.delete_application(application_id)
        self.rows = [r for r in self.rows if r["id"] != application_id]
        if self.reconciler is not None:
            self.reconciler.forget_applied(row["job_id"])


class PosterDashboard:
    """
    "Received applications" for the jobs the current user posted.

    At most one job is expanded at a time; ``stats`` always describes the
    expanded job and is computed from its current application rows.
    """

    def __init__(self, api: JobBoardClient) -> None:
        self.api = api
        self.jobs: list[dict[str, Any]] = []
        self.expanded_job_id: str | None = None
        self._requested_job_id: str | None = None
        self.applications: list[dict[str, Any]] = []

    async def load(self) -> list[dict[str, Any]]:
        self.jobs = await self.api.my_jobs()
        if self.expanded_job_id and not self._job(self.expanded_job_id):
            self.collapse()
        return self.jobs

    def _job(self, job_id: str) -> dict[str, Any] | None:
        return next((j for j in self.jobs if j["id"] == job_id), None)

    async def expand(self, job_id: str) -> list[dict[str, Any]]:
        if self._job(job_id) is None:
            raise NotFound("Job not found among your posts")
        self.collapse()
        self._requested_job_id = job_id
        applications = await self.api.job_applications(job_id)
        if self._requested_job_id != job_id:
            logger.debug("discarding applications for %s, another job was expanded", job_id)
            return applications
        self.expanded_job_id = job_id
        self.applications = applications
        return applications

    def collapse(self) -> None:
        self.expanded_job_id = None
        self._requested_job_id = None
        self.applications = []

    async def toggle(self, job_id: str) -> None:
        if self.expanded_job_id == job_id:
            self.collapse()
        else:
            await self.expand(job_id)

    @property
    def stats(self) -> StatusCounts | None:
        if self.expanded_job_id is None:
            return None
        return count_statuses(self.applications)

    async def review(self, application_id: str, status: str, notes: str | None = None) -> dict[str, Any]:
        updated = await self.api.review_application(application_id, status, notes)
        self.applications = [updated if a["id"] == application_id else a for a in self.applications]
        return updated

    async def delete_application(self, application_id: str) -> None:
        await self.api.delete_application(application_id)
        self.applications = [a for a in self.applications if a["id"] != application_id]
        job = self._job(self.expanded_job_id) if self.expanded_job_id else None
        if job is not None:
            job["applications_count"] = len(self.applications)
        logger.info("application %s removed from job %s", application_id, self.expanded_job_id)
