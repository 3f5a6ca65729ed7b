"""Job board browsing state: the current FilterSpec, the last good page, and save toggles."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from jobboard.client.api import JobBoardClient, JobListResult
from jobboard.client.cache import CacheReconciler
from jobboard.client.governor import RequestGovernor
from jobboard.client.scheduler import Debouncer
from jobboard.errors import DuplicateApplication, JobBoardError, NetworkError, RateLimited, ValidationError
from jobboard.services.filters import FilterSpec, filter_jobs

logger = logging.getLogger(__name__)


class JobBrowser:
    def __init__(
        self,
        api: JobBoardClient,
        governor: RequestGovernor | None = None,
        reconciler: CacheReconciler | None = None,
        debouncer: Debouncer | None = None,
        page_size: int = 12,
    ) -> None:
        self.api = api
        self.governor = governor or RequestGovernor()
        self.reconciler = reconciler
        self.debouncer = debouncer or Debouncer()
        self.spec = FilterSpec(page_size=page_size)
        self.result = JobListResult()
        self.result_spec: FilterSpec | None = None
        self.error: JobBoardError | None = None

    @property
    def page(self) -> int:
        return self.spec.page

    @property
    def total_pages(self) -> int:
        return self.result.total_pages

    @property
    def visible_jobs(self) -> list[dict[str, Any]]:
        """The fetched page re-filtered against the current spec, for use before the server answers."""
        return filter_jobs(self.result.jobs, self.spec)

    async def set_filters(self, **changes) -> bool:
        self.spec = self.spec.with_filters(**changes)
        return await self.refresh()

    async def clear_filters(self) -> bool:
        self.spec = FilterSpec(page_size=self.spec.page_size)
        return await self.refresh()

    def set_search_text(self, text: str) -> asyncio.TimerHandle:
        self.spec = self.spec.with_filters(search_text=text)
        return self.debouncer.schedule(self.refresh)

    async def go_to_page(self, page: int) -> bool:
        if page < 1 or (self.total_pages and page > self.total_pages):
            raise ValidationError(f"Page {page} is out of range")
        self.spec = self.spec.with_page(page)
        return await self.refresh()

    async def refresh(self) -> bool:
        """
        Fetch the page for the current spec.

        A response for a spec that is no longer current is discarded and the
        current spec is fetched instead. Network and rate-limit failures keep
        the last good page and are exposed through ``error``.
        """
        while True:
            spec = self.spec
            try:
                result = await self.governor.run(lambda: self.api.list_jobs(spec))
            except (RateLimited, NetworkError) as exc:
                self.error = exc
                logger.warning("job list refresh failed, keeping last page: %s", exc)
                return False
            if result is None:
                # The outstanding request re-checks the spec when it lands.
                return False
            if spec != self.spec:
                logger.debug("discarding stale job list response for page=%s", spec.page)
                continue
            self.result = result
            self.result_spec = spec
            self.error = None
            return True

    async def retry(self) -> bool:
        if not self.governor.retry():
            return False
        return await self.refresh()

    def is_saved(self, job_id: str) -> bool:
        return self.reconciler is not None and self.reconciler.is_saved(job_id)

    def has_applied(self, job_id: str) -> bool:
        return self.reconciler is not None and self.reconciler.has_applied(job_id)

    async def toggle_saved(self, job_id: str) -> bool:
        if self.reconciler is None:
            raise RuntimeError("JobBrowser has no CacheReconciler")
        return await self.reconciler.toggle_saved(job_id)

    async def apply(self, job_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Submit an application and mark the job as applied without waiting for re-hydration."""
        try:
            application = await self.api.submit_application(job_id, payload)
        except DuplicateApplication:
            # The server already holds one, so the local set was just behind.
            self._record_applied(job_id)
            raise
        self._record_applied(job_id)
        return application

    def _record_applied(self, job_id: str) -> None:
        if self.reconciler is not None:
            self.reconciler.record_applied(job_id)
