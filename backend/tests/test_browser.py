import asyncio

import pytest

from jobboard.client.api import JobListResult
from jobboard.client.cache import CacheReconciler, MemoryCache
from jobboard.client.catalog import JobBrowser
from jobboard.client.governor import RequestGovernor
from jobboard.client.scheduler import Debouncer
from jobboard.errors import DuplicateApplication, NetworkError, RateLimited, ValidationError


class FakeApi:
    def __init__(self, jobs=None, pages=3):
        self.jobs = jobs or []
        self.pages = pages
        self.calls = []
        self.gate = None
        self.failure = None

    async def list_jobs(self, spec):
        self.calls.append(spec)
        if self.gate is not None:
            await self.gate.wait()
        if self.failure:
            raise self.failure
        return JobListResult(jobs=list(self.jobs), page=spec.page, total_pages=self.pages, total=len(self.jobs))


def _job(job_id, **overrides):
    job = {"id": job_id, "position": "Engineer", "company": "Acme", "location": "Berlin",
           "type": "full-time", "experience": "mid", "industry": "technology", "remote": False,
           "salary": None, "vacancies": None, "tags": []}
    job.update(overrides)
    return job


class TestJobBrowser:
    def test_refresh_stores_page(self):
        api = FakeApi([_job("a")])
        browser = JobBrowser(api)
        assert asyncio.run(browser.refresh()) is True
        assert [j["id"] for j in browser.result.jobs] == ["a"]
        assert browser.result_spec == browser.spec
        assert browser.total_pages == 3

    def test_filter_change_resets_page(self):
        browser = JobBrowser(FakeApi())

        async def run():
            await browser.refresh()
            await browser.go_to_page(3)
            assert browser.page == 3
            await browser.set_filters(industry="finance")

        asyncio.run(run())
        assert browser.page == 1
        assert browser.spec.industry == "finance"

    def test_page_out_of_range(self):
        browser = JobBrowser(FakeApi(pages=2))
        asyncio.run(browser.refresh())
        with pytest.raises(ValidationError):
            asyncio.run(browser.go_to_page(5))
        with pytest.raises(ValidationError):
            asyncio.run(browser.go_to_page(0))

    def test_stale_response_is_discarded(self):
        api = FakeApi([_job("a")])
        browser = JobBrowser(api)

        async def run():
            api.gate = asyncio.Event()
            first = asyncio.create_task(browser.refresh())
            await asyncio.sleep(0)
            dropped = await browser.set_filters(type="contract")
            api.gate.set()
            return dropped, await first

        dropped, landed = asyncio.run(run())
        assert dropped is False
        assert landed is True
        assert [s.type for s in api.calls] == ["all", "contract"]
        assert browser.result_spec.type == "contract"

    def test_network_failure_keeps_last_page(self):
        api = FakeApi([_job("a")])
        browser = JobBrowser(api)
        asyncio.run(browser.refresh())

        api.failure = NetworkError("offline")
        assert asyncio.run(browser.go_to_page(2)) is False
        assert isinstance(browser.error, NetworkError)
        assert [j["id"] for j in browser.result.jobs] == ["a"]
        assert browser.result_spec.page == 1

    def test_rate_limit_then_retry(self):
        now = [0.0]
        api = FakeApi([_job("a")])
        browser = JobBrowser(api, governor=RequestGovernor(clock=lambda: now[0]))

        api.failure = RateLimited("slow down")
        assert asyncio.run(browser.refresh()) is False
        api.failure = None

        assert asyncio.run(browser.refresh()) is False
        assert len(api.calls) == 1
        assert asyncio.run(browser.retry()) is False

        now[0] = 31.0
        assert asyncio.run(browser.retry()) is True
        assert browser.error is None

    def test_visible_jobs_reapply_current_filters(self):
        api = FakeApi([_job("a", remote=True), _job("b")])
        browser = JobBrowser(api)
        asyncio.run(browser.refresh())
        browser.spec = browser.spec.with_filters(remote_mode="remote")
        assert [j["id"] for j in browser.visible_jobs] == ["a"]

    def test_search_text_is_debounced(self):
        api = FakeApi()
        browser = JobBrowser(api, debouncer=Debouncer(delay=0.01))

        async def run():
            browser.set_search_text("re")
            browser.set_search_text("react")
            await asyncio.sleep(0.05)
            await browser.debouncer.drain()

        asyncio.run(run())
        assert [s.search_text for s in api.calls] == ["react"]

    def test_save_state_comes_from_reconciler(self):
        cache = MemoryCache()
        cache.set("savedJobs", ["a"])
        browser = JobBrowser(FakeApi(), reconciler=CacheReconciler(cache))
        assert browser.is_saved("a")
        assert not browser.is_saved("b")
        assert not JobBrowser(FakeApi()).is_saved("a")

class FakeApplyApi(FakeApi):
    def __init__(self):
        super().__init__()
        self.submitted = []

    async def submit_application(self, job_id, payload):
        if job_id in self.submitted:
            raise DuplicateApplication("already applied")
        self.submitted.append(job_id)
        return {"id": f"app-{job_id}", "job_id": job_id, "status": "Applied"}


class TestApply:
    def test_apply_marks_job_applied(self):
        browser = JobBrowser(FakeApplyApi(), reconciler=CacheReconciler(MemoryCache()))
        assert not browser.has_applied("a")

        application = asyncio.run(browser.apply("a", {"skills": ["x"]}))
        assert application["job_id"] == "a"
        assert browser.has_applied("a")

    def test_duplicate_still_marks_job_applied(self):
        api = FakeApplyApi()
        api.submitted.append("a")
        browser = JobBrowser(api, reconciler=CacheReconciler(MemoryCache()))

        with pytest.raises(DuplicateApplication):
            asyncio.run(browser.apply("a", {}))
        assert browser.has_applied("a")

    def test_failed_submission_leaves_set_alone(self):
        api = FakeApi()
        api.submit_application = _rejecting_submit
        browser = JobBrowser(api, reconciler=CacheReconciler(MemoryCache()))

        with pytest.raises(ValidationError):
            asyncio.run(browser.apply("a", {}))
        assert not browser.has_applied("a")


async def _rejecting_submit(job_id, payload):
    raise ValidationError("Invalid application", {"skills": "At least one skill is required"})
