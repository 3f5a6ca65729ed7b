import pytest

from jobboard.errors import ValidationError
from jobboard.services.filters import (
    ALL,
    FilterSpec,
    filter_jobs,
    in_bounds,
    matches_job,
    total_pages,
)

API = "/api/v1"


def _job(**overrides):
    job = {
        "id": "j1",
        "position": "Frontend Engineer",
        "company": "Acme Corp",
        "description": "Build things",
        "location": "Berlin",
        "type": "full-time",
        "experience": "mid",
        "industry": "technology",
        "remote": False,
        "salary": {"min": 60000, "max": 80000, "currency": "EUR"},
        "vacancies": 2,
        "tags": ["react"],
    }
    job.update(overrides)
    return job


class TestFilterSpec:
    def test_defaults_are_all(self):
        spec = FilterSpec()
        assert spec.type == ALL
        assert spec.page == 1
        assert spec.to_params() == {"page": 1, "page_size": 12}

    def test_with_filters_resets_page(self):
        spec = FilterSpec(page=4)
        changed = spec.with_filters(type="contract")
        assert changed.page == 1
        assert changed.type == "contract"
        assert spec.page == 4

    def test_with_filters_refuses_page(self):
        with pytest.raises(ValueError):
            FilterSpec().with_filters(page=3)

    def test_with_page_keeps_filters(self):
        spec = FilterSpec(industry="finance").with_page(3)
        assert spec.page == 3
        assert spec.industry == "finance"
        assert spec.offset == 24

    def test_unknown_bucket_rejected(self):
        with pytest.raises(ValidationError) as exc:
            FilterSpec(salary_bucket="1m+")
        assert "salary_bucket" in exc.value.errors

    def test_to_params_uses_wire_names(self):
        spec = FilterSpec(search_text="  react ", salary_bucket="100k-150k", vacancy_bucket="2-5")
        assert spec.to_params() == {
            "page": 1,
            "page_size": 12,
            "q": "react",
            "salary": "100k-150k",
            "vacancies": "2-5",
        }


class TestMatchesJob:
    def test_all_never_excludes(self):
        assert matches_job(_job(salary=None, vacancies=None), FilterSpec())

    def test_text_matches_tags_case_insensitively(self):
        assert matches_job(_job(), FilterSpec(search_text="REACT"))
        assert not matches_job(_job(), FilterSpec(search_text="django"))

    def test_remote_location(self):
        spec = FilterSpec(location="remote")
        assert matches_job(_job(remote=True), spec)
        assert not matches_job(_job(remote=False), spec)

    def test_remote_modes(self):
        hybrid = _job(location="Berlin (Hybrid)")
        onsite = _job()
        remote = _job(remote=True, location="Anywhere")
        assert filter_jobs([hybrid, onsite, remote], FilterSpec(remote_mode="hybrid")) == [hybrid]
        assert filter_jobs([hybrid, onsite, remote], FilterSpec(remote_mode="onsite")) == [onsite]
        assert filter_jobs([hybrid, onsite, remote], FilterSpec(remote_mode="remote")) == [remote]

    def test_salary_bucket_uses_minimum(self):
        spec = FilterSpec(salary_bucket="100k-150k")
        assert matches_job(_job(salary={"min": 120000, "max": 140000}), spec)
        assert not matches_job(_job(salary={"min": 90000, "max": 130000}), spec)
        assert not matches_job(_job(salary=None), spec)

    def test_open_ended_bucket(self):
        assert matches_job(_job(vacancies=40), FilterSpec(vacancy_bucket="10+"))
        assert not matches_job(_job(vacancies=None), FilterSpec(vacancy_bucket="1"))

    def test_in_bounds_is_inclusive(self):
        assert in_bounds(50000, (0, 50000))
        assert in_bounds(50000, (50000, 75000))
        assert not in_bounds(None, (0, None))

    def test_total_pages(self):
        assert total_pages(0, 12) == 0
        assert total_pages(12, 12) == 1
        assert total_pages(13, 12) == 2


class TestListingFilters:
    @pytest.fixture
    def seeded(self, client, as_user, job_payload):
        h = as_user("poster-1")
        payloads = [
            job_payload(position="Remote React", remote=True, salary={"min": 120000, "max": 140000}),
            job_payload(position="Remote Near Miss", remote=True, salary={"min": 90000, "max": 130000}),
            job_payload(position="Onsite Senior", salary={"min": 110000, "max": 150000}, experience="senior"),
            job_payload(position="Hybrid Analyst", location="London (Hybrid)", industry="finance",
                        type="contract", vacancies=12, salary=None, tags=["excel"]),
            job_payload(position="Growth 100% Remote", company="Initech", tags=[], vacancies=1),
        ]
        for p in payloads:
            assert client.post(f"{API}/jobs", json=p, headers=h).status_code == 201
        return h

    def _positions(self, client, headers, **params):
        params.setdefault("page_size", 100)
        r = client.get(f"{API}/jobs", params=params, headers=headers)
        assert r.status_code == 200, r.text
        return sorted(j["position"] for j in r.json()["jobs"])

    def test_salary_and_remote_together(self, client, seeded):
        positions = self._positions(client, seeded, salary="100k-150k", remote_mode="remote")
        assert positions == ["Remote React"]

    def test_industry_and_type(self, client, seeded):
        assert self._positions(client, seeded, industry="finance", type="contract") == ["Hybrid Analyst"]

    def test_vacancy_bucket(self, client, seeded):
        assert self._positions(client, seeded, vacancies="10+") == ["Hybrid Analyst"]
        assert self._positions(client, seeded, vacancies="1") == ["Growth 100% Remote"]

    def test_percent_in_search_is_literal(self, client, seeded):
        assert self._positions(client, seeded, q="100%") == ["Growth 100% Remote"]

    def test_search_matches_tags(self, client, seeded):
        assert self._positions(client, seeded, q="EXCEL") == ["Hybrid Analyst"]

    def test_invalid_facet_is_400(self, client, seeded):
        r = client.get(f"{API}/jobs", params={"remote_mode": "moon"}, headers=seeded)
        assert r.status_code == 400

    @pytest.mark.parametrize("params", [
        {},
        {"q": "remote"},
        {"location": "remote"},
        {"location": "london"},
        {"remote_mode": "onsite"},
        {"remote_mode": "hybrid"},
        {"experience": "senior"},
        {"salary": "75k-100k"},
        {"salary": "100k-150k", "industry": "technology"},
        {"vacancies": "2-5"},
    ])
    def test_server_agrees_with_predicate(self, client, seeded, params):
        everything = client.get(f"{API}/jobs", params={"page_size": 100}, headers=seeded).json()["jobs"]
        spec = FilterSpec(
            search_text=params.get("q", ""),
            location=params.get("location", ALL),
            experience=params.get("experience", ALL),
            industry=params.get("industry", ALL),
            salary_bucket=params.get("salary", ALL),
            remote_mode=params.get("remote_mode", ALL),
            vacancy_bucket=params.get("vacancies", ALL),
        )
        expected = sorted(j["position"] for j in filter_jobs(everything, spec))
        assert self._positions(client, seeded, **params) == expected
