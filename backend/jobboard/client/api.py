from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from jobboard.errors import (
    ERRORS_BY_CODE,
    DuplicateApplication,
    Forbidden,
    JobBoardError,
    NetworkError,
    NotFound,
    RateLimited,
    ValidationError,
)
from jobboard.services.filters import FilterSpec, total_pages

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@dataclass
class JobListResult:
    jobs: list[dict[str, Any]] = field(default_factory=list)
    page: int = 1
    total_pages: int = 0
    total: int = 0


def parse_job_list(payload: Any, spec: FilterSpec) -> JobListResult:
    """Collapse a bare array or a (possibly ``data``-wrapped) object into one shape."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), (dict, list)):
        payload = payload["data"]

    if isinstance(payload, list):
        return JobListResult(
            jobs=payload,
            page=spec.page,
            total_pages=1 if payload else 0,
            total=len(payload),
        )
    if not isinstance(payload, dict):
        raise ValidationError("Unexpected job list payload")

    jobs = payload.get("jobs") or []
    pagination = payload.get("pagination") or {}
    total = pagination.get("total", pagination.get("totalCount", len(jobs)))
    pages = pagination.get("total_pages", pagination.get("totalPages"))
    if pages is None:
        pages = total_pages(total, pagination.get("page_size", pagination.get("limit", spec.page_size)))
    return JobListResult(
        jobs=jobs,
        page=pagination.get("page", pagination.get("currentPage", spec.page)),
        total_pages=pages,
        total=total,
    )


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    try:
        return float(value) if value is not None else None
    except ValueError:
        return None


def error_from_response(response: httpx.Response) -> JobBoardError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    detail = body.get("detail")
    message = detail if isinstance(detail, str) else response.reason_phrase or "Request failed"
    status = response.status_code

    if status == 429:
        return RateLimited(message, retry_after=_retry_after(response))
    cls = ERRORS_BY_CODE.get(body.get("error"))
    if cls is None:
        if status == 403:
            cls = Forbidden
        elif status == 404:
            cls = NotFound
        elif status == 409:
            cls = DuplicateApplication
        elif status in (400, 422):
            cls = ValidationError
        elif status >= 500:
            cls = NetworkError
        else:
            return JobBoardError(message)
    if issubclass(cls, ValidationError):
        return cls(message, errors=body.get("errors"))
    if cls is RateLimited:
        return RateLimited(message, retry_after=_retry_after(response))
    return cls(message)


class JobBoardClient:
    def __init__(
        self,
        base_url: str,
        user_id: str,
        role: str,
        tenant_id: str,
        display_name: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "X-User-Id": user_id,
            "X-User-Role": role,
            "X-Tenant-Id": tenant_id,
        }
        if display_name:
            self.headers["X-User-Name"] = display_name
        self.timeout = timeout
        self._transport = transport

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, f"{API_PREFIX}{path}", **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= 400:
            raise error_from_response(response)
        return response.json()

    async def list_jobs(self, spec: FilterSpec) -> JobListResult:
        payload = await self._request("GET", "/jobs", params=spec.to_params())
        return parse_job_list(payload, spec)

    async def get_job(self, job_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/jobs/{job_id}")

    async def my_jobs(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/jobs/mine")

    async def create_job(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/jobs", json=payload)

    async def update_job(self, job_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/jobs/{job_id}", json=changes)

    async def delete_job(self, job_id: str) -> None:
        await self._request("DELETE", f"/jobs/{job_id}")

    async def save_job(self, job_id: str) -> bool:
        payload = await self._request("PUT", f"/jobs/{job_id}/save")
        return bool(payload.get("saved", True))

    async def unsave_job(self, job_id: str) -> bool:
        payload = await self._request("DELETE", f"/jobs/{job_id}/save")
        return bool(payload.get("saved", False))

    async def saved_jobs(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/jobs/saved")

    async def submit_application(self, job_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/jobs/{job_id}/applications", json=payload)

    async def job_applications(
        self, job_id: str, page: int = 1, page_size: int | None = None
    ) -> list[dict[str, Any]]:
        params = {"page": page, "page_size": page_size} if page_size else None
        payload = await self._request("GET", f"/jobs/{job_id}/applications", params=params)
        return payload["applications"]

    async def my_applications(self, limit: int = 500) -> list[dict[str, Any]]:
        payload = await self._request("GET", "/applications/mine", params={"limit": limit})
        return payload["applications"]

    async def review_application(
        self, application_id: str, status: str, review_notes: str | None = None
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"/applications/{application_id}/status",
            json={"status": status, "review_notes": review_notes},
        )

    async def delete_application(self, application_id: str) -> None:
        await self._request("DELETE", f"/applications/{application_id}")
