"""
SavedJobs / AppliedJobs membership, reconciled between a local cache and the API.

AppliedJobs is overwritten from a bounded server fetch on hydration. SavedJobs
toggles are optimistic: the local set changes first, and if the server call
fails on the network (or is rate limited) the local value is kept and the job
is remembered in ``unsynced`` until the next successful toggle for it.
Authorization and validation failures roll the local toggle back.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Protocol

from jobboard.client.api import JobBoardClient
from jobboard.errors import NetworkError, RateLimited

logger = logging.getLogger(__name__)

SAVED_JOBS_KEY = "savedJobs"
APPLIED_JOBS_KEY = "appliedJobs"
APPLIED_HYDRATION_LIMIT = 500


class CachePort(Protocol):
    def get(self, key: str) -> list[str] | None: ...

    def set(self, key: str, values: Iterable[str]) -> None: ...

    def merge(self, key: str, values: Iterable[str]) -> list[str]: ...


class MemoryCache:
    def __init__(self) -> None:
        self._data: dict[str, list[str]] = {}

    def get(self, key: str) -> list[str] | None:
        values = self._data.get(key)
        return list(values) if values is not None else None

    def set(self, key: str, values: Iterable[str]) -> None:
        self._data[key] = sorted(set(values))

    def merge(self, key: str, values: Iterable[str]) -> list[str]:
        merged = set(self._data.get(key) or []) | set(values)
        self.set(key, merged)
        return self._data[key]


class JsonFileCache:
    """Durable key-value store in one JSON document; every write rewrites the file, last writer wins."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, list[str]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable cache file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, list[str]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: str) -> list[str] | None:
        values = self._load().get(key)
        return list(values) if isinstance(values, list) else None

    def set(self, key: str, values: Iterable[str]) -> None:
        data = self._load()
        data[key] = sorted(set(values))
        self._dump(data)

    def merge(self, key: str, values: Iterable[str]) -> list[str]:
        data = self._load()
        merged = sorted(set(data.get(key) or []) | set(values))
        data[key] = merged
        self._dump(data)
        return merged


class CacheReconciler:
    def __init__(self, cache: CachePort, api: JobBoardClient | None = None) -> None:
        self.cache = cache
        self.api = api
        self.unsynced: set[str] = set()

    @property
    def saved_jobs(self) -> frozenset[str]:
        return frozenset(self.cache.get(SAVED_JOBS_KEY) or [])

    @property
    def applied_jobs(self) -> frozenset[str]:
        return frozenset(self.cache.get(APPLIED_JOBS_KEY) or [])

    def is_saved(self, job_id: str) -> bool:
        return job_id in self.saved_jobs

    def has_applied(self, job_id: str) -> bool:
        return job_id in self.applied_jobs

    async def hydrate_applied(self, limit: int = APPLIED_HYDRATION_LIMIT) -> frozenset[str]:
        """Replace AppliedJobs with the server's view; keep the last known set if the fetch fails."""
        try:
            applications = await self.api.my_applications(limit=limit)
        except (NetworkError, RateLimited) as exc:
            logger.warning("applied-jobs hydration failed, keeping cached set: %s", exc)
            return self.applied_jobs
        return self.replace_applied(a["job_id"] for a in applications)

    def replace_applied(self, job_ids: Iterable[str]) -> frozenset[str]:
        self.cache.set(APPLIED_JOBS_KEY, job_ids)
        return self.applied_jobs

    def record_applied(self, job_id: str) -> None:
        self.cache.merge(APPLIED_JOBS_KEY, [job_id])

    def forget_applied(self, job_id: str) -> None:
        self.cache.set(APPLIED_JOBS_KEY, self.applied_jobs - {job_id})

    def _write_saved(self, job_id: str, saved: bool) -> None:
        current = self.saved_jobs
        self.cache.set(SAVED_JOBS_KEY, current | {job_id} if saved else current - {job_id})

    async def toggle_saved(self, job_id: str) -> bool:
        """Flip membership locally, then tell the server. Returns the resulting membership."""
        previous = self.is_saved(job_id)
        wanted = not previous
        self._write_saved(job_id, wanted)

        try:
            if wanted:
                confirmed = await self.api.save_job(job_id)
            else:
                confirmed = await self.api.unsave_job(job_id)
        except (NetworkError, RateLimited) as exc:
            self.unsynced.add(job_id)
            logger.warning("saved-jobs toggle for %s kept locally, server call failed: %s", job_id, exc)
            return wanted
        except Exception:
            self._write_saved(job_id, previous)
            raise

        self.unsynced.discard(job_id)
        if confirmed != wanted:
            self._write_saved(job_id, confirmed)
        return confirmed
