"""
Job stores: full-record upsert, get by id, list by status
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Protocol

from auditor.exceptions import PersistenceError
from auditor.jobs.models import Job, JobStatus

logger = logging.getLogger(__name__)


class JobStore(Protocol):
    async def upsert(self, job: Job) -> None: ...

    async def get(self, job_id: str) -> Job | None: ...

    async def list(
        self, status: JobStatus | None = None, limit: int | None = None
    ) -> list[Job]: ...


def _select(records: dict[str, dict], status: JobStatus | None, limit: int | None) -> list[Job]:
    """Newest first"""
    jobs = [
        Job.from_dict(r) for r in records.values()
        if status is None or r.get("status") == status.value
    ]
    jobs.sort(key=lambda j: j.created_at, reverse=True)
    return jobs[:limit] if limit else jobs


def _trim(records: dict[str, dict], max_jobs: int) -> list[str]:
    """Drop the oldest terminal records until at most max_jobs remain"""
    excess = len(records) - max_jobs
    if max_jobs <= 0 or excess <= 0:
        return []
    terminal = sorted(
        (r for r in records.values() if JobStatus(r["status"]).is_terminal),
        key=lambda r: r["created_at"],
    )
    dropped = [r["id"] for r in terminal[:excess]]
    for job_id in dropped:
        del records[job_id]
    return dropped


class InMemoryJobStore:
    """Dict-backed store; records are kept serialized so callers never share state"""

    def __init__(self, max_jobs: int = 1000):
        self.max_jobs = max_jobs
        self._records: dict[str, dict] = {}

    async def upsert(self, job: Job) -> None:
        self._records[job.id] = job.to_dict()
        _trim(self._records, self.max_jobs)

    async def get(self, job_id: str) -> Job | None:
        record = self._records.get(job_id)
        return Job.from_dict(record) if record else None

    async def list(self, status: JobStatus | None = None, limit: int | None = None) -> list[Job]:
        return _select(self._records, status, limit)


class JsonFileJobStore:
    """Store jobs in a JSON file, rewritten atomically on every upsert"""

    def __init__(self, path: str | Path, max_jobs: int = 1000):
        self._path = Path(path)
        self.max_jobs = max_jobs
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def _read_file(self) -> dict[str, dict]:
        """Read job records from file"""
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Job store {self._path} is corrupt: {e}", e) from e
        except OSError as e:
            raise PersistenceError(f"Could not read job store {self._path}: {e}", e) from e

        jobs = data.get("jobs") if isinstance(data, dict) else None
        if not isinstance(jobs, dict):
            raise PersistenceError(f"Job store {self._path} has an unexpected layout")
        return jobs

    async def _write_file(self, records: dict[str, dict]) -> None:
        """Write job records through a temp file so readers never see half a file"""
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump({"jobs": records}, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Could not write job store {self._path}: {e}", e) from e

    async def upsert(self, job: Job) -> None:
        async with self._lock:
            records = await self._read_file()
            records[job.id] = job.to_dict()
            dropped = _trim(records, self.max_jobs)
            if dropped:
                logger.info(f"Trimmed {len(dropped)} old jobs from {self._path}")
            await self._write_file(records)

    async def get(self, job_id: str) -> Job | None:
        async with self._lock:
            records = await self._read_file()
        record = records.get(job_id)
        return Job.from_dict(record) if record else None

    async def list(self, status: JobStatus | None = None, limit: int | None = None) -> list[Job]:
        async with self._lock:
            records = await self._read_file()
        return _select(records, status, limit)
