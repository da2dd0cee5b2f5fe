"""
Job model and lifecycle graph
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from auditor.analyzer.models import AnalysisResult


class JobStatus(str, Enum):
    PENDING = "pending"
    CRAWLING = "crawling"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED})

# Forward moves only; same-status writes are progress updates.
# FAILED and CANCELLED are reachable from every non-terminal status.
ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.PENDING, JobStatus.CRAWLING},
    JobStatus.CRAWLING: {JobStatus.CRAWLING, JobStatus.ANALYZING},
    JobStatus.ANALYZING: {JobStatus.ANALYZING, JobStatus.COMPLETED},
}


def can_transition(current: JobStatus, requested: JobStatus) -> bool:
    if current.is_terminal:
        return False
    if requested in (JobStatus.FAILED, JobStatus.CANCELLED):
        return True
    return requested in ALLOWED_TRANSITIONS[current]


@dataclass
class Job:
    """One analysis request and its persisted lifecycle"""

    id: str
    url: str
    status: JobStatus
    created_at: str
    updated_at: str
    progress: int = 0
    current_step: str = "Queued"
    prompt_ids: list[str] = field(default_factory=list)
    started_at: str | None = None
    completed_at: str | None = None
    result: AnalysisResult | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def evolve(self, **changes) -> "Job":
        return replace(self, **changes)

    def status_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "status": self.status.value,
            "progress": self.progress,
            "current_step": self.current_step,
            "updated_at": self.updated_at,
            "error": self.error,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "id": self.id,
            "url": self.url,
            "status": self.status.value,
            "progress": self.progress,
            "current_step": self.current_step,
            "prompt_ids": list(self.prompt_ids),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Job":
        result = data.get("result")
        return cls(
            id=data["id"],
            url=data["url"],
            status=JobStatus(data["status"]),
            progress=data.get("progress", 0),
            current_step=data.get("current_step", ""),
            prompt_ids=list(data.get("prompt_ids") or []),
            created_at=data["created_at"],
            updated_at=data.get("updated_at", data["created_at"]),
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
            result=AnalysisResult.from_dict(result) if result else None,
            error=data.get("error"),
        )
