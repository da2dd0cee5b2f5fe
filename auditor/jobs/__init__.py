"""
Jobs module - job lifecycle, persistence and background execution
"""

from auditor.jobs.models import Job, JobStatus, TERMINAL_STATUSES
from auditor.jobs.runner import JobRunner
from auditor.jobs.service import AnalysisService
from auditor.jobs.state_machine import JobStateMachine
from auditor.jobs.store import InMemoryJobStore, JobStore, JsonFileJobStore

__all__ = [
    "AnalysisService",
    "InMemoryJobStore",
    "Job",
    "JobRunner",
    "JobStateMachine",
    "JobStatus",
    "JobStore",
    "JsonFileJobStore",
    "TERMINAL_STATUSES",
]
