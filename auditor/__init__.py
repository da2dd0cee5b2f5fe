"""
SEO analysis pipeline: page extraction, prompt orchestration and job lifecycle
"""

from auditor.config import AppConfig, load_config
from auditor.factory import build_service
from auditor.jobs import AnalysisService, Job, JobStatus
from auditor.logging_setup import setup_logging

__all__ = [
    "AnalysisService",
    "AppConfig",
    "Job",
    "JobStatus",
    "build_service",
    "load_config",
    "setup_logging",
]
