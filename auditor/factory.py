"""
Build a ready-to-start AnalysisService from config
"""

import logging

from auditor.analyzer.orchestrator import AnalysisOrchestrator
from auditor.analyzer.prompt_catalog import PromptCatalog
from auditor.config import AppConfig
from auditor.exceptions import ConfigError
from auditor.extractor.page_extractor import PageExtractor
from auditor.jobs.runner import JobRunner
from auditor.jobs.service import AnalysisService
from auditor.jobs.state_machine import JobStateMachine
from auditor.jobs.store import JobStore, JsonFileJobStore
from llm.config_loader import create_random_llm_wrapper
from llm.types import CompletionProvider

logger = logging.getLogger(__name__)


def build_catalog(config: AppConfig) -> PromptCatalog:
    return PromptCatalog.from_file(
        config.analysis.prompts_file, config.analysis.default_categories
    )


def build_store(config: AppConfig) -> JsonFileJobStore:
    return JsonFileJobStore(config.storage.path, config.storage.max_jobs)


def build_service(
    config: AppConfig,
    provider: CompletionProvider | None = None,
    store: JobStore | None = None,
) -> AnalysisService:
    """Wire provider, store, extractor and orchestrator into one service"""
    if provider is None:
        provider = create_random_llm_wrapper(config.llm)
        if provider is None:
            raise ConfigError("No usable LLM configuration found in the 'llm' section")

    state_machine = JobStateMachine(store or build_store(config))
    runner = JobRunner(
        state_machine,
        AnalysisOrchestrator(provider, config.analysis),
        extractor_factory=lambda: PageExtractor(config.extractor),
    )
    service = AnalysisService(state_machine, build_catalog(config), runner)

    close = getattr(provider, "close", None)
    if close is not None:
        service.add_cleanup(close)
    return service
