"""
Analyzer module - prompt execution and analysis orchestration
"""

from auditor.analyzer.language import detect_language, get_locale_profile, language_name
from auditor.analyzer.models import (
    AnalysisResult,
    CategoryScores,
    LanguageInfo,
    PromptOutcome,
    PromptSpec,
    Recommendation,
)
from auditor.analyzer.orchestrator import AnalysisOrchestrator
from auditor.analyzer.prompt_catalog import DEFAULT_PROMPTS, PromptCatalog
from auditor.analyzer.prompt_executor import PromptExecutor

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisResult",
    "CategoryScores",
    "DEFAULT_PROMPTS",
    "LanguageInfo",
    "PromptCatalog",
    "PromptExecutor",
    "PromptOutcome",
    "PromptSpec",
    "Recommendation",
    "detect_language",
    "get_locale_profile",
    "language_name",
]
