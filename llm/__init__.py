"""
Completion providers used by the SEO analyzer.
"""

from llm.exceptions import (
    EmptyCompletion,
    ProviderError,
    ProviderTimeout,
    QuotaExceeded,
    SafetyBlocked,
)
from llm.types import Completion, CompletionOptions, CompletionProvider, Usage
from llm.openai_wrapper import OpenAIWrapper
from llm.config_loader import create_random_llm_wrapper

__all__ = [
    "Completion",
    "CompletionOptions",
    "CompletionProvider",
    "EmptyCompletion",
    "OpenAIWrapper",
    "ProviderError",
    "ProviderTimeout",
    "QuotaExceeded",
    "SafetyBlocked",
    "Usage",
    "create_random_llm_wrapper",
]
