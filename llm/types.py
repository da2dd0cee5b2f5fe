"""Completion request/response types"""

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass
class CompletionOptions:
    """Per-call overrides; None means use the provider default"""

    system_prompt: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    extra: dict = field(default_factory=dict)  # Passed through to the API call


@dataclass
class Usage:
    """Token accounting reported by the provider"""

    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> dict:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class Completion:
    """Unified completion result"""

    text: str
    usage: Usage = field(default_factory=Usage)
    finish_reason: str | None = None
    model: str | None = None
    raw_response: Any = None


class CompletionProvider(Protocol):
    """Anything that can turn a prompt string into completion text"""

    async def complete(
        self, prompt: str, options: CompletionOptions | None = None
    ) -> Completion:
        """Return completion text and usage, or raise ProviderError"""
        ...
