"""
Prompt executor - one prompt, one provider call, one outcome
"""

import logging
from datetime import datetime

from auditor.analyzer.models import PromptOutcome, PromptSpec
from llm.exceptions import ProviderError
from llm.types import CompletionOptions, CompletionProvider

logger = logging.getLogger(__name__)


class PromptExecutor:
    """Stateless; failures come back as failed outcomes, never as exceptions"""

    def __init__(
        self, provider: CompletionProvider, options: CompletionOptions | None = None
    ):
        self.provider = provider
        self.options = options

    async def execute(self, spec: PromptSpec, request_text: str) -> PromptOutcome:
        executed_at = datetime.now().isoformat()
        try:
            completion = await self.provider.complete(request_text, self.options)
            text = completion.text.strip() if isinstance(completion.text, str) else ""
            if not text:
                raise ProviderError("Model returned empty response")

            logger.info(f"Prompt '{spec.name}' succeeded ({completion.usage.total_tokens} tokens)")
            return PromptOutcome(
                prompt_id=spec.id,
                name=spec.name,
                category=spec.category,
                succeeded=True,
                executed_at=executed_at,
                result_text=text,
                usage=completion.usage.to_dict(),
            )

        except ProviderError as e:
            logger.warning(f"Prompt '{spec.name}' failed: {e}")
            return self._failed(spec, executed_at, str(e))

        except Exception as e:
            logger.warning(f"Prompt '{spec.name}' failed unexpectedly: {e}", exc_info=True)
            return self._failed(spec, executed_at, f"{type(e).__name__}: {e}")

    @staticmethod
    def _failed(spec: PromptSpec, executed_at: str, message: str) -> PromptOutcome:
        return PromptOutcome(
            prompt_id=spec.id,
            name=spec.name,
            category=spec.category,
            succeeded=False,
            executed_at=executed_at,
            error_message=message or "Unknown provider error",
        )
