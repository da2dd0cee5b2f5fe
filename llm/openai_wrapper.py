"""
OpenAI-compatible completion provider for making async API calls.
"""

import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from llm.exceptions import (
    EmptyCompletion,
    ProviderError,
    ProviderTimeout,
    QuotaExceeded,
    SafetyBlocked,
)
from llm.types import Completion, CompletionOptions, Usage

logger = logging.getLogger(__name__)


class OpenAIWrapper:
    """
    An async completion provider backed by any OpenAI-compatible endpoint.

    Example:
        async with OpenAIWrapper(
            base_url="https://api.openai.com/v1",
            api_key="your-api-key",
            model="gpt-4o-mini",
        ) as wrapper:
            completion = await wrapper.complete("Audit this page ...")
            print(completion.text, completion.usage.total_tokens)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        organization: Optional[str] = None,
        project: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ):
        """
        Initialize the wrapper.

        Args:
            base_url: The base URL for the API endpoint
            api_key: API key for authentication
            model: Model name to use for completions
            timeout: Request timeout in seconds (default: 60.0)
            max_retries: Maximum number of SDK-level retries (default: 2)
            organization: Optional organization ID
            project: Optional project ID
            temperature: Default sampling temperature
            max_tokens: Default completion token budget
        """
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            organization=organization,
            project=project,
        )

    async def complete(
        self, prompt: str, options: CompletionOptions | None = None
    ) -> Completion:
        """
        Send a prompt and return the normalized completion.

        Raises:
            QuotaExceeded: rate limit / quota errors (HTTP 429)
            ProviderTimeout: request exceeded the configured timeout
            SafetyBlocked: the provider filtered the completion
            EmptyCompletion: the provider returned no text
            ProviderError: any other API failure
        """
        options = options or CompletionOptions()
        messages = []

        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})

        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=options.max_tokens or self.max_tokens,
                temperature=(
                    options.temperature
                    if options.temperature is not None
                    else self.temperature
                ),
                **options.extra,
            )
        except openai.RateLimitError as e:
            retry_after = _retry_after(e)
            raise QuotaExceeded(retry_after=retry_after, cause=e) from e
        except openai.APITimeoutError as e:
            raise ProviderTimeout(timeout=self.timeout, cause=e) from e
        except openai.APIConnectionError as e:
            raise ProviderError(f"Provider connection failed: {e}", cause=e) from e
        except openai.APIStatusError as e:
            raise ProviderError(
                f"Provider API error {e.status_code}: {e.message}", cause=e
            ) from e
        except openai.OpenAIError as e:
            raise ProviderError(f"Provider call failed: {e}", cause=e) from e

        if not response.choices:
            raise EmptyCompletion(response)

        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            raise SafetyBlocked(reason=choice.finish_reason)

        content = choice.message.content
        if not content:
            raise EmptyCompletion(response)

        usage = Usage()
        if response.usage is not None:
            usage = Usage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
            )

        return Completion(
            text=content,
            usage=usage,
            finish_reason=choice.finish_reason,
            model=response.model,
            raw_response=response,
        )

    async def close(self):
        """Close the underlying HTTP client."""
        await self.client.close()

    async def __aenter__(self):
        """Support async context manager protocol."""
        return self

    async def __aexit__(self, _exc_type, _exc_val, _exc_tb):
        """Support async context manager protocol."""
        await self.close()


def _retry_after(error: openai.RateLimitError) -> float | None:
    try:
        value = error.response.headers.get("retry-after")
        return float(value) if value else None
    except (AttributeError, TypeError, ValueError):
        return None
