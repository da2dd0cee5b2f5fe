"""Tests for the OpenAI-compatible provider and LLM config selection"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from llm.config_loader import create_random_llm_wrapper, validate_llm_config
from llm.exceptions import (
    EmptyCompletion,
    ProviderError,
    ProviderTimeout,
    QuotaExceeded,
    SafetyBlocked,
)
from llm.openai_wrapper import OpenAIWrapper
from llm.types import CompletionOptions

REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat/completions")


def make_response(content="Looks good.", finish_reason="stop", usage=(12, 30)):
    return SimpleNamespace(
        choices=[
            SimpleNamespace(
                finish_reason=finish_reason,
                message=SimpleNamespace(content=content),
            )
        ],
        usage=SimpleNamespace(prompt_tokens=usage[0], completion_tokens=usage[1]) if usage else None,
        model="gpt-test",
    )


def make_wrapper(result) -> OpenAIWrapper:
    wrapper = OpenAIWrapper(
        base_url="https://api.example.com/v1",
        api_key="sk-test",
        model="gpt-test",
        timeout=15.0,
    )
    wrapper.client = MagicMock()
    if isinstance(result, BaseException):
        wrapper.client.chat.completions.create = AsyncMock(side_effect=result)
    else:
        wrapper.client.chat.completions.create = AsyncMock(return_value=result)
    wrapper.client.close = AsyncMock()
    return wrapper


@pytest.mark.asyncio
async def test_complete_returns_text_and_usage():
    wrapper = make_wrapper(make_response())

    completion = await wrapper.complete("Audit this page")

    assert completion.text == "Looks good."
    assert completion.usage.total_tokens == 42
    assert completion.model == "gpt-test"
    kwargs = wrapper.client.chat.completions.create.await_args.kwargs
    assert kwargs["messages"] == [{"role": "user", "content": "Audit this page"}]
    assert kwargs["temperature"] == 0.7
    assert kwargs["max_tokens"] == 4096


@pytest.mark.asyncio
async def test_options_override_defaults():
    wrapper = make_wrapper(make_response())

    await wrapper.complete(
        "Score it",
        CompletionOptions(system_prompt="You are strict.", temperature=0.0, max_tokens=256),
    )

    kwargs = wrapper.client.chat.completions.create.await_args.kwargs
    assert kwargs["messages"][0] == {"role": "system", "content": "You are strict."}
    assert kwargs["temperature"] == 0.0
    assert kwargs["max_tokens"] == 256


@pytest.mark.asyncio
async def test_missing_usage_defaults_to_zero():
    completion = await make_wrapper(make_response(usage=None)).complete("hi")
    assert completion.usage.total_tokens == 0


@pytest.mark.asyncio
async def test_rate_limit_maps_to_quota_exceeded():
    error = openai.RateLimitError(
        "Rate limit reached",
        response=httpx.Response(429, headers={"retry-after": "7"}, request=REQUEST),
        body=None,
    )

    with pytest.raises(QuotaExceeded) as exc_info:
        await make_wrapper(error).complete("hi")

    assert exc_info.value.retry_after == 7.0
    assert exc_info.value.cause is error


@pytest.mark.asyncio
async def test_timeout_maps_to_provider_timeout():
    with pytest.raises(ProviderTimeout) as exc_info:
        await make_wrapper(openai.APITimeoutError(request=REQUEST)).complete("hi")

    assert exc_info.value.timeout == 15.0


@pytest.mark.asyncio
async def test_connection_error_maps_to_provider_error():
    with pytest.raises(ProviderError, match="connection failed"):
        await make_wrapper(openai.APIConnectionError(request=REQUEST)).complete("hi")


@pytest.mark.asyncio
async def test_status_error_maps_to_provider_error():
    error = openai.InternalServerError(
        "upstream exploded",
        response=httpx.Response(500, request=REQUEST),
        body=None,
    )

    with pytest.raises(ProviderError, match="Provider API error 500"):
        await make_wrapper(error).complete("hi")


@pytest.mark.asyncio
async def test_content_filter_maps_to_safety_blocked():
    with pytest.raises(SafetyBlocked):
        await make_wrapper(make_response(content=None, finish_reason="content_filter")).complete("hi")


@pytest.mark.asyncio
async def test_empty_content_raises():
    with pytest.raises(EmptyCompletion):
        await make_wrapper(make_response(content="")).complete("hi")


@pytest.mark.asyncio
async def test_no_choices_raises():
    response = make_response()
    response.choices = []
    with pytest.raises(EmptyCompletion):
        await make_wrapper(response).complete("hi")


@pytest.mark.asyncio
async def test_context_manager_closes_client():
    wrapper = make_wrapper(make_response())
    async with wrapper:
        pass
    wrapper.client.close.assert_awaited_once()


def test_validate_llm_config():
    assert validate_llm_config({"base_url": "u", "api_key": "k", "model": "m"}) == []
    assert validate_llm_config({"base_url": "u", "api_key": ""}) == ["api_key", "model"]


def test_random_wrapper_skips_incomplete_configs():
    wrapper = create_random_llm_wrapper([
        {"base_url": "https://a.example.com/v1", "model": "broken"},
        {"base_url": "https://b.example.com/v1", "api_key": "sk-b", "model": "good", "temperature": 0.2},
    ])
    assert wrapper.model == "good"
    assert wrapper.temperature == 0.2


def test_random_wrapper_without_usable_config():
    assert create_random_llm_wrapper([]) is None
    assert create_random_llm_wrapper([{"model": "x"}]) is None
