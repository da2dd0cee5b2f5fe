"""End-to-end tests for the analysis service with fake extractor and provider"""

import asyncio

import pytest

from auditor.exceptions import JobNotFound, NavigationError, RenderError, ValidationError
from auditor.jobs.models import JobStatus
from auditor.jobs.state_machine import INTERRUPTED_ERROR
from llm.exceptions import ProviderError
from conftest import FakeExtractor, FakeProvider, default_reply, make_service

UNKNOWN_ID = "0b8f4c9e-5d21-4a7e-9f3a-2c6d8e1b7a40"


@pytest.mark.asyncio
async def test_successful_analysis():
    extractor = FakeExtractor()
    service = make_service(extractor=extractor)

    job = await service.submit("https://example.com")
    done = await service.wait(job.id, timeout=5)

    assert done.status == JobStatus.COMPLETED
    assert done.progress == 100
    assert done.prompt_ids == [
        "seo-technical-analysis", "content-quality-review", "competitive-analysis",
    ]
    assert len(done.result.outcomes) == 3
    assert done.result.recommendations[0].title == "Write a meta description"
    assert done.result.snapshot.url == "https://example.com/"
    assert extractor.calls == ["https://example.com"]
    assert extractor.closed
    assert not service.is_running(job.id)


@pytest.mark.asyncio
async def test_progress_milestones():
    service = make_service()
    seen = []
    service.jobs.add_listener(lambda job: seen.append((job.status, job.progress)))

    job = await service.submit("https://example.com")
    await service.wait(job.id, timeout=5)

    assert seen == [
        (JobStatus.PENDING, 0),
        (JobStatus.CRAWLING, 20),
        (JobStatus.CRAWLING, 40),
        (JobStatus.ANALYZING, 50),
        (JobStatus.ANALYZING, 63),
        (JobStatus.ANALYZING, 76),
        (JobStatus.ANALYZING, 90),
        (JobStatus.COMPLETED, 100),
    ]


@pytest.mark.asyncio
async def test_navigation_error_fails_job():
    extractor = FakeExtractor(
        error=NavigationError("https://example.com", "net::ERR_NAME_NOT_RESOLVED")
    )
    provider = FakeProvider()
    service = make_service(provider=provider, extractor=extractor)

    job = await service.submit("https://example.com")
    done = await service.wait(job.id, timeout=5)

    assert done.status == JobStatus.FAILED
    assert done.error.startswith("crawl failed: Failed to load URL")
    assert done.result is None
    assert extractor.closed
    assert provider.prompts == []


@pytest.mark.asyncio
async def test_render_error_fails_job():
    extractor = FakeExtractor(error=RenderError("https://example.com", "#app", 5000))
    service = make_service(extractor=extractor)

    job = await service.submit("https://example.com")
    done = await service.wait(job.id, timeout=5)

    assert done.status == JobStatus.FAILED
    assert "#app" in done.error


@pytest.mark.asyncio
async def test_unexpected_error_fails_job_with_type():
    service = make_service(extractor=FakeExtractor(error=RuntimeError("browser crashed")))

    job = await service.submit("https://example.com")
    done = await service.wait(job.id, timeout=5)

    assert done.status == JobStatus.FAILED
    assert done.error == "RuntimeError: browser crashed"


@pytest.mark.asyncio
async def test_partial_prompt_failures_still_complete():
    def reply(prompt: str):
        if prompt.startswith("Evaluate the content quality"):
            return ProviderError("rate limited")
        return default_reply(prompt)

    service = make_service(provider=FakeProvider(reply))

    job = await service.submit("https://example.com", ["seo-technical-analysis", "content-quality-review"])
    done = await service.wait(job.id, timeout=5)

    assert done.status == JobStatus.COMPLETED
    assert [o.prompt_id for o in done.result.failed_prompts] == ["content-quality-review"]
    assert done.result.outcomes[0].succeeded


@pytest.mark.asyncio
async def test_all_prompts_failing_still_complete_with_defaults():
    service = make_service(provider=FakeProvider(lambda prompt: ProviderError("down")))

    job = await service.submit("https://example.com")
    done = await service.wait(job.id, timeout=5)

    assert done.status == JobStatus.COMPLETED
    assert len(done.result.failed_prompts) == 3
    assert done.result.recommendations == []


@pytest.mark.asyncio
async def test_cancel_during_crawl():
    gate = asyncio.Event()
    extractor = FakeExtractor(gate=gate)
    provider = FakeProvider()
    service = make_service(provider=provider, extractor=extractor)

    job = await service.submit("https://example.com")
    await extractor.started.wait()

    cancelled = await service.cancel(job.id)
    assert cancelled.status == JobStatus.CANCELLED

    gate.set()
    done = await service.wait(job.id, timeout=5)

    assert done.status == JobStatus.CANCELLED
    assert done.updated_at == cancelled.updated_at
    assert done.result is None
    assert extractor.closed
    assert provider.prompts == []


@pytest.mark.asyncio
async def test_cancel_from_another_process_stops_runner():
    gate = asyncio.Event()
    extractor = FakeExtractor(gate=gate)
    provider = FakeProvider()
    service = make_service(provider=provider, extractor=extractor)

    job = await service.submit("https://example.com")
    await extractor.started.wait()

    # no token involved: only the stored record says cancelled
    await service.jobs.cancel(job.id)
    gate.set()
    done = await service.wait(job.id, timeout=5)

    assert done.status == JobStatus.CANCELLED
    assert provider.prompts == []


@pytest.mark.asyncio
async def test_cancel_finished_job_is_noop():
    service = make_service()
    job = await service.submit("https://example.com")
    done = await service.wait(job.id, timeout=5)

    again = await service.cancel(job.id)

    assert again.status == JobStatus.COMPLETED
    assert again.updated_at == done.updated_at


@pytest.mark.asyncio
async def test_status_available_right_after_submit():
    gate = asyncio.Event()
    service = make_service(extractor=FakeExtractor(gate=gate))

    job = await service.submit("https://example.com")
    status = await service.get_status(job.id)

    assert status["id"] == job.id
    assert status["status"] in ("pending", "crawling")
    assert set(status) == {"id", "url", "status", "progress", "current_step", "updated_at", "error"}

    gate.set()
    await service.wait(job.id, timeout=5)


@pytest.mark.asyncio
async def test_invalid_submissions_create_no_job():
    service = make_service()

    with pytest.raises(ValidationError) as exc_info:
        await service.submit("ftp://example.com/file")
    assert exc_info.value.field == "url"

    with pytest.raises(ValidationError) as exc_info:
        await service.submit("https://example.com", ["no-such-prompt"])
    assert exc_info.value.field == "prompts"

    with pytest.raises(ValidationError):
        await service.submit("https://example.com", "seo-technical-analysis")

    assert await service.list_jobs() == []


@pytest.mark.asyncio
async def test_lookups_validate_ids():
    service = make_service()

    with pytest.raises(ValidationError):
        await service.get_status("not-a-uuid")
    with pytest.raises(JobNotFound):
        await service.get_result(UNKNOWN_ID)
    with pytest.raises(JobNotFound):
        await service.cancel(UNKNOWN_ID)


@pytest.mark.asyncio
async def test_list_jobs_by_status():
    service = make_service()
    first = await service.submit("https://example.com/a")
    await service.wait(first.id, timeout=5)
    second = await service.submit("https://example.com/b")
    await service.cancel(second.id)
    await service.wait(second.id, timeout=5)

    completed = await service.list_jobs("completed")
    assert [job.id for job in completed] == [first.id]
    assert len(await service.list_jobs()) == 2

    with pytest.raises(ValidationError):
        await service.list_jobs("sleeping")


@pytest.mark.asyncio
async def test_start_recovers_interrupted_jobs():
    service = make_service()
    stale = await service.jobs.create("https://example.com")

    recovered = await service.start()

    assert [job.id for job in recovered] == [stale.id]
    job = await service.get_result(stale.id)
    assert job.status == JobStatus.FAILED
    assert job.error == INTERRUPTED_ERROR


@pytest.mark.asyncio
async def test_shutdown_cancels_running_jobs_and_runs_cleanups():
    gate = asyncio.Event()
    extractor = FakeExtractor(gate=gate)
    service = make_service(extractor=extractor)
    cleaned = []

    async def cleanup():
        cleaned.append(True)

    service.add_cleanup(cleanup)
    job = await service.submit("https://example.com")
    await extractor.started.wait()

    shutdown = asyncio.create_task(service.shutdown())
    await asyncio.sleep(0.01)
    gate.set()
    await asyncio.wait_for(shutdown, 5)

    assert (await service.get_result(job.id)).status == JobStatus.CANCELLED
    assert cleaned == [True]
    assert not service.is_running(job.id)
