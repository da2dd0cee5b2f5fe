"""
Pytest configuration and shared fixtures.
"""

import asyncio
import json

import pytest

from auditor.analyzer.orchestrator import AnalysisOrchestrator
from auditor.analyzer.prompt_catalog import PromptCatalog
from auditor.config import AnalysisConfig
from auditor.extractor.models import ResourceStats, WebVitals
from auditor.extractor.page_parser import build_snapshot
from auditor.jobs.runner import JobRunner
from auditor.jobs.service import AnalysisService
from auditor.jobs.state_machine import JobStateMachine
from auditor.jobs.store import InMemoryJobStore
from llm.types import Completion, Usage

# ============================================
# Mock Responses
# ============================================

MOCK_SCORES = '{"technical": 80, "content": 70, "performance": 60, "user_experience": 75, "accessibility": 50}'

MOCK_SUMMARY = "Your page is in decent shape. Fix the meta description first."

MOCK_RECOMMENDATIONS = json.dumps([
    {
        "title": "Add internal links",
        "priority": "medium",
        "category": "content",
        "impact": "medium",
        "effort": "low",
    },
    {
        "title": "Write a meta description",
        "priority": "critical",
        "category": "technical",
        "impact": "high",
        "effort": "low",
    },
])


def make_raw(**overrides) -> dict:
    """Raw in-page extraction result for a small but complete page"""
    raw = {
        "location": "https://example.com/",
        "title": "Example Domain - Handmade Widgets for Every Home",
        "lang": "en",
        "charset": "UTF-8",
        "metas": [
            ["description", "Discover handmade widgets built to last. Shop the full range today."],
            ["robots", "index, follow"],
            ["viewport", "width=device-width, initial-scale=1"],
            ["og:title", "Example Widgets"],
            ["twitter:card", "summary"],
        ],
        "canonicalHref": "https://example.com/",
        "hasViewport": True,
        "hasFavicon": True,
        "headings": {
            "h1": [{"text": "Handmade Widgets", "position": 1}],
            "h2": [{"text": "Why widgets", "position": 1}, {"text": "Pricing", "position": 2}],
            "h3": [], "h4": [], "h5": [], "h6": [],
        },
        "images": [
            {"src": "https://example.com/a.png", "alt": "A widget", "position": 1},
            {"src": "https://example.com/b.png", "alt": "", "position": 2},
        ],
        "links": [
            {"href": "https://example.com/about", "text": "About", "position": 1},
            {"href": "https://example.com/shop", "text": "Shop", "position": 2},
            {"href": "https://other.org/", "text": "Partner", "position": 3},
        ],
        "schemaScripts": ['{"@context": "https://schema.org", "@type": "Organization"}'],
        "textContent": "Handmade widgets for the home. " * 20,
        "paragraphCount": 4,
    }
    raw.update(overrides)
    return raw


def make_snapshot(**overrides):
    return build_snapshot(
        make_raw(**overrides),
        requested_url="https://example.com",
        status_code=200,
        load_time_ms=1200,
        resources=ResourceStats(requests=12, responses=11, failures=1, total_bytes=20480),
        web_vitals=WebVitals(lcp=1800, fid=40, cls=0.05, fcp=900, ttfb=200),
    )


def default_reply(prompt: str):
    if "rate the page in each category" in prompt:
        return MOCK_SCORES
    if "executive summary" in prompt:
        return MOCK_SUMMARY
    if "Return ONLY a JSON array" in prompt:
        return MOCK_RECOMMENDATIONS
    return "The page has a clear title and a single H1."


class FakeProvider:
    """CompletionProvider whose replies come from a function of the prompt"""

    def __init__(self, reply=default_reply):
        self.reply = reply
        self.prompts: list[str] = []

    async def complete(self, prompt, options=None):
        self.prompts.append(prompt)
        result = self.reply(prompt)
        if isinstance(result, BaseException):
            raise result
        return Completion(text=result, usage=Usage(prompt_tokens=10, completion_tokens=5))


class FakeExtractor:
    """Page extractor stand-in; optionally blocks on a gate before returning"""

    def __init__(self, snapshot=None, error: Exception | None = None, gate: asyncio.Event | None = None):
        self.snapshot = snapshot
        self.error = error
        self.gate = gate
        self.started = asyncio.Event()
        self.closed = False
        self.calls = []

    async def extract(self, url, options=None, cancel_token=None):
        self.calls.append(url)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.snapshot or make_snapshot()

    async def close(self):
        self.closed = True


def make_service(provider=None, extractor=None, store=None, concurrency=1) -> AnalysisService:
    provider = provider or FakeProvider()
    extractor = extractor or FakeExtractor()
    state_machine = JobStateMachine(store or InMemoryJobStore())
    runner = JobRunner(
        state_machine,
        AnalysisOrchestrator(provider, AnalysisConfig(prompt_concurrency=concurrency)),
        extractor_factory=lambda: extractor,
    )
    return AnalysisService(state_machine, PromptCatalog(), runner)


@pytest.fixture
def snapshot():
    return make_snapshot()


@pytest.fixture
def fake_provider():
    return FakeProvider()
