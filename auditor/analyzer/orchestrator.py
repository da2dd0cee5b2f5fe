"""
Analysis orchestrator - runs every prompt and derives scores, summary and recommendations
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime

from auditor.analyzer.language import detect_language, get_locale_profile
from auditor.analyzer.models import (
    AnalysisResult,
    LanguageInfo,
    PromptOutcome,
    PromptSpec,
    Recommendation,
)
from auditor.analyzer.payload import build_payload, serialize_payload
from auditor.analyzer.prompt_executor import PromptExecutor
from auditor.analyzer.recommendation_parser import parse_recommendations
from auditor.analyzer.scoring import build_category_scores, parse_category_scores
from auditor.analyzer.seo_checks import priority_matrix, validate_seo
from auditor.analyzer.templates import (
    render_prompt_request,
    render_recommendations,
    render_scores,
    render_summary,
)
from auditor.cancellation import CancellationToken
from auditor.config import AnalysisConfig
from auditor.extractor.models import CrawlSnapshot
from llm.exceptions import ProviderError
from llm.types import CompletionOptions, CompletionProvider

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Unable to generate summary due to analysis error."

ProgressCallback = Callable[[int, int], Awaitable[None]]


class AnalysisOrchestrator:
    """
    Runs the prompt set against one snapshot.

    analyze() never raises for provider trouble: a failing prompt becomes a
    failed PromptOutcome and a failing derived step falls back to a default.
    Only JobCancelled escapes, and only from a checkpoint between calls.
    """

    def __init__(self, provider: CompletionProvider, config: AnalysisConfig | None = None):
        self.provider = provider
        self.config = config or AnalysisConfig()
        self.executor = PromptExecutor(provider)

    async def analyze(
        self,
        snapshot: CrawlSnapshot,
        prompts: list[PromptSpec],
        cancel_token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> AnalysisResult:
        started = time.monotonic()
        language = detect_language(snapshot)
        locale = get_locale_profile(language.code)
        logger.info(
            f"Analyzing {snapshot.url} with {len(prompts)} prompts "
            f"(language: {language.code}, confidence {language.confidence})"
        )

        payload = serialize_payload(
            build_payload(snapshot, language, self.config.max_content_chars)
        )
        outcomes = await self._run_prompts(
            prompts, payload, language, cancel_token, on_progress
        )

        succeeded = [o for o in outcomes if o.succeeded]
        logger.info(f"{len(succeeded)}/{len(outcomes)} prompts succeeded for {snapshot.url}")
        analysis_text = combine_outcomes(succeeded)

        scores = {}
        summary = DEFAULT_SUMMARY
        recommendations: list[Recommendation] = []
        if analysis_text:
            scores = await self._generate_scores(snapshot, analysis_text, cancel_token)
            summary = await self._generate_summary(
                snapshot, analysis_text, language, cancel_token
            )
            recommendations = await self._generate_recommendations(
                snapshot, analysis_text, language, cancel_token
            )
        else:
            logger.warning(f"No prompt succeeded for {snapshot.url}, using default artifacts")

        if "performance" not in scores and snapshot.performance.scores.get("performance") is not None:
            scores["performance"] = snapshot.performance.scores["performance"]

        validation = validate_seo(snapshot, locale)
        return AnalysisResult(
            snapshot=snapshot,
            outcomes=outcomes,
            scores=build_category_scores(scores),
            summary=summary,
            recommendations=recommendations,
            language=language,
            seo_validation=validation,
            priority_matrix=priority_matrix(validation),
            analyzed_at=datetime.now().isoformat(),
            analysis_time_ms=int((time.monotonic() - started) * 1000),
        )

    async def _run_prompts(
        self,
        prompts: list[PromptSpec],
        payload: str,
        language: LanguageInfo,
        cancel_token: CancellationToken | None,
        on_progress: ProgressCallback | None,
    ) -> list[PromptOutcome]:
        """Outcomes come back in the order of the input prompts"""
        total = len(prompts)
        done = 0

        async def run_one(spec: PromptSpec) -> PromptOutcome:
            nonlocal done
            if cancel_token:
                cancel_token.raise_if_cancelled()
            request = render_prompt_request(spec.content, language.name, payload)
            outcome = await self.executor.execute(spec, request)
            done += 1
            if on_progress:
                await on_progress(done, total)
            return outcome

        concurrency = max(1, int(self.config.prompt_concurrency or 1))
        if concurrency == 1:
            return [await run_one(spec) for spec in prompts]

        semaphore = asyncio.Semaphore(concurrency)

        async def limited(spec: PromptSpec) -> PromptOutcome:
            async with semaphore:
                return await run_one(spec)

        tasks = [asyncio.create_task(limited(spec)) for spec in prompts]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # stop sibling prompts once one raises
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _derive(
        self,
        step: str,
        prompt: str,
        cancel_token: CancellationToken | None,
        options: CompletionOptions | None = None,
    ) -> str | None:
        """One derived provider call; None means fall back to the default"""
        if cancel_token:
            cancel_token.raise_if_cancelled()
        try:
            completion = await self.provider.complete(prompt, options)
        except ProviderError as e:
            logger.warning(f"{step} generation failed: {e}")
            return None
        except Exception as e:
            logger.warning(f"{step} generation failed unexpectedly: {e}", exc_info=True)
            return None
        text = completion.text.strip() if isinstance(completion.text, str) else ""
        return text or None

    async def _generate_scores(
        self, snapshot: CrawlSnapshot, analysis_text: str, cancel_token
    ) -> dict[str, int]:
        text = await self._derive(
            "Score", render_scores(snapshot.url, analysis_text), cancel_token,
            CompletionOptions(temperature=0.0),
        )
        return parse_category_scores(text) if text else {}

    async def _generate_summary(
        self, snapshot: CrawlSnapshot, analysis_text: str, language: LanguageInfo, cancel_token
    ) -> str:
        text = await self._derive(
            "Summary", render_summary(snapshot.url, analysis_text, language.name), cancel_token,
            CompletionOptions(max_tokens=1024),
        )
        return text or DEFAULT_SUMMARY

    async def _generate_recommendations(
        self, snapshot: CrawlSnapshot, analysis_text: str, language: LanguageInfo, cancel_token
    ) -> list[Recommendation]:
        prompt = render_recommendations(
            snapshot.url, analysis_text, language.name, get_locale_profile(language.code)
        )
        text = await self._derive("Recommendations", prompt, cancel_token)
        return parse_recommendations(text) if text else []


def combine_outcomes(outcomes: list[PromptOutcome]) -> str:
    return "\n\n".join(
        f"## {o.name} ({o.category})\n{o.result_text}" for o in outcomes if o.result_text
    )
