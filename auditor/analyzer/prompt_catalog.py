"""
Prompt catalog: built-in analysis prompts plus optional extras from a JSON file
"""

import json
import logging
from pathlib import Path

from auditor.analyzer.models import PromptSpec
from auditor.exceptions import ConfigError, ValidationError

logger = logging.getLogger(__name__)

_TECHNICAL = """Analyze the following webpage data for technical SEO issues.

Focus areas:
1. Page load performance: loading speed, resource weight and Core Web Vitals
2. Meta tags and structured data: title, meta description, canonical URL and schema markup
3. HTML structure: heading hierarchy, semantic markup and content structure
4. Mobile readiness: viewport settings and mobile optimization
5. Crawlability: robots directives, SSL and indexability

For each area give the current status, concrete issues found, specific fixes and a
priority (High/Medium/Low) with the expected SEO impact."""

_CONTENT = """Evaluate the content quality and on-page optimization of this webpage.

Criteria:
1. Relevance: does the content match the likely search intent?
2. Keyword usage: natural integration of the main topics and phrases
3. Structure and readability: formatting, paragraphing and scannability
4. Depth and authority: expertise, trustworthiness and supporting detail
5. Freshness: does the content look current?

Score each criterion from 1 to 10, list strengths, and give prioritized suggestions
for improving the content."""

_COMPETITIVE = """Perform a competitive analysis based on the webpage content and structure.

Framework:
1. Unique value propositions visible on the page
2. Content gaps: topics a competing page would likely cover that this one misses
3. Technical advantages or disadvantages versus a typical competitor
4. User experience differentiators
5. Market positioning conveyed by the copy

Finish with actionable recommendations for differentiating the page in search results."""

_UX = """Conduct a user experience audit of this webpage.

Areas:
1. Navigation and information architecture
2. Accessibility: alt text, heading semantics, link text
3. Visual hierarchy as implied by the document structure
4. Mobile experience
5. Conversion paths and calls to action

For each area describe the issues that hurt engagement or rankings and how to fix them,
then give a prioritized improvement roadmap."""

_LOCAL = """Analyze the webpage for local SEO opportunities.

Factors:
1. Business details: name, address and phone consistency
2. LocalBusiness and related schema markup
3. Location-specific content and keywords
4. Local citation and link opportunities
5. Signals that tie the page to a business profile on maps and local search

Rate the local SEO readiness and list the missing elements with implementation steps."""

DEFAULT_PROMPTS = [
    PromptSpec(
        id="seo-technical-analysis",
        name="Technical SEO Analysis",
        category="technical",
        content=_TECHNICAL,
    ),
    PromptSpec(
        id="content-quality-review",
        name="Content Quality Review",
        category="content",
        content=_CONTENT,
    ),
    PromptSpec(
        id="competitive-analysis",
        name="Competitive Analysis",
        category="competitive",
        content=_COMPETITIVE,
    ),
    PromptSpec(
        id="user-experience-audit",
        name="User Experience Audit",
        category="ux",
        content=_UX,
    ),
    PromptSpec(
        id="local-seo-analysis",
        name="Local SEO Analysis",
        category="local",
        content=_LOCAL,
    ),
]


class PromptCatalog:
    """Read-only lookup of PromptSpecs by id or default category set"""

    def __init__(
        self,
        prompts: list[PromptSpec] | None = None,
        default_categories: list[str] | None = None,
    ):
        self._prompts: dict[str, PromptSpec] = {}
        for spec in prompts if prompts is not None else DEFAULT_PROMPTS:
            self._prompts[spec.id] = spec
        self.default_categories = list(
            default_categories or ["technical", "content", "competitive"]
        )

    @classmethod
    def from_file(
        cls, prompts_file: str | Path | None, default_categories: list[str] | None = None
    ) -> "PromptCatalog":
        """Built-in prompts plus those in prompts_file; file entries override by id"""
        prompts = list(DEFAULT_PROMPTS)
        if prompts_file:
            prompts.extend(load_prompts_file(prompts_file))
        return cls(prompts, default_categories)

    def list_default(self) -> list[PromptSpec]:
        return [
            spec for spec in self._prompts.values()
            if spec.category in self.default_categories
        ]

    def list_by_ids(self, ids: list[str]) -> list[PromptSpec]:
        """Prompts in the order requested; unknown ids are a ValidationError"""
        unknown = [prompt_id for prompt_id in ids if prompt_id not in self._prompts]
        if unknown:
            raise ValidationError("prompts", f"Unknown prompt IDs: {', '.join(unknown)}")
        seen = set()
        specs = []
        for prompt_id in ids:
            if prompt_id in seen:
                continue
            seen.add(prompt_id)
            specs.append(self._prompts[prompt_id])
        return specs

    def list_all(self) -> list[PromptSpec]:
        return list(self._prompts.values())

    def get(self, prompt_id: str) -> PromptSpec | None:
        return self._prompts.get(prompt_id)

    def resolve(self, ids: list[str] | None) -> list[PromptSpec]:
        """Explicit ids win; an empty selection means the default set"""
        return self.list_by_ids(ids) if ids else self.list_default()


def load_prompts_file(prompts_file: str | Path) -> list[PromptSpec]:
    """Load a JSON list of {id, name, category, content} objects"""
    path = Path(prompts_file)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not load prompts file {path}: {e}") from e

    if not isinstance(data, list):
        raise ConfigError(f"Prompts file {path} must contain a JSON list")

    specs = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict) or not all(
            isinstance(entry.get(key), str) and entry.get(key)
            for key in ("id", "name", "category", "content")
        ):
            raise ConfigError(
                f"Prompt #{i + 1} in {path} needs non-empty id, name, category and content"
            )
        specs.append(
            PromptSpec(
                id=entry["id"],
                name=entry["name"],
                category=entry["category"],
                content=entry["content"],
            )
        )
    logger.info(f"Loaded {len(specs)} prompts from {path}")
    return specs
