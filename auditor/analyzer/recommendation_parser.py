"""
Recommendation parsing from free-form model output.

Strategies, in order: fenced code blocks, the widest [...] span, then
recovery of complete {...} objects from a truncated array. When all of
them fail the caller gets one fallback recommendation carrying the
cleaned raw text.
"""

import json
import logging
import re

from auditor.analyzer.models import PRIORITY_ORDER, Recommendation

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_]\w*)\s*:")

_FIELD_ALIASES = {
    "whyItMatters": "why_it_matters",
    "why": "why_it_matters",
    "description": "why_it_matters",
    "expectedOutcome": "expected_outcome",
    "expected_result": "expected_outcome",
}
_LEVELS = ("high", "medium", "low")
_DIFFICULTIES = ("beginner", "intermediate", "advanced")
MAX_FALLBACK_CHARS = 2000


def clean_json(text: str) -> str:
    text = text.replace("```json", "").replace("```", "")
    text = _TRAILING_COMMA_RE.sub(r"\1", text)
    text = _BARE_KEY_RE.sub(r'\1"\2":', text)
    return text.strip()


def _try_array(text: str) -> list[dict] | None:
    for candidate in (text, clean_json(text)):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict) and isinstance(data.get("recommendations"), list):
            data = data["recommendations"]
        if isinstance(data, list):
            items = [item for item in data if isinstance(item, dict) and item.get("title")]
            if items:
                return items
    return None


def from_code_blocks(text: str) -> list[dict] | None:
    for match in _FENCE_RE.finditer(text):
        items = _try_array(match.group(1))
        if items:
            return items
    return None


def from_greedy_array(text: str) -> list[dict] | None:
    match = _ARRAY_RE.search(text)
    return _try_array(match.group(0)) if match else None


def iter_balanced_objects(text: str):
    """Yield every top-level {...} span, honouring string literals"""
    depth = 0
    start = None
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start is not None:
                yield text[start:i + 1]
                start = None


def from_partial_objects(text: str) -> list[dict] | None:
    array_start = text.find("[")
    if array_start == -1:
        return None
    items = []
    for chunk in iter_balanced_objects(text[array_start:]):
        data = _load_object(chunk)
        if isinstance(data, dict) and data.get("title"):
            items.append(data)
    return items or None


def _load_object(chunk: str):
    for candidate in (chunk, clean_json(chunk)):
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return None


def normalize(item: dict) -> Recommendation:
    data = {}
    for key, value in item.items():
        data[_FIELD_ALIASES.get(key, key)] = value

    def pick(key: str, allowed: tuple[str, ...], default: str) -> str:
        value = str(data.get(key) or "").strip().lower()
        return value if value in allowed else default

    return Recommendation(
        title=str(data["title"]).strip(),
        priority=pick("priority", tuple(PRIORITY_ORDER), "medium"),
        category=str(data.get("category") or "general").strip().lower(),
        impact=pick("impact", _LEVELS, "medium"),
        effort=pick("effort", _LEVELS, "medium"),
        difficulty=pick("difficulty", _DIFFICULTIES, "intermediate"),
        why_it_matters=str(data.get("why_it_matters") or ""),
        expected_outcome=str(data.get("expected_outcome") or ""),
    )


def sort_by_priority(recommendations: list[Recommendation]) -> list[Recommendation]:
    return sorted(recommendations, key=lambda r: PRIORITY_ORDER.get(r.priority, 2))


def clean_raw_text(text: str) -> str:
    text = text.replace("```json", "").replace("```", "")
    text = re.sub(r"\n{3,}", "\n\n", text).strip()
    if len(text) > MAX_FALLBACK_CHARS:
        text = text[:MAX_FALLBACK_CHARS] + "..."
    return text


def fallback_recommendation(raw_text: str) -> Recommendation:
    return Recommendation(
        title="Review SEO Analysis Results",
        priority="high",
        category="general",
        impact="high",
        effort="low",
        difficulty="intermediate",
        why_it_matters="The analysis contains insights for improving this page's SEO.",
        expected_outcome="A clearer picture of the page's SEO opportunities.",
        details=clean_raw_text(raw_text),
    )


def parse_recommendations(text: str) -> list[Recommendation]:
    """Always returns at least one recommendation for non-empty text"""
    if not text or not text.strip():
        return []
    for strategy in (from_code_blocks, from_greedy_array, from_partial_objects):
        items = strategy(text)
        if items:
            logger.debug(f"Parsed {len(items)} recommendations via {strategy.__name__}")
            return sort_by_priority([normalize(item) for item in items])

    logger.warning("Could not parse recommendations JSON, using fallback recommendation")
    return [fallback_recommendation(text)]
