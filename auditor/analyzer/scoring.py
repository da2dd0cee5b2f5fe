"""
Category score parsing and the weighted overall score
"""

import json
import logging
import re

from auditor.analyzer.models import CATEGORY_WEIGHTS, CategoryScores

logger = logging.getLogger(__name__)

_KEY_ALIASES = {
    "technical": "technical",
    "technical_seo": "technical",
    "content": "content",
    "content_quality": "content",
    "performance": "performance",
    "user_experience": "user_experience",
    "userexperience": "user_experience",
    "ux": "user_experience",
    "accessibility": "accessibility",
}

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def clip_score(value: float) -> int:
    return int(max(0, min(100, round(value))))


def _coerce_score(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, dict):
        value = value.get("score")
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return None
    if isinstance(value, (int, float)):
        return clip_score(value)
    return None


def _load_object(text: str) -> dict | None:
    candidates = [m.group(1) for m in _FENCE_RE.finditer(text)]
    match = _OBJECT_RE.search(text)
    if match:
        candidates.append(match.group(0))
    for candidate in candidates:
        try:
            data = json.loads(candidate.strip())
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def parse_category_scores(text: str) -> dict[str, int]:
    """Category -> score for every category the text gives a number for"""
    data = _load_object(text or "")
    if data is None:
        logger.warning("Could not find a JSON score object in the model response")
        return {}
    if isinstance(data.get("scores"), dict):
        data = data["scores"]

    scores: dict[str, int] = {}
    for key, value in data.items():
        category = _KEY_ALIASES.get(re.sub(r"[\s-]", "_", str(key)).lower())
        if category is None:
            continue
        score = _coerce_score(value)
        if score is not None:
            scores[category] = score
    return scores


def weighted_overall(scores: dict[str, float]) -> int:
    """
    Weighted average over the categories present, clipped to 0-100.

    Weights of missing categories are left out of the denominator; with no
    categories at all the overall is 0.
    """
    present = {k: v for k, v in scores.items() if k in CATEGORY_WEIGHTS and v is not None}
    if not present:
        return 0
    total_weight = sum(CATEGORY_WEIGHTS[k] for k in present)
    weighted = sum(CATEGORY_WEIGHTS[k] * clip_score(v) for k, v in present.items())
    return clip_score(weighted / total_weight)


def build_category_scores(scores: dict[str, int]) -> CategoryScores:
    measured = [k for k in CATEGORY_WEIGHTS if k in scores]
    return CategoryScores(
        technical=scores.get("technical", 0),
        content=scores.get("content", 0),
        performance=scores.get("performance", 0),
        user_experience=scores.get("user_experience", 0),
        accessibility=scores.get("accessibility", 0),
        overall=weighted_overall(scores),
        measured=measured,
    )
