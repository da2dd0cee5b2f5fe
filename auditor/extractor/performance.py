"""
Core Web Vitals and load-time scoring
"""

from auditor.extractor.models import WebVitals

# (good, needs improvement) upper bounds per metric
VITAL_THRESHOLDS = {
    "lcp": (2500, 4000),
    "fid": (100, 300),
    "cls": (0.1, 0.25),
    "fcp": (1800, 3000),
    "ttfb": (600, 1500),
}

PERFORMANCE_WEIGHTS = {
    "load": 0.25,
    "lcp": 0.25,
    "fid": 0.20,
    "cls": 0.20,
    "fcp": 0.10,
}

LOAD_TIME_STEPS = ((1500, 100), (2500, 90), (3500, 75), (5000, 50))


def score_load_time(load_time_ms: float) -> int:
    for limit, score in LOAD_TIME_STEPS:
        if load_time_ms <= limit:
            return score
    return 25


def score_vital(metric: str, value: float | None) -> int | None:
    """100 / 75 / 25 for good / needs improvement / poor; None if unmeasured"""
    if value is None:
        return None
    good, fair = VITAL_THRESHOLDS[metric]
    if value <= good:
        return 100
    if value <= fair:
        return 75
    return 25


def performance_score(load_time_ms: float | None, vitals: WebVitals) -> int:
    """
    Weighted blend of load time and vitals.

    Only measured components count, and the result is divided by the sum of
    their weights so a page is not penalised for a metric the browser never
    reported. Returns 50 when nothing was measured.
    """
    components = {}
    if load_time_ms:
        components["load"] = score_load_time(load_time_ms)
    for metric in ("lcp", "fid", "cls", "fcp"):
        value = score_vital(metric, getattr(vitals, metric))
        if value is not None:
            components[metric] = value

    if not components:
        return 50

    total_weight = sum(PERFORMANCE_WEIGHTS[name] for name in components)
    weighted = sum(PERFORMANCE_WEIGHTS[name] * value for name, value in components.items())
    return round(weighted / total_weight)


def score_all(load_time_ms: float | None, vitals: WebVitals) -> dict[str, int | None]:
    scores: dict[str, int | None] = {
        "performance": performance_score(load_time_ms, vitals),
    }
    for metric in VITAL_THRESHOLDS:
        scores[metric] = score_vital(metric, getattr(vitals, metric))
    return scores
