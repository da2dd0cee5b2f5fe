"""
Deterministic on-page SEO checks and the priority matrix derived from them
"""

import re

from auditor.analyzer.language import DEFAULT_LOCALE, LocaleProfile
from auditor.analyzer.models import PRIORITY_ORDER
from auditor.extractor.models import HEADING_LEVELS, CrawlSnapshot

CTA_RE = re.compile(
    r"\b(learn more|discover|find out|get|try|start|book|contact|call|visit|shop|buy)\b",
    re.IGNORECASE,
)
PLACEHOLDER_TITLES = ("untitled", "new page")

IMPLEMENTATION_EFFORT = {
    "title_tag": "low",
    "meta_description": "low",
    "heading_structure": "medium",
    "content_length": "high",
    "image_optimization": "medium",
    "internal_linking": "medium",
    "technical_seo": "medium",
}


def _check(score: int, issues: list[str], recommendations: list[str], **extra) -> dict:
    return {"score": score, "issues": issues, "recommendations": recommendations, **extra}


def check_title(title: str, locale: LocaleProfile = DEFAULT_LOCALE) -> dict:
    low, high = locale.title_length
    length = len(title)
    if not title:
        return _check(
            0, ["Missing title tag"],
            ["Add a descriptive title tag with primary keywords"], length=0,
        )

    issues, recs = [], []
    if length < low:
        score = 20
        issues.append(f"Title too short (less than {low} characters)")
        recs.append(f"Expand title to {low}-{high} characters")
    elif length > high:
        score = 60
        issues.append(f"Title too long (more than {high} characters)")
        recs.append(f"Shorten title to {low}-{high} characters to prevent truncation")
    else:
        score = 100

    if any(p in title.lower() for p in PLACEHOLDER_TITLES):
        score = min(score, 30)
        issues.append("Generic or placeholder title detected")
        recs.append("Replace with a specific, keyword-rich title")
    return _check(score, issues, recs, length=length)


def check_meta_description(description: str, locale: LocaleProfile = DEFAULT_LOCALE) -> dict:
    low, high = locale.description_length
    length = len(description)
    if not description:
        return _check(
            0, ["Missing meta description"],
            ["Add a compelling meta description with a call-to-action"], length=0,
        )

    issues, recs = [], []
    if length < low:
        score = 50
        issues.append(f"Meta description too short (less than {low} characters)")
        recs.append(f"Expand to {low}-{high} characters")
    elif length > high:
        score = 70
        issues.append(f"Meta description too long (more than {high} characters)")
        recs.append(f"Shorten to {low}-{high} characters to prevent truncation")
    else:
        score = 100

    if not CTA_RE.search(description):
        score = max(score - 20, 0)
        issues.append("Missing call-to-action in meta description")
        recs.append("Add a call-to-action to improve click-through rate")
    return _check(score, issues, recs, length=length)


def check_headings(snapshot: CrawlSnapshot) -> dict:
    hierarchy = {level: len(snapshot.headings.get(level, [])) for level in HEADING_LEVELS}
    if sum(hierarchy.values()) == 0:
        return _check(
            0, ["No headings found"],
            ["Add a heading structure (H1, H2, H3) with target keywords"],
            hierarchy=hierarchy,
        )

    issues, recs = [], []
    if hierarchy["h1"] == 0:
        score = 0
        issues.append("Missing H1 tag")
        recs.append("Add a single H1 tag with the primary keyword")
    elif hierarchy["h1"] > 1:
        score = 40
        issues.append("Multiple H1 tags found")
        recs.append("Use only one H1 tag per page")
    else:
        score = 80

    if hierarchy["h2"] == 0:
        score = max(score - 20, 0)
        issues.append("Missing H2 subheadings")
        recs.append("Add H2 subheadings to structure the content")
        if hierarchy["h3"] > 0:
            score = max(score - 15, 0)
            issues.append("H3 used without H2 (improper hierarchy)")
            recs.append("Keep a proper heading hierarchy (H1 > H2 > H3)")

    if score > 60:
        score = 100
    return _check(score, issues, recs, hierarchy=hierarchy)


def check_content_length(word_count: int) -> dict:
    if word_count < 300:
        return _check(
            20, ["Insufficient content length (less than 300 words)"],
            ["Expand content to at least 1000 words for competitive keywords"],
            word_count=word_count,
        )
    if word_count < 600:
        return _check(
            50, ["Content length below competitive threshold (less than 600 words)"],
            ["Consider expanding content for better search visibility"],
            word_count=word_count,
        )
    if word_count < 1000:
        return _check(
            70, ["Content length below optimal range (less than 1000 words)"],
            ["Expand content to 1000+ words"],
            word_count=word_count,
        )
    return _check(100, [], [], word_count=word_count)


def check_images(snapshot: CrawlSnapshot) -> dict:
    total = len(snapshot.images)
    if total == 0:
        return _check(
            50, ["No images found"],
            ["Add relevant images with descriptive alt text"], image_count=0,
        )
    missing = len(snapshot.images_without_alt)
    if missing == 0:
        return _check(100, [], [], image_count=total)
    score = 70 if total - missing > missing else 30
    return _check(
        score, [f"{missing} images missing alt text"],
        ["Add descriptive alt text to all images"], image_count=total,
    )


def check_internal_links(snapshot: CrawlSnapshot) -> dict:
    internal = len(snapshot.internal_links)
    external = len(snapshot.external_links)
    counts = {"internal_count": internal, "external_count": external}
    if internal + external == 0:
        return _check(
            30, ["No links found on page"],
            ["Add relevant internal and external links"], **counts,
        )
    if internal == 0:
        return _check(
            40, ["No internal links found"],
            ["Add 2-5 contextual internal links to related pages"], **counts,
        )
    if internal < 2:
        return _check(
            60, ["Too few internal links"],
            ["Add more internal links to improve site navigation"], **counts,
        )
    if internal > 10:
        return _check(
            80, ["Too many internal links may dilute link equity"],
            ["Focus on 3-8 high-quality internal links"], **counts,
        )
    return _check(100, [], [], **counts)


def check_technical(snapshot: CrawlSnapshot) -> dict:
    issues, recs = [], []
    passed = 0

    if snapshot.technical.has_viewport:
        passed += 1
    else:
        issues.append("Missing viewport meta tag")
        recs.append("Add a viewport meta tag for mobile optimization")

    if snapshot.technical.has_canonical:
        passed += 1
    else:
        issues.append("Missing canonical URL")
        recs.append("Add a canonical URL to prevent duplicate content issues")

    if snapshot.technical.has_lang:
        passed += 1
    else:
        issues.append("Missing language attribute")
        recs.append("Add a lang attribute to the html tag")

    robots = snapshot.meta.robots.lower()
    if robots and "noindex" not in robots:
        passed += 1
    elif "noindex" in robots:
        issues.append("Page is set to noindex")
        recs.append("Remove noindex if the page should be indexed")
    else:
        issues.append("Missing robots directive")
        recs.append("Add an appropriate robots meta tag")

    return _check(round(passed / 4 * 100), issues, recs)


def validate_seo(snapshot: CrawlSnapshot, locale: LocaleProfile = DEFAULT_LOCALE) -> dict:
    """Run every check; the result maps area -> check plus an overall_score"""
    checks = {
        "title_tag": check_title(snapshot.title, locale),
        "meta_description": check_meta_description(snapshot.meta.description, locale),
        "heading_structure": check_headings(snapshot),
        "content_length": check_content_length(snapshot.content.word_count),
        "image_optimization": check_images(snapshot),
        "internal_linking": check_internal_links(snapshot),
        "technical_seo": check_technical(snapshot),
    }
    checks["overall_score"] = round(
        sum(c["score"] for c in checks.values()) / len(checks)
    )
    return checks


def priority_matrix(validation: dict) -> list[dict]:
    """Areas below 50 are critical, 50-69 high; everything else is left out"""
    entries = []
    for area, check in validation.items():
        if not isinstance(check, dict):
            continue
        score = check["score"]
        if score < 50:
            priority, impact = "critical", "high"
        elif score < 70:
            priority, impact = "high", "medium"
        else:
            continue
        entries.append({
            "area": area,
            "priority": priority,
            "score": score,
            "impact": impact,
            "effort": IMPLEMENTATION_EFFORT.get(area, "medium"),
            "issues": check.get("issues", []),
            "recommendations": check.get("recommendations", []),
        })
    return sorted(entries, key=lambda e: PRIORITY_ORDER[e["priority"]])
