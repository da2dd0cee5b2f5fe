"""
Size-bounded serialization of a snapshot for prompt requests
"""

import json

from auditor.analyzer.language import get_locale_profile
from auditor.analyzer.models import LanguageInfo
from auditor.extractor.models import CrawlSnapshot

TRUNCATION_MARKER = "..."


def truncate_text(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def build_payload(
    snapshot: CrawlSnapshot, language: LanguageInfo, max_content_chars: int = 8000
) -> dict:
    """Only the body text is truncated; structural data is always complete"""
    return {
        "url": snapshot.url,
        "status_code": snapshot.status_code,
        "title": snapshot.title,
        "description": snapshot.meta.description,
        "language": {
            "detected": language.code,
            "name": language.name,
            "confidence": language.confidence,
            "cultural_context": get_locale_profile(language.code).to_dict(),
        },
        "encoding": {
            "charset": snapshot.meta.charset,
            "has_special_chars": snapshot.content.has_special_chars,
        },
        "content": {
            "word_count": snapshot.content.word_count,
            "paragraph_count": snapshot.content.paragraph_count,
            "headings": {
                level: [h.text for h in items]
                for level, items in snapshot.headings.items()
            },
            "image_count": len(snapshot.images),
            "images_without_alt": len(snapshot.images_without_alt),
            "links": {
                "internal": len(snapshot.internal_links),
                "external": len(snapshot.external_links),
                "total": len(snapshot.links),
            },
            "text_sample": truncate_text(snapshot.content.text_content, max_content_chars),
        },
        "technical": {
            "has_h1": snapshot.technical.has_h1,
            "h1_count": snapshot.technical.h1_count,
            "has_meta_description": snapshot.technical.has_meta_description,
            "has_canonical": snapshot.technical.has_canonical,
            "has_robots": snapshot.technical.has_robots,
            "has_viewport": snapshot.technical.has_viewport,
            "has_ssl": snapshot.technical.has_ssl,
            "has_favicon": snapshot.technical.has_favicon,
            "lang": snapshot.meta.lang,
        },
        "performance": {
            "load_time_ms": snapshot.performance.load_time_ms,
            "resources": {
                "requests": snapshot.performance.resources.requests,
                "responses": snapshot.performance.resources.responses,
                "failures": snapshot.performance.resources.failures,
                "total_bytes": snapshot.performance.resources.total_bytes,
            },
            "core_web_vitals": {
                "lcp": snapshot.performance.web_vitals.lcp,
                "fid": snapshot.performance.web_vitals.fid,
                "cls": snapshot.performance.web_vitals.cls,
                "fcp": snapshot.performance.web_vitals.fcp,
                "ttfb": snapshot.performance.web_vitals.ttfb,
            },
            "scores": snapshot.performance.scores,
        },
        "meta": {
            "canonical": snapshot.meta.canonical,
            "robots": snapshot.meta.robots,
            "keywords": snapshot.meta.keywords,
            "open_graph": snapshot.meta.open_graph,
            "twitter_card": snapshot.meta.twitter_card,
            "schema_types": _schema_types(snapshot),
        },
    }


def _schema_types(snapshot: CrawlSnapshot) -> list[str]:
    types = []
    for block in snapshot.schema_markup:
        items = block.data if isinstance(block.data, list) else [block.data]
        for item in items:
            if isinstance(item, dict) and "@type" in item:
                types.append(str(item["@type"]))
    return types


def serialize_payload(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)
