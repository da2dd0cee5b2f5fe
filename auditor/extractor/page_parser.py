"""
Turn the raw in-page extraction into a CrawlSnapshot.

Pure functions only: nothing here touches the browser, so the whole
snapshot can be built and tested from a plain dict.
"""

import json
import logging
import re
from datetime import datetime
from urllib.parse import urljoin, urlparse

from auditor.extractor.models import (
    HEADING_LEVELS,
    ContentStats,
    CrawlSnapshot,
    Heading,
    ImageInfo,
    LinkInfo,
    MetaData,
    PerformanceData,
    ResourceStats,
    SchemaBlock,
    TechnicalFlags,
    WebVitals,
)
from auditor.extractor.performance import score_all

logger = logging.getLogger(__name__)

SPECIAL_CHAR_RE = re.compile(r"[øæåüßéèçàáíóúñ]", re.IGNORECASE)


def origin_of(url: str) -> tuple[str, str]:
    parsed = urlparse(url)
    return parsed.scheme.lower(), parsed.netloc.lower()


def is_internal_link(href: str, page_url: str) -> bool:
    """Same scheme and host as the page; non-web schemes (mailto:, tel:) count as internal.

    Hrefs that do not parse as URLs are treated as external.
    """
    try:
        scheme, netloc = origin_of(urljoin(page_url, href))
    except ValueError as e:
        logger.debug(f"Unparseable link {href!r}: {e}")
        return False
    if scheme not in ("http", "https"):
        return True
    return (scheme, netloc) == origin_of(page_url)


def parse_meta(raw: dict, page_url: str) -> MetaData:
    tags: dict[str, str] = {}
    open_graph: dict[str, str] = {}
    twitter_card: dict[str, str] = {}

    for name, content in raw.get("metas") or []:
        tags[name] = content
        if name.startswith("og:"):
            open_graph[name[3:]] = content
        elif name.startswith("twitter:"):
            twitter_card[name[8:]] = content

    canonical = raw.get("canonicalHref") or ""
    if canonical:
        try:
            canonical = urljoin(page_url, canonical)
        except ValueError as e:
            logger.debug(f"Keeping unparseable canonical {canonical!r}: {e}")

    return MetaData(
        description=tags.get("description", ""),
        keywords=tags.get("keywords", ""),
        robots=tags.get("robots", ""),
        canonical=canonical,
        lang=raw.get("lang") or "",
        charset=raw.get("charset") or "UTF-8",
        tags=tags,
        open_graph=open_graph,
        twitter_card=twitter_card,
    )


def parse_headings(raw: dict) -> dict[str, list[Heading]]:
    headings = raw.get("headings") or {}
    return {
        level: [
            Heading(text=h.get("text", ""), position=h.get("position", i + 1))
            for i, h in enumerate(headings.get(level) or [])
        ]
        for level in HEADING_LEVELS
    }


def parse_images(raw: dict) -> list[ImageInfo]:
    images = []
    for i, img in enumerate(raw.get("images") or []):
        alt = (img.get("alt") or "").strip()
        images.append(
            ImageInfo(
                src=img.get("src") or "",
                alt=alt,
                has_alt=bool(alt),
                position=img.get("position", i + 1),
                title=img.get("title") or "",
                width=img.get("width"),
                height=img.get("height"),
                loading=img.get("loading") or "",
            )
        )
    return images


def parse_links(raw: dict, page_url: str) -> list[LinkInfo]:
    links = []
    for i, link in enumerate(raw.get("links") or []):
        href = link.get("href") or ""
        if not href:
            continue
        links.append(
            LinkInfo(
                href=href,
                text=link.get("text") or "",
                is_internal=is_internal_link(href, page_url),
                position=link.get("position", i + 1),
                title=link.get("title") or "",
                rel=link.get("rel") or "",
                target=link.get("target") or "",
            )
        )
    return links


def parse_schema_blocks(scripts: list[str]) -> list[SchemaBlock]:
    """Parse ld+json blocks; malformed blocks are skipped"""
    blocks = []
    for position, text in enumerate(scripts or [], start=1):
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            logger.debug(f"Skipping malformed ld+json block #{position}: {e}")
            continue
        if isinstance(data, (dict, list)):
            blocks.append(SchemaBlock(position=position, data=data))
    return blocks


def content_stats(raw: dict, title: str, description: str) -> ContentStats:
    text = raw.get("textContent") or ""
    if not isinstance(text, str):
        text = ""
    words = text.split()
    return ContentStats(
        text_content=text,
        word_count=len(words),
        paragraph_count=int(raw.get("paragraphCount") or 0),
        has_special_chars=any(
            SPECIAL_CHAR_RE.search(value) for value in (text, title, description)
        ),
    )


def technical_flags(
    page_url: str, raw: dict, meta: MetaData, headings: dict[str, list[Heading]]
) -> TechnicalFlags:
    h1_count = len(headings.get("h1", []))
    return TechnicalFlags(
        has_h1=h1_count > 0,
        h1_count=h1_count,
        has_meta_description=bool(meta.description),
        has_meta_keywords=bool(meta.keywords),
        has_canonical=bool(meta.canonical),
        has_robots=bool(meta.robots),
        has_viewport=bool(raw.get("hasViewport")),
        has_ssl=urlparse(page_url).scheme.lower() == "https",
        has_favicon=bool(raw.get("hasFavicon")),
        has_lang=bool(meta.lang),
    )


def build_snapshot(
    raw: dict,
    requested_url: str,
    status_code: int,
    load_time_ms: int,
    resources: ResourceStats | None = None,
    web_vitals: WebVitals | None = None,
    crawled_at: str | None = None,
) -> CrawlSnapshot:
    """Build the immutable snapshot from the in-page extraction result"""
    page_url = raw.get("location") or requested_url
    title = (raw.get("title") or "").strip()
    meta = parse_meta(raw, page_url)
    headings = parse_headings(raw)
    vitals = web_vitals or WebVitals()

    return CrawlSnapshot(
        url=page_url,
        requested_url=requested_url,
        status_code=status_code,
        crawled_at=crawled_at or datetime.now().isoformat(),
        title=title,
        meta=meta,
        headings=headings,
        images=parse_images(raw),
        links=parse_links(raw, page_url),
        schema_markup=parse_schema_blocks(raw.get("schemaScripts") or []),
        content=content_stats(raw, title, meta.description),
        technical=technical_flags(page_url, raw, meta, headings),
        performance=PerformanceData(
            load_time_ms=load_time_ms,
            resources=resources or ResourceStats(),
            web_vitals=vitals,
            scores=score_all(load_time_ms, vitals),
        ),
    )
