"""
Page extractor - headless browser crawl of a single URL
"""

from auditor.extractor.models import (
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
from auditor.extractor.page_extractor import PageExtractor
from auditor.extractor.page_parser import build_snapshot

__all__ = [
    "ContentStats",
    "CrawlSnapshot",
    "Heading",
    "ImageInfo",
    "LinkInfo",
    "MetaData",
    "PageExtractor",
    "PerformanceData",
    "ResourceStats",
    "SchemaBlock",
    "TechnicalFlags",
    "WebVitals",
    "build_snapshot",
]
