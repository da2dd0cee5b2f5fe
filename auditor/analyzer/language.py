"""
Website language detection and per-locale SEO targets
"""

import re
from dataclasses import dataclass

from auditor.analyzer.models import LanguageInfo
from auditor.extractor.models import CrawlSnapshot

DEFAULT_LANGUAGE = "en"
DEFAULT_CONFIDENCE = 0.3
LANG_ATTRIBUTE_CONFIDENCE = 0.9
MIN_MARKER_OVERLAP = 0.3
# Content must beat this to override an explicit lang="en"
ENGLISH_OVERRIDE_OVERLAP = 0.5

LANGUAGE_NAMES = {
    "en": "English",
    "da": "Danish",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "nl": "Dutch",
    "sv": "Swedish",
    "no": "Norwegian",
}

# Ten frequent function words per language
MARKER_WORDS = {
    "en": ("the", "and", "of", "to", "in", "is", "for", "with", "you", "we"),
    "da": ("og", "til", "med", "på", "der", "det", "som", "ikke", "af", "være"),
    "de": ("und", "der", "die", "das", "mit", "auf", "für", "nicht", "ist", "werden"),
    "fr": ("le", "la", "et", "à", "un", "il", "être", "les", "avoir", "pour"),
    "es": ("el", "la", "que", "y", "en", "un", "ser", "se", "no", "los"),
    "it": ("il", "di", "che", "e", "la", "per", "un", "in", "con", "non"),
    "nl": ("de", "het", "van", "en", "in", "op", "voor", "met", "als", "zijn"),
    "sv": ("och", "att", "det", "på", "av", "för", "till", "med", "om", "är"),
    "no": ("og", "at", "det", "på", "av", "for", "til", "med", "om", "ikke"),
}

_WORD_RE = re.compile(r"\w+", re.UNICODE)


@dataclass(frozen=True)
class LocaleProfile:
    title_length: tuple[int, int] = (30, 60)
    description_length: tuple[int, int] = (120, 160)
    search_engines: tuple[str, ...] = ("google.com",)
    cultural_notes: str = "Standard international SEO practices apply."

    def to_dict(self) -> dict:
        return {
            "title_length": {"min": self.title_length[0], "max": self.title_length[1]},
            "description_length": {
                "min": self.description_length[0],
                "max": self.description_length[1],
            },
            "search_engines": list(self.search_engines),
            "cultural_notes": self.cultural_notes,
        }


DEFAULT_LOCALE = LocaleProfile()

LOCALE_PROFILES = {
    "da": LocaleProfile(
        title_length=(30, 55),
        description_length=(120, 155),
        search_engines=("google.dk", "bing.com"),
        cultural_notes="Danish users prefer direct, informative content. "
        "Local business information is highly valued.",
    ),
    "de": LocaleProfile(
        search_engines=("google.de", "bing.de"),
        cultural_notes="German users appreciate detailed, authoritative content. "
        "Technical specifications are important.",
    ),
    "fr": LocaleProfile(
        search_engines=("google.fr", "bing.fr"),
        cultural_notes="French users value elegant, well-structured content. "
        "Cultural references should be localized.",
    ),
    "es": LocaleProfile(
        search_engines=("google.es", "google.com.mx", "google.com.ar"),
        cultural_notes="Spanish content varies by region. "
        "Consider local dialects and cultural preferences.",
    ),
}


def language_name(code: str) -> str:
    """Display name for a language code; unknown codes are returned as-is"""
    if not code:
        return LANGUAGE_NAMES[DEFAULT_LANGUAGE]
    return LANGUAGE_NAMES.get(code, code)


def get_locale_profile(code: str) -> LocaleProfile:
    return LOCALE_PROFILES.get(code, DEFAULT_LOCALE)


def marker_overlap(text: str) -> dict[str, float]:
    """Share of each language's marker words that occur in text"""
    words = set(_WORD_RE.findall(text.lower()))
    return {
        lang: sum(1 for marker in markers if marker in words) / len(markers)
        for lang, markers in MARKER_WORDS.items()
    }


def detect_language(snapshot: CrawlSnapshot) -> LanguageInfo:
    """
    Detect the page language.

    A non-English html lang attribute wins outright. Otherwise the title,
    description and body text are scanned for marker words. A foreign
    language must reach MIN_MARKER_OVERLAP and beat the English markers;
    against an explicit lang="en" it must also exceed ENGLISH_OVERRIDE_OVERLAP.
    Failing that the page is English.
    """
    lang_attr = (snapshot.meta.lang or "").strip().lower()
    primary = lang_attr.split("-")[0].split("_")[0]
    if primary and primary != DEFAULT_LANGUAGE:
        return LanguageInfo(
            code=primary,
            name=language_name(primary),
            confidence=LANG_ATTRIBUTE_CONFIDENCE,
            sources=["html-lang-attribute"],
        )

    text = " ".join(
        (snapshot.title, snapshot.meta.description, snapshot.content.text_content)
    )
    scores = marker_overlap(text)
    best_lang, best_score = None, scores.pop(DEFAULT_LANGUAGE)
    for lang, score in scores.items():
        if score <= best_score or score < MIN_MARKER_OVERLAP:
            continue
        if primary == DEFAULT_LANGUAGE and score <= ENGLISH_OVERRIDE_OVERLAP:
            continue
        best_lang, best_score = lang, score

    if best_lang:
        return LanguageInfo(
            code=best_lang,
            name=language_name(best_lang),
            confidence=round(min(0.8, best_score), 2),
            sources=["content-analysis"],
        )

    if primary == DEFAULT_LANGUAGE:
        return LanguageInfo(
            code=DEFAULT_LANGUAGE,
            name=language_name(DEFAULT_LANGUAGE),
            confidence=0.6,
            sources=["html-lang-attribute"],
        )

    return LanguageInfo(
        code=DEFAULT_LANGUAGE,
        name=language_name(DEFAULT_LANGUAGE),
        confidence=DEFAULT_CONFIDENCE,
        sources=["default"],
    )
