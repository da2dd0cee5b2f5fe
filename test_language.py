"""Tests for website language detection and locale profiles"""

from auditor.analyzer.language import (
    detect_language,
    get_locale_profile,
    language_name,
    marker_overlap,
)
from conftest import make_snapshot

DANISH_TEXT = (
    "Vi har det bedste udvalg af cykler til hele familien, og det er ikke svært at "
    "finde en der passer. Se med på vores tilbud som kan være noget for dig."
)
GERMAN_TEXT = (
    "Wir sind für Sie da und helfen mit der Auswahl. Das ist nicht schwer, die "
    "Lieferung auf Rechnung wird schnell bearbeitet und geprüft."
)
ENGLISH_TEXT = (
    "We offer e-mail support for non-profit organizations in the US. "
    "Plans start at $9 per month. "
) * 10


def test_lang_attribute_wins_when_not_english():
    info = detect_language(make_snapshot(lang="de-DE", textContent=DANISH_TEXT))
    assert info.code == "de"
    assert info.name == "German"
    assert info.confidence == 0.9
    assert info.sources == ["html-lang-attribute"]


def test_content_markers_used_without_lang_attribute():
    info = detect_language(make_snapshot(lang="", textContent=DANISH_TEXT))
    assert info.code == "da"
    assert info.sources == ["content-analysis"]
    assert 0.3 <= info.confidence <= 0.8


def test_strong_content_markers_override_english_attribute():
    info = detect_language(make_snapshot(lang="en", textContent=GERMAN_TEXT))
    assert info.code == "de"
    assert info.sources == ["content-analysis"]


def test_english_text_keeps_english_attribute():
    info = detect_language(make_snapshot(lang="en", textContent=ENGLISH_TEXT))
    assert info.code == "en"
    assert info.name == "English"
    assert info.sources == ["html-lang-attribute"]


def test_english_markers_compete_without_attribute():
    info = detect_language(make_snapshot(lang="", textContent=ENGLISH_TEXT))
    assert info.code == "en"


def test_english_page_defaults_to_english():
    info = detect_language(make_snapshot(lang=""))
    assert info.code == "en"
    assert info.confidence == 0.3
    assert info.sources == ["default"]


def test_weak_marker_overlap_ignored():
    # only "og" and "til" match: 0.2 overlap
    info = detect_language(
        make_snapshot(lang="", title="Rock radio", textContent="Rock og roll til the end")
    )
    assert info.code == "en"


def test_marker_overlap_is_a_ratio_of_ten():
    scores = marker_overlap("und der die das")
    assert scores["de"] == 0.4


def test_locale_profiles():
    assert get_locale_profile("da").title_length == (30, 55)
    assert get_locale_profile("da").description_length == (120, 155)
    assert get_locale_profile("xx").title_length == (30, 60)
    assert get_locale_profile("xx").description_length == (120, 160)
    assert "google.de" in get_locale_profile("de").search_engines


def test_language_names():
    assert language_name("sv") == "Swedish"
    assert language_name("") == "English"


def test_unknown_lang_attribute_keeps_its_code_as_name():
    info = detect_language(make_snapshot(lang="ja"))
    assert info.code == "ja"
    assert info.name == "ja"
