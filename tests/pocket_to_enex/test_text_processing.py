"""Tests for paragraph segmentation, markers and binary/encoding detection."""

from __future__ import annotations

from src.functions.pocket_to_enex.core.contracts import ExtractionMethod
from src.functions.pocket_to_enex.core.processors import (
    build_result,
    classify_url,
    content_type_reference,
    decode_html,
    detect_encoding,
    extract_region_text,
    is_binary_url,
    is_text_content_type,
    label_method,
    segment_paragraphs,
)
from src.functions.pocket_to_enex.core.processors.binary_detector import binary_reference

from tests.pocket_to_enex.fakes import ARTICLE_TEXT

URL = "https://example.com/story"


def test_segment_paragraphs_groups_sentences_past_target_length() -> None:
    paragraphs = segment_paragraphs(ARTICLE_TEXT)

    assert len(paragraphs) == 2
    assert paragraphs[0].startswith("The city council approved")
    assert paragraphs[0].endswith("three years.")
    assert paragraphs[1].startswith("Residents who spoke")


def test_segment_paragraphs_drops_short_fragments() -> None:
    text = "Too short. This sentence is long enough to be kept around. Tiny!"

    assert segment_paragraphs(text) == ["This sentence is long enough to be kept around."]


def test_segment_paragraphs_breaks_on_section_marker() -> None:
    heading = "■ 第一章の見出しはここにあり、ここから本編が始まります。"
    body = "本文は次の段落から始まり、十分な長さがあります。"

    paragraphs = segment_paragraphs(heading + body)

    assert paragraphs == [heading, body]


def test_section_marker_closes_paragraph_before_target_length() -> None:
    lead = "This opening sentence is comfortably over twenty characters."
    labelled = "Details follow here： the venue has been confirmed."
    tail = "A closing sentence starts a brand new paragraph afterwards."

    paragraphs = segment_paragraphs(f"{lead} {labelled} {tail}")

    assert paragraphs == [f"{lead} {labelled}", tail]
    assert len(paragraphs[0]) < 150


def test_text_of_forty_chars_after_segmentation_fails() -> None:
    text = "A" * 39 + ". Tiny one. Small bit."

    result = build_result(URL, text, ExtractionMethod.LIGHTWEIGHT)

    assert not result.ok
    assert "Content could not be extracted" in result.text
    assert "40 chars" in result.reason


def test_fifty_char_boundary_passes() -> None:
    result = build_result(URL, "B" * 49 + ".", ExtractionMethod.LIGHTWEIGHT)

    assert result.ok
    assert result.text == "<p>" + "B" * 49 + ".</p>\n"


def test_build_result_escapes_markup() -> None:
    text = "Fish & chips <b>are</b> the best dinner anyone could order on a Friday."

    result = build_result(URL, text, ExtractionMethod.BROWSER)

    assert result.ok
    assert "Fish &amp; chips &lt;b&gt;are&lt;/b&gt;" in result.text
    assert result.method is ExtractionMethod.BROWSER


def test_browser_failure_text_mentions_browser() -> None:
    result = build_result(URL, "short", ExtractionMethod.BROWSER)

    assert result.text == f"<p>Content could not be extracted from {URL} (browser)</p>"


def test_label_method_appends_success_marker() -> None:
    labelled = label_method("<p>Body</p>\n", ExtractionMethod.LIGHTWEIGHT)

    assert labelled == "<p>Body</p>\n\n<p><small>[Scraped via HTTP]</small></p>"


def test_label_method_places_failure_marker_after_first_paragraph() -> None:
    labelled = label_method("<p>Failed to scrape content</p><p>more</p>", ExtractionMethod.FAILED)

    assert labelled == (
        "<p>Failed to scrape content</p>\n<p><small>[Scraping Failed]</small></p><p>more</p>"
    )


def test_extract_region_text_prefers_article_container() -> None:
    html = f"""
    <html><body>
      <nav>Home | News | Sport | Weather | Contact us and more links here</nav>
      <article><div class="content">{ARTICLE_TEXT}</div></article>
      <footer>Copyright notice that is rather long but should never be kept in output</footer>
      <script>var tracking = "should disappear";</script>
    </body></html>
    """

    text = extract_region_text(html)

    assert "transit plan" in text
    assert "Home | News" not in text
    assert "Copyright" not in text
    assert "tracking" not in text


def test_extract_region_text_returns_empty_for_tiny_page() -> None:
    assert extract_region_text("<html><body><div>hi</div></body></html>") == ""


def test_classify_url_by_extension() -> None:
    assert classify_url("https://example.com/photo.JPG") == "image"
    assert classify_url("https://example.com/talk.mp3?x=1") == "audio"
    assert classify_url("https://example.com/paper.pdf") == "pdf"
    assert classify_url("https://example.com/setup.exe") == "other"
    assert classify_url("https://example.com/article.html") is None
    assert not is_binary_url("https://example.com/news/story")


def test_binary_reference_blocks() -> None:
    image = binary_reference("https://example.com/img/cat.png")
    assert '<img src="https://example.com/img/cat.png" alt="Image"/>' in image
    assert "Image: cat.png" in image

    font = binary_reference("https://example.com/fonts/sans.woff2")
    assert "Binary file (WOFF2)" in font


def test_content_type_detection() -> None:
    assert is_text_content_type("")
    assert is_text_content_type("text/html; charset=utf-8")
    assert is_text_content_type("application/xhtml+xml")
    assert not is_text_content_type("application/pdf")

    block = content_type_reference("https://example.com/download", "application/pdf; qs=1")
    assert "File: <a href=\"https://example.com/download\">download</a>" in block
    assert "Content-Type: application/pdf" in block


def test_detect_encoding_from_meta_charset() -> None:
    euc = b'<meta http-equiv="Content-Type" content="text/html; charset=EUC-JP">'
    sjis = b'<meta charset="Shift_JIS">'

    assert detect_encoding(euc) == "euc_jp"
    assert detect_encoding(sjis) == "shift_jis"
    assert detect_encoding(b"<meta charset='iso-8859-1'>") == "utf-8"


def test_decode_html_uses_declared_japanese_encoding() -> None:
    body = '<meta charset="shift_jis"><p>日本語の記事</p>'.encode("shift_jis")

    assert "日本語の記事" in decode_html(body)
