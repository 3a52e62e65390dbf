"""Boilerplate removal and article-region selection."""

from __future__ import annotations

from bs4 import BeautifulSoup, Comment, Tag

# Minimum text length for a region to count as the article
MIN_REGION_CHARS = 100

REMOVAL_SELECTORS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "nav",
    "footer",
    "header",
    "aside",
    ".sidebar",
    ".ads",
    ".advertisement",
    ".social-share",
    ".comments",
    ".navigation",
    ".breadcrumb",
    ".menu",
    ".nav",
    ".navbar",
    ".header",
    ".footer",
    ".related",
    ".recommend",
)

CHILD_NOISE_SELECTORS: tuple[str, ...] = (
    "nav",
    ".nav",
    ".menu",
    ".sidebar",
    ".social",
    ".share",
    ".twitter",
    ".facebook",
)

# Semantic article containers first, whole document last
CONTENT_SELECTORS: tuple[str, ...] = (
    "article .content",
    "article .post-content",
    "article .entry-content",
    "article .text",
    ".article-content",
    ".post-content",
    ".entry-content",
    ".content",
    "article",
    "main",
    "[role='main']",
    "#content",
    ".post-body",
    ".article-body",
    ".article",
    ".story",
    ".entry",
    ".post",
    "#main",
    "#article",
    "#story",
    "body",
)

_BLOCK_TAGS = ["div", "section", "article", "p"]


def strip_noise(soup: BeautifulSoup) -> BeautifulSoup:
    """Remove scripts, navigation, ads and HTML comments in-place."""

    for element in soup.select(", ".join(REMOVAL_SELECTORS)):
        # nested matches are gone once their ancestor is
        if not element.decomposed:
            element.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    return soup


def _text_of(elements: list[Tag]) -> str:
    return " ".join(element.get_text(" ") for element in elements).strip()


def locate_content(soup: BeautifulSoup, *, min_chars: int = MIN_REGION_CHARS) -> list[Tag]:
    """Return the elements forming the most plausible article region.

    The first selector whose matches hold more than ``min_chars`` characters
    wins. Otherwise the single longest block element above the threshold is
    used. An empty list means nothing qualified.
    """

    for selector in CONTENT_SELECTORS:
        matches = soup.select(selector)
        if matches and len(_text_of(matches)) > min_chars:
            return matches

    best: Tag | None = None
    best_length = min_chars
    for element in soup.find_all(_BLOCK_TAGS):
        length = len(element.get_text(" ").strip())
        if length > best_length:
            best, best_length = element, length
    return [best] if best is not None else []


def extract_region_text(html: str) -> str:
    """Parse markup and return the cleaned text of its article region."""

    soup = strip_noise(BeautifulSoup(html, "lxml"))
    region = locate_content(soup)
    if not region:
        return ""
    for element in region:
        for noise in element.select(", ".join(CHILD_NOISE_SELECTORS)):
            if not noise.decomposed:
                noise.decompose()
    return _text_of(region)
