"""HTML-to-text helpers shared by search indexing, classification and PDF export."""

import html
import re

_BLOCK_TAGS = re.compile(
    r"</?(?:div|p|h[1-6]|section|article|header|footer|blockquote|pre|ul|ol|table|tr|br|hr)[^>]*>",
    re.IGNORECASE,
)
_LIST_ITEM = re.compile(r"<li[^>]*>(.*?)</li>", re.IGNORECASE | re.DOTALL)
_ANY_TAG = re.compile(r"<[^>]*>")
_PAGE_PLACEHOLDER = re.compile(r"\{[^}]*page[^}]*\}", re.IGNORECASE)


def strip_tags(text: str) -> str:
    """Drop markup and collapse whitespace to single spaces."""
    return re.sub(r"\s+", " ", _ANY_TAG.sub(" ", text or "")).strip()


def html_to_text(markup: str) -> str:
    """Convert rich-text HTML to plain text while keeping paragraphs and bullets."""
    if not markup:
        return ""

    text = _LIST_ITEM.sub(lambda m: f"\n• {m.group(1)}\n", markup)
    text = _BLOCK_TAGS.sub("\n", text)
    text = _ANY_TAG.sub("", text)
    text = html.unescape(text).replace("\xa0", " ")
    text = _PAGE_PLACEHOLDER.sub("", text)

    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
