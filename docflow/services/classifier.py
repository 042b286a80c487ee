"""Keyword-scoring classifier that tags document text with a category."""

import re
from typing import Any

from docflow.utils.html import strip_tags

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Invoice": ("invoice", "gst", "total", "due", "amount", "bill", "payment", "tax"),
    "Contract": ("agreement", "contract", "party", "parties", "terms", "clause", "hereby"),
    "Report": ("report", "analysis", "summary", "findings", "results", "quarter"),
    "Notice": ("notice", "announcement", "inform", "holiday", "students", "staff"),
    "Letter": ("dear", "sincerely", "regards", "yours", "letter"),
}

FALLBACK_CATEGORY = "General"
NO_MATCH_CONFIDENCE = 0.2

_MAX_KEYWORDS = max(len(words) for words in CATEGORY_KEYWORDS.values())
_PATTERNS = {
    category: [re.compile(rf"\b{re.escape(word)}\b") for word in words]
    for category, words in CATEGORY_KEYWORDS.items()
}


def classify_text(text: str) -> tuple[str, float]:
    """Return ``(category, confidence)`` for ``text``.

    The category with the most keyword hits wins (earlier categories win
    ties). Confidence is ``0.2`` with no hits, otherwise
    ``min(0.95, 0.4 + hits / (largest keyword list + 1))``.
    """
    lowered = (text or "").lower()
    best, best_score = FALLBACK_CATEGORY, 0
    for category, patterns in _PATTERNS.items():
        score = sum(1 for pattern in patterns if pattern.search(lowered))
        if score > best_score:
            best, best_score = category, score

    if best_score == 0:
        return FALLBACK_CATEGORY, NO_MATCH_CONFIDENCE
    return best, round(min(0.95, 0.4 + best_score / (_MAX_KEYWORDS + 1)), 4)


def content_to_text(content: Any) -> str:
    """Flatten a document content payload into plain text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return strip_tags(content)
    if isinstance(content, dict):
        return " ".join(content_to_text(value) for value in content.values() if value)
    if isinstance(content, (list, tuple)):
        return " ".join(content_to_text(value) for value in content)
    return str(content)
