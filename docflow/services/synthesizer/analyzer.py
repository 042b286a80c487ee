"""Prompt analysis for the local document synthesizer.

Every extraction degrades to an empty value instead of failing, so
``analyze`` accepts any string.
"""

import re
from dataclasses import dataclass, field

# Scanned in this order; a later type only takes the lead with a strictly
# higher score, so ties go to the earlier entry.
DOCUMENT_TYPE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "notice": ("notice", "announcement", "inform", "notify", "attention"),
    "holiday": ("holiday", "vacation", "diwali", "christmas", "eid"),
    "meeting": ("meeting", "conference", "agenda", "discussion", "assembly"),
    "exam": ("exam", "examination", "test", "assessment", "quiz"),
    "event": ("event", "celebration", "function", "competition", "fest"),
    "letter": ("letter", "dear", "correspondence", "request"),
    "memo": ("memo", "memorandum", "internal"),
    "policy": ("policy", "rules", "guidelines", "regulation", "procedure"),
    "application": ("application", "apply", "admission", "leave"),
    "certificate": ("certificate", "certify", "award", "completion"),
}

DEFAULT_DOCUMENT_TYPE = "notice"

MAX_KEYWORDS = 20
MAX_DETAILS = 5

_MONTHS = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
_ORDINAL = r"(?:st|nd|rd|th)?"

DATE_PATTERNS = (
    # 5 November 2024, 5th Nov, 2024
    re.compile(rf"\b\d{{1,2}}{_ORDINAL}\s+{_MONTHS}\.?,?\s+\d{{4}}\b", re.IGNORECASE),
    # November 5, 2024
    re.compile(rf"\b{_MONTHS}\.?\s+\d{{1,2}}{_ORDINAL},?\s+\d{{4}}\b", re.IGNORECASE),
    # 5/11/2024
    re.compile(r"\b\d{1,2}/\d{1,2}/\d{4}\b"),
    # 2024-11-05
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
)

NAME_PATTERN = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+\b")
NAME_STOPWORDS = frozenset(
    {"The", "This", "That", "There", "Here", "Where", "When", "What", "Who", "How"}
)

TIME_PATTERN = re.compile(r"\b\d{1,2}:\d{2}\s*(?:am|pm)?", re.IGNORECASE)

_PLACES = r"(?:room|hall|auditorium|lab|laboratory|ground|library|campus|building|block|office)"
LOCATION_PATTERNS = (
    # "in the Main Seminar Hall", "at Block C lab"
    re.compile(rf"\b(?:at|in)\s+(?:the\s+)?((?:[\w-]+\s+){{0,4}}?{_PLACES})\b", re.IGNORECASE),
    # "Room 204", "Hall B"
    re.compile(rf"\b({_PLACES}\s+(?:no\.?\s*)?[\w-]*\d[\w-]*|{_PLACES}\s+[A-Z]\b)", re.IGNORECASE),
)

# A captured phrase runs until punctuation, a joining preposition or the end.
_PHRASE = r"([A-Za-z][\w&'\- ]*?)(?=\s*(?:[,.;:!?\n]|\s(?:on|at|in|for|from|by|about|regarding|to|with|and)\s|$))"
RECIPIENT_PATTERNS = tuple(
    re.compile(rf"\b{word}\s+{_PHRASE}", re.IGNORECASE) for word in ("to", "for", "all")
)
SENDER_PATTERNS = tuple(
    re.compile(rf"\b{word}\s+{_PHRASE}", re.IGNORECASE) for word in ("from", "by")
)
PURPOSE_PATTERNS = tuple(
    re.compile(rf"\b{word}\s+([^.;!?\n]+)", re.IGNORECASE)
    for word in ("about", "regarding", "concerning")
)

SENTENCE_SPLIT = re.compile(r"[.!?]+")
WORD_PATTERN = re.compile(r"\w+")

TYPE_DEFAULTS: dict[str, tuple[str, str, str]] = {
    # type: (recipient, sender, audience)
    "notice": ("All Students and Staff", "College Administration", "general"),
    "holiday": ("All Students and Staff", "College Administration", "general"),
    "meeting": ("All Faculty Members", "Department Head", "faculty"),
    "exam": ("All Students", "Examination Department", "students"),
    "event": ("All Students and Staff", "Event Committee", "general"),
}


@dataclass
class PromptAnalysis:
    """Structured facts pulled out of a free-text prompt."""

    prompt: str
    keywords: list[str] = field(default_factory=list)
    document_type: str = DEFAULT_DOCUMENT_TYPE
    dates: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    time: str = ""
    location: str = ""
    recipient: str = ""
    sender: str = ""
    purpose: str = ""
    audience: str = ""
    length: str = "short"
    specific_details: list[str] = field(default_factory=list)


def score_document_type(prompt_lower: str) -> str:
    """Pick the document type whose trigger words occur most often."""
    best_type = DEFAULT_DOCUMENT_TYPE
    best_score = 0
    for doc_type, triggers in DOCUMENT_TYPE_KEYWORDS.items():
        score = sum(1 for word in triggers if re.search(rf"\b{word}\b", prompt_lower))
        if score > best_score:
            best_type, best_score = doc_type, score
    return best_type


def extract_dates(prompt: str) -> list[str]:
    dates: list[str] = []
    for pattern in DATE_PATTERNS:
        dates.extend(match.group(0) for match in pattern.finditer(prompt))
    return dates


def extract_names(prompt: str) -> list[str]:
    names = []
    for match in NAME_PATTERN.finditer(prompt):
        words = match.group(0).split()
        while words and words[0] in NAME_STOPWORDS:
            words.pop(0)
        if len(words) >= 2:
            names.append(" ".join(words))
    return names


def extract_location(prompt: str) -> str:
    # Later patterns overwrite earlier ones
    location = ""
    for pattern in LOCATION_PATTERNS:
        match = pattern.search(prompt)
        if match:
            location = match.group(1).strip()
    return location


def _first_capture(patterns: tuple[re.Pattern, ...], prompt: str) -> str:
    for pattern in patterns:
        match = pattern.search(prompt)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return ""


def classify_length(word_count: int, keyword_count: int) -> str:
    if word_count > 15 or keyword_count > 8:
        return "long"
    if word_count > 8:
        return "medium"
    return "short"


def analyze(prompt: str) -> PromptAnalysis:
    """Run every extraction step over ``prompt``."""
    prompt = prompt or ""
    prompt_lower = prompt.lower()

    analysis = PromptAnalysis(prompt=prompt)
    analysis.keywords = WORD_PATTERN.findall(prompt_lower)[:MAX_KEYWORDS]
    analysis.document_type = score_document_type(prompt_lower)
    analysis.dates = extract_dates(prompt)
    analysis.names = extract_names(prompt)

    time_match = TIME_PATTERN.search(prompt)
    analysis.time = time_match.group(0).strip() if time_match else ""

    analysis.location = extract_location(prompt)
    analysis.recipient = _first_capture(RECIPIENT_PATTERNS, prompt)
    analysis.sender = _first_capture(SENDER_PATTERNS, prompt)
    analysis.purpose = _first_capture(PURPOSE_PATTERNS, prompt)

    defaults = TYPE_DEFAULTS.get(analysis.document_type)
    if defaults:
        recipient, sender, audience = defaults
        analysis.recipient = analysis.recipient or recipient
        analysis.sender = analysis.sender or sender
        analysis.audience = analysis.audience or audience

    analysis.length = classify_length(len(prompt.split()), len(analysis.keywords))
    analysis.specific_details = [
        sentence.strip()
        for sentence in SENTENCE_SPLIT.split(prompt)
        if len(sentence.strip()) > 10
    ][:MAX_DETAILS]

    return analysis
