"""Local rule-based document synthesizer.

Used when no generation provider is configured or the provider call fails.
``synthesize`` is total over all strings and deterministic except for the
date fallback, which defaults to today.
"""

from datetime import date
from html import escape

from docflow.services.synthesizer.analyzer import PromptAnalysis, analyze
from docflow.services.synthesizer.renderers import TITLES, DocumentType, field, render_body

__all__ = ["DocumentType", "PromptAnalysis", "analyze", "synthesize"]


def _header(title: str, analysis: PromptAnalysis, today: date) -> str:
    doc_date = analysis.dates[0] if analysis.dates else today.strftime("%d %B %Y").lstrip("0")
    subject = analysis.purpose or title.title()
    return f"""<h2 style="text-align:center">{escape(title)}</h2>
<p><strong>Date:</strong> {escape(doc_date)}<br>
<strong>To:</strong> {field(analysis.recipient, "Recipient")}<br>
<strong>From:</strong> {field(analysis.sender, "Sender")}<br>
<strong>Subject:</strong> {escape(subject)}</p>"""


def _signature(analysis: PromptAnalysis) -> str:
    return f"""<p>Yours sincerely,</p>
<p>[Signature]<br>
[Name]<br>
[Designation]<br>
{field(analysis.sender, "Department")}</p>"""


def synthesize(prompt: str, requested_type: str = "generate", today: date | None = None) -> str:
    """Turn a free-text prompt into a complete HTML document.

    ``requested_type`` (generate, paraphrase, summarize, formal, expand) is
    recorded on the wrapper element; the rule-based renderer produces the
    same formal long-form document for every mode.
    """
    analysis = analyze(prompt)
    doc_type = DocumentType.parse(analysis.document_type)
    title = TITLES[doc_type]

    return (
        f'<div class="generated-document" data-type="{doc_type.value}" '
        f'data-mode="{escape(requested_type or "generate")}">\n'
        f"{_header(title, analysis, today or date.today())}\n"
        f"{render_body(doc_type, analysis).strip()}\n"
        f"{_signature(analysis)}\n"
        "</div>"
    )
