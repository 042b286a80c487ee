"""PDF export of documents, laid out with their template's header, footer and styling."""

import logging
import time
from pathlib import Path
from typing import Any

from fpdf import FPDF

from docflow.config import settings
from docflow.utils.html import html_to_text

logger = logging.getLogger(__name__)

PDF_URL_PREFIX = "/uploads/pdfs/"

# fpdf's core fonts; anything else falls back to Times
FONT_FAMILIES = {
    "times new roman": "Times",
    "times": "Times",
    "arial": "Helvetica",
    "helvetica": "Helvetica",
    "courier": "Courier",
    "courier new": "Courier",
}


def _latin1(text: str) -> str:
    """Encode to latin-1, replacing unsupported chars. fpdf core fonts are latin-1 only."""
    return text.replace("•", "-").encode("latin-1", errors="replace").decode("latin-1")


def _rgb(color: str | None, default: tuple[int, int, int]) -> tuple[int, int, int]:
    if not color or not color.startswith("#") or len(color) != 7:
        return default
    try:
        return tuple(int(color[i : i + 2], 16) for i in (1, 3, 5))
    except ValueError:
        return default


def format_content(content: Any) -> str:
    """Flatten stored content to printable text.

    ``{"body": html}`` prints the body; other mappings print ``label:`` blocks.
    """
    if not content:
        return ""
    if isinstance(content, str):
        return html_to_text(content)
    if isinstance(content, dict):
        if isinstance(content.get("body"), str):
            return html_to_text(content["body"])
        blocks = []
        for key, value in content.items():
            if isinstance(value, str):
                text = html_to_text(value)
                if text:
                    blocks.append(f"{key}:\n{text}")
        return "\n\n".join(blocks)
    return str(content)


class DocumentPDF(FPDF):
    """FPDF page with the template footer and optional page numbers."""

    def __init__(self, footer_text: str = "", page_numbers: bool = True, font_family: str = "Times"):
        super().__init__(unit="pt", format="A4")
        self.footer_text = footer_text
        self.page_numbers = page_numbers
        self.font_family_name = font_family

    def footer(self):
        self.set_y(-40)
        self.set_font(self.font_family_name, "", 9)
        self.set_text_color(110, 110, 110)
        if self.footer_text:
            self.cell(0, 12, _latin1(self.footer_text), align="C", ln=True)
        if self.page_numbers:
            self.cell(0, 12, f"Page {self.page_no()} of {{nb}}", align="C")


def render_document_pdf(
    title: str,
    content: Any,
    template: Any = None,
    document_number: str | None = None,
    status: str | None = None,
    author_name: str | None = None,
    approver_name: str | None = None,
    approval_date: str | None = None,
) -> bytes:
    """Render a document to PDF bytes."""
    header = (template.header if template else None) or {}
    footer = (template.footer if template else None) or {}
    styling = (template.styling if template else None) or {}
    margins = styling.get("margins") or {}
    family = FONT_FAMILIES.get(str(styling.get("fontFamily", "")).lower(), "Times")
    font_size = float(styling.get("fontSize") or 12)
    primary = _rgb(styling.get("primaryColor"), (0, 0, 0))
    secondary = _rgb(styling.get("secondaryColor"), (102, 102, 102))

    pdf = DocumentPDF(
        footer_text=footer.get("text") or "",
        page_numbers=footer.get("includePageNumbers", True),
        font_family=family,
    )
    pdf.set_margins(
        float(margins.get("left", 72)),
        float(margins.get("top", 72)),
        float(margins.get("right", 72)),
    )
    pdf.set_auto_page_break(auto=True, margin=float(margins.get("bottom", 72)))
    pdf.add_page()

    if header.get("title"):
        pdf.set_font(family, "B", font_size + 6)
        pdf.set_text_color(*primary)
        pdf.multi_cell(0, font_size + 10, _latin1(header["title"]), align="C")
    if header.get("subtitle"):
        pdf.set_font(family, "", font_size)
        pdf.set_text_color(*secondary)
        pdf.multi_cell(0, font_size + 4, _latin1(header["subtitle"]), align="C")
    if header.get("title") or header.get("subtitle"):
        pdf.ln(6)
        pdf.set_draw_color(*secondary)
        pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
        pdf.ln(10)

    pdf.set_font(family, "B", font_size + 4)
    pdf.set_text_color(*primary)
    pdf.multi_cell(0, font_size + 8, _latin1(title), align="L")

    pdf.set_font(family, "", font_size - 2)
    pdf.set_text_color(*secondary)
    meta = [f"Document No: {document_number}" if document_number else None,
            f"Status: {status}" if status else None,
            f"Prepared by: {author_name}" if author_name else None]
    for line in filter(None, meta):
        pdf.cell(0, font_size + 2, _latin1(line), ln=True)
    pdf.ln(8)

    pdf.set_font(family, "", font_size)
    pdf.set_text_color(0, 0, 0)
    body = format_content(content) or "This document has no content."
    pdf.multi_cell(0, font_size * 1.4, _latin1(body[:100000]))

    if approver_name:
        pdf.ln(18)
        pdf.set_font(family, "I", font_size - 1)
        line = f"Approved by {approver_name}"
        if approval_date:
            line += f" on {approval_date}"
        pdf.multi_cell(0, font_size + 2, _latin1(line))

    return bytes(pdf.output())


def pdf_directory() -> Path:
    path = Path(settings.UPLOAD_DIR) / "pdfs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def store_pdf(data: bytes, stem: str) -> str:
    """Write PDF bytes under the upload directory and return their public URL."""
    filename = f"{stem}-{int(time.time() * 1000)}.pdf"
    (pdf_directory() / filename).write_bytes(data)
    return f"{PDF_URL_PREFIX}{filename}"


def path_for_url(pdf_url: str) -> Path | None:
    """Map a stored ``pdf_url`` back to its file, refusing anything outside the PDF directory."""
    if not pdf_url or not pdf_url.startswith(PDF_URL_PREFIX):
        return None
    name = pdf_url[len(PDF_URL_PREFIX):]
    if not name or "/" in name or "\\" in name or name.startswith("."):
        return None
    return Path(settings.UPLOAD_DIR) / "pdfs" / name


def remove_pdf(pdf_url: str | None) -> None:
    """Delete a rendered PDF; missing files and OS errors are logged and ignored."""
    path = path_for_url(pdf_url) if pdf_url else None
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove PDF %s: %s", path, e)
