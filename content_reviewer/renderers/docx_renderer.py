from __future__ import annotations

import io
from datetime import datetime
from typing import Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from content_reviewer.domain.models import ReviewReport
from content_reviewer.renderers.pdf_renderer import FOOTER_LINE, FULL_TEXT_HEADING, REPORT_TITLE
from content_reviewer.services.pii import mask_redactions
from content_reviewer.services.result_formatter import document_information, summary_rows
from content_reviewer.utils.text import xml_safe


def _t(text: str) -> str:
    # every string handed to python-docx goes through here
    return xml_safe(mask_redactions(text))


def _labelled(doc, label: str, value: str) -> None:
    p = doc.add_paragraph()
    p.add_run(f"{_t(label)}: ").bold = True
    p.add_run(_t(value))


def render_docx(report: ReviewReport, generated_at: Optional[datetime] = None) -> bytes:
    generated_at = generated_at or datetime.now()
    doc = Document()

    heading = doc.add_heading(REPORT_TITLE, level=1)
    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER

    doc.add_heading("Document Information", level=2)
    for label, value in document_information(report):
        _labelled(doc, label, value)

    doc.add_heading("Summary", level=2)
    for label, value in summary_rows(report):
        _labelled(doc, label, value)

    doc.add_heading("Detailed Review", level=2)
    for section in report.sections:
        doc.add_heading(_t(section.title), level=3)
        doc.add_paragraph(_t(section.body))

    doc.add_heading(FULL_TEXT_HEADING, level=2)
    doc.add_paragraph(_t(report.full_review_text))

    footer = doc.add_paragraph()
    footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
    lines = [FOOTER_LINE, f"Report ID: {report.review_id}", f"Generated on: {generated_at.strftime('%d/%m/%Y, %H:%M:%S')}"]
    for i, line in enumerate(lines):
        run = footer.add_run(_t(line))
        run.italic = True
        run.font.size = Pt(10)
        if i < len(lines) - 1:
            run.add_break()

    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()
