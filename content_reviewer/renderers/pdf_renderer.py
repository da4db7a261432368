from __future__ import annotations

import io
from datetime import datetime
from typing import Optional

from markupsafe import escape
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from content_reviewer.domain.models import ReviewReport
from content_reviewer.services.pii import mask_redactions
from content_reviewer.services.result_formatter import document_information, summary_rows
from content_reviewer.utils.text import xml_safe

REPORT_TITLE = "GOV.UK Content Review Results"
FOOTER_LINE = "Generated by GOV.UK Content Review Tool"
FULL_TEXT_HEADING = "Full Review Text"


def _safe(text: str) -> str:
    escaped = str(escape(xml_safe(mask_redactions(text))))
    return escaped.replace("\r\n", "\n").replace("\n", "<br/>")


def render_pdf(report: ReviewReport, generated_at: Optional[datetime] = None) -> bytes:
    generated_at = generated_at or datetime.now()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=0.7 * inch, rightMargin=0.7 * inch,
        topMargin=0.7 * inch, bottomMargin=0.8 * inch,
        title=f"Review results {report.review_id}",
    )

    styles = getSampleStyleSheet()
    base = styles["Normal"]
    title = ParagraphStyle("ReportTitle", parent=styles["Title"], fontSize=22, leading=26, alignment=TA_CENTER)
    h2 = ParagraphStyle("H2", parent=base, fontName="Helvetica-Bold", fontSize=16, leading=20, spaceBefore=10, spaceAfter=6)
    h3 = ParagraphStyle("H3", parent=base, fontName="Helvetica-Bold", fontSize=13, leading=16, spaceBefore=8, spaceAfter=4)
    body = ParagraphStyle("Body", parent=base, fontSize=11, leading=14, alignment=TA_JUSTIFY)
    footer = ParagraphStyle("Footer", parent=base, fontSize=9, leading=12, alignment=TA_CENTER, textColor=colors.grey)

    story = [Paragraph(REPORT_TITLE, title), Spacer(1, 12)]

    story.append(Paragraph("Document Information", h2))
    for label, value in document_information(report):
        story.append(Paragraph(f"<b>{_safe(label)}:</b> {_safe(value)}", body))

    story.append(Paragraph("Summary", h2))
    for label, value in summary_rows(report):
        story.append(Paragraph(f"<b>{_safe(label)}:</b> {_safe(value)}", body))

    story.append(PageBreak())
    story.append(Paragraph("Detailed Review", h2))
    for section in report.sections:
        story.append(Paragraph(_safe(section.title), h3))
        story.append(Paragraph(_safe(section.body), body))
        story.append(Spacer(1, 6))

    story.append(Paragraph(FULL_TEXT_HEADING, h2))
    story.append(Paragraph(_safe(report.full_review_text), body))

    story.append(Spacer(1, 24))
    story.append(Paragraph(FOOTER_LINE, footer))
    story.append(Paragraph(f"Report ID: {_safe(report.review_id)}", footer))
    story.append(Paragraph(f"Generated on: {generated_at.strftime('%d/%m/%Y, %H:%M:%S')}", footer))

    def _page_number(canvas, doc_):
        canvas.saveState()
        w, _h = A4
        page = f"Page {doc_.page}"
        canvas.setFont("Helvetica", 8)
        canvas.drawString(w - 0.7 * inch - stringWidth(page, "Helvetica", 8), 0.5 * inch, page)
        canvas.restoreState()

    doc.build(story, onFirstPage=_page_number, onLaterPages=_page_number)
    return buf.getvalue()
