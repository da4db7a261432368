from .docx_renderer import render_docx
from .pdf_renderer import render_pdf

__all__ = [
    "render_docx",
    "render_pdf",
]
