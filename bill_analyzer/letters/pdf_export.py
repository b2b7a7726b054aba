"""
PDF rendering for dispute letters using reportlab.
"""

import io
import logging
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import letter as LETTER_PAGE
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

logger = logging.getLogger(__name__)


def render_letter_pdf(letter_text: str, title: str = "Billing Dispute Letter") -> bytes:
    """
    Render a plain-text letter as a single-column PDF document.

    Blank lines in the text become paragraph breaks.

    Args:
        letter_text: Letter produced by generate_dispute_letter.
        title: PDF document title metadata.

    Returns:
        bytes: The PDF file contents.
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=LETTER_PAGE,
        rightMargin=0.75 * inch,
        leftMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title=title,
    )

    styles = getSampleStyleSheet()
    body_style = ParagraphStyle(
        "LetterBody",
        parent=styles["Normal"],
        fontSize=10,
        leading=14,
    )

    story = []
    for block in letter_text.split("\n\n"):
        lines = [escape(line) for line in block.strip("\n").split("\n")]
        story.append(Paragraph("<br/>".join(lines), body_style))
        story.append(Spacer(1, 0.15 * inch))

    doc.build(story)
    pdf_bytes = buffer.getvalue()

    logger.info(f"Rendered dispute letter PDF ({len(pdf_bytes)} bytes)")
    return pdf_bytes
