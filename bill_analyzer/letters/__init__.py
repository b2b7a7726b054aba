"""
Dispute letter generation and rendering.
"""

from bill_analyzer.letters.dispute_letter import generate_dispute_letter
from bill_analyzer.letters.pdf_export import render_letter_pdf

__all__ = ["generate_dispute_letter", "render_letter_pdf"]
