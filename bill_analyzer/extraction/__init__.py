"""
Extraction module for turning raw bill text into structured data.
"""

from bill_analyzer.extraction.bill_parser import parse_bill_text

__all__ = ["parse_bill_text"]
