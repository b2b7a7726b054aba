"""
JSON and CSV exports of analysis results.
"""

import csv
import io
import json

from bill_analyzer.models import AnalysisResult

CSV_COLUMNS = [
    "id",
    "title",
    "severity",
    "category",
    "amount",
    "action_required",
    "description",
]


def result_to_json(result: AnalysisResult) -> str:
    """Serialize a full analysis result as indented JSON."""
    return json.dumps(result.to_dict(), indent=2)


def findings_to_csv(result: AnalysisResult) -> str:
    """
    Export the findings of a result as CSV, one row per finding.

    Args:
        result: Analysis result.

    Returns:
        str: CSV text with a header row; amounts use two decimals.
    """
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for finding in result.findings:
        writer.writerow(
            {
                "id": finding.id,
                "title": finding.title,
                "severity": finding.severity.value,
                "category": finding.category.value,
                "amount": f"{finding.amount:.2f}",
                "action_required": finding.action_required or "",
                "description": finding.description,
            }
        )
    return buffer.getvalue()


def export_filename(result: AnalysisResult, extension: str) -> str:
    """Download filename such as "bill-analysis-AB12CD3.json"."""
    return f"bill-analysis-{result.id}.{extension.lstrip('.')}"
