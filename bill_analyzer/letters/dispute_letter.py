"""
Dispute letter generation.

Renders an analysis result as a fixed-template plain-text letter that
a patient can send to a provider's billing department.
"""

import logging
from datetime import date
from typing import Optional

from bill_analyzer.models import AnalysisResult, Finding

logger = logging.getLogger(__name__)

PATIENT_NAME_PLACEHOLDER = "[Patient Name]"

DEFAULT_FOOTER = "This letter was generated by Medical Bill Analyzer"

LETTER_TEMPLATE = """FORMAL BILLING DISPUTE LETTER

Date: {today}
Patient ID: {patient_id}
Original Amount Billed: ${original_total:.2f}
Disputed Amount: ${total_savings:.2f}
Requested Corrected Total: ${corrected_total:.2f}

To Whom It May Concern,

I am writing to formally dispute the charges on my recent medical bill. After careful review, I have identified the following discrepancies that require immediate attention:

ITEMIZED DISCREPANCIES:
{findings_list}

FORMAL REQUESTS:
1. Please provide itemized CPT codes for all charges
2. Please provide a revised bill reflecting the corrections noted above
3. Please provide a written explanation for each disputed charge

I request that you review these charges and respond within 30 days as required by federal billing regulations.

Sincerely,
{patient_name}

---
{footer}"""


def generate_dispute_letter(
    result: AnalysisResult,
    today: Optional[date] = None,
    patient_name: Optional[str] = None,
    footer: str = DEFAULT_FOOTER,
) -> str:
    """
    Generate a dispute letter for an analysis result.

    Args:
        result: Analysis result from the anomaly analyzer.
        today: Letter date. Defaults to the current date.
        patient_name: Name for the signature block. Left as a
            placeholder when not given.
        footer: Closing footer line.

    Returns:
        str: Complete letter text.

    Example:
        >>> letter = generate_dispute_letter(result)
        >>> print(letter.splitlines()[0])
        FORMAL BILLING DISPUTE LETTER
    """
    today = today or date.today()

    letter = LETTER_TEMPLATE.format(
        today=_format_date(today),
        patient_id=result.patient_id,
        original_total=result.original_total,
        total_savings=result.total_savings,
        corrected_total=result.corrected_total,
        findings_list=_format_findings(result.findings),
        patient_name=patient_name or PATIENT_NAME_PLACEHOLDER,
        footer=footer,
    )

    logger.info(
        f"Generated dispute letter for result {result.id} "
        f"({len(result.findings)} findings)"
    )
    return letter


def _format_findings(findings: tuple[Finding, ...]) -> str:
    """
    Format findings as a numbered list, one line per finding.

    Args:
        findings: Findings in analysis order.

    Returns:
        str: Numbered lines joined by newlines; empty when no findings.
    """
    return "\n".join(
        f"{i}. {finding.title}: {finding.description} "
        f"(Potential overcharge: ${finding.amount:.2f})"
        for i, finding in enumerate(findings, 1)
    )


def _format_date(value: date) -> str:
    """Format a date as "October 12, 2024"."""
    return f"{value:%B} {value.day}, {value.year}"
