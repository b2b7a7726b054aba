"""
Anomaly analyzer for parsed medical bills.

Runs a fixed sequence of independent detection rules over a BillData
record and derives the aggregate metrics of the audit:

1. Duplicate charges (same description and amount)
2. Missing itemization (vague fee lines without a procedure code)
3. Upcoding (a single charge dominating the bill)
4. Unexplained surcharges
5. Arithmetic mismatch between line items and the stated total

Rules never short-circuit each other, so one line item can contribute
to several findings. Analysis never fails; empty bills produce an
empty, low-confidence result.
"""

import logging
import random
import string
from collections import Counter
from datetime import datetime
from typing import Callable, Optional

from bill_analyzer.models import (
    ACTION_VERIFY,
    AnalysisResult,
    BillData,
    ConfidenceStatus,
    Finding,
    FindingCategory,
    LineItem,
    Severity,
)

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]

# Description keywords for vague charges that need a breakdown
ITEMIZATION_KEYWORDS = ("fee", "surcharge", "processing", "administrative")

# Description keywords for add-on surcharges
SURCHARGE_KEYWORDS = ("surcharge", "premium")

# A single charge above this share of the total is treated as upcoded
UPCODING_SHARE_THRESHOLD = 0.40

# Assumed overcharge on an upcoded line
UPCODING_OVERCHARGE_RATE = 0.15

# Differences at or below this are rounding noise
ARITHMETIC_TOLERANCE = 1.0

# Differences at or above this share of the total are not simple math errors
ARITHMETIC_MAX_SHARE = 0.20

# Review-only categories; their amounts are not counted as savings
NON_SAVINGS_CATEGORIES = {FindingCategory.ITEMIZATION}

ID_ALPHABET = string.digits + string.ascii_uppercase
ID_LENGTH = 7


def analyze_bill(
    bill: BillData,
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> AnalysisResult:
    """
    Analyze a parsed bill for billing anomalies.

    Args:
        bill: Parsed bill from the bill parser.
        rng: Random source for result, finding and patient identifiers.
            Pass a seeded instance for reproducible identifiers.
        clock: Callable returning the result timestamp. Defaults to
            datetime.now.

    Returns:
        AnalysisResult: Findings in rule order plus aggregate metrics.

    Example:
        >>> bill = parse_bill_text(text)
        >>> result = analyze_bill(bill, rng=random.Random(42))
        >>> print(result.status.value, result.total_savings)
    """
    rng = rng or random.Random()
    clock = clock or datetime.now

    logger.info(
        f"Starting analysis: {len(bill.line_items)} line items, "
        f"stated total=${bill.total_amount:.2f}"
    )

    new_id = _make_id_factory(rng)

    findings: list[Finding] = []
    findings.extend(_check_duplicate_charges(bill, new_id))
    findings.extend(_check_missing_itemization(bill, new_id))
    findings.extend(_check_upcoding(bill, new_id))
    findings.extend(_check_surcharges(bill, new_id))
    findings.extend(_check_arithmetic(bill, new_id))

    for finding in findings:
        logger.debug(
            f"[{finding.severity.value}] {finding.category.value}: "
            f"{finding.title} (${finding.amount:.2f})"
        )

    original_total = bill.total_amount
    total_savings = _calculate_total_savings(findings)
    corrected_total = max(0.0, original_total - total_savings)
    savings_percentage = (
        total_savings / original_total * 100 if original_total > 0 else 0.0
    )

    result = AnalysisResult(
        id=_generate_id(rng),
        patient_id=_generate_patient_id(rng),
        status=_classify_status(findings),
        original_total=original_total,
        corrected_total=corrected_total,
        total_savings=total_savings,
        savings_percentage=savings_percentage,
        findings=tuple(findings),
        anomalies_count=sum(1 for f in findings if f.severity == Severity.HIGH),
        human_review_count=max(1, sum(1 for f in findings if f.needs_review)),
        extracted_text=bill.raw_text,
        timestamp=clock(),
    )

    logger.info(
        f"Analysis complete: id={result.id}, status={result.status.value}, "
        f"findings={len(findings)}, savings=${total_savings:.2f}"
    )

    return result


def _check_duplicate_charges(bill: BillData, new_id: IdFactory) -> list[Finding]:
    """
    Flag line items repeated with the same description and amount.

    Only the repeated occurrences count toward the overcharge, not the
    first one.

    Args:
        bill: Parsed bill.
        new_id: Finding ID factory.

    Returns:
        list[Finding]: One HIGH finding per duplicated group.
    """
    key_counts = Counter(_duplicate_key(item) for item in bill.line_items)

    findings = []
    for (description, amount), count in key_counts.items():
        if count < 2:
            continue
        excess = round(amount * (count - 1), 2)
        findings.append(
            Finding(
                id=new_id(),
                title="Possible Duplicate Charge",
                description=(
                    f"Identical entries detected for '{description}' "
                    f"({count} occurrences at ${amount:,.2f}). "
                    f"Potential clerical data entry error."
                ),
                severity=Severity.HIGH,
                amount=excess,
                category=FindingCategory.DUPLICATE,
            )
        )
    return findings


def _check_missing_itemization(bill: BillData, new_id: IdFactory) -> list[Finding]:
    """
    Flag vague fee lines that carry no procedure code.

    Args:
        bill: Parsed bill.
        new_id: Finding ID factory.

    Returns:
        list[Finding]: One MEDIUM finding per uncoded fee line.
    """
    findings = []
    for item in bill.line_items:
        if item.code or not _contains_any(item.description, ITEMIZATION_KEYWORDS):
            continue
        findings.append(
            Finding(
                id=new_id(),
                title="Missing Itemization",
                description=(
                    f"'{item.description}' lacks a procedure code or per-unit cost "
                    f"breakdown. An itemized statement is required for price audit."
                ),
                severity=Severity.MEDIUM,
                amount=item.amount,
                category=FindingCategory.ITEMIZATION,
                action_required=ACTION_VERIFY,
            )
        )
    return findings


def _check_upcoding(bill: BillData, new_id: IdFactory) -> list[Finding]:
    """
    Flag single charges that exceed a large share of the bill total.

    Args:
        bill: Parsed bill.
        new_id: Finding ID factory.

    Returns:
        list[Finding]: One HIGH finding per dominating charge.
    """
    threshold = bill.total_amount * UPCODING_SHARE_THRESHOLD

    findings = []
    for item in bill.line_items:
        if item.amount <= threshold:
            continue
        share = item.amount / bill.total_amount * 100 if bill.total_amount > 0 else 100.0
        findings.append(
            Finding(
                id=new_id(),
                title="Upcoding Detected",
                description=(
                    f"'{item.description}' accounts for {share:.0f}% of the total bill; "
                    f"a higher complexity level may have been billed than the "
                    f"treatment warranted."
                ),
                severity=Severity.HIGH,
                amount=round(item.amount * UPCODING_OVERCHARGE_RATE, 2),
                category=FindingCategory.UPCODING,
            )
        )
    return findings


def _check_surcharges(bill: BillData, new_id: IdFactory) -> list[Finding]:
    """
    Flag surcharge and premium add-on lines.

    Args:
        bill: Parsed bill.
        new_id: Finding ID factory.

    Returns:
        list[Finding]: One LOW finding per surcharge line.
    """
    findings = []
    for item in bill.line_items:
        if not _contains_any(item.description, SURCHARGE_KEYWORDS):
            continue
        findings.append(
            Finding(
                id=new_id(),
                title="Administrative Surcharge",
                description=(
                    f"Unexplained surcharge '{item.description}' (${item.amount:,.2f}). "
                    f"Typically waived upon patient request for a breakdown."
                ),
                severity=Severity.LOW,
                amount=item.amount,
                category=FindingCategory.SURCHARGE,
            )
        )
    return findings


def _check_arithmetic(bill: BillData, new_id: IdFactory) -> list[Finding]:
    """
    Compare the line item sum against the stated total.

    Differences of a dollar or less are rounding noise. Differences of
    20% of the total or more point at a data quality problem rather than
    an arithmetic error and are not reported.

    Args:
        bill: Parsed bill.
        new_id: Finding ID factory.

    Returns:
        list[Finding]: At most one HIGH finding.
    """
    calculated_total = bill.line_item_sum
    difference = abs(calculated_total - bill.total_amount)

    if difference <= ARITHMETIC_TOLERANCE:
        return []
    if difference >= bill.total_amount * ARITHMETIC_MAX_SHARE:
        logger.debug(
            f"Ignoring total difference ${difference:.2f}: too large for an arithmetic error"
        )
        return []

    return [
        Finding(
            id=new_id(),
            title="Arithmetic Mismatch",
            description=(
                f"Calculated total (${calculated_total:.2f}) differs from stated "
                f"total (${bill.total_amount:.2f}) by ${difference:.2f}."
            ),
            severity=Severity.HIGH,
            amount=round(difference, 2),
            category=FindingCategory.MATH_ERROR,
        )
    ]


def _calculate_total_savings(findings: list[Finding]) -> float:
    """
    Sum the overcharge estimates of all savings-bearing findings.

    Args:
        findings: All findings of the analysis.

    Returns:
        float: Estimated recoverable amount, rounded to cents.
    """
    return round(
        sum(f.amount for f in findings if f.category not in NON_SAVINGS_CATEGORIES),
        2,
    )


def _classify_status(findings: list[Finding]) -> ConfidenceStatus:
    """
    Derive the confidence status from the findings.

    Args:
        findings: All findings of the analysis.

    Returns:
        ConfidenceStatus: LOW without findings, HIGH when any finding is
        HIGH severity, MEDIUM otherwise.
    """
    if not findings:
        return ConfidenceStatus.LOW_CONFIDENCE
    if any(f.severity == Severity.HIGH for f in findings):
        return ConfidenceStatus.HIGH_CONFIDENCE
    return ConfidenceStatus.MEDIUM_CONFIDENCE


def _duplicate_key(item: LineItem) -> tuple[str, float]:
    return item.description.lower(), item.amount


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def _generate_id(rng: random.Random, length: int = ID_LENGTH) -> str:
    return "".join(rng.choice(ID_ALPHABET) for _ in range(length))


def _generate_patient_id(rng: random.Random) -> str:
    """Generate a display patient ID such as "#8K2Q-C"."""
    return f"#{_generate_id(rng, 4)}-{rng.choice(string.ascii_uppercase)}"


def _make_id_factory(rng: random.Random) -> IdFactory:
    """Return a finding ID factory that never repeats within one analysis."""
    issued: set[str] = set()

    def new_id() -> str:
        finding_id = _generate_id(rng)
        while finding_id in issued:
            finding_id = _generate_id(rng)
        issued.add(finding_id)
        return finding_id

    return new_id
