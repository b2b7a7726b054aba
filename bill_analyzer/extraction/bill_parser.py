"""
Bill text parsing utilities.

Turns free-form itemized bill text (typed, pasted or OCR-extracted)
into a structured BillData record using tolerant regex matching.
Parsing never fails: text that matches nothing yields an empty bill.
"""

import logging
import re
from typing import Iterator, Optional

from bill_analyzer.models import BillData, LineItem

logger = logging.getLogger(__name__)


# Labeled metadata lines ("Provider: Metro General Hospital")
PROVIDER_PATTERN = re.compile(
    r"(?:Provider|Hospital|Facility|Lab):\s*(.+)",
    re.IGNORECASE,
)
DATE_PATTERN = re.compile(
    r"(?:Date|Date of Service|Procedure Date):\s*(.+)",
    re.IGNORECASE,
)

# Line items read "[code ]description .... [$]amount". Each piece is
# matched on its own so a line is scanned in a single pass.
DOT_LEADER_PATTERN = re.compile(r"\.{2,}")
ITEM_AMOUNT_PATTERN = re.compile(r"\s*\$?([\d,]+\.?\d*)")
ITEM_CODE_PATTERN = re.compile(r"(\d{5})\s+")

# Labels are not anchored to a word boundary, so "SUBTOTAL:" also matches
TOTAL_PATTERN = re.compile(
    r"(?:TOTAL|AMOUNT DUE|TOTAL DUE|TOTAL CHARGES):\s*\$?([\d,]+\.?\d*)",
    re.IGNORECASE,
)


def parse_bill_text(text: str) -> BillData:
    """
    Parse raw bill text into structured bill data.

    Extracts provider and date metadata, line items written with
    leader dots ("85025 COMPLETE BLOOD COUNT ....... $125.00") and the
    first stated total. Falls back to the line item sum when no total
    label is present.

    Args:
        text: Raw bill text from any source.

    Returns:
        BillData: Parsed bill. The original text is kept verbatim.

    Example:
        >>> bill = parse_bill_text("36415 VENIPUNCTURE ....... $45.00")
        >>> bill.line_items[0].code, bill.total_amount
        ('36415', 45.0)
    """
    if text is None:
        text = ""

    provider = _extract_labeled_value(PROVIDER_PATTERN, text)
    date = _extract_labeled_value(DATE_PATTERN, text)
    line_items = _extract_line_items(text)

    total_amount = _extract_total(text)
    if total_amount is None:
        total_amount = sum(item.amount for item in line_items)
        logger.debug(f"No total label found, using line item sum {total_amount:.2f}")

    if not line_items:
        logger.warning("No line items found in bill text")

    logger.info(
        f"Parsed bill: {len(line_items)} line items, total=${total_amount:.2f}, "
        f"provider={provider!r}"
    )

    return BillData(
        raw_text=text,
        line_items=tuple(line_items),
        total_amount=total_amount,
        provider=provider,
        date=date,
    )


def _extract_labeled_value(pattern: re.Pattern, text: str) -> Optional[str]:
    """
    Return the trimmed value of the first labeled line matching pattern.

    Args:
        pattern: Compiled pattern whose first group captures the value.
        text: Bill text.

    Returns:
        Optional[str]: The value, or None if no line matches.
    """
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def _extract_line_items(text: str) -> list[LineItem]:
    """
    Scan text for leader-dot line items, in order of appearance.

    Matches with a zero or unparseable amount are skipped. A line item
    never spans more than one line.

    Args:
        text: Bill text.

    Returns:
        list[LineItem]: Extracted line items.
    """
    items = []
    for line in text.split("\n"):
        for code, description, raw_amount in _scan_line(line):
            amount = _parse_amount(raw_amount)
            if amount is None or amount <= 0:
                logger.debug(f"Discarding line item {description.strip()!r}: amount {raw_amount!r}")
                continue
            items.append(
                LineItem(
                    code=code,
                    description=description.strip(),
                    amount=amount,
                )
            )
    return items


def _scan_line(line: str) -> Iterator[tuple[Optional[str], str, str]]:
    """
    Yield (code, description, raw amount) for each line item in one line.

    A leader is a run of two or more dots followed by an amount. The
    description is the shortest text before the first usable leader,
    minus the whitespace in front of the dots, and may itself contain
    dots. A leading 5-digit code is taken when a description can still
    follow it. Scanning resumes after the amount.

    Args:
        line: One line of bill text, without the newline.

    Yields:
        tuple: Code or None, unstripped description, amount text.
    """
    leaders = []
    for run in DOT_LEADER_PATTERN.finditer(line):
        amount = ITEM_AMOUNT_PATTERN.match(line, run.end())
        if amount:
            leaders.append((run.start(), run.end(), amount.group(1), amount.end()))
    if not leaders:
        return

    # A description starting at `start` needs a leader ending at start + 3 or later
    last_end = leaders[-1][1]
    pos = 0
    index = 0
    while True:
        code = None
        start = pos
        code_match = ITEM_CODE_PATTERN.match(line, pos)
        if code_match:
            # Give back code padding when the description would otherwise run out of dots
            start = min(code_match.end(), last_end - 3)
            if start >= code_match.start(1) + 6:
                code = code_match.group(1)
            else:
                start = pos

        while index < len(leaders) and leaders[index][1] < start + 3:
            index += 1
        if index == len(leaders):
            return

        lead_start, lead_end, raw_amount, amount_end = leaders[index]
        end = max(lead_start, start + 1)
        while end > start + 1 and line[end - 1].isspace():
            end -= 1

        yield code, line[start:end], raw_amount
        pos = amount_end
        index += 1


def _extract_total(text: str) -> Optional[float]:
    """
    Find the first stated total in the text.

    Args:
        text: Bill text.

    Returns:
        Optional[float]: The stated total, or None if no label matched
        or the amount could not be parsed.
    """
    match = TOTAL_PATTERN.search(text)
    if not match:
        return None
    amount = _parse_amount(match.group(1))
    if amount is None or amount < 0:
        return None
    return amount


def _parse_amount(raw: str) -> Optional[float]:
    """
    Convert a currency string such as "1,500.00" to a float.

    Args:
        raw: Digits with optional thousands separators and fraction.

    Returns:
        Optional[float]: Parsed value or None if not a number.
    """
    try:
        return float(raw.replace(",", ""))
    except (AttributeError, ValueError):
        return None
