"""
Command line interface for the medical bill analyzer.

Usage:
    bill-analyzer statement.txt
    bill-analyzer --sample "er visit" --letter
    bill-analyzer statement.txt --json --seed 7
"""

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Optional

from bill_analyzer.audit.anomaly_analyzer import analyze_bill
from bill_analyzer.config import settings
from bill_analyzer.extraction.bill_parser import parse_bill_text
from bill_analyzer.letters.dispute_letter import generate_dispute_letter
from bill_analyzer.models import AnalysisResult
from bill_analyzer.samples import SAMPLE_BILLS, get_sample
from bill_analyzer.services.export import findings_to_csv, result_to_json

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Audit an itemized medical bill for billing errors."
    )
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        help="Text file containing the bill",
    )
    parser.add_argument(
        "--sample",
        help=f"Analyze a bundled sample ({', '.join(s.name for s in SAMPLE_BILLS)})",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Print the full result as JSON")
    output.add_argument("--letter", action="store_true", help="Print the dispute letter")
    output.add_argument("--csv", action="store_true", help="Print findings as CSV")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible identifiers (default: None)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def format_summary(result: AnalysisResult) -> str:
    """
    Generate a human-readable summary of an analysis result.

    Args:
        result: Analysis result.

    Returns:
        str: Formatted summary string.
    """
    lines = [
        f"Analysis {result.id} (patient {result.patient_id})",
        f"Status: {result.status.value}",
        f"Original Total: ${result.original_total:,.2f}",
        f"Potential Savings: ${result.total_savings:,.2f} ({result.savings_percentage:.1f}%)",
        f"Corrected Total: ${result.corrected_total:,.2f}",
        f"Anomalies: {result.anomalies_count}",
        f"Needs Human Review: {result.human_review_count}",
    ]

    if result.findings:
        lines.append("")
        lines.append("Findings:")
        for finding in result.findings:
            lines.append(
                f"  [{finding.severity.value}] {finding.title} "
                f"(${finding.amount:,.2f}): {finding.description}"
            )

    return "\n".join(lines)


def _read_input(args: argparse.Namespace) -> Optional[str]:
    if args.sample:
        sample = get_sample(args.sample)
        if sample is None:
            logger.error(f"Unknown sample: {args.sample}")
            return None
        return sample.content

    if args.input is None:
        return sys.stdin.read()

    # Undecodable bytes become U+FFFD; the parser tolerates any text
    try:
        return args.input.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error(f"Cannot read {args.input}: {e}")
        return None


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI usage."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    text = _read_input(args)
    if text is None:
        return EXIT_INPUT_ERROR

    rng = random.Random(args.seed) if args.seed is not None else None
    result = analyze_bill(parse_bill_text(text), rng=rng)

    if args.json:
        print(result_to_json(result))
    elif args.letter:
        print(generate_dispute_letter(result, footer=settings.LETTER_FOOTER))
    elif args.csv:
        print(findings_to_csv(result), end="")
    else:
        print(format_summary(result))

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
