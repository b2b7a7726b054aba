"""
Unit tests for JSON and CSV exports.
"""

import csv
import io
import json

import pytest

from bill_analyzer.audit.anomaly_analyzer import analyze_bill
from bill_analyzer.extraction.bill_parser import parse_bill_text
from bill_analyzer.services.export import (
    CSV_COLUMNS,
    export_filename,
    findings_to_csv,
    result_to_json,
)


@pytest.fixture
def surgery_result(surgery_text, rng, fixed_clock):
    return analyze_bill(parse_bill_text(surgery_text), rng=rng, clock=fixed_clock)


class TestResultToJson:
    """Test cases for JSON export."""

    def test_round_trips_as_dict(self, surgery_result):
        """Test that JSON matches the result dictionary."""
        data = json.loads(result_to_json(surgery_result))

        assert data == surgery_result.to_dict()
        assert data["status"] == "MEDIUM_CONFIDENCE"
        assert data["timestamp"] == "2024-10-12T09:30:00"
        assert data["findings"][0]["action_required"] == "VERIFY"

    def test_indented(self, surgery_result):
        """Test human-readable indentation."""
        assert result_to_json(surgery_result).startswith('{\n  "id"')


class TestFindingsToCsv:
    """Test cases for CSV export."""

    def test_rows(self, surgery_result):
        """Test header and one row per finding."""
        rows = list(csv.DictReader(io.StringIO(findings_to_csv(surgery_result))))

        assert len(rows) == 2
        assert rows[0]["category"] == "itemization"
        assert rows[0]["amount"] == "1500.00"
        assert rows[0]["action_required"] == "VERIFY"
        assert rows[1]["severity"] == "LOW"
        assert rows[1]["action_required"] == ""

    def test_header_only_without_findings(self, lab_tests_text, rng):
        """Test export of a clean bill."""
        result = analyze_bill(parse_bill_text(lab_tests_text), rng=rng)

        assert findings_to_csv(result) == ",".join(CSV_COLUMNS) + "\n"

    def test_quotes_descriptions_with_commas(self, surgery_result):
        """Test that descriptions containing commas survive CSV quoting."""
        rows = list(csv.DictReader(io.StringIO(findings_to_csv(surgery_result))))

        assert rows[1]["description"] == surgery_result.findings[1].description


class TestExportFilename:
    """Test cases for download filenames."""

    @pytest.mark.parametrize("extension", ["json", ".json"])
    def test_filename(self, surgery_result, extension):
        """Test filename with or without leading dot."""
        assert export_filename(surgery_result, extension) == f"bill-analysis-{surgery_result.id}.json"
