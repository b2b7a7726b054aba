"""
Audit module for medical bill analysis.

Provides the rule-based anomaly analyzer.
"""

from bill_analyzer.audit.anomaly_analyzer import analyze_bill

__all__ = ["analyze_bill"]
