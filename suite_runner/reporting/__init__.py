"""Test result reporting: result files, JSON/YAML and HTML reports."""

from suite_runner.reporting.html_reporter import generate_html_report, write_html_report
from suite_runner.reporting.reporter import Reporter, ReportError

__all__ = [
    "ReportError",
    "Reporter",
    "generate_html_report",
    "write_html_report",
]
