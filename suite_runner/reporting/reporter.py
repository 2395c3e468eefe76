"""Result collection and report generation.

During a run each TestResult is written as one JSON file into the
results directory.  After the run the files are aggregated into a
report (JSON, YAML and a self-contained HTML page) in the report
directory.
"""

from __future__ import annotations

import dataclasses
import datetime
import hashlib
import json
import re
import shutil
import webbrowser
from pathlib import Path
from typing import Any

import yaml

from suite_runner.execution.engine import TestResult
from suite_runner.log import log
from suite_runner.reporting.html_reporter import write_html_report

RESULT_SUFFIX = "-result.json"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class ReportError(RuntimeError):
    """Raised when a report cannot be produced or displayed."""


class Reporter:
    """Writes per-test results and builds the run report.

    Args:
        results_dir: Directory holding one JSON file per test result.
        report_dir: Directory the generated report is written to.
    """

    def __init__(self, results_dir: Path, report_dir: Path) -> None:
        self.results_dir = results_dir
        self.report_dir = report_dir

    @property
    def html_path(self) -> Path:
        return self.report_dir / "index.html"

    def clean_results_directory(self) -> None:
        """Remove stale results from a previous run."""
        if self.results_dir.exists():
            shutil.rmtree(self.results_dir)
        self.results_dir.mkdir(parents=True, exist_ok=True)

    def result_path(self, name: str) -> Path:
        """Result file for a test name.

        The name is sanitised for the filesystem and suffixed with a short
        digest of the raw name, so distinct names never share a file.
        """
        safe_name = _UNSAFE_CHARS.sub("_", name)
        digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:10]
        return self.results_dir / f"{safe_name}-{digest}{RESULT_SUFFIX}"

    def write_result(self, result: TestResult) -> Path:
        """Write a single test result file.

        Returns:
            Path of the written file.
        """
        self.results_dir.mkdir(parents=True, exist_ok=True)
        path = self.result_path(result.name)
        with open(path, "w") as f:
            json.dump(dataclasses.asdict(result), f, indent=2, default=str)
        return path

    def load_results(self) -> list[dict[str, Any]]:
        """Read all result files, ordered by start time."""
        if not self.results_dir.is_dir():
            return []

        results: list[dict[str, Any]] = []
        for path in sorted(self.results_dir.glob(f"*{RESULT_SUFFIX}")):
            try:
                data = json.loads(path.read_text())
            except (json.JSONDecodeError, OSError) as e:
                log(f"Skipping unreadable result file {path}: {e}", "warn")
                continue
            if isinstance(data, dict) and "name" in data:
                results.append(data)
        results.sort(key=lambda r: r.get("started_at", ""))
        return results

    def generate_report(self) -> dict[str, Any]:
        """Aggregate result files into JSON, YAML and HTML reports.

        Returns:
            The report dict ({"report": {...}}).
        """
        tests = [_format_result(r) for r in self.load_results()]
        report_data: dict[str, Any] = {
            "report": {
                "generated_at": datetime.datetime.now(
                    datetime.timezone.utc
                ).isoformat(),
                "summary": _compute_summary(tests),
                "tests": tests,
            }
        }

        self.report_dir.mkdir(parents=True, exist_ok=True)
        with open(self.report_dir / "report.json", "w") as f:
            json.dump(report_data, f, indent=2)
        self.write_yaml(report_data, self.report_dir / "report.yaml")
        write_html_report(report_data, self.html_path)

        log(f"Report written to: {self.html_path}", "info")
        return report_data

    def write_yaml(self, report_data: dict[str, Any], path: Path) -> None:
        """Write the report as a YAML file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(report_data, f, sort_keys=False)

    def open_report(self) -> None:
        """Open the generated HTML report in a browser.

        Raises:
            ReportError: If the report is missing or no browser opened it.
        """
        if not self.html_path.is_file():
            raise ReportError(f"Report not found: {self.html_path}")
        try:
            opened = webbrowser.open(self.html_path.resolve().as_uri())
        except webbrowser.Error as e:
            raise ReportError(f"Could not open report: {e}") from e
        if not opened:
            raise ReportError("No browser available to open the report")


def _format_result(data: dict[str, Any]) -> dict[str, Any]:
    """Format a stored result for the report."""
    entry: dict[str, Any] = {
        "name": data["name"],
        "status": data.get("status", "failed"),
        "duration_seconds": round(float(data.get("duration", 0.0)), 3),
    }
    if data.get("error"):
        entry["error"] = data["error"]
    if data.get("started_at"):
        entry["started_at"] = data["started_at"]
    if data.get("steps"):
        entry["steps"] = data["steps"]
    return entry


def _compute_summary(tests: list[dict[str, Any]]) -> dict[str, Any]:
    passed = sum(1 for t in tests if t["status"] == "passed")
    return {
        "total": len(tests),
        "passed": passed,
        "failed": len(tests) - passed,
        "total_duration_seconds": round(
            sum(t["duration_seconds"] for t in tests), 3
        ),
    }
