"""HTML report generation from run reports.

Generates a self-contained HTML page with color-coded statuses and
expandable error and step sections.
"""

from __future__ import annotations

import html
from pathlib import Path
from typing import Any

STATUS_COLORS: dict[str, str] = {
    "passed": "#90EE90",
    "failed": "#FFB6C1",
}

STATUS_LABELS: dict[str, str] = {
    "passed": "PASSED",
    "failed": "FAILED",
}

_CSS = """\
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    padding: 20px;
    margin: 0;
    background: #f5f5f5;
    color: #333;
}
.report-header {
    background: #fff;
    border-radius: 8px;
    padding: 20px;
    margin-bottom: 20px;
    box-shadow: 0 1px 3px rgba(0,0,0,0.1);
}
.report-header h1 {
    margin: 0 0 10px 0;
    font-size: 24px;
}
.meta {
    color: #666;
    font-size: 14px;
}
.summary {
    display: flex;
    gap: 20px;
    flex-wrap: wrap;
    margin-top: 15px;
}
.summary-item {
    padding: 10px 16px;
    border-radius: 6px;
    font-weight: 600;
    font-size: 14px;
}
.status-badge {
    display: inline-block;
    padding: 3px 10px;
    border-radius: 12px;
    font-size: 12px;
    font-weight: 600;
    color: #333;
}
.test-entry {
    border-left: 4px solid #ddd;
    margin: 8px 0;
    padding: 8px 12px;
    background: #fff;
    border-radius: 0 6px 6px 0;
}
.test-name {
    font-weight: 600;
    font-size: 14px;
}
.test-meta {
    font-size: 12px;
    color: #666;
    margin-top: 4px;
}
details.log-details {
    margin-top: 8px;
}
details.log-details > summary {
    cursor: pointer;
    font-size: 13px;
    color: #555;
    font-weight: 500;
}
pre {
    background: #1e1e1e;
    color: #d4d4d4;
    padding: 12px;
    border-radius: 6px;
    overflow-x: auto;
    font-size: 12px;
    line-height: 1.5;
    margin: 8px 0;
}
.steps-table {
    border-collapse: collapse;
    width: 100%;
    font-size: 13px;
    margin: 8px 0;
}
.steps-table th,
.steps-table td {
    border: 1px solid #ddd;
    padding: 6px 10px;
    text-align: left;
}
.steps-table th {
    background: #f0f0f0;
    font-weight: 600;
}
"""


def generate_html_report(report_data: dict[str, Any]) -> str:
    """Generate a self-contained HTML report from report data.

    Args:
        report_data: Report dict (as produced by Reporter.generate_report()).
                     Expected structure: {"report": {...}}.

    Returns:
        Complete HTML string.
    """
    report = report_data.get("report", {})
    parts: list[str] = []

    parts.append("<!DOCTYPE html>")
    parts.append('<html lang="en">')
    parts.append("<head>")
    parts.append('<meta charset="UTF-8">')
    parts.append('<meta name="viewport" content="width=device-width, initial-scale=1.0">')
    parts.append("<title>Test Report</title>")
    parts.append(f"<style>{_CSS}</style>")
    parts.append("</head>")
    parts.append("<body>")

    parts.append(_render_header(report))

    parts.append('<div class="tests">')
    parts.append("<h2>Test Results</h2>")
    tests = report.get("tests", [])
    if not tests:
        parts.append('<div class="meta">No tests were executed.</div>')
    for test in tests:
        parts.append(_render_test_entry(test))
    parts.append("</div>")

    parts.append("</body>")
    parts.append("</html>")

    return "\n".join(parts)


def write_html_report(
    report_data: dict[str, Any], output_path: Path
) -> None:
    """Write HTML report to a file."""
    html_content = generate_html_report(report_data)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(html_content)


def _render_header(report: dict[str, Any]) -> str:
    """Render the report header with summary."""
    parts: list[str] = []
    parts.append('<div class="report-header">')
    parts.append("<h1>Test Report</h1>")

    if "generated_at" in report:
        parts.append(
            f'<div class="meta">Generated: '
            f"{html.escape(str(report['generated_at']))}</div>"
        )

    summary = report.get("summary", {})
    if summary:
        parts.append('<div class="summary">')
        parts.append(
            f'<div class="summary-item" style="background:#e8e8e8">'
            f"Total: {summary.get('total', 0)}</div>"
        )
        parts.append(
            f'<div class="summary-item" style="background:{STATUS_COLORS["passed"]}">'
            f"Passed: {summary.get('passed', 0)}</div>"
        )
        failed = summary.get("failed", 0)
        if failed:
            parts.append(
                f'<div class="summary-item" style="background:{STATUS_COLORS["failed"]}">'
                f"Failed: {failed}</div>"
            )
        parts.append(
            f'<div class="summary-item" style="background:#e8e8e8">'
            f"Duration: {summary.get('total_duration_seconds', 0):.3f}s</div>"
        )
        parts.append("</div>")

    parts.append("</div>")
    return "\n".join(parts)


def _render_test_entry(data: dict[str, Any]) -> str:
    """Render a single test entry with expandable details."""
    parts: list[str] = []
    name = str(data.get("name", "unknown"))
    status = data.get("status", "failed")
    color = STATUS_COLORS.get(status, "#e8e8e8")
    label = STATUS_LABELS.get(status, status.upper())
    duration = data.get("duration_seconds", 0)

    parts.append(
        f'<div class="test-entry" style="border-left-color:{color}"'
        f' data-test-name="{html.escape(name, quote=True)}">'
    )
    parts.append(
        f'<div class="test-name">{html.escape(name)} '
        f'<span class="status-badge" style="background:{color}">'
        f"{html.escape(label)}</span></div>"
    )

    meta_items = [f"Duration: {duration:.3f}s"]
    if data.get("started_at"):
        meta_items.append(f"Started: {html.escape(str(data['started_at']))}")
    parts.append(f'<div class="test-meta">{" | ".join(meta_items)}</div>')

    steps = data.get("steps") or []
    if steps:
        parts.append(_render_steps(steps))

    error = data.get("error")
    if error:
        parts.append('<details class="log-details" open>')
        parts.append("<summary>Error</summary>")
        parts.append(f"<pre>{html.escape(str(error))}</pre>")
        parts.append("</details>")

    parts.append("</div>")
    return "\n".join(parts)


def _render_steps(steps: list[dict[str, Any]]) -> str:
    parts: list[str] = ['<table class="steps-table">']
    parts.append("<tr><th>Step</th><th>Status</th><th>Assertions</th></tr>")
    for step in steps:
        if not isinstance(step, dict):
            step = {"name": step}
        status = str(step.get("status", "passed"))
        color = STATUS_COLORS.get(status, "#e8e8e8")
        assertions = ", ".join(
            _render_assertion(a) for a in step.get("assertions") or []
        )
        parts.append(
            f"<tr><td>{html.escape(str(step.get('name', '')))}</td>"
            f'<td style="background:{color}">{html.escape(status)}</td>'
            f"<td>{html.escape(assertions)}</td></tr>"
        )
    parts.append("</table>")
    return "\n".join(parts)


def _render_assertion(assertion: Any) -> str:
    if not isinstance(assertion, dict):
        return str(assertion)
    return f"{assertion.get('name')}: {'ok' if assertion.get('passed') else 'FAILED'}"
