"""Runner configuration file management.

Reads the optional .runner_config JSON file that locates the test
registry and the report directories.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "registry": "tests.yaml",
    "results_dir": "reports/results",
    "report_dir": "reports/html",
    "open_report": True,
}


class RunnerConfig:
    """Manages the .runner_config JSON configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            text = self.path.read_text()
            data = json.loads(text)
            if isinstance(data, dict):
                self._data = {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError):
            self._data = dict(DEFAULT_CONFIG)

    @property
    def base_dir(self) -> Path:
        """Directory that relative config paths resolve against."""
        if self.path is not None:
            return self.path.resolve().parent
        return Path.cwd()

    def _resolve(self, key: str) -> Path:
        value = Path(str(self._data.get(key, DEFAULT_CONFIG[key])))
        if value.is_absolute():
            return value
        return self.base_dir / value

    @property
    def registry(self) -> Path:
        """Get the registry manifest path."""
        return self._resolve("registry")

    @property
    def results_dir(self) -> Path:
        """Get the per-test results directory."""
        return self._resolve("results_dir")

    @property
    def report_dir(self) -> Path:
        """Get the generated report directory."""
        return self._resolve("report_dir")

    @property
    def open_report(self) -> bool:
        """Whether to open the report after a run."""
        return bool(self._data.get("open_report", DEFAULT_CONFIG["open_report"]))
