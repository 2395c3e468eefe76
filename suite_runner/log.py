"""Console logging for the test runner.

Info and success lines go to stdout; warnings and errors go to stderr
with a prefix so they stand out in CI logs.
"""

from __future__ import annotations

import sys

LEVELS = ("info", "warn", "error", "success")

_PREFIXES: dict[str, str] = {
    "info": "",
    "success": "[PASS] ",
    "warn": "Warning: ",
    "error": "Error: ",
}


def log(message: str, level: str = "info") -> None:
    """Write a single log line at the given level.

    Args:
        message: Text to emit.
        level: One of info, warn, error, success.

    Raises:
        ValueError: If the level is unknown.
    """
    if level not in _PREFIXES:
        raise ValueError(f"Unknown log level: {level}")

    stream = sys.stderr if level in ("warn", "error") else sys.stdout
    print(f"{_PREFIXES[level]}{message}", file=stream)
