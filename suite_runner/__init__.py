"""Dependency-aware test runner with per-test data loading."""

from suite_runner.units import TestUnit, UnitResult

__all__ = ["TestUnit", "UnitResult"]
