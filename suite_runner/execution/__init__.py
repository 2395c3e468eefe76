"""Test execution: dependency resolution and the sequential engine."""

from suite_runner.execution.engine import ExecutionEngine, ExecutionResult, TestResult
from suite_runner.execution.resolver import CircularDependencyError, DependencyResolver

__all__ = [
    "CircularDependencyError",
    "DependencyResolver",
    "ExecutionEngine",
    "ExecutionResult",
    "TestResult",
]
