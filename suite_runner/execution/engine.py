"""Sequential execution engine.

Resolves the requested tests, then drives each one through data loading,
unit construction and execution.  A failure in one test never stops the
remaining tests; every resolved test is counted as successful or failed.
"""

from __future__ import annotations

import datetime
import inspect
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Sequence

from suite_runner.config.registry import TestRegistry
from suite_runner.data.defaults import CREDENTIALS_KEY
from suite_runner.data.loader import DataLoader
from suite_runner.execution.resolver import DependencyResolver
from suite_runner.log import log
from suite_runner.units import load_unit

if TYPE_CHECKING:
    from suite_runner.reporting.reporter import Reporter


@dataclass
class TestResult:
    """Result of a single test execution."""

    __test__ = False

    name: str
    status: str  # passed, failed
    duration: float = 0.0
    error: str | None = None
    started_at: str = ""
    stopped_at: str = ""
    steps: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class ExecutionResult:
    """Summary of one run."""

    total: int
    successful: int
    failed: int
    execution_time: float
    results: tuple[TestResult, ...] = ()

    @property
    def success(self) -> bool:
        return self.failed == 0


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _normalize_steps(steps: Any) -> list[dict[str, Any]]:
    """Steps as dicts; anything that is not a mapping becomes a named step."""
    if isinstance(steps, (str, Mapping)):
        steps = [steps]
    return [
        dict(step) if isinstance(step, Mapping) else {"name": str(step)}
        for step in steps or []
    ]


def _classify(outcome: Any) -> tuple[bool, str | None, list[dict[str, Any]]]:
    """Normalise a unit's return value to (success, error, steps)."""
    if isinstance(outcome, bool):
        return outcome, None, []
    if isinstance(outcome, Mapping):
        return (
            bool(outcome.get("success")),
            outcome.get("error"),
            _normalize_steps(outcome.get("steps")),
        )
    if hasattr(outcome, "success"):
        return (
            bool(outcome.success),
            getattr(outcome, "error", None),
            _normalize_steps(getattr(outcome, "steps", None)),
        )
    raise TypeError(f"Unsupported test result type: {type(outcome).__name__}")


class ExecutionEngine:
    """Runs resolved tests strictly one after another.

    Args:
        registry: The static test registry.
        loader: Data loader for per-test data.
        reporter: Receives per-test results; its results directory is
            cleared before each run.
        units: Optional mapping of test name to unit factory that takes
            precedence over the registry's locator.
    """

    def __init__(
        self,
        registry: TestRegistry,
        loader: DataLoader | None = None,
        reporter: Reporter | None = None,
        units: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        self.registry = registry
        self.loader = loader or DataLoader(registry)
        self.reporter = reporter
        self.units = dict(units or {})
        self.resolver = DependencyResolver(registry)

    async def run(self, tests: Sequence[str]) -> ExecutionResult:
        """Run the given tests plus their prerequisites.

        Returns:
            ExecutionResult with counts and elapsed time.

        Raises:
            CircularDependencyError: If prerequisites form a cycle.
        """
        log(f"Starting test execution for {len(tests)} tests", "info")

        if self.reporter is not None:
            self.reporter.clean_results_directory()

        order = self.resolver.resolve(tests)
        log(f"Tests to run with dependencies: {', '.join(order)}", "info")

        results: list[TestResult] = []
        start_time = time.monotonic()

        for name in order:
            log(f"Executing test: {name}", "info")
            result = await self._run_test(name)
            results.append(result)
            if self.reporter is not None:
                self.reporter.write_result(result)

        execution_time = time.monotonic() - start_time
        successful = sum(1 for r in results if r.status == "passed")
        failed = len(results) - successful

        log("\nTest Execution Summary:", "info")
        log(f"Total tests: {len(order)}", "info")
        log(f"Successful: {successful}", "success")
        log(f"Failed: {failed}", "error" if failed else "info")
        log(f"Execution time: {execution_time:.2f} seconds", "info")

        return ExecutionResult(
            total=len(order),
            successful=successful,
            failed=failed,
            execution_time=execution_time,
            results=tuple(results),
        )

    async def run_by_tag(self, tag: str) -> ExecutionResult | None:
        """Run every test carrying the tag; None when no test matches."""
        names = list(self.registry.get_tests_by_tag(tag))
        if not names:
            log(f"No tests found with tag: {tag}", "warn")
            return None

        log(f"Found {len(names)} tests with tag '{tag}': {', '.join(names)}", "info")
        return await self.run(names)

    async def _run_test(self, name: str) -> TestResult:
        """Run a single test, converting every failure into a failed result."""
        started_at = _now()
        start_time = time.monotonic()

        def finish(status: str, error: str | None = None, steps=None) -> TestResult:
            return TestResult(
                name=name,
                status=status,
                duration=time.monotonic() - start_time,
                error=error,
                started_at=started_at,
                stopped_at=_now(),
                steps=steps or [],
            )

        entry = self.registry.get_test(name)
        if entry is None:
            log(f"Test configuration not found for: {name}", "error")
            return finish("failed", "Test configuration not found")

        try:
            test_data = await self.loader.load(entry.data_sources)
            log(f"Loaded test data with keys: {', '.join(test_data)}", "info")
            credentials = test_data.get(CREDENTIALS_KEY)
            if isinstance(credentials, Mapping) and credentials.get("email"):
                log(f"Test data includes credentials for: {credentials['email']}", "info")

            factory = self.units.get(name)
            if factory is None:
                factory = load_unit(entry.path, self.registry.base_dir)

            unit = factory(test_data)
            outcome = unit.run()
            if inspect.isawaitable(outcome):
                outcome = await outcome
            success, error, steps = _classify(outcome)
        except Exception as e:
            log(f"Error running test {name}: {e}", "error")
            return finish("failed", f"{type(e).__name__}: {e}")

        if success:
            log(f"Test {name} completed successfully", "success")
            return finish("passed", steps=steps)

        log(f"Test {name} failed: {error or 'Unknown error'}", "error")
        return finish("failed", error or "Unknown error", steps)
