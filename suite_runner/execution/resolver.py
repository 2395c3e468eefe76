"""Dependency resolution for requested tests.

Expands a requested set of test names into an execution order where
every prerequisite appears before the tests that declare it, and every
test appears exactly once.
"""

from __future__ import annotations

from typing import Sequence

from suite_runner.config.registry import TestRegistry
from suite_runner.log import log


class CircularDependencyError(ValueError):
    """Raised when prerequisite declarations form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")


class DependencyResolver:
    """Computes a prerequisite-respecting order over a TestRegistry."""

    def __init__(self, registry: TestRegistry) -> None:
        self.registry = registry

    def resolve(self, requested: Sequence[str]) -> list[str]:
        """Resolve requested tests plus their transitive prerequisites.

        Requested order is kept among independent tests, and each test's
        prerequisites are placed in declared order.  Names missing from
        the registry are kept (with a warning) so the run can count them.

        Args:
            requested: Test names to run.

        Returns:
            Ordered, de-duplicated list of test names.

        Raises:
            CircularDependencyError: If a prerequisite chain loops.
        """
        order: list[str] = []
        placed: set[str] = set()
        path: list[str] = []

        def visit(name: str) -> None:
            if name in placed:
                return
            if name in path:
                cycle_start = path.index(name)
                raise CircularDependencyError(path[cycle_start:] + [name])

            entry = self.registry.get_test(name)
            if entry is None:
                log(f"Test not found: {name}", "warn")
            else:
                path.append(name)
                for dep_name in entry.dependencies:
                    visit(dep_name)
                path.pop()

            placed.add(name)
            order.append(name)

        for name in requested:
            visit(name)

        return order
