"""Test unit base class and unit lookup.

A test unit is constructed with its loaded test data and exposes a
``run()`` method returning a UnitResult (or an awaitable of one).
Subclasses either override ``run()`` directly or implement ``execute()``
and use the step helpers to record structured progress.
"""

from __future__ import annotations

import importlib
import importlib.util
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Generator


class UnitLoadError(ImportError):
    """Raised when a test unit locator cannot be resolved."""


class CriticalAssertionError(Exception):
    """Stops a unit after a failed critical assertion."""


@dataclass
class UnitResult:
    """Outcome reported by a test unit."""

    success: bool
    error: str | None = None
    steps: list[dict[str, Any]] = field(default_factory=list)


class TestUnit:
    """Base class for test units."""

    __test__ = False

    def __init__(self, data: dict[str, Any]) -> None:
        self.data = data
        self.failures: list[str] = []
        self.steps: list[dict[str, Any]] = []
        self._current_step: dict[str, Any] | None = None

    def execute(self) -> None:
        raise NotImplementedError

    def run(self) -> UnitResult:
        """Run ``execute()`` and turn recorded failures into a UnitResult."""
        try:
            self.execute()
        except CriticalAssertionError as e:
            return UnitResult(False, str(e), self.steps)
        except Exception as e:
            self.failures.append(type(e).__name__)
            return UnitResult(False, f"{type(e).__name__}: {e}", self.steps)

        if self.failures:
            return UnitResult(
                False, f"Failed assertions: {', '.join(self.failures)}", self.steps
            )
        return UnitResult(True, None, self.steps)

    @contextmanager
    def step(self, name: str, **extra: Any) -> Generator[dict[str, Any], None, None]:
        """Record a named step; an exception inside marks it failed and re-raises."""
        record: dict[str, Any] = {"name": name, "status": "passed", "assertions": [], **extra}
        self.steps.append(record)
        parent, self._current_step = self._current_step, record
        try:
            yield record
        except Exception as e:
            record["status"] = "failed"
            record["error"] = str(e)
            if not isinstance(e, CriticalAssertionError):
                record["traceback"] = traceback.format_exc()
            raise
        finally:
            self._current_step = parent

    def assert_that(self, name: str, passed: bool, critical: bool = False) -> None:
        """Record an assertion; a failed critical assertion stops the unit."""
        if self._current_step is not None:
            self._current_step["assertions"].append({"name": name, "passed": passed})
            if not passed:
                self._current_step["status"] = "failed"
        if not passed:
            self.failures.append(name)
            if critical:
                raise CriticalAssertionError(f"Critical assertion failed: {name}")


# Modules loaded from files, keyed by resolved path, so every test in a
# run sees the same module state.
_FILE_MODULES: dict[Path, ModuleType] = {}


def _load_from_file(file_path: Path) -> ModuleType:
    file_path = file_path.resolve()
    if file_path in _FILE_MODULES:
        return _FILE_MODULES[file_path]

    spec = importlib.util.spec_from_file_location(file_path.stem, file_path)
    if spec is None or spec.loader is None:
        raise UnitLoadError(f"Cannot load test module: {file_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    _FILE_MODULES[file_path] = module
    return module


def load_unit(locator: str, base_dir: Path | None = None) -> Callable[..., Any]:
    """Resolve a unit locator to a unit class or factory.

    Supported forms:
        ``package.module:ClassName`` imported with importlib.
        ``path/to/file.py:ClassName`` loaded from a file relative to
        base_dir.  Without ``:ClassName`` the module's ``TEST_UNIT``
        attribute is used.

    Raises:
        UnitLoadError: If the module or attribute cannot be found.
    """
    module_ref, _, attr = locator.partition(":")
    try:
        if module_ref.endswith(".py"):
            file_path = Path(module_ref)
            if not file_path.is_absolute() and base_dir is not None:
                file_path = base_dir / file_path
            if not file_path.is_file():
                raise UnitLoadError(f"Test module not found: {file_path}")
            module = _load_from_file(file_path)
        else:
            module = importlib.import_module(module_ref)
    except UnitLoadError:
        raise
    except ImportError as e:
        raise UnitLoadError(f"Cannot import test module '{module_ref}': {e}") from e

    attr = attr or "TEST_UNIT"
    try:
        return getattr(module, attr)
    except AttributeError:
        raise UnitLoadError(f"'{module_ref}' has no attribute '{attr}'") from None
