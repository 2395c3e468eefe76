"""Per-test data loading with fallback values.

Every load starts from the baseline default data.  Each requested data
source is then read from disk; any failure for one source degrades to
that source's configured fallback value and never aborts the batch.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Sequence

from suite_runner.config.registry import DataSourceSpec, TestRegistry
from suite_runner.data.defaults import prepare_default_data
from suite_runner.data.readers import READERS
from suite_runner.log import log

DefaultsProvider = Callable[[], "Awaitable[dict[str, Any]] | dict[str, Any]"]


class DataLoader:
    """Loads the TestData mapping for one test attempt."""

    def __init__(
        self,
        registry: TestRegistry,
        defaults: DefaultsProvider = prepare_default_data,
        readers: dict[str, Callable[..., Any]] | None = None,
    ) -> None:
        self.registry = registry
        self.defaults = defaults
        self.readers = dict(READERS if readers is None else readers)

    async def load(self, data_sources: Sequence[str]) -> dict[str, Any]:
        """Load baseline data plus the named data sources.

        Args:
            data_sources: Data source names declared by a test.

        Returns:
            Mapping with the baseline keys plus one entry per known
            data source (loaded data or its fallback).
        """
        baseline = self.defaults()
        if inspect.isawaitable(baseline):
            baseline = await baseline
        test_data: dict[str, Any] = dict(baseline)

        for source_name in data_sources:
            source = self.registry.get_data_source(source_name)
            if source is None:
                log(f"Data source not found: {source_name}", "warn")
                continue
            test_data[source_name] = await self._load_source(source)

        return test_data

    async def _load_source(self, source: DataSourceSpec) -> Any:
        """Read a single data source, returning its fallback on failure."""
        reader = self.readers.get(source.kind)
        if reader is None:
            log(
                f"Unsupported data source type '{source.kind}' for {source.name}, "
                f"using fallback data",
                "warn",
            )
            return source.fallback

        path = self.registry.resolve_path(source.path)
        if not path.is_file():
            log(f"{source.kind} file not found: {path}, using fallback data", "warn")
            return source.fallback

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, reader, path, source.sheet)
        except Exception as e:
            log(f"Error loading data for {source.name}: {e}", "error")
            return source.fallback
