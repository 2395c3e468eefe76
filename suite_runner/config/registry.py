"""Static test registry: test entries and data source declarations.

The registry is built once at startup from a YAML or JSON manifest and is
never mutated afterwards.  Manifest layout::

    tests:
      login:
        path: examples.shop.units:LoginTest
        dependencies: []
        tags: [smoke]
        data_sources: [users]
    data_sources:
      users:
        type: json
        path: data/users.json
        fallback: []
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

# Canonical data source kinds and their accepted aliases
KIND_ALIASES: dict[str, str] = {
    "excel": "excel",
    "xlsx": "excel",
    "tabular": "excel",
    "csv": "csv",
    "json": "json",
    "structured": "json",
    "yaml": "yaml",
    "yml": "yaml",
}


class RegistryError(ValueError):
    """Raised when a registry manifest is malformed."""


@dataclass(frozen=True)
class TestRegistryEntry:
    """A single registered test."""

    __test__ = False

    name: str
    path: str
    dependencies: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    data_sources: tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class DataSourceSpec:
    """A named origin of auxiliary test input."""

    name: str
    kind: str
    path: str
    sheet: str | int | None = None
    fallback: Any = field(default=None, compare=False)


def _as_names(value: Any, field_name: str, owner: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise RegistryError(
            f"'{field_name}' of '{owner}' must be a list, got {type(value).__name__}"
        )
    return tuple(str(v) for v in value)


class TestRegistry:
    """Immutable mapping of test names to entries plus data sources."""

    __test__ = False

    def __init__(
        self,
        tests: Mapping[str, TestRegistryEntry] | None = None,
        data_sources: Mapping[str, DataSourceSpec] | None = None,
        base_dir: Path | None = None,
    ) -> None:
        self._tests = MappingProxyType(dict(tests or {}))
        self._data_sources = MappingProxyType(dict(data_sources or {}))
        self.base_dir = base_dir or Path.cwd()

    @classmethod
    def from_manifest(
        cls, manifest: dict[str, Any], base_dir: Path | None = None
    ) -> TestRegistry:
        """Construct a registry from a parsed manifest.

        Args:
            manifest: Dict with 'tests' and optional 'data_sources' keys.
            base_dir: Directory that relative paths resolve against.

        Returns:
            A fully constructed TestRegistry.

        Raises:
            RegistryError: If an entry is malformed.
        """
        if not isinstance(manifest, dict):
            raise RegistryError("Registry manifest must be a mapping")

        raw_tests = manifest.get("tests") or {}
        if not isinstance(raw_tests, dict):
            raise RegistryError("'tests' must be a mapping of test name to entry")
        raw_sources = manifest.get("data_sources") or {}
        if not isinstance(raw_sources, dict):
            raise RegistryError(
                "'data_sources' must be a mapping of source name to entry"
            )

        tests: dict[str, TestRegistryEntry] = {}
        for name, data in raw_tests.items():
            if not isinstance(data, dict):
                raise RegistryError(f"Test '{name}' must be a mapping")
            if not data.get("path"):
                raise RegistryError(f"Test '{name}' is missing 'path'")
            tests[name] = TestRegistryEntry(
                name=name,
                path=str(data["path"]),
                dependencies=_as_names(data.get("dependencies"), "dependencies", name),
                tags=_as_names(data.get("tags"), "tags", name),
                data_sources=_as_names(data.get("data_sources"), "data_sources", name),
                description=str(data.get("description", "")),
            )

        sources: dict[str, DataSourceSpec] = {}
        for name, data in raw_sources.items():
            if not isinstance(data, dict):
                raise RegistryError(f"Data source '{name}' must be a mapping")
            kind = data.get("type", "")
            if not isinstance(kind, str):
                raise RegistryError(f"Data source '{name}' has an invalid 'type'")
            sources[name] = DataSourceSpec(
                name=name,
                kind=KIND_ALIASES.get(kind.lower(), kind.lower()),
                path=str(data.get("path", "")),
                sheet=data.get("sheet"),
                fallback=data.get("fallback"),
            )

        return cls(tests, sources, base_dir)

    @classmethod
    def load(cls, path: Path) -> TestRegistry:
        """Load a registry manifest from a YAML or JSON file.

        Raises:
            OSError: If the manifest cannot be read.
            RegistryError: If the manifest cannot be decoded or parsed.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise RegistryError(f"Registry manifest {path} is not UTF-8: {e}") from e
        try:
            if path.suffix in (".yaml", ".yml"):
                manifest = yaml.safe_load(text) or {}
            else:
                manifest = json.loads(text)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise RegistryError(f"Invalid registry manifest {path}: {e}") from e
        return cls.from_manifest(manifest, base_dir=path.resolve().parent)

    def get_test(self, name: str) -> TestRegistryEntry | None:
        return self._tests.get(name)

    def get_all_tests(self) -> Mapping[str, TestRegistryEntry]:
        return self._tests

    def get_tests_by_tag(self, tag: str) -> dict[str, TestRegistryEntry]:
        """Get all tests carrying the given tag, in registry order."""
        return {
            name: entry for name, entry in self._tests.items() if tag in entry.tags
        }

    def get_data_source(self, name: str) -> DataSourceSpec | None:
        return self._data_sources.get(name)

    def resolve_path(self, relative: str) -> Path:
        """Resolve a manifest-relative path."""
        return (self.base_dir / relative).resolve()
