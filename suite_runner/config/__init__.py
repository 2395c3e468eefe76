"""Static configuration: test registry and runner settings."""

from suite_runner.config.registry import (
    DataSourceSpec,
    RegistryError,
    TestRegistry,
    TestRegistryEntry,
)
from suite_runner.config.settings import DEFAULT_CONFIG, RunnerConfig

__all__ = [
    "DEFAULT_CONFIG",
    "DataSourceSpec",
    "RegistryError",
    "RunnerConfig",
    "TestRegistry",
    "TestRegistryEntry",
]
