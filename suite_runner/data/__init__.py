"""Test data: baseline defaults, file readers and the data loader."""

from suite_runner.data.defaults import CREDENTIALS_KEY, prepare_default_data
from suite_runner.data.loader import DataLoader

__all__ = [
    "CREDENTIALS_KEY",
    "DataLoader",
    "prepare_default_data",
]
