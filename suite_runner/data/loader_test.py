"""Unit tests for the data loader and file readers."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from suite_runner.config.registry import TestRegistry
from suite_runner.data.defaults import CREDENTIALS_KEY, prepare_default_data
from suite_runner.data.loader import DataLoader
from suite_runner.data.readers import read_csv, read_excel, read_json, read_yaml


BASELINE = {CREDENTIALS_KEY: {"email": "qa@example.com", "password": "pw"}}


async def _fixed_defaults() -> dict:
    return {CREDENTIALS_KEY: dict(BASELINE[CREDENTIALS_KEY])}


def _make_loader(base_dir: Path, sources: dict) -> DataLoader:
    registry = TestRegistry.from_manifest(
        {"tests": {}, "data_sources": sources}, base_dir=base_dir
    )
    return DataLoader(registry, defaults=_fixed_defaults)


def _load(loader: DataLoader, names: list[str]) -> dict:
    return asyncio.run(loader.load(names))


class TestBaseline:
    """The baseline keys are always present."""

    def test_no_sources_returns_baseline(self, tmp_path):
        assert _load(_make_loader(tmp_path, {}), []) == BASELINE

    def test_baseline_kept_when_every_source_fails(self, tmp_path):
        (tmp_path / "bad.json").write_text("{oops")
        loader = _make_loader(tmp_path, {
            "missing": {"type": "excel", "path": "nope.xlsx", "fallback": "fb1"},
            "bad": {"type": "json", "path": "bad.json", "fallback": "fb2"},
        })
        data = _load(loader, ["missing", "bad", "unknown"])
        assert data == {**BASELINE, "missing": "fb1", "bad": "fb2"}

    def test_sync_defaults_provider(self, tmp_path):
        registry = TestRegistry.from_manifest({}, base_dir=tmp_path)
        loader = DataLoader(registry, defaults=lambda: {"token": "abc"})
        assert _load(loader, []) == {"token": "abc"}

    def test_defaults_failure_is_fatal(self, tmp_path):
        def broken() -> dict:
            raise RuntimeError("no credentials service")

        registry = TestRegistry.from_manifest({}, base_dir=tmp_path)
        with pytest.raises(RuntimeError, match="no credentials service"):
            _load(DataLoader(registry, defaults=broken), [])

    def test_fresh_mapping_per_load(self, tmp_path):
        loader = _make_loader(tmp_path, {})
        first = _load(loader, [])
        first["scratch"] = 1
        assert "scratch" not in _load(loader, [])


class TestSourceLoading:
    """Tests for loading each data source kind."""

    def test_json_source(self, tmp_path):
        (tmp_path / "users.json").write_text(json.dumps([{"name": "Ann"}]))
        loader = _make_loader(tmp_path, {"users": {"type": "json", "path": "users.json"}})
        assert _load(loader, ["users"])["users"] == [{"name": "Ann"}]

    def test_yaml_source(self, tmp_path):
        (tmp_path / "cfg.yaml").write_text("retries: 2\nregion: eu\n")
        loader = _make_loader(tmp_path, {"cfg": {"type": "yaml", "path": "cfg.yaml"}})
        assert _load(loader, ["cfg"])["cfg"] == {"retries": 2, "region": "eu"}

    def test_csv_source(self, tmp_path):
        (tmp_path / "products.csv").write_text("sku,price\nA,1.5\nB,\n")
        loader = _make_loader(tmp_path, {"products": {"type": "csv", "path": "products.csv"}})
        assert _load(loader, ["products"])["products"] == [
            {"sku": "A", "price": 1.5},
            {"sku": "B", "price": None},
        ]

    def test_excel_source_with_sheet(self, tmp_path):
        path = tmp_path / "discounts.xlsx"
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame({"code": ["X"]}).to_excel(writer, sheet_name="Old", index=False)
            pd.DataFrame({"code": ["WELCOME"], "percent": [10]}).to_excel(
                writer, sheet_name="Active", index=False
            )
        loader = _make_loader(tmp_path, {
            "discounts": {"type": "tabular", "path": "discounts.xlsx", "sheet": "Active"},
        })
        assert _load(loader, ["discounts"])["discounts"] == [{"code": "WELCOME", "percent": 10}]


class TestFallbacks:
    """Failures degrade to the configured fallback value."""

    def test_missing_excel_uses_fallback(self, tmp_path, capsys):
        fallback = [{"code": "FALLBACK"}]
        loader = _make_loader(tmp_path, {
            "discounts": {"type": "excel", "path": "absent.xlsx", "fallback": fallback},
        })
        data = _load(loader, ["discounts"])
        assert data["discounts"] == fallback
        err = capsys.readouterr().err
        assert "Warning:" in err
        assert "absent.xlsx" in err

    def test_missing_json_uses_fallback(self, tmp_path, capsys):
        loader = _make_loader(tmp_path, {
            "users": {"type": "json", "path": "absent.json", "fallback": {"a": 1}},
        })
        assert _load(loader, ["users"])["users"] == {"a": 1}
        assert "using fallback data" in capsys.readouterr().err

    def test_malformed_json_uses_fallback_and_logs_error(self, tmp_path, capsys):
        (tmp_path / "bad.json").write_text("{not: valid")
        (tmp_path / "good.json").write_text('{"ok": true}')
        loader = _make_loader(tmp_path, {
            "bad": {"type": "json", "path": "bad.json", "fallback": []},
            "good": {"type": "json", "path": "good.json"},
        })
        data = _load(loader, ["bad", "good"])
        assert data["bad"] == []
        assert data["good"] == {"ok": True}
        assert "Error: Error loading data for bad" in capsys.readouterr().err

    def test_corrupt_spreadsheet_uses_fallback(self, tmp_path, capsys):
        (tmp_path / "sheet.xlsx").write_text("this is not a zip archive")
        loader = _make_loader(tmp_path, {
            "sheet": {"type": "excel", "path": "sheet.xlsx", "fallback": "fb"},
        })
        assert _load(loader, ["sheet"])["sheet"] == "fb"
        assert "Error loading data for sheet" in capsys.readouterr().err

    def test_missing_sheet_uses_fallback(self, tmp_path):
        path = tmp_path / "book.xlsx"
        pd.DataFrame({"a": [1]}).to_excel(path, sheet_name="Only", index=False)
        loader = _make_loader(tmp_path, {
            "book": {"type": "excel", "path": "book.xlsx", "sheet": "Nope", "fallback": 0},
        })
        assert _load(loader, ["book"])["book"] == 0

    def test_unknown_source_skipped_with_warning(self, tmp_path, capsys):
        data = _load(_make_loader(tmp_path, {}), ["ghost"])
        assert "ghost" not in data
        assert "Data source not found: ghost" in capsys.readouterr().err

    def test_unsupported_kind_uses_fallback(self, tmp_path, capsys):
        loader = _make_loader(tmp_path, {
            "db": {"type": "postgres", "path": "db", "fallback": "none"},
        })
        assert _load(loader, ["db"])["db"] == "none"
        assert "Unsupported data source type 'postgres'" in capsys.readouterr().err

    def test_fallback_defaults_to_none(self, tmp_path):
        loader = _make_loader(tmp_path, {"x": {"type": "json", "path": "x.json"}})
        data = _load(loader, ["x"])
        assert "x" in data
        assert data["x"] is None


class TestReaders:
    """Direct reader behaviour."""

    def test_json_selector(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text('{"admins": [1], "users": [2]}')
        assert read_json(path, "users") == [2]

    def test_yaml_selector(self, tmp_path):
        path = tmp_path / "doc.yaml"
        path.write_text("staging: {url: s}\nprod: {url: p}\n")
        assert read_yaml(path, "prod") == {"url": "p"}

    def test_csv_ignores_selector(self, tmp_path):
        path = tmp_path / "rows.csv"
        path.write_text("a\n1\n")
        assert read_csv(path, "ignored") == [{"a": 1}]

    def test_excel_first_sheet_by_default(self, tmp_path):
        path = tmp_path / "book.xlsx"
        pd.DataFrame({"name": ["Ann", None], "age": [1, 2]}).to_excel(path, index=False)
        assert read_excel(path) == [
            {"name": "Ann", "age": 1},
            {"name": None, "age": 2},
        ]

    def test_xls_read_with_openpyxl(self, tmp_path):
        with patch("suite_runner.data.readers.pd.read_excel", return_value=pd.DataFrame()) as mock_read:
            read_excel(tmp_path / "legacy.xls")
        assert mock_read.call_args.kwargs["engine"] == "openpyxl"


class TestDefaults:
    def test_generated_credentials(self):
        data = asyncio.run(prepare_default_data())
        creds = data[CREDENTIALS_KEY]
        assert set(creds) == {"first_name", "last_name", "email", "password"}
        assert "@" in creds["email"]
        assert len(creds["password"]) == 16

    def test_credentials_unique_per_call(self):
        first = asyncio.run(prepare_default_data())[CREDENTIALS_KEY]["email"]
        second = asyncio.run(prepare_default_data())[CREDENTIALS_KEY]["email"]
        assert first != second

    def test_email_domain_override(self, monkeypatch):
        monkeypatch.setenv("SUITE_RUNNER_EMAIL_DOMAIN", "qa.test")
        creds = asyncio.run(prepare_default_data())[CREDENTIALS_KEY]
        assert creds["email"].endswith("@qa.test")
