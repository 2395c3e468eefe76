"""Tests for the test unit base class and unit loading."""

from __future__ import annotations

import pytest

from suite_runner.units import TestUnit, UnitLoadError, UnitResult, load_unit


class _AllGood(TestUnit):
    def execute(self) -> None:
        with self.step("open_page", url="/home"):
            self.assert_that("page_loaded", True)


class _SoftFailure(TestUnit):
    def execute(self) -> None:
        with self.step("check"):
            self.assert_that("title_matches", False)
            self.assert_that("footer_present", True)
        with self.step("continue"):
            self.assert_that("still_running", True)


class _CriticalFailure(TestUnit):
    def execute(self) -> None:
        with self.step("login"):
            self.assert_that("logged_in", False, critical=True)
        with self.step("never_reached"):
            pass


class _Crashes(TestUnit):
    def execute(self) -> None:
        with self.step("click"):
            raise LookupError("element #buy not found")


class TestTestUnit:
    """Tests for TestUnit.run() and step recording."""

    def test_units_not_collected_by_pytest(self):
        assert TestUnit.__test__ is False
        assert _AllGood.__test__ is False

    def test_data_stored(self):
        assert _AllGood({"a": 1}).data == {"a": 1}

    def test_success(self):
        result = _AllGood({}).run()
        assert result.success is True
        assert result.error is None
        assert result.steps == [{
            "name": "open_page",
            "status": "passed",
            "assertions": [{"name": "page_loaded", "passed": True}],
            "url": "/home",
        }]

    def test_soft_failure_continues(self):
        result = _SoftFailure({}).run()
        assert result.success is False
        assert result.error == "Failed assertions: title_matches"
        assert [s["name"] for s in result.steps] == ["check", "continue"]
        assert result.steps[0]["status"] == "failed"
        assert result.steps[1]["status"] == "passed"

    def test_critical_failure_stops(self):
        result = _CriticalFailure({}).run()
        assert result.success is False
        assert result.error == "Critical assertion failed: logged_in"
        assert [s["name"] for s in result.steps] == ["login"]

    def test_exception_marks_step_failed(self):
        result = _Crashes({}).run()
        assert result.success is False
        assert result.error == "LookupError: element #buy not found"
        assert result.steps[0]["status"] == "failed"
        assert "traceback" in result.steps[0]

    def test_execute_not_implemented(self):
        result = TestUnit({}).run()
        assert result.success is False
        assert result.error.startswith("NotImplementedError")

    def test_assert_outside_step(self):
        unit = TestUnit({})
        unit.assert_that("loose", False)
        assert unit.failures == ["loose"]


class TestLoadUnit:
    """Tests for load_unit()."""

    def test_module_locator(self):
        assert load_unit("suite_runner.units:UnitResult") is UnitResult

    def test_file_locator_relative_to_base_dir(self, tmp_path):
        (tmp_path / "checks.py").write_text(
            "from suite_runner.units import TestUnit\n"
            "class Smoke(TestUnit):\n"
            "    def execute(self):\n"
            "        pass\n"
        )
        factory = load_unit("checks.py:Smoke", tmp_path)
        assert factory({}).run().success is True

    def test_file_locator_default_attribute(self, tmp_path):
        (tmp_path / "single.py").write_text("TEST_UNIT = dict\n")
        assert load_unit("single.py", tmp_path) is dict

    def test_file_module_loaded_once(self, tmp_path):
        (tmp_path / "stateful.py").write_text("STATE = []\nclass A: pass\nclass B: pass\n")
        a = load_unit("stateful.py:A", tmp_path)
        b = load_unit("stateful.py:B", tmp_path)
        assert a.__module__ == b.__module__
        assert load_unit("stateful.py:STATE", tmp_path) is load_unit("stateful.py:STATE", tmp_path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(UnitLoadError, match="Test module not found"):
            load_unit("absent.py:X", tmp_path)

    def test_missing_module(self):
        with pytest.raises(UnitLoadError, match="Cannot import"):
            load_unit("suite_runner.does_not_exist:X")

    def test_missing_attribute(self):
        with pytest.raises(UnitLoadError, match="has no attribute 'Nope'"):
            load_unit("suite_runner.units:Nope")

    def test_load_error_is_import_error(self):
        with pytest.raises(ImportError):
            load_unit("suite_runner.units:Nope")
