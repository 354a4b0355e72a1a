"""Tests for the CLI entry point."""

import json

import pytest
from click.testing import CliRunner
from loguru import logger

from daybook.core.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path, monkeypatch):
    """Run a daybook command against a throwaway data directory."""
    monkeypatch.setenv("DAYBOOK_LOGGING__LEVEL", "ERROR")
    monkeypatch.setenv("COLUMNS", "200")  # keep rich tables on one line

    def _invoke(*args, **kwargs):
        return runner.invoke(main, ["--data-dir", str(tmp_path / "data"), *args], **kwargs)

    yield _invoke
    # sinks point at the runner's captured stderr
    logger.remove()


def _add(invoke, title, *extra):
    result = invoke("add", title, *extra)
    assert result.exit_code == 0, result.output
    return result.output.split()[1]


class TestCliGroup:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Daybook" in result.output
        for command in ["add", "list", "edit", "rm", "import", "export", "stats"]:
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestEntryCommands:
    def test_add_and_show(self, invoke):
        record_id = _add(invoke, "Morning walk", "--date", "2024-01-02", "-m", "happy", "-t", "outdoor", "-c", "Sunny")
        result = invoke("show", record_id)
        assert result.exit_code == 0
        assert "Morning walk" in result.output
        assert "2024-01-02" in result.output
        assert "happy" in result.output
        assert "outdoor" in result.output
        assert "Sunny" in result.output

    def test_add_rejects_bad_date(self, invoke):
        result = invoke("add", "x", "--date", "tomorrow")
        assert result.exit_code != 0
        assert "date" in result.output.lower()

    def test_add_rejects_blank_title(self, invoke):
        result = invoke("add", "   ")
        assert result.exit_code != 0
        assert "title" in result.output.lower()

    def test_show_missing(self, invoke):
        result = invoke("show", "nope")
        assert result.exit_code != 0
        assert "not found" in result.output

    def test_edit(self, invoke):
        record_id = _add(invoke, "Draft", "--date", "2024-01-02", "-t", "a")
        result = invoke("edit", record_id, "--title", "Final", "-m", "tired")
        assert result.exit_code == 0, result.output
        shown = invoke("show", record_id).output
        assert "Final" in shown
        assert "tired" in shown
        assert "2024-01-02" in shown
        assert "tags:    a" in shown

    def test_rm_with_confirmation(self, invoke):
        record_id = _add(invoke, "Temp")
        aborted = invoke("rm", record_id, input="n\n")
        assert aborted.exit_code != 0
        assert invoke("show", record_id).exit_code == 0

        result = invoke("rm", record_id, "-y")
        assert result.exit_code == 0
        assert invoke("show", record_id).exit_code != 0

    def test_rm_missing(self, invoke):
        result = invoke("rm", "nope", "-y")
        assert result.exit_code != 0
        assert "not found" in result.output


class TestListCommands:
    def test_list_empty(self, invoke):
        result = invoke("list")
        assert result.exit_code == 0
        assert "No entries" in result.output

    def test_list_filters(self, invoke):
        _add(invoke, "Beach day", "--date", "2024-07-01", "-t", "summer")
        _add(invoke, "Snow day", "--date", "2024-01-01", "-t", "winter")
        result = invoke("list", "-t", "summer")
        assert result.exit_code == 0
        assert "Beach day" in result.output
        assert "Snow day" not in result.output
        assert "1 of 1" in result.output

    def test_list_pages(self, invoke):
        for i in range(1, 4):
            _add(invoke, f"Entry {i}", "--date", f"2024-01-0{i}")
        first = invoke("list", "--page-size", "2")
        assert "2 of 3" in first.output
        assert "--page 2" in first.output
        second = invoke("list", "--page-size", "2", "--page", "2")
        assert "3 of 3" in second.output

    def test_list_bad_date(self, invoke):
        assert invoke("list", "--date", "nope").exit_code != 0

    def test_tags(self, invoke):
        _add(invoke, "a", "-t", "one", "-t", "two")
        result = invoke("tags")
        assert result.output.split() == ["one", "two"]

    def test_stats(self, invoke):
        _add(invoke, "a", "-m", "low")
        result = invoke("stats")
        assert result.exit_code == 0
        assert "Total 1 entries" in result.output
        assert "low: 1" in result.output
        assert "last 30 days: 1" in result.output

    def test_size(self, invoke):
        _add(invoke, "a")
        result = invoke("size")
        assert result.exit_code == 0
        assert "MB" in result.output


class TestTransferCommands:
    def test_export_import(self, invoke, tmp_path):
        _add(invoke, "Keep me", "--date", "2024-01-01")
        out = tmp_path / "export.json"
        assert invoke("export", "-o", str(out)).exit_code == 0
        records = json.loads(out.read_text(encoding="utf-8"))
        assert records[0]["title"] == "Keep me"

        records.append({"id": "extra", "date": "2024-02-02", "title": "Imported"})
        out.write_text(json.dumps(records), encoding="utf-8")
        result = invoke("import", str(out))
        assert result.exit_code == 0
        assert "Imported 1 new, skipped 1 duplicate" in result.output
        assert "Imported" in invoke("list").output

    def test_export_csv_to_stdout(self, invoke):
        _add(invoke, "Row")
        result = invoke("export", "-f", "csv")
        assert result.output.startswith("id,date,title")

    def test_import_rejects_non_list(self, invoke, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"id": "a"}')
        result = invoke("import", str(bad))
        assert result.exit_code != 0
        assert "list" in result.output


class TestConfigErrors:
    def test_invalid_config_is_reported(self, runner, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("view:\n  page_size: 0\n")
        result = runner.invoke(main, ["--config", str(config), "--data-dir", str(tmp_path), "list"])
        assert result.exit_code != 0
        assert "Invalid configuration" in result.output
