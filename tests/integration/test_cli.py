"""
Integration tests for the CLI commands.
"""

import json
from unittest.mock import AsyncMock

import pytest
from typer.testing import CliRunner

from recorder_studio import main
from recorder_studio.exceptions import SessionAttachError
from recorder_studio.main import app
from recorder_studio.storage import ActionLogMirror, JsonFileStore, NamedRecords


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "store.json"


@pytest.fixture
def actions_file(tmp_path, sample_actions):
    path = tmp_path / "actions.json"
    path.write_text(json.dumps([action.to_dict() for action in sample_actions]), encoding="utf-8")
    return path


@pytest.fixture
def saved_store(store_path, sample_actions):
    records = NamedRecords(JsonFileStore(store_path))
    records.save("login", sample_actions)
    records.save("smoke", sample_actions[:1])
    return store_path


class TestCLIHelp:
    """Test command discovery."""

    def test_commands_listed(self, runner):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("record", "generate", "replay", "records", "version"):
            assert command in result.output

    def test_record_help(self, runner):
        result = runner.invoke(app, ["record", "--help"])
        assert result.exit_code == 0
        assert "--name" in result.output

    def test_version(self, runner):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "v0.1.0" in result.output


class TestCLIGenerate:
    """Test the 'generate' command."""

    def test_from_file(self, runner, actions_file, store_path):
        result = runner.invoke(app, ["generate", "--file", str(actions_file), "--store", str(store_path)])

        assert result.exit_code == 0
        assert "await page.locator('xpath=//*[@id=\"login\"]').click();" in result.output
        assert "await page.waitForTimeout(2000);" in result.output

    def test_to_output_file(self, runner, actions_file, store_path, tmp_path):
        output = tmp_path / "login.spec.js"

        result = runner.invoke(app, [
            "generate", "--file", str(actions_file), "--dialect", "puppeteer",
            "--output", str(output), "--store", str(store_path),
        ])

        assert result.exit_code == 0
        assert "await page.click('xpath///*[@id=\"login\"]');" in output.read_text(encoding="utf-8")

    def test_from_record(self, runner, saved_store):
        result = runner.invoke(app, [
            "generate", "--record", "smoke", "--dialect", "playwright-python", "--store", str(saved_store),
        ])

        assert result.exit_code == 0
        assert 'await page.locator("xpath=//*[@id=\\"login\\"]").click()' in result.output

    def test_from_last_recording(self, runner, store_path, sample_actions):
        ActionLogMirror(JsonFileStore(store_path)).write(sample_actions[:1])

        result = runner.invoke(app, ["generate", "--store", str(store_path)])

        assert result.exit_code == 0
        assert '// Click on "Log in"' in result.output

    def test_nothing_to_generate(self, runner, store_path):
        result = runner.invoke(app, ["generate", "--store", str(store_path)])
        assert result.exit_code == 1

    def test_unknown_dialect(self, runner, actions_file, store_path):
        result = runner.invoke(app, [
            "generate", "--file", str(actions_file), "--dialect", "cypress", "--store", str(store_path),
        ])

        assert result.exit_code == 1
        assert "Unknown code dialect" in result.output

    def test_missing_record(self, runner, store_path):
        result = runner.invoke(app, ["generate", "--record", "nope", "--store", str(store_path)])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_file(self, runner, tmp_path, store_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")

        result = runner.invoke(app, ["generate", "--file", str(path), "--store", str(store_path)])

        assert result.exit_code == 1

    def test_record_and_file_conflict(self, runner, actions_file, store_path):
        result = runner.invoke(app, [
            "generate", "--record", "x", "--file", str(actions_file), "--store", str(store_path),
        ])
        assert result.exit_code == 2


class TestCLIRecords:
    """Test the 'records' sub-commands."""

    def test_list_empty(self, runner, store_path):
        result = runner.invoke(app, ["records", "list", "--store", str(store_path)])

        assert result.exit_code == 0
        assert "No saved records" in result.output

    def test_list(self, runner, saved_store):
        result = runner.invoke(app, ["records", "list", "--store", str(saved_store)])

        assert result.exit_code == 0
        assert "login" in result.output
        assert "smoke" in result.output

    def test_show(self, runner, saved_store):
        result = runner.invoke(app, ["records", "show", "login", "--store", str(saved_store)])

        assert result.exit_code == 0
        assert "assertion-text" in result.output

    def test_show_missing(self, runner, saved_store):
        result = runner.invoke(app, ["records", "show", "nope", "--store", str(saved_store)])
        assert result.exit_code == 1

    def test_delete_with_confirmation(self, runner, saved_store):
        result = runner.invoke(app, ["records", "delete", "smoke", "--store", str(saved_store)], input="y\n")

        assert result.exit_code == 0
        assert NamedRecords(JsonFileStore(saved_store)).names() == ["login"]

    def test_delete_declined(self, runner, saved_store):
        result = runner.invoke(app, ["records", "delete", "smoke", "--store", str(saved_store)], input="n\n")

        assert result.exit_code == 0
        assert NamedRecords(JsonFileStore(saved_store)).names() == ["login", "smoke"]

    def test_delete_missing(self, runner, saved_store):
        result = runner.invoke(app, ["records", "delete", "nope", "--yes", "--store", str(saved_store)])
        assert result.exit_code == 1


class TestCLIReplay:
    """Test the 'replay' command without a browser."""

    def test_nothing_to_replay(self, runner, store_path):
        result = runner.invoke(app, ["replay", "--store", str(store_path)])
        assert result.exit_code == 1

    def test_no_debuggable_tab(self, runner, monkeypatch, saved_store):
        monkeypatch.setattr(
            main,
            "discover_active_tab",
            AsyncMock(side_effect=SessionAttachError("No page target listed")),
        )

        result = runner.invoke(app, ["replay", "--record", "login", "--store", str(saved_store)])

        assert result.exit_code == 1
        assert "No page target listed" in result.output


class TestCLIConfig:
    """Test config errors surfaced by the CLI."""

    def test_invalid_config_file(self, runner, monkeypatch, tmp_path, store_path):
        path = tmp_path / "bad.yaml"
        path.write_text("recorder:\n  dialect: cypress\n", encoding="utf-8")
        monkeypatch.setenv("RECORDER_STUDIO_CONFIG", str(path))

        result = runner.invoke(app, ["records", "list", "--store", str(store_path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
