"""Tests for the command-line entry point."""

from typer.testing import CliRunner

from vtex_mdx import __version__
from vtex_mdx.cli import app

runner = CliRunner()


class TestCli:
    """Smoke tests for commands that need no remote."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_check_default_config(self, monkeypatch):
        monkeypatch.delenv("MDX_BASE_URL_TEMPLATE", raising=False)
        monkeypatch.delenv("MDX_MAX_BATCHES", raising=False)

        result = runner.invoke(app, ["check"])

        assert result.exit_code == 0
        assert "vtexcommercestable" in result.stdout

    def test_check_rejects_bad_config(self, monkeypatch):
        monkeypatch.setenv("MDX_MAX_BATCHES", "500")

        result = runner.invoke(app, ["check"])

        assert result.exit_code == 1
        assert "MDX_MAX_BATCHES" in result.stdout

    def test_export_reports_validation_error(self, monkeypatch):
        monkeypatch.delenv("VTEX_ACCOUNT_NAME", raising=False)
        monkeypatch.delenv("VTEX_APP_KEY", raising=False)
        monkeypatch.delenv("VTEX_APP_TOKEN", raising=False)

        result = runner.invoke(app, ["export", "CL"])

        assert result.exit_code == 1
        assert "required" in result.stdout

    def test_strategies_lists_descriptions(self):
        result = runner.invoke(app, ["strategies"], env={"COLUMNS": "200"})

        assert result.exit_code == 0
        assert "cursor_scroll" in result.stdout
        assert "REST-Range windows" in result.stdout
