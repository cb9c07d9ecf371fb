"""Fixtures for CLI command tests."""

import os

import pytest
from click.testing import CliRunner

from deep_report.config.settings import ENV_PREFIX


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch):
    """Empty working directory, no config files, no API keys, no log handlers."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)
    for name in ("OPENAI_API_KEY", "SERPAPI_API_KEY", "TAVILY_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "home" / ".config"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("deep_report.cli.commands.run.ReportSettings.setup_logging", lambda self: None)
    return tmp_path
