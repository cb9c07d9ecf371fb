"""CLI commands."""

from deep_report.cli.commands.chapters import parse_chapters_cmd
from deep_report.cli.commands.run import run_cmd

__all__ = [
    "parse_chapters_cmd",
    "run_cmd",
]
