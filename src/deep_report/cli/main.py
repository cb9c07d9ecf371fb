"""deep-report CLI entry point."""

import click

from deep_report import __version__
from deep_report.cli.commands import parse_chapters_cmd, run_cmd


@click.group()
@click.version_option(__version__, prog_name="deep-report")
def cli() -> None:
    """Generate researched reports from a free-text query."""


cli.add_command(run_cmd)
cli.add_command(parse_chapters_cmd)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
