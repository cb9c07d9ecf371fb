"""Offline check of a saved chapter-parse response."""

import click

from deep_report.cli.output import emit_error, emit_success
from deep_report.core.errors.workflow import ChapterParseError
from deep_report.core.research.workflows.report import parse_chapter_plan


@click.command("parse-chapters")
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False))
def parse_chapters_cmd(response_file: str) -> None:
    """Validate the chapter-parse response saved in RESPONSE_FILE.

    Runs the same fence extraction and schema validation as a live run and
    prints the chapters in ascending number order.
    """
    with open(response_file, encoding="utf-8") as handle:
        raw = handle.read()

    try:
        plan = parse_chapter_plan(raw)
    except ChapterParseError as exc:
        emit_error(
            str(exc),
            code="CHAPTER_PARSE_ERROR",
            error_type="validation",
            remediation='Expected a fenced JSON block: {"chapters": [{"number", "title", "description"}]}',
            details={"file": response_file},
        )

    chapters = sorted(plan.chapters, key=lambda c: c.number)
    emit_success(
        {
            "file": response_file,
            "count": len(chapters),
            "chapters": [chapter.model_dump() for chapter in chapters],
        }
    )
