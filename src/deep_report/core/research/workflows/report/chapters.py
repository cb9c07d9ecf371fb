"""Chapter parsing and per-chapter content development."""

from __future__ import annotations

import logging
from typing import Optional

from deep_report.core.concurrency import DEFAULT_COOLDOWN, run_batched
from deep_report.core.providers.base import TextGenerator
from deep_report.core.research.models import Chapter, ChapterContent, ChapterPlan, Phase
from deep_report.core.research.workflows.base import AuditSink
from deep_report.core.research.workflows.report import prompts
from deep_report.core.research.workflows.report._json_parsing import parse_chapter_plan
from deep_report.core.research.workflows.report.controller import DEFAULT_MAX_ATTEMPTS, PhaseController
from deep_report.core.research.workflows.report.research import ChapterResearcher
from deep_report.core.research.workflows.report.roles import generate_text

logger = logging.getLogger(__name__)

CHAPTERS_STREAM = "chapters.json"
CONTENT_STREAM = "content.md"
DEFAULT_CHAPTER_WIDTH = 3


async def parse_chapters(
    generator: TextGenerator,
    outline: str,
    audit: Optional[AuditSink] = None,
) -> ChapterPlan:
    """Split an accepted outline into chapters with one generation call.

    There is no critique loop here: a malformed response is fatal.

    Raises:
        ChapterParseError: If the response is not a valid chapter plan
    """
    raw = await generate_text(generator, outline, prompts.CHAPTER_PARSER_SYSTEM_PROMPT)
    if audit is not None:
        try:
            audit.append(f"\n\n==== parsed chapters ====\n\n{raw}", CHAPTERS_STREAM)
        except Exception as exc:
            logger.error("Audit append to %s failed: %s", CHAPTERS_STREAM, exc)
    plan = parse_chapter_plan(raw)
    logger.info("Parsed %d chapters from outline", len(plan.chapters))
    return plan


class ChapterPipeline:
    """Develop every chapter through its own content phase loop.

    Chapters run in batches of ``width``; the assembled draft is always in
    ascending chapter-number order regardless of completion order.

    Args:
        phase: The content phase (producer, reviewer, referee)
        audit: Audit sink shared by all chapters
        width: Chapters developed concurrently
        max_attempts: Attempt budget per chapter
        researcher: Optional source of research notes for seed prompts
        cooldown: Seconds between chapter batches
    """

    def __init__(
        self,
        phase: Phase,
        audit: Optional[AuditSink] = None,
        *,
        width: int = DEFAULT_CHAPTER_WIDTH,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        researcher: Optional[ChapterResearcher] = None,
        cooldown: float = DEFAULT_COOLDOWN,
    ):
        self.phase = phase
        self.audit = audit
        self.width = width
        self.max_attempts = max_attempts
        self.researcher = researcher
        self.cooldown = cooldown

    async def seed_prompt(self, chapter: Chapter) -> str:
        notes = ""
        if self.researcher is not None:
            notes = await self.researcher.notes_for(chapter)
        return prompts.content_writer_prompt(chapter.title, chapter.description, notes)

    async def _develop_one(self, chapter: Chapter) -> ChapterContent:
        controller = PhaseController(
            self.phase,
            self.audit,
            max_attempts=self.max_attempts,
            stream=CONTENT_STREAM,
            label=f"Chapter {chapter.number}: ",
        )
        result = await controller.run(await self.seed_prompt(chapter))
        return ChapterContent(
            chapter=chapter,
            body=result.text,
            attempts=result.attempts,
            exhausted=result.exhausted,
            forced_acceptance=result.forced_acceptance,
        )

    async def develop_contents(self, chapters: list[Chapter]) -> list[ChapterContent]:
        """Run every chapter and return results sorted by chapter number."""
        contents = await run_batched(chapters, self.width, self._develop_one, cooldown=self.cooldown)
        contents.sort(key=lambda c: c.number)
        exhausted = [c.number for c in contents if c.exhausted]
        if exhausted:
            logger.warning("Chapters %s kept best-attempt text after exhausting revisions", exhausted)
        return contents

    @staticmethod
    def assemble(contents: list[ChapterContent]) -> str:
        return "\n\n".join(c.body for c in sorted(contents, key=lambda c: c.number))

    async def develop(self, chapters: list[Chapter]) -> str:
        """Develop all chapters and return the concatenated draft."""
        return self.assemble(await self.develop_contents(chapters))
