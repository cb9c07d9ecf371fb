"""Tests for chapter parsing and the per-chapter content pipeline."""

import asyncio
import json
import logging
import re

import pytest

from deep_report.core.errors.workflow import ChapterParseError
from deep_report.core.research.models import Chapter, Phase
from deep_report.core.research.workflows.report import prompts
from deep_report.core.research.workflows.report.chapters import (
    CHAPTERS_STREAM,
    CONTENT_STREAM,
    ChapterPipeline,
    parse_chapters,
)

PROCEED = '{"action": "proceed", "reason": "fine"}'
REVISE = '{"action": "revise", "reason": "thin"}'

_TITLE = re.compile(r"Chapter title: (.+)")


def chapter(number, title=None, description=""):
    return Chapter(number=number, title=title or f"Title {number}", description=description)


def content_phase(verdict=PROCEED, gates=None):
    """Content phase writing ``Body of <title>``; ``gates`` may delay titles."""
    gates = gates or {}

    async def producer(prompt: str) -> str:
        match = _TITLE.search(prompt)
        title = match.group(1).strip() if match else "revision"
        if title in gates:
            await gates[title].wait()
        return f"Body of {title}"

    async def reviewer(text: str) -> str:
        return "looks fine"

    async def referee(phase: str, output: str, feedback: str) -> str:
        return verdict

    return Phase(name="content", producer=producer, reviewer=reviewer, referee=referee)


class StubResearcher:
    def __init__(self):
        self.seen = []

    async def notes_for(self, chapter: Chapter) -> str:
        self.seen.append(chapter.number)
        return f"### Source for {chapter.title}\nURL: https://example.com/{chapter.number}"


class TestParseChapters:
    @pytest.mark.asyncio
    async def test_parses_and_audits_raw_response(self, make_generator, audit):
        payload = {"chapters": [{"number": 1, "title": "Intro", "description": "Why"}]}
        generator = make_generator(lambda request: f"```json\n{json.dumps(payload)}\n```")

        plan = await parse_chapters(generator, "1. Intro - Why", audit)

        assert plan.chapters == [Chapter(number=1, title="Intro", description="Why")]
        request = generator.requests[0]
        assert request.prompt == "1. Intro - Why"
        assert request.system_prompt == prompts.CHAPTER_PARSER_SYSTEM_PROMPT
        assert "==== parsed chapters ====" in audit.streams[CHAPTERS_STREAM]

    @pytest.mark.asyncio
    async def test_malformed_response_is_fatal_but_audited(self, make_generator, audit):
        generator = make_generator(lambda request: "Chapter one is about things")

        with pytest.raises(ChapterParseError):
            await parse_chapters(generator, "outline", audit)
        assert "Chapter one is about things" in audit.streams[CHAPTERS_STREAM]


class TestChapterPipeline:
    @pytest.mark.asyncio
    async def test_draft_is_in_ascending_number_order(self, audit):
        chapters = [chapter(3), chapter(1), chapter(2)]

        draft = await ChapterPipeline(content_phase(), audit, width=3, cooldown=0).develop(chapters)

        assert draft == "Body of Title 1\n\nBody of Title 2\n\nBody of Title 3"

    @pytest.mark.asyncio
    async def test_completion_order_does_not_change_assembly(self, audit):
        release_first = asyncio.Event()
        phase = content_phase(gates={"Title 1": release_first})
        pipeline = ChapterPipeline(phase, audit, width=2, cooldown=0)

        async def release_later():
            await asyncio.sleep(0.01)
            release_first.set()

        _, contents = await asyncio.gather(release_later(), pipeline.develop_contents([chapter(1), chapter(2)]))

        assert [c.number for c in contents] == [1, 2]
        stream = audit.streams[CONTENT_STREAM]
        assert stream.index("Chapter 2: trial 1") < stream.index("Chapter 1: trial 1")

    @pytest.mark.asyncio
    async def test_non_contiguous_numbers(self, audit):
        contents = await ChapterPipeline(content_phase(), audit, cooldown=0).develop_contents(
            [chapter(10), chapter(2), chapter(7)]
        )
        assert [c.number for c in contents] == [2, 7, 10]

    @pytest.mark.asyncio
    async def test_exhausted_chapters_keep_last_text(self, audit, caplog):
        pipeline = ChapterPipeline(content_phase(verdict=REVISE), audit, max_attempts=2, cooldown=0)

        with caplog.at_level(logging.WARNING):
            contents = await pipeline.develop_contents([chapter(1)])

        assert contents[0].exhausted is True
        assert contents[0].attempts == 2
        assert contents[0].body == "Body of revision"
        assert "exhausting revisions" in caplog.text

    @pytest.mark.asyncio
    async def test_research_notes_reach_seed_prompt(self, audit):
        researcher = StubResearcher()
        pipeline = ChapterPipeline(content_phase(), audit, researcher=researcher, cooldown=0)

        prompt = await pipeline.seed_prompt(chapter(4, "Markets", "Market size"))

        assert researcher.seen == [4]
        assert "Chapter title: Markets" in prompt
        assert "Chapter description: Market size" in prompt
        assert "https://example.com/4" in prompt

    @pytest.mark.asyncio
    async def test_no_chapters_gives_empty_draft(self, audit):
        assert await ChapterPipeline(content_phase(), audit, cooldown=0).develop([]) == ""

    @pytest.mark.asyncio
    async def test_chapter_failure_propagates(self, audit):
        async def producer(prompt: str) -> str:
            raise RuntimeError("generator down")

        phase = Phase(name="content", producer=producer, reviewer=producer, referee=None)

        with pytest.raises(RuntimeError, match="generator down"):
            await ChapterPipeline(phase, audit, cooldown=0).develop([chapter(1), chapter(2)])
