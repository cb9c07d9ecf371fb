"""End-to-end tests for ReportWorkflow with a scripted generator."""

import asyncio
import json
import re

import pytest

from deep_report.config.workflow import WorkflowConfig
from deep_report.core.errors.workflow import ChapterParseError, WorkflowTimeoutError
from deep_report.core.providers.base import GenerationRequest, GenerationResult, TextGenerator
from deep_report.core.research.workflows.report import prompts
from deep_report.core.research.workflows.report.audit import AuditTrail
from deep_report.core.research.workflows.report.orchestrator import (
    COMPLETED_REPORT_STREAM,
    DRAFT_STREAM,
    ReportWorkflow,
)

CHAPTER_PLAN = {
    "chapters": [
        {"number": 2, "title": "Methods", "description": "How it works"},
        {"number": 1, "title": "Introduction", "description": "Background"},
    ]
}

_TITLE = re.compile(r"Chapter title: (.+)")


def scripted_responder(chapter_plan=None, verdict="proceed"):
    """Answer each role according to its system prompt."""
    plan_text = f"```json\n{json.dumps(chapter_plan or CHAPTER_PLAN)}\n```"

    def respond(request: GenerationRequest) -> str:
        system = request.system_prompt
        if system == prompts.OUTLINE_WRITER_SYSTEM_PROMPT:
            return "1. Introduction\n2. Methods"
        if system == prompts.CHAPTER_PARSER_SYSTEM_PROMPT:
            return plan_text
        if system == prompts.CONTENT_WRITER_SYSTEM_PROMPT:
            match = _TITLE.search(request.prompt)
            return f"## {match.group(1)}\nBody" if match else "## Revised\nBody"
        if system == prompts.FINAL_REPORT_WRITER_SYSTEM_PROMPT:
            return "# Final report"
        if system == prompts.PHASE_JUDGE_SYSTEM_PROMPT:
            return json.dumps({"action": verdict, "reason": "scripted"})
        return "no major changes needed"

    return respond


class HangingGenerator(TextGenerator):
    def get_provider_name(self) -> str:
        return "hanging"

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


class TestReportWorkflow:
    @pytest.mark.asyncio
    async def test_full_run(self, make_generator, audit, fast_config):
        generator = make_generator(scripted_responder())
        workflow = ReportWorkflow(fast_config, generator, audit)

        result = await workflow.run("Solid-state batteries")

        assert result.query == "Solid-state batteries"
        assert result.outline == "1. Introduction\n2. Methods"
        assert [c.number for c in result.chapters] == [2, 1]
        assert [c.number for c in result.contents] == [1, 2]
        assert result.draft == "## Introduction\nBody\n\n## Methods\nBody"
        assert result.report == "# Final report"
        assert set(result.phases) == {"outline", "final-report"}
        assert result.phases["outline"].attempts == 1

        assert audit.streams[DRAFT_STREAM] == result.draft
        assert audit.streams[COMPLETED_REPORT_STREAM] == "# Final report"
        for stream in ("outline.md", "chapters.json", "content.md", "final_report.md"):
            assert stream in audit.streams
        assert audit.event_types()[0] == "workflow.started"
        assert audit.event_types()[-1] == "workflow.completed"

    @pytest.mark.asyncio
    async def test_outline_reaches_chapter_parser(self, make_generator, audit, fast_config):
        generator = make_generator(scripted_responder())

        await ReportWorkflow(fast_config, generator, audit).run("topic")

        parse_requests = [r for r in generator.requests if r.system_prompt == prompts.CHAPTER_PARSER_SYSTEM_PROMPT]
        assert len(parse_requests) == 1
        assert parse_requests[0].prompt == "1. Introduction\n2. Methods"

    @pytest.mark.asyncio
    async def test_content_writer_sampling_controls(self, make_generator, audit):
        config = WorkflowConfig(
            batch_cooldown=0.0,
            workflow_timeout=None,
            content_temperature=0.2,
            content_frequency_penalty=0.7,
        )
        generator = make_generator(scripted_responder())

        await ReportWorkflow(config, generator, audit).run("topic")

        writer_requests = [r for r in generator.requests if r.system_prompt == prompts.CONTENT_WRITER_SYSTEM_PROMPT]
        assert writer_requests
        assert all(r.temperature == 0.2 and r.frequency_penalty == 0.7 for r in writer_requests)

    @pytest.mark.asyncio
    async def test_budget_exhaustion_still_completes(self, make_generator, audit):
        config = WorkflowConfig(max_attempts=2, batch_cooldown=0.0, workflow_timeout=None)
        generator = make_generator(scripted_responder(verdict="revise"))

        result = await ReportWorkflow(config, generator, audit).run("topic")

        assert result.phases["outline"].exhausted is True
        assert result.phases["final-report"].attempts == 2
        assert all(c.exhausted for c in result.contents)
        completed = audit.events[-1]
        assert completed["event_type"] == "workflow.completed"
        assert completed["data"]["exhausted_chapters"] == [1, 2]

    @pytest.mark.asyncio
    async def test_chapter_parse_failure_aborts(self, make_generator, audit, fast_config):
        def respond(request):
            if request.system_prompt == prompts.CHAPTER_PARSER_SYSTEM_PROMPT:
                return "I could not find any chapters."
            return scripted_responder()(request)

        generator = make_generator(respond)

        with pytest.raises(ChapterParseError):
            await ReportWorkflow(fast_config, generator, audit).run("topic")
        assert not any(r.system_prompt == prompts.CONTENT_WRITER_SYSTEM_PROMPT for r in generator.requests)

    @pytest.mark.asyncio
    async def test_deadline_raises_workflow_timeout(self, audit):
        config = WorkflowConfig(batch_cooldown=0.0, workflow_timeout=0.05)

        with pytest.raises(WorkflowTimeoutError) as exc_info:
            await ReportWorkflow(config, HangingGenerator(), audit).run("topic")

        assert exc_info.value.timeout == 0.05
        assert exc_info.value.phase == "outline"
        assert "workflow.timeout" in audit.event_types()

    @pytest.mark.asyncio
    async def test_writes_real_audit_files(self, make_generator, tmp_path, fast_config):
        trail = AuditTrail(tmp_path)

        await ReportWorkflow(fast_config, make_generator(scripted_responder()), trail).run("topic")

        assert (tmp_path / COMPLETED_REPORT_STREAM).read_text(encoding="utf-8") == "# Final report"
        outline_log = (tmp_path / "outline.md").read_text(encoding="utf-8")
        assert "==== trial 1 ====" in outline_log
        assert "==== final outline ====" in outline_log
        assert (tmp_path / "events.jsonl").exists()
