"""Outline -> chapters -> content -> final report orchestration.

Phases are strictly sequential; each receives only the previous phase's
accepted output.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from deep_report.config.workflow import WorkflowConfig
from deep_report.core.concurrency import Deadline
from deep_report.core.providers.base import TextGenerator
from deep_report.core.research.models import ReportPhase, ReportResult
from deep_report.core.research.workflows.base import AuditSink, ResearchWorkflowBase
from deep_report.core.research.workflows.report import prompts
from deep_report.core.research.workflows.report.chapters import (
    CHAPTERS_STREAM,
    CONTENT_STREAM,
    ChapterPipeline,
    parse_chapters,
)
from deep_report.core.research.workflows.report.controller import PhaseController
from deep_report.core.research.workflows.report.research import ChapterResearcher
from deep_report.core.research.workflows.report.roles import ReportPhases, build_report_phases

logger = logging.getLogger(__name__)

OUTLINE_STREAM = "outline.md"
DRAFT_STREAM = "final_content_draft.md"
FINAL_REPORT_STREAM = "final_report.md"
COMPLETED_REPORT_STREAM = "completed_report.md"

CHAPTER_PARSE_PHASE = "chapter-parse"


class ReportWorkflow(ResearchWorkflowBase[ReportResult]):
    """Produce a full report for a research query.

    Args:
        config: Attempt budget, batch widths and deadline
        generator: Backend for every generation role
        audit: Audit sink for streams and events
        researcher: Optional chapter researcher feeding content prompts
        deadline: Shared run budget
    """

    name = "report"

    def __init__(
        self,
        config: WorkflowConfig,
        generator: TextGenerator,
        audit: Optional[AuditSink] = None,
        researcher: Optional[ChapterResearcher] = None,
        *,
        deadline: Optional[Deadline] = None,
    ):
        super().__init__(config, generator, audit, deadline=deadline)
        self.researcher = researcher
        self.phases: ReportPhases = build_report_phases(generator, config)

    def _controller(self, phase_name: str, stream: str) -> PhaseController:
        phase = self.phases.outline if phase_name == ReportPhase.OUTLINE.value else self.phases.final_report
        return PhaseController(phase, self.audit, max_attempts=self.config.max_attempts, stream=stream)

    async def _run(self, query: str) -> ReportResult:
        cfg = self.config
        start = time.perf_counter()
        for stream in (OUTLINE_STREAM, CHAPTERS_STREAM, CONTENT_STREAM, FINAL_REPORT_STREAM):
            self._write("", stream)

        self._current_phase = ReportPhase.OUTLINE.value
        outline = await self._controller(ReportPhase.OUTLINE.value, OUTLINE_STREAM).run(
            prompts.outline_writer_prompt(query)
        )

        self._current_phase = CHAPTER_PARSE_PHASE
        plan = await parse_chapters(self.generator, outline.text, self.audit)

        self._current_phase = ReportPhase.CONTENT.value
        pipeline = ChapterPipeline(
            self.phases.content,
            self.audit,
            width=cfg.chapter_width,
            max_attempts=cfg.max_attempts,
            researcher=self.researcher,
            cooldown=cfg.batch_cooldown,
        )
        contents = await pipeline.develop_contents(plan.chapters)
        draft = pipeline.assemble(contents)
        self._write(draft, DRAFT_STREAM)

        self._current_phase = ReportPhase.FINAL_REPORT.value
        final = await self._controller(ReportPhase.FINAL_REPORT.value, FINAL_REPORT_STREAM).run(
            prompts.final_report_writer_prompt(draft)
        )
        self._write(final.text, COMPLETED_REPORT_STREAM)
        self._current_phase = None

        duration_ms = (time.perf_counter() - start) * 1000
        self._record(
            "workflow.completed",
            {
                "workflow": self.name,
                "chapters": len(contents),
                "exhausted_chapters": [c.number for c in contents if c.exhausted],
                "forced_chapters": [c.number for c in contents if c.forced_acceptance],
                "duration_ms": duration_ms,
            },
        )
        logger.info("Report workflow completed in %.0fms (%d chapters)", duration_ms, len(contents))
        return ReportResult(
            query=query,
            outline=outline.text,
            chapters=list(plan.chapters),
            contents=contents,
            draft=draft,
            report=final.text,
            phases={ReportPhase.OUTLINE.value: outline, ReportPhase.FINAL_REPORT.value: final},
            duration_ms=duration_ms,
        )
