"""Report workflow package.

Public entry points:
    from deep_report.core.research.workflows.report import ReportWorkflow, PhaseController
"""

from deep_report.core.research.workflows.report._json_parsing import (
    extract_code_block,
    parse_chapter_plan,
    parse_judgment,
)
from deep_report.core.research.workflows.report.audit import AuditTrail, stream_name_for
from deep_report.core.research.workflows.report.chapters import ChapterPipeline, parse_chapters
from deep_report.core.research.workflows.report.controller import PhaseController, next_state
from deep_report.core.research.workflows.report.orchestrator import ReportWorkflow
from deep_report.core.research.workflows.report.prompts import build_revision_prompt
from deep_report.core.research.workflows.report.research import ChapterResearcher, build_researcher
from deep_report.core.research.workflows.report.roles import ReportPhases, build_report_phases

__all__ = [
    "AuditTrail",
    "ChapterPipeline",
    "ChapterResearcher",
    "PhaseController",
    "ReportPhases",
    "ReportWorkflow",
    "build_report_phases",
    "build_researcher",
    "build_revision_prompt",
    "extract_code_block",
    "next_state",
    "parse_chapter_plan",
    "parse_chapters",
    "parse_judgment",
    "stream_name_for",
]
