"""Research workflow models package.

Callers import from the package:
    from deep_report.core.research.models import Chapter, PhaseResult
"""

from deep_report.core.research.models.enums import (
    Judgment,
    JudgmentKind,
    PhaseState,
    ReportPhase,
    WorkflowType,
)
from deep_report.core.research.models.report import (
    Attempt,
    Chapter,
    ChapterContent,
    ChapterPlan,
    JudgmentParseFailure,
    JudgmentPayload,
    JudgmentValid,
    ParsedJudgment,
    Phase,
    PhaseResult,
    Producer,
    Referee,
    ReportResult,
    Reviewer,
)
from deep_report.core.research.models.task_plan import (
    ResearchItem,
    SearchPage,
    TaskPlanResult,
)

__all__ = [
    "Attempt",
    "Chapter",
    "ChapterContent",
    "ChapterPlan",
    "Judgment",
    "JudgmentKind",
    "JudgmentParseFailure",
    "JudgmentPayload",
    "JudgmentValid",
    "ParsedJudgment",
    "Phase",
    "PhaseResult",
    "PhaseState",
    "Producer",
    "Referee",
    "ReportPhase",
    "ReportResult",
    "ResearchItem",
    "Reviewer",
    "SearchPage",
    "TaskPlanResult",
    "WorkflowType",
]
