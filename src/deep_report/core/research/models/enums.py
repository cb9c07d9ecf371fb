"""Shared enums for research workflow models."""

from enum import Enum


class WorkflowType(str, Enum):
    """Research workflows available from the CLI."""

    REPORT = "report"  # Outline -> chapters -> final report
    TASK_PLAN = "task-plan"  # Task plan -> search lists -> page summaries


class Judgment(str, Enum):
    """Referee decision for one attempt of a phase."""

    PROCEED = "proceed"
    REVISE = "revise"


class JudgmentKind(str, Enum):
    """Discriminator of a parsed referee response."""

    VALID = "valid"
    PARSE_FAILURE = "parse_failure"


class PhaseState(str, Enum):
    """States of the generate -> critique -> judge loop.

    REVISING loops back to GENERATING; ACCEPTED is terminal.
    """

    GENERATING = "generating"
    CRITIQUING = "critiquing"
    JUDGING = "judging"
    REVISING = "revising"
    ACCEPTED = "accepted"


class ReportPhase(str, Enum):
    """Phase names used for audit streams and referee prompts."""

    OUTLINE = "outline"
    CONTENT = "content"
    FINAL_REPORT = "final-report"
