"""Models for the outline -> chapters -> final report workflow.

Wire-format payloads coming back from generators (chapter plans, referee
judgments) are pydantic models so malformed output fails validation in one
place. Control-flow records (phases, attempts, results) are plain
dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from deep_report.core.research.models.enums import Judgment, JudgmentKind

# Role signatures shared by every phase
Producer = Callable[[str], Awaitable[str]]
Reviewer = Callable[[str], Awaitable[str]]
Referee = Callable[[str, str, str], Awaitable[str]]


@dataclass(frozen=True)
class Phase:
    """Immutable configuration of one phase of the pipeline.

    Attributes:
        name: Phase name, also used in referee prompts and logs
        producer: Generates candidate text from the current input
        reviewer: Critiques a candidate and returns feedback text
        referee: Turns (phase name, candidate, feedback) into a raw judgment
    """

    name: str
    producer: Producer
    reviewer: Reviewer
    referee: Referee


@dataclass
class Attempt:
    """One generate/critique/judge iteration of a phase."""

    index: int
    output: str
    feedback: str = ""
    judgment: Judgment = Judgment.REVISE
    reason: Optional[str] = None


@dataclass
class PhaseResult:
    """Accepted output of one phase invocation.

    Attributes:
        text: Output of the most recent attempt
        attempts: Number of attempts consumed
        exhausted: Budget ran out while the referee still asked for revision
        forced_acceptance: The referee response could not be parsed and the
            attempt was accepted without a genuine approval
        last_attempt: The terminal attempt, kept for diagnostics
    """

    text: str
    attempts: int
    exhausted: bool = False
    forced_acceptance: bool = False
    last_attempt: Optional[Attempt] = None


# --- Parsed referee responses (tagged union) ---


@dataclass(frozen=True)
class JudgmentValid:
    action: Judgment
    reason: str = ""
    kind: JudgmentKind = field(default=JudgmentKind.VALID, init=False)


@dataclass(frozen=True)
class JudgmentParseFailure:
    raw: str
    error: str = ""
    kind: JudgmentKind = field(default=JudgmentKind.PARSE_FAILURE, init=False)


ParsedJudgment = Union[JudgmentValid, JudgmentParseFailure]


class JudgmentPayload(BaseModel):
    """Referee wire format: ``{"action": "proceed"|"revise", "reason": "..."}``."""

    action: Judgment
    reason: str = Field(default="", description="Short justification for the decision")

    @field_validator("reason", mode="before")
    @classmethod
    def _none_reason(cls, v: object) -> object:
        return "" if v is None else v


# --- Chapters ---


class Chapter(BaseModel):
    """One chapter parsed from the outline."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., description="Chapter number, unique but not necessarily contiguous")
    title: str = Field(..., description="Chapter title")
    description: str = Field(default="", description="What the chapter should cover")

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, v: object) -> object:
        return "" if v is None else v


class ChapterPlan(BaseModel):
    """Chapter-parse wire format: ``{"chapters": [...]}``."""

    chapters: list[Chapter] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_numbers(self) -> "ChapterPlan":
        seen: set[int] = set()
        for chapter in self.chapters:
            if chapter.number in seen:
                raise ValueError(f"duplicate chapter number {chapter.number}")
            seen.add(chapter.number)
        return self


class ChapterContent(BaseModel):
    """A chapter plus the body text its content phase accepted."""

    chapter: Chapter
    body: str
    attempts: int = 1
    exhausted: bool = False
    forced_acceptance: bool = False

    @property
    def number(self) -> int:
        return self.chapter.number


@dataclass
class ReportResult:
    """Outcome of a full report run.

    Attributes:
        query: The research request
        outline: Accepted outline text
        chapters: Chapters parsed from the outline
        contents: Per-chapter results, ascending by chapter number
        draft: Concatenated chapter bodies
        report: Accepted final report
        phases: PhaseResult per loop-driven phase (outline, final-report);
            per-chapter outcomes live in ``contents``
        duration_ms: Wall-clock duration of the run
    """

    query: str
    outline: str
    chapters: list[Chapter]
    contents: list[ChapterContent]
    draft: str
    report: str
    phases: dict[str, PhaseResult] = field(default_factory=dict)
    duration_ms: float = 0.0
