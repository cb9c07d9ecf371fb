"""Generate -> critique -> judge -> retry state machine shared by every phase.

One ``PhaseController`` run drives a ``Phase`` (producer, reviewer, referee)
through explicit ``PhaseState`` transitions until the referee approves, the
attempt budget runs out, or the referee's answer can not be parsed.

Fail-open policy: an unparseable judgment never triggers another attempt.
The current output is accepted with ``forced_acceptance=True`` and the raw
response is logged and recorded as a ``judgment.parse_failed`` event, so a
broken referee can not stall the pipeline while still being told apart
from a genuine approval.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from deep_report.core.research.models import (
    Attempt,
    Judgment,
    JudgmentParseFailure,
    Phase,
    PhaseResult,
    PhaseState,
)
from deep_report.core.research.workflows.base import AuditSink
from deep_report.core.research.workflows.report._json_parsing import parse_judgment
from deep_report.core.research.workflows.report.prompts import build_revision_prompt

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


def next_state(
    state: PhaseState,
    *,
    judgment: Judgment = Judgment.REVISE,
    attempt: int = 0,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    parse_failed: bool = False,
) -> PhaseState:
    """Pure transition function of the phase loop.

    Args:
        state: Current state
        judgment: Latest judgment (only consulted when leaving JUDGING)
        attempt: Attempts consumed so far
        max_attempts: Attempt budget
        parse_failed: Whether the latest referee response failed to parse

    Returns:
        The state to enter next

    Raises:
        ValueError: When called with the terminal ACCEPTED state
    """
    if state is PhaseState.GENERATING:
        return PhaseState.CRITIQUING
    if state is PhaseState.CRITIQUING:
        return PhaseState.JUDGING
    if state is PhaseState.JUDGING:
        if parse_failed or judgment is Judgment.PROCEED or attempt >= max_attempts:
            return PhaseState.ACCEPTED
        return PhaseState.REVISING
    if state is PhaseState.REVISING:
        return PhaseState.GENERATING
    raise ValueError(f"No transition out of terminal state {state.value!r}")


class PhaseController:
    """Run one phase through the generate/critique/judge loop.

    Args:
        phase: The phase's producer, reviewer and referee
        audit: Sink for trials, feedback and events; failures are logged only
        max_attempts: Default attempt budget for ``run``
        stream: Audit stream name (default ``<phase name>.md``)
        label: Prefix for audit markers, e.g. ``"Chapter 2: "``
    """

    def __init__(
        self,
        phase: Phase,
        audit: Optional[AuditSink] = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        stream: Optional[str] = None,
        label: str = "",
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.phase = phase
        self.audit = audit
        self.max_attempts = max_attempts
        self.stream = stream or f"{phase.name}.md"
        self.label = label

    # ------------------------------------------------------------------
    # Audit helpers
    # ------------------------------------------------------------------

    def _append(self, marker: str, text: str) -> None:
        if self.audit is None:
            return
        try:
            self.audit.append(f"\n\n==== {self.label}{marker} ====\n\n{text}", self.stream)
        except Exception as exc:
            logger.error("%s phase: audit append to %s failed: %s", self.phase.name, self.stream, exc)

    def _record(self, event_type: str, data: dict[str, Any], level: str = "info") -> None:
        if self.audit is None:
            return
        try:
            self.audit.record_event(event_type, data, level=level, phase=self.phase.name)
        except Exception as exc:
            logger.error("%s phase: audit event %s failed: %s", self.phase.name, event_type, exc)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run(self, initial_input: str, max_attempts: Optional[int] = None) -> PhaseResult:
        """Execute the loop for one phase invocation.

        Args:
            initial_input: Seed prompt for the first attempt
            max_attempts: Attempt budget override (positive integer)

        Returns:
            PhaseResult holding the most recent output

        Raises:
            ValueError: If max_attempts is smaller than 1
            Exception: Whatever a producer, reviewer or referee call raises
        """
        limit = self.max_attempts if max_attempts is None else max_attempts
        if limit < 1:
            raise ValueError(f"max_attempts must be >= 1, got {limit}")

        name = self.phase.name
        start = time.perf_counter()
        logger.info("Executing %s phase %s(max_attempts=%d)", name, self.label, limit)
        self._record("phase.started", {"label": self.label, "max_attempts": limit})

        state = PhaseState.GENERATING
        judgment = Judgment.REVISE
        parse_failed = False
        attempt_no = 0
        current_input = initial_input
        current = Attempt(index=0, output="")

        try:
            while state is not PhaseState.ACCEPTED:
                if state is PhaseState.GENERATING:
                    attempt_no += 1
                    output = await self.phase.producer(current_input)
                    current = Attempt(index=attempt_no, output=output)
                    logger.debug("%s phase: attempt %d generated %d chars", name, attempt_no, len(output))
                    self._append(f"trial {attempt_no}", output)

                elif state is PhaseState.CRITIQUING:
                    current.feedback = await self.phase.reviewer(current.output)
                    self._append(f"feedback {attempt_no}", current.feedback)

                elif state is PhaseState.JUDGING:
                    raw = await self.phase.referee(name, current.output, current.feedback)
                    parsed = parse_judgment(raw)
                    if isinstance(parsed, JudgmentParseFailure):
                        parse_failed = True
                        judgment = Judgment.PROCEED
                        logger.warning(
                            "%s phase: unparseable judgment on attempt %d (%s), accepting output. Raw response: %s",
                            name,
                            attempt_no,
                            parsed.error,
                            parsed.raw,
                        )
                        self._record(
                            "judgment.parse_failed",
                            {"attempt": attempt_no, "error": parsed.error, "raw_response": parsed.raw},
                            level="warning",
                        )
                    else:
                        judgment = parsed.action
                        current.reason = parsed.reason
                        logger.info(
                            "%s phase: attempt %d judged %s: %s", name, attempt_no, judgment.value, parsed.reason
                        )
                        if judgment is Judgment.REVISE:
                            self._append(f"revision reason {attempt_no}", parsed.reason)
                    current.judgment = judgment

                elif state is PhaseState.REVISING:
                    current_input = build_revision_prompt(current.output, current.feedback)

                state = next_state(
                    state,
                    judgment=judgment,
                    attempt=attempt_no,
                    max_attempts=limit,
                    parse_failed=parse_failed,
                )
        except Exception as exc:
            self._record(
                "phase.failed",
                {"attempt": attempt_no, "state": state.value, "error": str(exc)},
                level="error",
            )
            raise

        exhausted = attempt_no == limit and judgment is Judgment.REVISE
        if exhausted:
            logger.warning(
                "%s phase %s: revision budget exhausted after %d attempts, keeping best available output",
                name,
                self.label,
                attempt_no,
            )

        duration_ms = (time.perf_counter() - start) * 1000
        self._record(
            "phase.completed",
            {
                "label": self.label,
                "attempts": attempt_no,
                "exhausted": exhausted,
                "forced_acceptance": parse_failed,
                "duration_ms": duration_ms,
            },
            level="warning" if exhausted else "info",
        )
        self._append(f"final {name}", current.output)

        return PhaseResult(
            text=current.output,
            attempts=attempt_no,
            exhausted=exhausted,
            forced_acceptance=parse_failed,
            last_attempt=current,
        )
