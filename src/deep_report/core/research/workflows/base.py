"""Base class for research workflows.

Provides the shared run envelope: a top-level ``Deadline`` enforced with
``asyncio.wait_for``, best-effort audit helpers, and lifecycle events.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, Protocol, TypeVar

from deep_report.config.workflow import WorkflowConfig
from deep_report.core.concurrency import Deadline
from deep_report.core.errors.workflow import WorkflowTimeoutError
from deep_report.core.providers.base import TextGenerator

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class AuditSink(Protocol):
    """Destination for audit streams and events (see ``AuditTrail``)."""

    def append(self, text: str, stream: str) -> None: ...

    def write(self, text: str, stream: str) -> None: ...

    def record_event(
        self,
        event_type: str,
        data: Optional[dict[str, Any]] = None,
        *,
        level: str = "info",
        phase: Optional[str] = None,
    ) -> None: ...


class ResearchWorkflowBase(ABC, Generic[ResultT]):
    """Base class for query -> document workflows.

    Subclasses implement ``_run``; ``run`` wraps it in the deadline.

    Args:
        config: Workflow knobs
        generator: Backend for every generation call
        audit: Audit sink; every audit failure is logged and swallowed
        deadline: Shared run budget; created from ``config.workflow_timeout``
            when omitted
    """

    name = "workflow"

    def __init__(
        self,
        config: WorkflowConfig,
        generator: TextGenerator,
        audit: Optional[AuditSink] = None,
        *,
        deadline: Optional[Deadline] = None,
    ) -> None:
        self.config = config
        self.generator = generator
        self.audit = audit
        self.deadline = deadline
        self._current_phase: Optional[str] = None

    # ------------------------------------------------------------------
    # Audit helpers
    # ------------------------------------------------------------------

    def _write(self, text: str, stream: str) -> None:
        if self.audit is None:
            return
        try:
            self.audit.write(text, stream)
        except Exception as exc:
            logger.error("%s: audit write to %s failed: %s", self.name, stream, exc)

    def _append(self, text: str, stream: str) -> None:
        if self.audit is None:
            return
        try:
            self.audit.append(text, stream)
        except Exception as exc:
            logger.error("%s: audit append to %s failed: %s", self.name, stream, exc)

    def _record(self, event_type: str, data: dict[str, Any], level: str = "info") -> None:
        if self.audit is None:
            return
        try:
            self.audit.record_event(event_type, data, level=level, phase=self._current_phase)
        except Exception as exc:
            logger.error("%s: audit event %s failed: %s", self.name, event_type, exc)

    # ------------------------------------------------------------------
    # Run envelope
    # ------------------------------------------------------------------

    async def run(self, query: str) -> ResultT:
        """Run the workflow for ``query`` under the deadline.

        Raises:
            WorkflowTimeoutError: If the deadline fires before completion
        """
        deadline = self.deadline or Deadline(timeout=self.config.workflow_timeout)
        self._record("workflow.started", {"workflow": self.name, "query": query, "timeout": deadline.timeout})
        try:
            return await asyncio.wait_for(self._run(query), timeout=deadline.remaining())
        except asyncio.TimeoutError as exc:
            phase = self._current_phase
            logger.error("%s timed out after %.1fs during %s", self.name, deadline.elapsed(), phase)
            self._record("workflow.timeout", {"timeout": deadline.timeout}, level="error")
            raise WorkflowTimeoutError(
                f"{self.name} exceeded {deadline.timeout}s deadline",
                timeout=deadline.timeout,
                phase=phase,
            ) from exc

    @abstractmethod
    async def _run(self, query: str) -> ResultT:
        """Execute the workflow body."""
