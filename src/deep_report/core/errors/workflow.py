"""Report workflow error classes."""

from typing import Optional


class WorkflowError(RuntimeError):
    """Base exception for failures that terminate a workflow run."""


class ChapterParseError(WorkflowError):
    """Raised when the chapter-parse response is not a valid chapter plan.

    Attributes:
        raw: The unparsed generator response, kept for diagnosis
    """

    def __init__(self, message: str, *, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class WorkflowTimeoutError(WorkflowError):
    """Raised when a run exceeds its top-level deadline.

    Attributes:
        timeout: Configured workflow budget in seconds
        phase: Phase that was executing when the deadline fired, if known
    """

    def __init__(
        self,
        message: str,
        *,
        timeout: Optional[float] = None,
        phase: Optional[str] = None,
    ):
        super().__init__(message)
        self.timeout = timeout
        self.phase = phase
