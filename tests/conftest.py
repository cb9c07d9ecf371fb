"""Shared fixtures: scripted generators and an in-memory audit sink."""

from typing import Any, Callable, Optional

import pytest

from deep_report.config.workflow import WorkflowConfig
from deep_report.core.providers.base import GenerationRequest, GenerationResult, TextGenerator


class StubGenerator(TextGenerator):
    """TextGenerator answering every request through ``responder``.

    Every request is kept in ``requests`` for later assertions.
    """

    def __init__(self, responder: Optional[Callable[[GenerationRequest], str]] = None, name: str = "stub"):
        self.name = name
        self.responder = responder or (lambda request: f"echo: {request.prompt}")
        self.requests: list[GenerationRequest] = []

    def get_provider_name(self) -> str:
        return self.name

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        self.requests.append(request)
        return GenerationResult(text=self.responder(request), provider_id=self.name, model_used="stub-model")


class RecordingAudit:
    """In-memory audit sink mirroring AuditTrail's write/append semantics."""

    def __init__(self) -> None:
        self.streams: dict[str, str] = {}
        self.events: list[dict[str, Any]] = []

    def write(self, text: str, stream: str) -> None:
        self.streams[stream] = text

    def append(self, text: str, stream: str) -> None:
        self.streams[stream] = self.streams.get(stream, "") + text

    def record_event(
        self,
        event_type: str,
        data: Optional[dict[str, Any]] = None,
        *,
        level: str = "info",
        phase: Optional[str] = None,
    ) -> None:
        self.events.append({"event_type": event_type, "data": data or {}, "level": level, "phase": phase})

    def event_types(self) -> list[str]:
        return [event["event_type"] for event in self.events]


class BrokenAudit(RecordingAudit):
    """Audit sink whose every call raises."""

    def write(self, text: str, stream: str) -> None:
        raise OSError("disk full")

    def append(self, text: str, stream: str) -> None:
        raise OSError("disk full")

    def record_event(self, event_type, data=None, *, level="info", phase=None) -> None:
        raise OSError("disk full")


@pytest.fixture
def audit():
    return RecordingAudit()


@pytest.fixture
def broken_audit():
    return BrokenAudit()


@pytest.fixture
def fast_config():
    """Workflow config without cooldowns or deadline."""
    return WorkflowConfig(batch_cooldown=0.0, workflow_timeout=None, retry_delay=0.0)


@pytest.fixture
def make_generator():
    """Factory for StubGenerator instances: ``make_generator(responder)``."""
    return StubGenerator
