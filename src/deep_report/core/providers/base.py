"""
Base text-generation abstractions for deep-report.

Every phase role (producer, reviewer, referee, chapter parser) talks to a
``TextGenerator``. The contract is deliberately small: one request in, one
text out, with optional sampling controls.

Design principles:
- Frozen dataclasses for requests and results
- Provider-specific failures surface as ``ProviderError`` subclasses
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GenerationRequest:
    """Normalized generation request.

    Attributes:
        prompt: User prompt
        system_prompt: Optional role instructions
        temperature: Optional sampling temperature
        frequency_penalty: Optional repetition penalty
        max_tokens: Optional cap on generated tokens
        timeout: Per-call timeout in seconds, enforced by the caller
    """

    prompt: str
    system_prompt: Optional[str] = None
    temperature: Optional[float] = None
    frequency_penalty: Optional[float] = None
    max_tokens: Optional[int] = None
    timeout: Optional[float] = None


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class GenerationResult:
    """Normalized generation response.

    Attributes:
        text: Generated text
        provider_id: Provider that produced the text
        model_used: Model reported by the provider, if any
        tokens: Token accounting, if reported
        duration_ms: Wall-clock duration of the call
    """

    text: str
    provider_id: str = ""
    model_used: Optional[str] = None
    tokens: Optional[TokenUsage] = None
    duration_ms: Optional[float] = None


class TextGenerator(ABC):
    """Abstract base class for text-generation backends.

    Implementations should raise ``ProviderUnavailableError`` for
    configuration/auth problems, ``ProviderExecutionError`` (with
    ``retryable`` set appropriately) for request failures, and
    ``ProviderTimeoutError`` when the backend does not answer in time.
    """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provider identifier used in logs and results."""
        ...

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate text for a single request.

        Args:
            request: The normalized request

        Returns:
            GenerationResult with the generated text
        """
        ...
