"""Text-generation providers.

Public API:
    TextGenerator, GenerationRequest, GenerationResult, TokenUsage
    OpenAICompatibleGenerator: httpx client for /chat/completions endpoints
    GuardedGenerator: per-call timeout and retry wrapper
"""

from deep_report.core.providers.base import (
    GenerationRequest,
    GenerationResult,
    TextGenerator,
    TokenUsage,
)
from deep_report.core.providers.guarded import GuardedGenerator
from deep_report.core.providers.openai_compat import OpenAICompatibleGenerator

__all__ = [
    "GenerationRequest",
    "GenerationResult",
    "GuardedGenerator",
    "OpenAICompatibleGenerator",
    "TextGenerator",
    "TokenUsage",
]
