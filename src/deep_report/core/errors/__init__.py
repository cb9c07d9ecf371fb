"""Error hierarchy for deep-report.

Exceptions are defined in domain-specific modules and re-exported here.

Usage:
    from deep_report.core.errors import ProviderTimeoutError, ChapterParseError
"""

# --- Provider errors ---
from deep_report.core.errors.provider import (
    ProviderError,
    ProviderExecutionError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)

# --- Search errors ---
from deep_report.core.errors.search import (
    AuthenticationError,
    PageFetchError,
    RateLimitError,
    SearchProviderError,
)

# --- Workflow errors ---
from deep_report.core.errors.workflow import (
    ChapterParseError,
    WorkflowError,
    WorkflowTimeoutError,
)

__all__ = [
    "AuthenticationError",
    "ChapterParseError",
    "PageFetchError",
    "ProviderError",
    "ProviderExecutionError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "RateLimitError",
    "SearchProviderError",
    "WorkflowError",
    "WorkflowTimeoutError",
]
