"""Timeout and retry guard around a TextGenerator.

``GuardedGenerator`` is itself a ``TextGenerator``, so phase roles never know
whether they talk to a raw backend or a guarded one. Each call gets a
per-call timeout clamped to the run's ``Deadline``; transient failures are
retried with exponential backoff.
"""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Optional

from deep_report.core.concurrency import Deadline
from deep_report.core.errors.provider import (
    ProviderError,
    ProviderExecutionError,
    ProviderTimeoutError,
)
from deep_report.core.providers.base import (
    GenerationRequest,
    GenerationResult,
    TextGenerator,
)

logger = logging.getLogger(__name__)


def _is_retryable(exc: ProviderError) -> bool:
    if isinstance(exc, ProviderTimeoutError):
        return True
    if isinstance(exc, ProviderExecutionError):
        return exc.retryable
    return False


class GuardedGenerator(TextGenerator):
    """Apply per-call timeouts and bounded retries to another generator.

    Args:
        inner: The generator doing the actual work
        deadline: Run-wide budget; per-call timeouts never exceed it
        call_timeout: Default per-call timeout in seconds
        max_retries: Retries after the first attempt for retryable errors
        retry_delay: Base backoff delay in seconds, doubled per retry
    """

    def __init__(
        self,
        inner: TextGenerator,
        *,
        deadline: Optional[Deadline] = None,
        call_timeout: Optional[float] = None,
        max_retries: int = 2,
        retry_delay: float = 2.0,
    ):
        self._inner = inner
        self._deadline = deadline or Deadline()
        self._call_timeout = call_timeout
        self._max_retries = max(0, max_retries)
        self._retry_delay = retry_delay

    def get_provider_name(self) -> str:
        return self._inner.get_provider_name()

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate with timeout protection and retries.

        Raises:
            ProviderTimeoutError: If the deadline is spent or the last attempt
                timed out
            ProviderError: The last non-retryable or exhausted provider error
        """
        provider = self.get_provider_name()

        attempt = 0
        while True:
            if self._deadline.expired:
                raise ProviderTimeoutError(
                    "Workflow deadline exhausted before generation call",
                    provider=provider,
                    elapsed=self._deadline.elapsed(),
                    timeout=self._deadline.timeout,
                )

            timeout = self._deadline.bound(request.timeout or self._call_timeout)
            start = time.perf_counter()
            try:
                return await asyncio.wait_for(
                    self._inner.generate(replace(request, timeout=timeout)),
                    timeout=timeout,
                )
            except asyncio.TimeoutError as exc:
                elapsed = time.perf_counter() - start
                error: ProviderError = ProviderTimeoutError(
                    f"Timed out after {elapsed:.1f}s",
                    provider=provider,
                    elapsed=elapsed,
                    timeout=timeout,
                )
                error.__cause__ = exc
            except ProviderError as exc:
                error = exc

            if not _is_retryable(error) or attempt >= self._max_retries:
                raise error

            delay = self._retry_delay * (2**attempt)
            bounded = self._deadline.bound(delay)
            logger.warning(
                "Provider %s failed with %s (attempt %d/%d), retrying in %.1fs: %s",
                provider,
                type(error).__name__,
                attempt + 1,
                self._max_retries + 1,
                bounded or 0.0,
                error,
            )
            await asyncio.sleep(bounded or 0.0)
            attempt += 1
