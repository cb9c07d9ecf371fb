"""Text-generation provider error classes."""

from typing import Optional


class ProviderError(RuntimeError):
    """Base exception for text-generation provider errors."""

    def __init__(self, message: str, *, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(ProviderError):
    """Raised when a provider cannot be used (missing credentials, auth rejected)."""


class ProviderExecutionError(ProviderError):
    """Raised when a generation request fails.

    Attributes:
        provider: Provider that failed
        retryable: Whether repeating the same request may succeed
        status_code: HTTP status returned by the provider, if any
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        retryable: bool = False,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, provider=provider)
        self.retryable = retryable
        self.status_code = status_code


class ProviderTimeoutError(ProviderError):
    """Raised when a provider exceeds its allotted execution time.

    Attributes:
        provider: Provider that timed out
        elapsed: Actual elapsed time in seconds before timeout
        timeout: Configured timeout value in seconds
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        elapsed: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(message, provider=provider)
        self.elapsed = elapsed
        self.timeout = timeout
