"""OpenAI-compatible chat completions provider.

Wraps any endpoint that speaks the ``/chat/completions`` protocol (OpenAI,
Azure-style gateways, local model servers) behind ``TextGenerator``.

Error mapping:
    - 401/403: ProviderUnavailableError (credentials must be fixed)
    - 429 and 5xx: ProviderExecutionError, retryable
    - other 4xx: ProviderExecutionError, not retryable
    - transport timeouts: ProviderTimeoutError
    - other transport errors: ProviderExecutionError, retryable

Example usage:
    generator = OpenAICompatibleGenerator(model="gpt-4o")
    result = await generator.generate(GenerationRequest(prompt="Hello"))
"""

import logging
import os
import time
from typing import Any, Optional

import httpx

from deep_report.core.errors.provider import (
    ProviderExecutionError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from deep_report.core.providers.base import (
    GenerationRequest,
    GenerationResult,
    TextGenerator,
    TokenUsage,
)
from deep_report.core.providers.shared import extract_error_message

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
CHAT_COMPLETIONS_ENDPOINT = "/chat/completions"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_TIMEOUT = 300.0


class OpenAICompatibleGenerator(TextGenerator):
    """Text generator backed by an OpenAI-compatible chat completions API.

    Attributes:
        api_key: Bearer token (falls back to OPENAI_API_KEY)
        base_url: API base URL
        model: Model identifier sent with every request
        timeout: Default HTTP timeout in seconds
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the generator.

        Args:
            api_key: API key. If not provided, reads from OPENAI_API_KEY env var.
            base_url: API base URL (default: https://api.openai.com/v1)
            model: Model identifier (default: gpt-4o)
            timeout: HTTP timeout used when a request carries none
            transport: Optional httpx transport, used by tests

        Raises:
            ProviderUnavailableError: If no API key is provided or found
        """
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self._api_key:
            raise ProviderUnavailableError(
                "API key required. Provide via api_key parameter "
                "or OPENAI_API_KEY environment variable.",
                provider=self.get_provider_name(),
            )
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout
        self._transport = transport

    def get_provider_name(self) -> str:
        return "openai-compatible"

    @property
    def model(self) -> str:
        return self._model

    def _build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        messages: list[dict[str, str]] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.prompt})

        payload: dict[str, Any] = {"model": self._model, "messages": messages}
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.frequency_penalty is not None:
            payload["frequency_penalty"] = request.frequency_penalty
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        return payload

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Send one chat completion request.

        Args:
            request: The normalized request

        Returns:
            GenerationResult with the first choice's message content

        Raises:
            ProviderUnavailableError: On 401/403
            ProviderExecutionError: On other HTTP or transport failures
            ProviderTimeoutError: When the HTTP call times out
        """
        url = f"{self._base_url}{CHAT_COMPLETIONS_ENDPOINT}"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        timeout = request.timeout or self._timeout
        provider = self.get_provider_name()
        logger.debug("POST %s (model=%s, timeout=%s)", url, self._model, timeout)
        start = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(url, json=self._build_payload(request), headers=headers)
        except httpx.TimeoutException as exc:
            elapsed = time.perf_counter() - start
            raise ProviderTimeoutError(
                f"Request timed out after {elapsed:.1f}s",
                provider=provider,
                elapsed=elapsed,
                timeout=timeout,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderExecutionError(
                f"Request failed: {exc}",
                provider=provider,
                retryable=True,
            ) from exc

        if response.status_code in (401, 403):
            raise ProviderUnavailableError(
                f"Authentication rejected ({response.status_code})",
                provider=provider,
            )
        if response.status_code >= 400:
            retryable = response.status_code == 429 or response.status_code >= 500
            raise ProviderExecutionError(
                f"API error {response.status_code}: {extract_error_message(response)}",
                provider=provider,
                retryable=retryable,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderExecutionError(
                "Response was not valid JSON",
                provider=provider,
                retryable=True,
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise ProviderExecutionError(
                f"Unexpected response type {type(data).__name__}",
                provider=provider,
                retryable=True,
                status_code=response.status_code,
            )

        return self._parse_response(data, (time.perf_counter() - start) * 1000)

    def _parse_response(self, data: dict[str, Any], duration_ms: float) -> GenerationResult:
        """Parse a chat completions response body.

        Expected structure:
        {
            "model": "...",
            "choices": [{"message": {"role": "assistant", "content": "..."}}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 20}
        }
        """
        choices = data.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            raise ProviderExecutionError(
                "Response contained no choices",
                provider=self.get_provider_name(),
            )
        message = choices[0].get("message")
        content = (message.get("content") if isinstance(message, dict) else None) or ""

        tokens = None
        usage = data.get("usage")
        if isinstance(usage, dict):
            tokens = TokenUsage(
                input_tokens=int(usage.get("prompt_tokens") or 0),
                output_tokens=int(usage.get("completion_tokens") or 0),
            )

        return GenerationResult(
            text=content,
            provider_id=self.get_provider_name(),
            model_used=data.get("model") or self._model,
            tokens=tokens,
            duration_ms=duration_ms,
        )

