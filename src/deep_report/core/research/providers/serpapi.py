"""SerpAPI provider for web search.

Wraps the SerpAPI JSON endpoint and returns its ``organic_results`` as
``OrganicResult`` objects.

SerpAPI documentation: https://serpapi.com/search-api

Error Handling:
    - 401/403: AuthenticationError, not retryable
    - 429: RateLimitError, retryable (Retry-After honoured by callers)
    - 5xx: SearchProviderError, retryable
    - other 4xx: SearchProviderError, not retryable
    - 200 without organic results: SearchProviderError, not retryable

Example usage:
    provider = SerpApiSearchProvider(api_key="...")
    results = await provider.search("renewable energy policy", max_results=10)
"""

import logging
import os
from typing import Any, Optional

import httpx

from deep_report.core.errors.search import (
    AuthenticationError,
    RateLimitError,
    SearchProviderError,
)
from deep_report.core.providers.shared import (
    extract_error_message,
    parse_retry_after,
    redact_secrets,
)
from deep_report.core.research.providers.base import OrganicResult, SearchProvider

logger = logging.getLogger(__name__)

# SerpAPI constants
SERPAPI_BASE_URL = "https://serpapi.com/search.json"
DEFAULT_TIMEOUT = 30.0
VALID_ENGINES = frozenset(["google", "yahoo", "bing"])

# Search defaults
DEFAULT_ENGINE = "google"
DEFAULT_LOCATION = "Tokyo, Japan"
DEFAULT_DOMAIN = "google.com"
DEFAULT_COUNTRY = "jp"
DEFAULT_LANGUAGE = "ja"
DEFAULT_NUM_RESULTS = 50


class SerpApiSearchProvider(SearchProvider):
    """SerpAPI-backed web search.

    Attributes:
        api_key: SerpAPI key (falls back to SERPAPI_API_KEY)
        engine: Default engine: google, yahoo or bing
        location: Location the search is executed from
        domain: Engine domain, e.g. google.com
        country: Two-letter country code (``gl``)
        language: Interface language code (``hl``)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        engine: str = DEFAULT_ENGINE,
        location: str = DEFAULT_LOCATION,
        domain: str = DEFAULT_DOMAIN,
        country: str = DEFAULT_COUNTRY,
        language: str = DEFAULT_LANGUAGE,
        num_results: int = DEFAULT_NUM_RESULTS,
        base_url: str = SERPAPI_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the SerpAPI provider.

        Raises:
            ValueError: If no API key is available or the engine is unknown
        """
        self._api_key = api_key or os.environ.get("SERPAPI_API_KEY")
        if not self._api_key:
            raise ValueError(
                "SerpAPI key required. Provide via api_key parameter "
                "or SERPAPI_API_KEY environment variable."
            )
        if engine not in VALID_ENGINES:
            raise ValueError(f"Invalid engine: {engine!r}. Must be one of: {sorted(VALID_ENGINES)}")

        self._engine = engine
        self._location = location
        self._domain = domain
        self._country = country
        self._language = language
        self._num_results = num_results
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    def get_provider_name(self) -> str:
        return "serpapi"

    def _build_params(self, query: str, max_results: Optional[int], kwargs: dict[str, Any]) -> dict[str, Any]:
        engine = kwargs.get("engine", self._engine)
        if engine not in VALID_ENGINES:
            raise ValueError(f"Invalid engine: {engine!r}. Must be one of: {sorted(VALID_ENGINES)}")
        return {
            "engine": engine,
            "q": query,
            "location": kwargs.get("location", self._location),
            "google_domain": kwargs.get("domain", self._domain),
            "gl": kwargs.get("country", self._country),
            "hl": kwargs.get("language", self._language),
            "num": max_results or self._num_results,
            "start": kwargs.get("offset", 0),
            "api_key": self._api_key,
        }

    async def search(
        self,
        query: str,
        max_results: int = DEFAULT_NUM_RESULTS,
        **kwargs: Any,
    ) -> list[OrganicResult]:
        """Execute a web search via SerpAPI.

        Args:
            query: The search query string
            max_results: Number of results requested from the engine
            **kwargs: Per-call overrides:
                - engine: "google", "yahoo" or "bing"
                - location: e.g. "Tokyo, Japan"
                - domain: engine domain, e.g. "google.com"
                - country: country code, e.g. "jp"
                - language: language code, e.g. "ja"
                - offset: pagination offset

        Returns:
            Organic results, at most ``max_results``

        Raises:
            AuthenticationError: If the API key is rejected
            RateLimitError: If the rate limit is exceeded
            SearchProviderError: For other API errors or missing results
            ValueError: If an invalid engine is requested
        """
        params = self._build_params(query, max_results, kwargs)
        logger.debug("SerpAPI search engine=%s query=%r", params["engine"], query)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._base_url, params=params)
        except httpx.TimeoutException as exc:
            raise SearchProviderError(
                provider="serpapi",
                message="Request timed out",
                retryable=True,
                original_error=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise SearchProviderError(
                provider="serpapi",
                message=f"Request failed: {redact_secrets(str(exc))}",
                retryable=True,
                original_error=exc,
            ) from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(provider="serpapi", message="Invalid API key")
        if response.status_code == 429:
            raise RateLimitError(provider="serpapi", retry_after=parse_retry_after(response))
        if response.status_code >= 400:
            raise SearchProviderError(
                provider="serpapi",
                message=f"API error {response.status_code}: {extract_error_message(response)}",
                retryable=response.status_code >= 500,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise SearchProviderError(
                provider="serpapi",
                message="Response was not valid JSON",
                retryable=True,
                original_error=exc,
            ) from exc
        if not isinstance(data, dict):
            raise SearchProviderError(provider="serpapi", message=f"Unexpected response type {type(data).__name__}")

        results = self._parse_response(data)
        return results[:max_results] if max_results else results

    def _parse_response(self, data: dict[str, Any]) -> list[OrganicResult]:
        """Map ``organic_results`` entries to OrganicResult.

        Entries without a link are skipped.
        """
        organic = data.get("organic_results")
        if not organic:
            message = data.get("error") or "No organic results found"
            raise SearchProviderError(provider="serpapi", message=redact_secrets(str(message)))

        results: list[OrganicResult] = []
        for entry in organic:
            if not isinstance(entry, dict):
                continue
            link = entry.get("link")
            if not link:
                continue
            results.append(
                OrganicResult(
                    title=entry.get("title") or link,
                    link=link,
                    snippet=entry.get("snippet"),
                )
            )
        return results
