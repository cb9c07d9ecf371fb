"""Tavily Extract API page fetcher.

Retrieves the main content of a single URL through Tavily's extraction
endpoint, so no HTML parsing happens locally.

Tavily Extract API documentation: https://docs.tavily.com/documentation/api-reference/endpoint/extract

URLs are validated before the request: only http/https with a public
hostname are accepted.

Example usage:
    fetcher = TavilyPageFetcher(api_key="tvly-...")
    page = await fetcher.fetch_page("https://example.com/article")
"""

import ipaddress
import logging
import os
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from deep_report.core.errors.search import (
    AuthenticationError,
    PageFetchError,
    RateLimitError,
    SearchProviderError,
)
from deep_report.core.providers.shared import (
    extract_domain,
    extract_error_message,
    parse_retry_after,
)
from deep_report.core.research.providers.base import PageContent, PageFetcher

logger = logging.getLogger(__name__)

# Tavily API constants
TAVILY_API_BASE_URL = "https://api.tavily.com"
TAVILY_EXTRACT_ENDPOINT = "/extract"
DEFAULT_TIMEOUT = 30.0
VALID_EXTRACT_DEPTHS = frozenset(["basic", "advanced"])

# Content limits
MAX_URL_LENGTH = 2048
MAX_CONTENT_SIZE = 200_000

BLOCKED_HOSTS = frozenset(["localhost", "localhost.localdomain", "0.0.0.0"])


def validate_page_url(url: str) -> None:
    """Reject URLs that are malformed or point at local/private hosts.

    Raises:
        PageFetchError: If the URL is not a public http(s) URL
    """
    if len(url) > MAX_URL_LENGTH:
        raise PageFetchError("tavily_extract", url[:80], f"URL too long ({len(url)} chars)")

    try:
        parsed = urlparse(url)
        hostname = (parsed.hostname or "").lower()
    except ValueError as exc:
        raise PageFetchError("tavily_extract", url, f"Malformed URL: {exc}", original_error=exc) from exc

    if parsed.scheme not in ("http", "https"):
        raise PageFetchError("tavily_extract", url, f"Invalid scheme {parsed.scheme!r}")

    if not hostname:
        raise PageFetchError("tavily_extract", url, "No hostname in URL")
    if hostname in BLOCKED_HOSTS or hostname.endswith((".local", ".internal")):
        raise PageFetchError("tavily_extract", url, "Blocked host")

    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return
    if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved:
        raise PageFetchError("tavily_extract", url, "Blocked private IP address")


class TavilyPageFetcher(PageFetcher):
    """Page fetcher backed by Tavily Extract.

    Attributes:
        api_key: Tavily API key (falls back to TAVILY_API_KEY)
        extract_depth: "basic" or "advanced"
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        extract_depth: str = "basic",
        base_url: str = TAVILY_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key or os.environ.get("TAVILY_API_KEY")
        if not self._api_key:
            raise ValueError(
                "Tavily API key required. Provide via api_key parameter or TAVILY_API_KEY environment variable."
            )
        if extract_depth not in VALID_EXTRACT_DEPTHS:
            raise ValueError(
                f"Invalid extract_depth: {extract_depth!r}. Must be one of: {sorted(VALID_EXTRACT_DEPTHS)}"
            )
        self._extract_depth = extract_depth
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def get_provider_name(self) -> str:
        return "tavily_extract"

    async def fetch_page(self, url: str) -> PageContent:
        """Extract the main content of ``url``.

        Raises:
            PageFetchError: If the URL is rejected, extraction failed, or the
                page has no content
            AuthenticationError: If the API key is invalid
            RateLimitError: If the rate limit is exceeded
            SearchProviderError: For other API errors
        """
        validate_page_url(url)
        logger.info("Reading page: %s", url)

        payload: dict[str, Any] = {
            "api_key": self._api_key,
            "urls": [url],
            "extract_depth": self._extract_depth,
            "format": "markdown",
        }
        endpoint = f"{self._base_url}{TAVILY_EXTRACT_ENDPOINT}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(endpoint, json=payload)
        except httpx.TimeoutException as exc:
            raise PageFetchError(
                self.get_provider_name(), url, "Request timed out", retryable=True, original_error=exc
            ) from exc
        except httpx.HTTPError as exc:
            raise PageFetchError(
                self.get_provider_name(), url, f"Request failed: {exc}", retryable=True, original_error=exc
            ) from exc

        if response.status_code == 401:
            raise AuthenticationError(provider="tavily_extract", message="Invalid API key")
        if response.status_code == 429:
            raise RateLimitError(provider="tavily_extract", retry_after=parse_retry_after(response))
        if response.status_code >= 400:
            raise SearchProviderError(
                provider="tavily_extract",
                message=f"API error {response.status_code}: {extract_error_message(response)}",
                retryable=response.status_code >= 500,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise PageFetchError(
                self.get_provider_name(), url, "Response was not valid JSON", retryable=True, original_error=exc
            ) from exc
        if not isinstance(data, dict):
            raise PageFetchError(self.get_provider_name(), url, f"Unexpected response type {type(data).__name__}")
        return self._parse_response(data, url)

    def _parse_response(self, data: dict[str, Any], url: str) -> PageContent:
        """Build PageContent from the first extract result.

        Tavily returns ``{"results": [{"url", "raw_content", "title"?}],
        "failed_results": [{"url", "error"}]}``.
        """
        results = data.get("results") or []
        if not results:
            failed = data.get("failed_results") or []
            reason = failed[0].get("error") if failed and isinstance(failed[0], dict) else None
            raise PageFetchError(self.get_provider_name(), url, reason or "No content extracted")

        result = results[0]
        content = result.get("raw_content") or ""
        if not content.strip():
            raise PageFetchError(self.get_provider_name(), url, "Empty page content")
        if len(content) > MAX_CONTENT_SIZE:
            content = content[:MAX_CONTENT_SIZE]

        page_url = result.get("url") or url
        title = result.get("title") or extract_domain(page_url) or page_url
        return PageContent(title=title, content=content, url=page_url)
