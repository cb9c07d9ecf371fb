"""Abstract base classes for search and page-fetch providers.

The report workflow only needs two capabilities from the web:

    search(query, **options) -> list[OrganicResult]
    fetch_page(url) -> PageContent

Concrete providers wrap HTTP APIs; tests substitute stubs.

Example usage:
    class MySearchProvider(SearchProvider):
        def get_provider_name(self) -> str:
            return "mine"

        async def search(self, query: str, max_results: int = 10, **kwargs: Any) -> list[OrganicResult]:
            ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class OrganicResult:
    """One organic search hit.

    Attributes:
        title: Title or headline of the result
        link: URL of the result
        snippet: Optional text excerpt shown by the engine
    """

    title: str
    link: str
    snippet: Optional[str] = None


@dataclass(frozen=True)
class PageContent:
    """Main content extracted from a web page."""

    title: str
    content: str
    url: str


class SearchProvider(ABC):
    """Abstract base class for web search providers."""

    @abstractmethod
    def get_provider_name(self) -> str: ...

    @abstractmethod
    async def search(
        self,
        query: str,
        max_results: int = 10,
        **kwargs: Any,
    ) -> list[OrganicResult]:
        """Execute a search query.

        Args:
            query: The search query string
            max_results: Maximum number of results to return
            **kwargs: Provider-specific options (engine, location, language...)

        Returns:
            Organic results in engine ranking order

        Raises:
            SearchProviderError: If the search fails
        """
        ...


class PageFetcher(ABC):
    """Abstract base class for page retrieval + main-content extraction."""

    @abstractmethod
    def get_provider_name(self) -> str: ...

    @abstractmethod
    async def fetch_page(self, url: str) -> PageContent:
        """Retrieve a page and return its main content.

        Raises:
            PageFetchError: If the page cannot be retrieved or is empty
            SearchProviderError: For API-level failures
        """
        ...
