"""Web search and page-fetch providers for research workflows."""

from deep_report.core.research.providers.base import (
    OrganicResult,
    PageContent,
    PageFetcher,
    SearchProvider,
)
from deep_report.core.research.providers.serpapi import SerpApiSearchProvider
from deep_report.core.research.providers.tavily_extract import (
    TavilyPageFetcher,
    validate_page_url,
)

__all__ = [
    "OrganicResult",
    "PageContent",
    "PageFetcher",
    "SearchProvider",
    "SerpApiSearchProvider",
    "TavilyPageFetcher",
    "validate_page_url",
]
