"""Web research notes for chapter content prompts.

For each chapter the researcher runs one search, fetches the top pages and
renders a compact notes block (title, URL, excerpt) that is appended to the
chapter's seed prompt.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from deep_report.core.concurrency import DEFAULT_COOLDOWN, run_batched
from deep_report.core.errors.search import PageFetchError, SearchProviderError
from deep_report.core.research.models import Chapter
from deep_report.core.research.providers.base import (
    OrganicResult,
    PageContent,
    PageFetcher,
    SearchProvider,
)

logger = logging.getLogger(__name__)


class ChapterResearcher:
    """Gather research notes for a chapter from search + page fetch.

    Args:
        search: Web search provider
        fetcher: Page retrieval provider
        results: Search results requested per chapter
        pages: Number of top results fetched
        width: Concurrent page fetches
        excerpt_chars: Characters kept from each page
        cooldown: Seconds between fetch batches
    """

    def __init__(
        self,
        search: SearchProvider,
        fetcher: PageFetcher,
        *,
        results: int = 5,
        pages: int = 3,
        width: int = 3,
        excerpt_chars: int = 4000,
        cooldown: float = DEFAULT_COOLDOWN,
    ):
        self.search = search
        self.fetcher = fetcher
        self.results = results
        self.pages = pages
        self.width = width
        self.excerpt_chars = excerpt_chars
        self.cooldown = cooldown

    @staticmethod
    def query_for(chapter: Chapter) -> str:
        return f"{chapter.title} {chapter.description}".strip()

    async def _fetch(self, hit: OrganicResult) -> Union[PageContent, PageFetchError]:
        try:
            return await self.fetcher.fetch_page(hit.link)
        except PageFetchError as exc:
            logger.warning("Skipping page %s: %s", hit.link, exc)
            return exc
        except SearchProviderError as exc:
            logger.warning("Page fetch for %s failed: %s", hit.link, exc)
            return PageFetchError(exc.provider, hit.link, exc.message, original_error=exc)

    def render(self, hits: list[OrganicResult], pages: list[Union[PageContent, PageFetchError]]) -> str:
        blocks = []
        for hit, page in zip(hits, pages):
            if isinstance(page, PageFetchError):
                blocks.append(f"### {hit.title}\nURL: {hit.link}\n(fetch failed: {page})")
                continue
            excerpt = page.content[: self.excerpt_chars].strip()
            blocks.append(f"### {page.title or hit.title}\nURL: {page.url}\n\n{excerpt}")
        return "\n\n".join(blocks)

    async def notes_for(self, chapter: Chapter) -> str:
        """Return rendered research notes for ``chapter``.

        A failed search yields ``""`` so the chapter is written without
        notes; a failed page is listed in the notes with its error.
        """
        query = self.query_for(chapter)
        try:
            hits = await self.search.search(query, max_results=self.results)
        except SearchProviderError as exc:
            logger.warning("Chapter %d: search for %r failed: %s", chapter.number, query, exc)
            return ""

        hits = hits[: self.pages]
        if not hits:
            return ""
        logger.debug("Chapter %d: fetching %d pages", chapter.number, len(hits))
        pages = await run_batched(hits, self.width, self._fetch, cooldown=self.cooldown)
        return self.render(hits, pages)


def build_researcher(
    search: Optional[SearchProvider],
    fetcher: Optional[PageFetcher],
    **options,
) -> Optional[ChapterResearcher]:
    """Return a researcher when both providers are available, else None."""
    if search is None or fetcher is None:
        return None
    return ChapterResearcher(search, fetcher, **options)
