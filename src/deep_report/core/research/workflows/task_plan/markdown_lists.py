"""Parsers for the checkbox-list markdown produced by the task-plan agents.

Task plans look like::

    # Website Research
    [ ] 1. First topic
    [ ] 2. Second topic
    # Analyze the research output
    ...

Search lists look like::

    # Research Topic <topic>
    <topic description>
    # Pages
    <overview>
    ### Search query: <query>
    - [ ] <link or titled link>
"""

import logging
import re
from typing import Optional

from deep_report.core.research.models import ResearchItem, SearchPage

logger = logging.getLogger(__name__)

WEBSITE_RESEARCH_HEADING = "# Website Research"
RESEARCH_TOPIC_HEADING = "# Research Topic"
PAGES_HEADING = "# Pages"
SEARCH_QUERY_MARKER = "### Search query:"

_ITEM_PATTERN = re.compile(r"\[\s*\]\s*(\d+)\.\s*(.+)")
_QUERY_PATTERN = re.compile(r"### Search query:\s*(.+)\n([\s\S]*?)(?=\n### |\n#|\Z)")
_BULLET_PATTERN = re.compile(r"- \[ \] (.+)")
_URL_PATTERN = re.compile(r"https?://[^\s)\]>\"']+")


def extract_research_items(markdown: str) -> list[ResearchItem]:
    """Return the ``[ ] N. topic`` items of the Website Research section.

    The section runs from its heading to the next ``#``. A missing section
    yields an empty list.
    """
    start = markdown.find(WEBSITE_RESEARCH_HEADING)
    if start == -1:
        logger.error("Website Research section not found in task plan")
        return []

    end = markdown.find("#", start + 1)
    section = markdown[start:end] if end != -1 else markdown[start:]

    items = [
        ResearchItem(number=int(match.group(1)), topic=match.group(2).strip())
        for match in _ITEM_PATTERN.finditer(section)
    ]
    if not items:
        logger.warning("Website Research section contains no open items")
    return items


def check_task(markdown: str, topic: str) -> str:
    """Mark the first open ``[ ] N. <topic>`` line as done (``[x]``).

    Already checked items and unknown topics leave the text unchanged.
    """
    pattern = re.compile(rf"^(\[\s*\])\s*(\d+\.\s*{re.escape(topic)}.*)", re.MULTILINE)
    return pattern.sub(r"[x] \2", markdown, count=1)


def parse_search_pages(search_list: str) -> list[SearchPage]:
    """Split a search list into one SearchPage per search query block.

    The topic is everything between ``# Research Topic`` and ``# Pages``;
    the description is the text between ``# Pages`` and the first query.
    """
    pages: list[SearchPage] = []
    for section in search_list.split(RESEARCH_TOPIC_HEADING)[1:]:
        header, _, rest = section.partition(PAGES_HEADING)
        topic = header.strip()

        marker = rest.find(SEARCH_QUERY_MARKER)
        description = rest[:marker].strip() if marker != -1 else ""

        for match in _QUERY_PATTERN.finditer(rest):
            links = [bullet.group(1).strip() for bullet in _BULLET_PATTERN.finditer(match.group(2).strip())]
            pages.append(
                SearchPage(
                    topic=topic,
                    description=description,
                    query=match.group(1).strip(),
                    links=links,
                )
            )
    return pages


def extract_url(link: str) -> Optional[str]:
    """Return the first http(s) URL inside a link bullet, if any.

    Bullets may be bare URLs or ``[Title](url) - snippet`` entries.
    """
    match = _URL_PATTERN.search(link)
    return match.group(0) if match else None
