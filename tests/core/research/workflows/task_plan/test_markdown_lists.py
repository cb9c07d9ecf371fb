"""Tests for task plan and search list markdown parsing."""

import pytest

from deep_report.core.research.models import ResearchItem, SearchPage
from deep_report.core.research.workflows.task_plan.markdown_lists import (
    check_task,
    extract_research_items,
    extract_url,
    parse_search_pages,
)


class TestExtractResearchItems:
    def test_extracts_items_until_next_heading(self):
        markdown = """
# Website Research
[ ] 1. First research topic
[ ] 2. Second research topic
[ ]    3. Topic with spaces
# Another Section
[ ] 4. Not a research item
"""
        assert extract_research_items(markdown) == [
            ResearchItem(number=1, topic="First research topic"),
            ResearchItem(number=2, topic="Second research topic"),
            ResearchItem(number=3, topic="Topic with spaces"),
        ]

    def test_missing_section(self):
        markdown = """
# Some Other Section
[ ] 1. First research topic
"""
        assert extract_research_items(markdown) == []

    def test_section_without_items(self):
        markdown = """
# Website Research
No items here
# Another Section
"""
        assert extract_research_items(markdown) == []

    def test_checked_items_are_skipped(self):
        markdown = "# Website Research\n[x] 1. Done already\n[ ] 2. Still open\n"
        assert [item.number for item in extract_research_items(markdown)] == [2]

    def test_section_at_end_of_document(self):
        items = extract_research_items("# Website Research\n[ ] 7. Last topic")
        assert items == [ResearchItem(number=7, topic="Last topic")]


class TestCheckTask:
    def test_marks_matching_task(self):
        markdown = """
[ ] 1. First task
[ ] 2. Task to complete
[ ] 3. Another task
"""
        expected = """
[x] 1. First task
[ ] 2. Task to complete
[ ] 3. Another task
"""
        assert check_task(markdown, "First task") == expected

    def test_already_completed_task_is_unchanged(self):
        markdown = """
[x] 1. Already complete
[ ] 2. Task to complete
"""
        assert check_task(markdown, "Already complete") == markdown

    def test_unknown_task_is_unchanged(self):
        markdown = """
[ ] 1. First task
[ ] 2. Second task
"""
        assert check_task(markdown, "Non-existent task") == markdown

    def test_topic_with_regex_characters(self):
        markdown = "[ ] 1. C++ (and C#) tooling?\n"
        assert check_task(markdown, "C++ (and C#) tooling?") == "[x] 1. C++ (and C#) tooling?\n"


class TestParseSearchPages:
    def test_parses_topics_and_queries(self):
        search_list = """
# Research Topic Intermittent fasting
Some description about intermittent fasting

# Pages
More info about pages

### Search query: intermittent fasting benefits
- [ ] https://example.com/article1
- [ ] https://example.com/article2

### Search query: intermittent fasting methods
- [ ] https://example.com/article3
- [ ] https://example.com/article4

# Research Topic Another topic
Another topic description

# Pages
More info about another topic

### Search query: another topic search
- [ ] https://example.com/article5
- [ ] https://example.com/article6
"""
        fasting = "Intermittent fasting\nSome description about intermittent fasting"
        assert parse_search_pages(search_list) == [
            SearchPage(
                topic=fasting,
                description="More info about pages",
                query="intermittent fasting benefits",
                links=["https://example.com/article1", "https://example.com/article2"],
            ),
            SearchPage(
                topic=fasting,
                description="More info about pages",
                query="intermittent fasting methods",
                links=["https://example.com/article3", "https://example.com/article4"],
            ),
            SearchPage(
                topic="Another topic\nAnother topic description",
                description="More info about another topic",
                query="another topic search",
                links=["https://example.com/article5", "https://example.com/article6"],
            ),
        ]

    def test_empty_search_list(self):
        assert parse_search_pages("") == []

    def test_query_without_links(self):
        search_list = """
# Research Topic Empty topic
Empty description

# Pages
No links here

### Search query: empty search
"""
        assert parse_search_pages(search_list) == [
            SearchPage(
                topic="Empty topic\nEmpty description",
                description="No links here",
                query="empty search",
                links=[],
            )
        ]

    def test_titled_link_bullets_are_kept_verbatim(self):
        search_list = (
            "# Research Topic Solar\n# Pages\n"
            "### Search query: solar cost\n"
            "- [ ] [IEA report](https://iea.example/solar) - 2024 figures\n"
        )
        pages = parse_search_pages(search_list)
        assert pages[0].links == ["[IEA report](https://iea.example/solar) - 2024 figures"]
        assert pages[0].description == ""


class TestExtractUrl:
    @pytest.mark.parametrize(
        "link,expected",
        [
            ("https://example.com/article1", "https://example.com/article1"),
            ("[IEA report](https://iea.example/solar) - 2024 figures", "https://iea.example/solar"),
            ("<http://example.org/a?b=1>", "http://example.org/a?b=1"),
            ("no url here", None),
        ],
    )
    def test_extract_url(self, link, expected):
        assert extract_url(link) == expected
