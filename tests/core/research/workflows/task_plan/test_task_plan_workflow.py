"""Tests for TaskPlanWorkflow with scripted generator and web stubs."""

from typing import Any

import pytest

from deep_report.config.workflow import WorkflowConfig
from deep_report.core.errors.search import PageFetchError, SearchProviderError
from deep_report.core.providers.base import GenerationRequest
from deep_report.core.research.providers.base import OrganicResult, PageContent, PageFetcher, SearchProvider
from deep_report.core.research.workflows.task_plan import prompts
from deep_report.core.research.workflows.task_plan.workflow import (
    FINAL_OUTPUT_STREAM,
    RESEARCH_OUTPUT_STREAM,
    SEARCH_LIST_STREAM,
    TASK_PLAN_STREAM,
    TaskPlanWorkflow,
)

TASK_PLAN = """# Task plan
## Goal
Compare renewable energy sources.

# Website Research
[ ] 1. Solar costs
[ ] 2. Wind capacity

# Analyze the research output
Write the comparison.
"""


def topic_of(request: GenerationRequest) -> str:
    return request.prompt.splitlines()[0].replace("Research topic: ", "")


def search_list_for(topic: str) -> str:
    slug = topic.lower().replace(" ", "-")
    return (
        f"# Research Topic {topic}\n\n# Pages\nOverview of {topic}\n\n"
        f"### Search query: {topic} statistics\n"
        f"- [ ] [Source A](https://a.example/{slug})\n"
        f"- [ ] https://b.example/{slug}\n"
    )


def respond(request: GenerationRequest) -> str:
    system = request.system_prompt
    if system == prompts.TASK_PLANNER_SYSTEM_PROMPT:
        return TASK_PLAN
    if system == prompts.SEARCH_LIST_SYSTEM_PROMPT:
        return search_list_for(topic_of(request))
    if system == prompts.PAGE_SUMMARY_SYSTEM_PROMPT:
        url = [line for line in request.prompt.splitlines() if line.startswith("Page URL: ")][0]
        return f"Summary of {url[len('Page URL: '):]}"
    if system == prompts.TOPIC_SUMMARY_SYSTEM_PROMPT:
        return f"Topic summary: {request.prompt.splitlines()[0]}"
    if system == prompts.FINALIZE_SYSTEM_PROMPT:
        return "# Final output"
    raise AssertionError(f"unexpected system prompt: {system!r}")


class StubSearch(SearchProvider):
    def __init__(self, error=None):
        self.error = error
        self.queries = []

    def get_provider_name(self) -> str:
        return "stub-search"

    async def search(self, query: str, max_results: int = 10, **kwargs: Any) -> list[OrganicResult]:
        self.queries.append((query, max_results))
        if self.error:
            raise self.error
        return [OrganicResult(title=f"{query} hit", link="https://hit.example/1", snippet="snippet text")]


class StubFetcher(PageFetcher):
    def __init__(self, fail=()):
        self.fail = set(fail)
        self.urls = []

    def get_provider_name(self) -> str:
        return "stub-fetch"

    async def fetch_page(self, url: str) -> PageContent:
        self.urls.append(url)
        if url in self.fail:
            raise PageFetchError("stub-fetch", url, "No content")
        return PageContent(title="Page", content="0123456789" * 10, url=url)


def requests_for(generator, system_prompt):
    return [r for r in generator.requests if r.system_prompt == system_prompt]


class TestTaskPlanWorkflow:
    @pytest.mark.asyncio
    async def test_full_run(self, make_generator, audit, fast_config):
        generator = make_generator(respond)

        result = await TaskPlanWorkflow(fast_config, generator, audit).run("Compare solar and wind")

        assert [item.topic for item in result.items] == ["Solar costs", "Wind capacity"]
        assert [page.query for page in result.pages] == ["Solar costs statistics", "Wind capacity statistics"]
        assert result.metadata == {"items": 2, "queries": 2, "links": 4}
        assert result.report == "# Final output"
        assert "[x] 1. Solar costs" in result.task_plan
        assert "[x] 2. Wind capacity" in result.task_plan

        assert audit.streams[TASK_PLAN_STREAM] == result.task_plan
        assert audit.streams[SEARCH_LIST_STREAM] == result.search_list
        assert audit.streams[RESEARCH_OUTPUT_STREAM] == result.summaries
        assert audit.streams[FINAL_OUTPUT_STREAM] == "# Final output"
        assert audit.streams["Solar_costs.md"].startswith("Topic summary: # Research Topic: Solar costs")
        assert audit.event_types() == ["workflow.started", "workflow.completed"]

    @pytest.mark.asyncio
    async def test_every_link_is_summarized(self, make_generator, audit, fast_config):
        generator = make_generator(respond)

        result = await TaskPlanWorkflow(fast_config, generator, audit).run("query")

        summaries = requests_for(generator, prompts.PAGE_SUMMARY_SYSTEM_PROMPT)
        urls = sorted(line for r in summaries for line in r.prompt.splitlines() if line.startswith("Page URL: "))
        assert urls == [
            "Page URL: https://a.example/solar-costs",
            "Page URL: https://a.example/wind-capacity",
            "Page URL: https://b.example/solar-costs",
            "Page URL: https://b.example/wind-capacity",
        ]
        topic_prompts = [r.prompt for r in requests_for(generator, prompts.TOPIC_SUMMARY_SYSTEM_PROMPT)]
        assert any("Summary of https://a.example/solar-costs" in p for p in topic_prompts)
        assert result.summaries.count("Topic summary:") == 2

    @pytest.mark.asyncio
    async def test_finalize_prompt_combines_inputs(self, make_generator, audit, fast_config):
        generator = make_generator(respond)

        result = await TaskPlanWorkflow(fast_config, generator, audit).run("Compare solar and wind")

        final = requests_for(generator, prompts.FINALIZE_SYSTEM_PROMPT)[0].prompt
        assert final == prompts.finalize_prompt("Compare solar and wind", result.task_plan, result.summaries)
        assert "## User query:\nCompare solar and wind" in final

    @pytest.mark.asyncio
    async def test_search_results_seed_search_lists(self, make_generator, audit, fast_config):
        generator = make_generator(respond)
        search = StubSearch()

        await TaskPlanWorkflow(fast_config, generator, audit, search=search).run("query")

        assert sorted(q for q, _ in search.queries) == ["Solar costs", "Wind capacity"]
        assert all(n == fast_config.research_results for _, n in search.queries)
        search_prompts = [r.prompt for r in requests_for(generator, prompts.SEARCH_LIST_SYSTEM_PROMPT)]
        assert any("- [Solar costs hit](https://hit.example/1) - snippet text" in p for p in search_prompts)

    @pytest.mark.asyncio
    async def test_search_failure_falls_back_to_generator(self, make_generator, audit, fast_config):
        generator = make_generator(respond)
        search = StubSearch(error=SearchProviderError("stub-search", "quota exhausted"))

        result = await TaskPlanWorkflow(fast_config, generator, audit, search=search).run("query")

        assert result.metadata["queries"] == 2
        prompt = requests_for(generator, prompts.SEARCH_LIST_SYSTEM_PROMPT)[0].prompt
        assert "Search results you may choose from" not in prompt

    @pytest.mark.asyncio
    async def test_fetched_content_feeds_page_summaries(self, make_generator, audit):
        config = WorkflowConfig(batch_cooldown=0.0, workflow_timeout=None, page_excerpt_chars=15)
        generator = make_generator(respond)
        fetcher = StubFetcher(fail={"https://b.example/solar-costs"})

        await TaskPlanWorkflow(config, generator, audit, fetcher=fetcher).run("query")

        assert len(fetcher.urls) == 4
        by_url = {
            line: r.prompt
            for r in requests_for(generator, prompts.PAGE_SUMMARY_SYSTEM_PROMPT)
            for line in r.prompt.splitlines()
            if line.startswith("Page URL: ")
        }
        assert by_url["Page URL: https://a.example/solar-costs"].endswith("Page content:\n\n012345678901234")
        assert "Page content" not in by_url["Page URL: https://b.example/solar-costs"]

    @pytest.mark.asyncio
    async def test_plan_without_research_section(self, make_generator, audit, fast_config):
        def no_items(request):
            if request.system_prompt == prompts.TASK_PLANNER_SYSTEM_PROMPT:
                return "# Task plan\nNothing to look up."
            return respond(request)

        generator = make_generator(no_items)

        result = await TaskPlanWorkflow(fast_config, generator, audit).run("query")

        assert result.items == []
        assert result.pages == []
        assert result.metadata == {"items": 0, "queries": 0, "links": 0}
        assert result.report == "# Final output"
        assert not requests_for(generator, prompts.SEARCH_LIST_SYSTEM_PROMPT)
