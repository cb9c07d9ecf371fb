"""Task plan -> search list -> page summaries -> final output workflow.

A single-pass pipeline without critique loops:

1. The planner writes a markdown task plan (``taskplan.md``).
2. Open items of its Website Research section become research items.
3. Each item gets a search list of queries and candidate pages
   (``search_list.md``).
4. Each search query block is researched: every linked page is fetched and
   summarized, then the page summaries are merged into a topic summary
   (appended to ``<topic>.md``; all topics in ``deep_research_output.md``).
5. The finalizer synthesizes the query, plan and summaries
   (``final_output.md``).
"""

import logging
import time
from typing import Optional

from deep_report.config.workflow import WorkflowConfig
from deep_report.core.concurrency import Deadline, run_batched
from deep_report.core.errors.search import SearchProviderError
from deep_report.core.providers.base import TextGenerator
from deep_report.core.research.models import ResearchItem, SearchPage, TaskPlanResult
from deep_report.core.research.providers.base import PageFetcher, SearchProvider
from deep_report.core.research.workflows.base import AuditSink, ResearchWorkflowBase
from deep_report.core.research.workflows.report.audit import stream_name_for
from deep_report.core.research.workflows.report.roles import generate_text
from deep_report.core.research.workflows.task_plan import prompts
from deep_report.core.research.workflows.task_plan.markdown_lists import (
    check_task,
    extract_research_items,
    extract_url,
    parse_search_pages,
)

logger = logging.getLogger(__name__)

TASK_PLAN_STREAM = "taskplan.md"
SEARCH_LIST_STREAM = "search_list.md"
RESEARCH_OUTPUT_STREAM = "deep_research_output.md"
FINAL_OUTPUT_STREAM = "final_output.md"


class TaskPlanWorkflow(ResearchWorkflowBase[TaskPlanResult]):
    """Research a query by planning tasks and summarizing web pages.

    Args:
        config: Batch widths, cooldown and deadline
        generator: Backend for every generation call
        audit: Audit sink for output files and events
        search: Optional search provider; its results seed the search lists
        fetcher: Optional page fetcher; fetched content feeds page summaries
        deadline: Shared run budget
    """

    name = "task-plan"

    def __init__(
        self,
        config: WorkflowConfig,
        generator: TextGenerator,
        audit: Optional[AuditSink] = None,
        search: Optional[SearchProvider] = None,
        fetcher: Optional[PageFetcher] = None,
        *,
        deadline: Optional[Deadline] = None,
    ) -> None:
        super().__init__(config, generator, audit, deadline=deadline)
        self.search = search
        self.fetcher = fetcher

    async def _candidates(self, item: ResearchItem) -> str:
        if self.search is None:
            return ""
        try:
            hits = await self.search.search(item.topic, max_results=self.config.research_results)
        except SearchProviderError as exc:
            logger.warning("Search for research item %d failed: %s", item.number, exc)
            return ""
        lines = []
        for hit in hits:
            line = f"- [{hit.title}]({hit.link})"
            if hit.snippet:
                line += f" - {hit.snippet}"
            lines.append(line)
        return "\n".join(lines)

    async def _search_list_for(self, item: ResearchItem) -> str:
        candidates = await self._candidates(item)
        text = await generate_text(
            self.generator,
            prompts.search_list_prompt(item.topic, item.description, candidates),
            prompts.SEARCH_LIST_SYSTEM_PROMPT,
        )
        logger.info("Search list generated for research item %d: %s", item.number, item.topic)
        return text

    async def _summarize_link(self, page: SearchPage, link: str) -> str:
        url = extract_url(link)
        page_text = None
        if url and self.fetcher is not None:
            try:
                content = await self.fetcher.fetch_page(url)
                page_text = content.content[: self.config.page_excerpt_chars]
            except SearchProviderError as exc:
                logger.warning("Summarizing %s without page content: %s", url, exc)
        return await generate_text(
            self.generator,
            prompts.page_summary_prompt(page.topic, page.description, url or link, page_text),
            prompts.PAGE_SUMMARY_SYSTEM_PROMPT,
        )

    async def _research_page(self, page: SearchPage) -> str:
        async def summarize(link: str) -> str:
            return await self._summarize_link(page, link)

        summaries = await run_batched(
            page.links, self.config.link_width, summarize, cooldown=self.config.batch_cooldown
        )
        research = prompts.topic_research_header(page.topic, page.description, page.query)
        research += "\n\n".join(summaries)

        topic_summary = await generate_text(self.generator, research, prompts.TOPIC_SUMMARY_SYSTEM_PROMPT)
        self._append(topic_summary, stream_name_for(page.topic))
        logger.info("Topic summary written for query %r (%d pages)", page.query, len(page.links))
        return topic_summary

    async def _run(self, query: str) -> TaskPlanResult:
        cfg = self.config
        start = time.perf_counter()

        self._current_phase = "task-plan"
        task_plan = await generate_text(self.generator, query, prompts.TASK_PLANNER_SYSTEM_PROMPT)
        self._write(task_plan, TASK_PLAN_STREAM)
        items = extract_research_items(task_plan)
        logger.info("Extracted %d research items", len(items))

        self._current_phase = "search-list"
        search_lists = await run_batched(items, cfg.chapter_width, self._search_list_for, cooldown=cfg.batch_cooldown)
        search_list = "\n\n".join(search_lists)
        self._write(search_list, SEARCH_LIST_STREAM)
        for item in items:
            task_plan = check_task(task_plan, item.topic)
        self._write(task_plan, TASK_PLAN_STREAM)

        self._current_phase = "page-research"
        pages = parse_search_pages(search_list)
        logger.info("Parsed %d search query blocks", len(pages))
        topic_summaries = await run_batched(pages, cfg.topic_width, self._research_page, cooldown=cfg.batch_cooldown)
        summaries = "\n\n".join(topic_summaries)
        self._write(summaries, RESEARCH_OUTPUT_STREAM)

        self._current_phase = "finalize"
        report = await generate_text(
            self.generator,
            prompts.finalize_prompt(query, task_plan, summaries),
            prompts.FINALIZE_SYSTEM_PROMPT,
        )
        self._write(report, FINAL_OUTPUT_STREAM)
        self._current_phase = None

        duration_ms = (time.perf_counter() - start) * 1000
        metadata = {
            "items": len(items),
            "queries": len(pages),
            "links": sum(len(page.links) for page in pages),
        }
        self._record("workflow.completed", {"workflow": self.name, "duration_ms": duration_ms, **metadata})
        logger.info("Task-plan workflow completed in %.0fms", duration_ms)
        return TaskPlanResult(
            query=query,
            task_plan=task_plan,
            items=items,
            search_list=search_list,
            pages=pages,
            summaries=summaries,
            report=report,
            duration_ms=duration_ms,
            metadata=metadata,
        )
