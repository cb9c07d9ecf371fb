"""Run a report or task-plan workflow for a query."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

import click

from deep_report.cli.output import emit_error, emit_success
from deep_report.config import ReportSettings
from deep_report.core.concurrency import Deadline
from deep_report.core.errors import (
    ChapterParseError,
    ProviderError,
    SearchProviderError,
    WorkflowError,
    WorkflowTimeoutError,
)
from deep_report.core.providers import GuardedGenerator, OpenAICompatibleGenerator, TextGenerator
from deep_report.core.research.models import ReportResult, TaskPlanResult, WorkflowType
from deep_report.core.research.providers import SerpApiSearchProvider, TavilyPageFetcher
from deep_report.core.research.providers.base import PageFetcher, SearchProvider
from deep_report.core.research.workflows.base import ResearchWorkflowBase
from deep_report.core.research.workflows.report import AuditTrail, ReportWorkflow, build_researcher
from deep_report.core.research.workflows.task_plan import TaskPlanWorkflow

logger = logging.getLogger(__name__)

WorkflowResult = Union[ReportResult, TaskPlanResult]


def build_generator(settings: ReportSettings, deadline: Deadline) -> TextGenerator:
    """Create the guarded chat generator for one run.

    Raises:
        ProviderUnavailableError: If no API key is configured
    """
    wf = settings.workflow
    prov = settings.providers
    inner = OpenAICompatibleGenerator(
        api_key=prov.api_key,
        base_url=prov.base_url,
        model=prov.model,
        timeout=wf.call_timeout,
    )
    return GuardedGenerator(
        inner,
        deadline=deadline,
        call_timeout=wf.call_timeout,
        max_retries=wf.max_call_retries,
        retry_delay=wf.retry_delay,
    )


def build_web_providers(settings: ReportSettings) -> tuple[Optional[SearchProvider], Optional[PageFetcher]]:
    """Create search and page-fetch providers, or (None, None) without keys."""
    prov = settings.providers
    try:
        search = SerpApiSearchProvider(
            prov.serpapi_key,
            engine=prov.search_engine,
            location=prov.search_location,
            domain=prov.search_domain,
            country=prov.search_country,
            language=prov.search_language,
            num_results=prov.search_num_results,
        )
        fetcher = TavilyPageFetcher(prov.tavily_api_key)
    except ValueError as exc:
        logger.warning("Web research disabled: %s", exc)
        return None, None
    return search, fetcher


def build_workflow(
    settings: ReportSettings,
    workflow_type: WorkflowType,
    *,
    research: bool = True,
    deadline: Optional[Deadline] = None,
) -> ResearchWorkflowBase:
    """Assemble the chosen workflow and its collaborators from settings."""
    wf = settings.workflow
    deadline = deadline or Deadline(timeout=wf.workflow_timeout)
    generator = build_generator(settings, deadline)
    audit = AuditTrail(settings.workspace_dir, enabled=settings.audit_enabled)

    search: Optional[SearchProvider] = None
    fetcher: Optional[PageFetcher] = None
    if research and wf.research_enabled:
        search, fetcher = build_web_providers(settings)

    if workflow_type is WorkflowType.TASK_PLAN:
        return TaskPlanWorkflow(wf, generator, audit, search, fetcher, deadline=deadline)

    researcher = build_researcher(
        search,
        fetcher,
        results=wf.research_results,
        pages=wf.research_pages,
        width=wf.link_width,
        excerpt_chars=wf.page_excerpt_chars,
        cooldown=wf.batch_cooldown,
    )
    return ReportWorkflow(wf, generator, audit, researcher, deadline=deadline)


def _error_code(exc: Exception) -> str:
    if isinstance(exc, WorkflowTimeoutError):
        return "WORKFLOW_TIMEOUT"
    if isinstance(exc, ChapterParseError):
        return "CHAPTER_PARSE_ERROR"
    if isinstance(exc, SearchProviderError):
        return "SEARCH_PROVIDER_ERROR"
    if isinstance(exc, ProviderError):
        return "PROVIDER_ERROR"
    return "WORKFLOW_ERROR"


def _summary(result: WorkflowResult) -> dict:
    if isinstance(result, ReportResult):
        return {
            "chapters": [c.number for c in result.contents],
            "exhausted_chapters": [c.number for c in result.contents if c.exhausted],
            "forced_chapters": [c.number for c in result.contents if c.forced_acceptance],
            "phases": {
                name: {
                    "attempts": phase.attempts,
                    "exhausted": phase.exhausted,
                    "forced_acceptance": phase.forced_acceptance,
                }
                for name, phase in result.phases.items()
            },
        }
    return dict(result.metadata)


@click.command("run")
@click.argument("query")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="TOML config file (disables config discovery).",
)
@click.option("--workspace", type=click.Path(file_okay=False), help="Directory for audit files.")
@click.option("--max-attempts", type=click.IntRange(min=1), help="Attempts per phase loop.")
@click.option("--timeout", type=click.FloatRange(min=0), help="Workflow deadline in seconds (0 disables).")
@click.option(
    "--workflow",
    "workflow_name",
    type=click.Choice([w.value for w in WorkflowType], case_sensitive=False),
    default=WorkflowType.REPORT.value,
    show_default=True,
    help="Pipeline to run.",
)
@click.option("--no-research", is_flag=True, help="Skip web search and page fetching.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Also write the report to this file.")
def run_cmd(
    query: str,
    config_file: Optional[str],
    workspace: Optional[str],
    max_attempts: Optional[int],
    timeout: Optional[float],
    workflow_name: str,
    no_research: bool,
    output: Optional[str],
) -> None:
    """Research QUERY and print the resulting report."""
    try:
        settings = ReportSettings.from_env(config_file)
    except ValueError as exc:
        emit_error(str(exc), code="CONFIG_ERROR", error_type="validation")

    if workspace:
        settings.workspace_dir = Path(workspace).expanduser()
    if max_attempts is not None:
        settings.workflow.max_attempts = max_attempts
    if timeout is not None:
        settings.workflow.workflow_timeout = timeout or None
    settings.setup_logging()

    workflow_type = WorkflowType(workflow_name.lower())
    try:
        workflow = build_workflow(settings, workflow_type, research=not no_research)
        result = asyncio.run(workflow.run(query))
    except (ProviderError, SearchProviderError, WorkflowError) as exc:
        logger.error("%s workflow failed: %s", workflow_type.value, exc)
        emit_error(
            str(exc),
            code=_error_code(exc),
            error_type=type(exc).__name__,
            details={"workspace": str(settings.workspace_dir)},
        )

    if output:
        Path(output).write_text(result.report, encoding="utf-8")

    emit_success(
        {
            "workflow": workflow_type.value,
            "query": query,
            "workspace": str(settings.workspace_dir),
            "output_file": output,
            "duration_ms": round(result.duration_ms, 1),
            "summary": _summary(result),
            "report": result.report,
        }
    )
