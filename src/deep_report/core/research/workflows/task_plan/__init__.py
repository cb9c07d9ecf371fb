"""Task-plan research workflow package."""

from deep_report.core.research.workflows.task_plan.markdown_lists import (
    check_task,
    extract_research_items,
    extract_url,
    parse_search_pages,
)
from deep_report.core.research.workflows.task_plan.workflow import TaskPlanWorkflow

__all__ = [
    "TaskPlanWorkflow",
    "check_task",
    "extract_research_items",
    "extract_url",
    "parse_search_pages",
]
