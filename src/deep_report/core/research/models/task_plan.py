"""Models for the task-plan research workflow."""

from dataclasses import dataclass, field

from pydantic import BaseModel, Field


class ResearchItem(BaseModel):
    """A ``[ ] N. topic`` line from the task plan's Website Research section."""

    number: int = Field(..., description="Research item number")
    topic: str = Field(..., description="Topic of the research item")
    description: str = Field(default="", description="Description of the research item")


class SearchPage(BaseModel):
    """One search query block of a search list, with its candidate links."""

    topic: str
    description: str = ""
    query: str
    links: list[str] = Field(default_factory=list)


@dataclass
class TaskPlanResult:
    query: str
    task_plan: str
    items: list[ResearchItem]
    search_list: str
    pages: list[SearchPage]
    summaries: str
    report: str
    duration_ms: float = 0.0
    metadata: dict = field(default_factory=dict)
