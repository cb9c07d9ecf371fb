"""Workflow and provider configuration.

``WorkflowConfig`` holds the knobs of the report and task-plan pipelines
(attempt budget, batch widths, timeouts). ``ProviderSettings`` holds the
endpoints, credentials and search defaults of the external collaborators.
Both are built from TOML sections via ``from_toml_dict``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def _known_keys(cls: type, data: Dict[str, Any], section: str) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - names)
    if unknown:
        logger.warning("Ignoring unknown [%s] keys: %s", section, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in names}


@dataclass
class WorkflowConfig:
    """Configuration for the report workflows.

    Attributes:
        max_attempts: Attempt budget of every generate/critique/judge loop
        chapter_width: Concurrent chapters (and task-plan research items)
        link_width: Concurrent page fetches/summaries per topic or chapter
        topic_width: Concurrent search pages in the task-plan workflow
        batch_cooldown: Seconds between consecutive batches
        call_timeout: Per-call generation timeout in seconds
        workflow_timeout: Wall-clock budget for a whole run in seconds
            (0 or None disables the deadline)
        max_call_retries: Retries per generation call for transient errors
        retry_delay: Base backoff delay between retries in seconds
        research_enabled: Gather web research notes for each chapter
        research_results: Search results requested per chapter
        research_pages: Pages fetched per chapter
        page_excerpt_chars: Characters kept from each fetched page
        content_temperature: Sampling temperature of the content writer
        content_frequency_penalty: Frequency penalty of the content writer
    """

    max_attempts: int = 3
    chapter_width: int = 3
    link_width: int = 3
    topic_width: int = 2
    batch_cooldown: float = 1.0
    call_timeout: float = 300.0
    workflow_timeout: Optional[float] = 3600.0
    max_call_retries: int = 2
    retry_delay: float = 2.0
    research_enabled: bool = True
    research_results: int = 5
    research_pages: int = 3
    page_excerpt_chars: int = 4000
    content_temperature: float = 0.5
    content_frequency_penalty: float = 0.5

    def __post_init__(self) -> None:
        """Validate configuration fields after initialization."""
        for name in ("max_attempts", "chapter_width", "link_width", "topic_width"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"Invalid {name}: {value!r}. Must be an integer >= 1.")
        if self.batch_cooldown < 0:
            raise ValueError(f"Invalid batch_cooldown: {self.batch_cooldown!r}. Must be >= 0.")
        if self.call_timeout <= 0:
            raise ValueError(f"Invalid call_timeout: {self.call_timeout!r}. Must be > 0.")
        if not self.workflow_timeout:
            self.workflow_timeout = None
        elif self.workflow_timeout < 0:
            raise ValueError(f"Invalid workflow_timeout: {self.workflow_timeout!r}. Must be >= 0.")
        if self.max_call_retries < 0:
            raise ValueError(f"Invalid max_call_retries: {self.max_call_retries!r}. Must be >= 0.")
        if self.research_pages < 0 or self.research_results < 0:
            raise ValueError("research_pages and research_results must be >= 0.")

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "WorkflowConfig":
        """Create config from a TOML dict (the ``[workflow]`` section)."""
        return cls(**_known_keys(cls, data, "workflow"))


@dataclass
class ProviderSettings:
    """Endpoints, credentials and search defaults of external providers.

    API keys left unset fall back to the providers' own environment
    variables (OPENAI_API_KEY, SERPAPI_API_KEY, TAVILY_API_KEY).

    Attributes:
        base_url: OpenAI-compatible API base URL
        model: Chat model identifier
        api_key: Chat API key
        serpapi_key: SerpAPI key
        tavily_api_key: Tavily key for page extraction
        search_engine: Default engine: google, yahoo or bing
        search_location: Location the search runs from
        search_domain: Engine domain
        search_country: Country code
        search_language: Language code
        search_num_results: Results requested per search
    """

    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o"
    api_key: Optional[str] = field(default=None, repr=False)
    serpapi_key: Optional[str] = field(default=None, repr=False)
    tavily_api_key: Optional[str] = field(default=None, repr=False)
    search_engine: str = "google"
    search_location: str = "Tokyo, Japan"
    search_domain: str = "google.com"
    search_country: str = "jp"
    search_language: str = "ja"
    search_num_results: int = 50

    def __post_init__(self) -> None:
        if self.search_engine not in ("google", "yahoo", "bing"):
            raise ValueError(
                f"Invalid search_engine: {self.search_engine!r}. Must be one of: bing, google, yahoo."
            )

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "ProviderSettings":
        """Create settings from a TOML dict (the ``[providers]`` section)."""
        return cls(**_known_keys(cls, data, "providers"))

