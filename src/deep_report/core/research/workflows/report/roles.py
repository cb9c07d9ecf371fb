"""Bind a TextGenerator to the producer/reviewer/referee roles of each phase."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from deep_report.config.workflow import WorkflowConfig
from deep_report.core.providers.base import GenerationRequest, TextGenerator
from deep_report.core.research.models import Phase, ReportPhase
from deep_report.core.research.workflows.report import prompts

logger = logging.getLogger(__name__)


async def generate_text(
    generator: TextGenerator,
    prompt: str,
    system_prompt: Optional[str] = None,
    *,
    temperature: Optional[float] = None,
    frequency_penalty: Optional[float] = None,
) -> str:
    """Run one generation call and return its text."""
    result = await generator.generate(
        GenerationRequest(
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            frequency_penalty=frequency_penalty,
        )
    )
    if result.tokens is not None:
        logger.debug(
            "%s call used %d tokens in %.0fms",
            result.provider_id or generator.get_provider_name(),
            result.tokens.total_tokens,
            result.duration_ms or 0.0,
        )
    return result.text


def _text_role(
    generator: TextGenerator,
    system_prompt: str,
    render: Optional[Callable[[str], str]] = None,
    **sampling: Optional[float],
) -> Callable[[str], Awaitable[str]]:
    async def role(text: str) -> str:
        prompt = render(text) if render is not None else text
        return await generate_text(generator, prompt, system_prompt, **sampling)

    return role


def make_referee(generator: TextGenerator) -> Callable[[str, str, str], Awaitable[str]]:
    """Referee shared by all phases: renders the judge prompt, returns raw text."""

    async def referee(phase: str, output: str, feedback: str) -> str:
        return await generate_text(
            generator,
            prompts.phase_judge_prompt(phase, output, feedback),
            prompts.PHASE_JUDGE_SYSTEM_PROMPT,
        )

    return referee


@dataclass(frozen=True)
class ReportPhases:
    outline: Phase
    content: Phase
    final_report: Phase


def build_report_phases(generator: TextGenerator, config: Optional[WorkflowConfig] = None) -> ReportPhases:
    """Create the outline, content and final-report phases.

    Producers receive ready-made prompts (seed or revision prompts); reviewers
    receive the candidate text and wrap it in their reflection prompt.

    Args:
        generator: Backend used by every role
        config: Supplies the content writer's sampling controls

    Returns:
        ReportPhases with one immutable Phase per stage
    """
    config = config or WorkflowConfig()
    referee = make_referee(generator)

    outline = Phase(
        name=ReportPhase.OUTLINE.value,
        producer=_text_role(generator, prompts.OUTLINE_WRITER_SYSTEM_PROMPT),
        reviewer=_text_role(
            generator, prompts.OUTLINE_REFLECTION_SYSTEM_PROMPT, prompts.outline_reflection_prompt
        ),
        referee=referee,
    )
    content = Phase(
        name=ReportPhase.CONTENT.value,
        producer=_text_role(
            generator,
            prompts.CONTENT_WRITER_SYSTEM_PROMPT,
            temperature=config.content_temperature,
            frequency_penalty=config.content_frequency_penalty,
        ),
        reviewer=_text_role(
            generator, prompts.CONTENT_REFLECTION_SYSTEM_PROMPT, prompts.content_reflection_prompt
        ),
        referee=referee,
    )
    final_report = Phase(
        name=ReportPhase.FINAL_REPORT.value,
        producer=_text_role(generator, prompts.FINAL_REPORT_WRITER_SYSTEM_PROMPT),
        reviewer=_text_role(
            generator, prompts.FINAL_REPORT_REFLECTION_SYSTEM_PROMPT, prompts.final_report_reflection_prompt
        ),
        referee=referee,
    )
    return ReportPhases(outline=outline, content=content, final_report=final_report)
