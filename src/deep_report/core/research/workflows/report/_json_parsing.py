"""Fenced-block extraction and payload parsing for generator responses."""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from pydantic import ValidationError

from deep_report.core.errors.workflow import ChapterParseError
from deep_report.core.research.models import (
    ChapterPlan,
    JudgmentParseFailure,
    JudgmentPayload,
    JudgmentValid,
    ParsedJudgment,
)

# First fenced block, with an optional language tag such as ```json
_CODE_BLOCK_PATTERN = re.compile(r"```[a-zA-Z0-9_-]*\s*([\s\S]*?)\s*```")


def extract_code_block(content: Optional[str]) -> str:
    """Return the body of the first fenced code block in ``content``.

    Without a fence the whole content is returned unchanged; ``None`` or an
    empty string yields ``""``.
    """
    if not content:
        return ""
    match = _CODE_BLOCK_PATTERN.search(content)
    return match.group(1).strip() if match else content


def _load_payload(content: Optional[str]) -> Any:
    return json.loads(extract_code_block(content))


def parse_judgment(raw: Optional[str]) -> ParsedJudgment:
    """Parse a referee response into a tagged judgment.

    Never raises: anything that is not a JSON object with a valid ``action``
    comes back as ``JudgmentParseFailure`` carrying the raw response.

    Args:
        raw: Referee response text

    Returns:
        JudgmentValid or JudgmentParseFailure
    """
    try:
        data = _load_payload(raw)
    except ValueError as exc:
        return JudgmentParseFailure(raw=raw or "", error=f"invalid JSON: {exc}")

    try:
        payload = JudgmentPayload.model_validate(data)
    except ValidationError as exc:
        return JudgmentParseFailure(
            raw=raw or "",
            error=f"malformed judgment: {exc.error_count()} validation error(s)",
        )
    return JudgmentValid(action=payload.action, reason=payload.reason)


def parse_chapter_plan(raw: Optional[str]) -> ChapterPlan:
    """Parse a chapter-parse response into a ChapterPlan.

    Args:
        raw: Chapter parser response, ideally a fenced JSON block

    Returns:
        Validated ChapterPlan with at least one chapter

    Raises:
        ChapterParseError: If the payload is not valid JSON, does not match
            the chapter schema, or lists no chapters
    """
    try:
        data = _load_payload(raw)
    except ValueError as exc:
        raise ChapterParseError(f"Chapter plan is not valid JSON: {exc}", raw=raw or "") from exc

    try:
        plan = ChapterPlan.model_validate(data)
    except ValidationError as exc:
        raise ChapterParseError(f"Chapter plan failed validation: {exc}", raw=raw or "") from exc

    if not plan.chapters:
        raise ChapterParseError("Chapter plan contains no chapters", raw=raw or "")
    return plan
