"""Parsing helpers for configuration values coming from TOML or the environment."""

import logging
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _try_parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in {"true", "1", "yes", "on"}:
        return True
    if normalized in {"false", "0", "no", "off"}:
        return False
    return None


def _parse_env_value(name: str, raw: str, parser: Callable[[str], T], current: T) -> T:
    """Parse an environment override, keeping ``current`` when it is invalid."""
    try:
        return parser(raw)
    except ValueError:
        logger.warning("Invalid value for %s: %r. Keeping %r.", name, raw, current)
        return current
