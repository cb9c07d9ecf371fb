"""JSON response envelopes for CLI commands.

Every command prints exactly one JSON object to stdout::

    {"success": true, "data": {...}, "error": null}
    {"success": false, "data": {"error_code": ..., ...}, "error": "message"}
"""

import json
import sys
from typing import Any, NoReturn, Optional

import click


def _emit(payload: dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def emit_success(data: dict[str, Any]) -> None:
    _emit({"success": True, "data": data, "error": None})


def emit_error(
    message: str,
    *,
    code: str,
    error_type: str = "internal",
    remediation: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> NoReturn:
    """Print an error envelope and exit with status 1."""
    data: dict[str, Any] = {"error_code": code, "error_type": error_type}
    if remediation:
        data["remediation"] = remediation
    if details:
        data["details"] = details
    _emit({"success": False, "data": data, "error": message})
    sys.exit(1)
