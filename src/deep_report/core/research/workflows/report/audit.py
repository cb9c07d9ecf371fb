"""Audit trail for report workflows.

Persists the diagnostic side channel of a run under the workspace
directory: named text streams (``outline.md``, ``content.md``...) that
record every trial, feedback and revision reason, plus a JSONL event log.

The trail is write-only and best effort. A failed write is logged and
echoed to stderr but never raised, so a full disk or a bad path can not
abort a phase.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from filelock import FileLock, Timeout
from ulid import ULID

logger = logging.getLogger(__name__)

EVENTS_STREAM = "events.jsonl"
LOCK_ACQUISITION_TIMEOUT = 5.0

_UNSAFE_STREAM_CHARS = re.compile(r"[^\w.\-]+")


def stream_name_for(label: str, suffix: str = ".md") -> str:
    """Derive a safe stream file name from free text such as a topic title.

    Whitespace runs become underscores and any other character that is not
    a word character, dot or dash is dropped.
    """
    name = re.sub(r"\s+", "_", label.strip())
    name = _UNSAFE_STREAM_CHARS.sub("", name).strip("._") or "untitled"
    return f"{name[:100]}{suffix}"


class AuditTrail:
    """File-backed audit sink bound to one workspace directory.

    Args:
        workspace_dir: Directory receiving the stream files
        enabled: When False every call is a no-op
    """

    def __init__(self, workspace_dir: Path | str, *, enabled: bool = True):
        self.workspace_dir = Path(workspace_dir)
        self.enabled = enabled

    def _resolve(self, stream: str) -> Optional[Path]:
        if not stream or stream != Path(stream).name or stream in (".", ".."):
            logger.error("Rejected audit stream name %r", stream)
            return None
        return self.workspace_dir / stream

    def _write_text(self, stream: str, text: str, mode: str) -> None:
        if not self.enabled:
            return
        path = self._resolve(stream)
        if path is None:
            return
        lock_path = path.with_name(f".{path.name}.lock")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(lock_path, timeout=LOCK_ACQUISITION_TIMEOUT):
                with path.open(mode, encoding="utf-8") as handle:
                    handle.write(text)
        except (Timeout, OSError) as exc:
            logger.error("Failed to write audit stream %s: %s", stream, exc)
            print(f"AUDIT_FALLBACK: {stream} - {exc}", file=sys.stderr, flush=True)

    def write(self, text: str, stream: str) -> None:
        """Replace the content of ``stream`` with ``text``."""
        self._write_text(stream, text, "w")

    def append(self, text: str, stream: str) -> None:
        """Append ``text`` to ``stream``, creating it if needed."""
        self._write_text(stream, text, "a")

    def record_event(
        self,
        event_type: str,
        data: Optional[dict[str, Any]] = None,
        *,
        level: str = "info",
        phase: Optional[str] = None,
    ) -> None:
        """Append one JSONL event to the run's event log.

        Args:
            event_type: Dotted event name, e.g. ``phase.completed``
            data: JSON-serializable payload
            level: ``info``, ``warning`` or ``error``
            phase: Phase the event belongs to, if any
        """
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "event_id": f"evt_{ULID()}",
            "event_type": event_type,
            "level": level,
            "phase": phase,
            "data": data or {},
        }
        try:
            line = json.dumps(payload, ensure_ascii=False, default=str)
        except (TypeError, ValueError) as exc:
            logger.error("Failed to serialize audit event %s: %s", event_type, exc)
            return
        self._write_text(EVENTS_STREAM, line + "\n", "a")
