"""Tests for the file-backed AuditTrail."""

import json
import logging

import pytest

from deep_report.core.research.workflows.report.audit import EVENTS_STREAM, AuditTrail, stream_name_for


@pytest.fixture
def trail(tmp_path):
    return AuditTrail(tmp_path / "workspace")


class TestAuditStreams:
    def test_write_replaces_and_append_extends(self, trail):
        trail.write("first", "outline.md")
        trail.append(" second", "outline.md")
        trail.write("fresh", "content.md")
        trail.append(" more", "content.md")
        trail.write("reset", "outline.md")

        assert (trail.workspace_dir / "outline.md").read_text(encoding="utf-8") == "reset"
        assert (trail.workspace_dir / "content.md").read_text(encoding="utf-8") == "fresh more"

    def test_append_creates_missing_stream(self, trail):
        trail.append("line", "chapters.json")
        assert (trail.workspace_dir / "chapters.json").read_text(encoding="utf-8") == "line"

    @pytest.mark.parametrize("stream", ["", "..", "../escape.md", "nested/file.md"])
    def test_unsafe_stream_names_are_rejected(self, trail, stream, caplog):
        with caplog.at_level(logging.ERROR):
            trail.write("text", stream)
        assert "Rejected audit stream name" in caplog.text
        assert not (trail.workspace_dir.parent / "escape.md").exists()

    def test_disabled_trail_writes_nothing(self, tmp_path):
        trail = AuditTrail(tmp_path / "off", enabled=False)
        trail.write("text", "outline.md")
        trail.record_event("phase.started")
        assert not (tmp_path / "off").exists()

    def test_write_failure_is_swallowed(self, tmp_path, caplog, capsys):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way", encoding="utf-8")
        trail = AuditTrail(blocker)

        with caplog.at_level(logging.ERROR):
            trail.write("text", "outline.md")

        assert "Failed to write audit stream outline.md" in caplog.text
        assert "AUDIT_FALLBACK: outline.md" in capsys.readouterr().err


class TestAuditEvents:
    def test_events_are_jsonl(self, trail):
        trail.record_event("phase.started", {"max_attempts": 3}, phase="outline")
        trail.record_event("judgment.parse_failed", {"raw_response": "??"}, level="warning", phase="content")

        lines = (trail.workspace_dir / EVENTS_STREAM).read_text(encoding="utf-8").splitlines()
        events = [json.loads(line) for line in lines]

        assert [e["event_type"] for e in events] == ["phase.started", "judgment.parse_failed"]
        assert events[0]["data"] == {"max_attempts": 3}
        assert events[0]["phase"] == "outline"
        assert events[1]["level"] == "warning"
        assert all(e["event_id"].startswith("evt_") for e in events)
        assert events[0]["event_id"] != events[1]["event_id"]
        assert events[0]["timestamp"].endswith("Z")

    def test_non_serializable_data_is_stringified(self, trail, tmp_path):
        trail.record_event("workflow.completed", {"path": tmp_path})
        event = json.loads((trail.workspace_dir / EVENTS_STREAM).read_text(encoding="utf-8"))
        assert event["data"]["path"] == str(tmp_path)


class TestStreamNameFor:
    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Intermittent fasting", "Intermittent_fasting.md"),
            ("  spaced   out  ", "spaced_out.md"),
            ("a/b\\c:d", "abcd.md"),
            ("../../etc/passwd", "etcpasswd.md"),
            ("???", "untitled.md"),
        ],
    )
    def test_safe_names(self, label, expected):
        assert stream_name_for(label) == expected

    def test_long_labels_are_truncated(self):
        assert len(stream_name_for("x" * 500)) == 103

    def test_custom_suffix(self):
        assert stream_name_for("topic", suffix=".txt") == "topic.txt"
