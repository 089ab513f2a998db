"""
Tests for persistence — the run history ledger.
"""

import json
import logging
from pathlib import Path

from buildgate.core.persistence.history import HistoryWriter, RunEntry


class TestHistoryWriter:
    """Tests for the run history ledger."""

    def test_write_and_read(self, tmp_path: Path):
        writer = HistoryWriter(path=tmp_path / "runs.ndjson")
        entry = RunEntry(
            run_id="run-001",
            pipeline="rust-book",
            status="succeeded",
            stages_total=8,
            stages_completed=8,
        )
        writer.write(entry)

        entries = writer.read_all()
        assert len(entries) == 1
        assert entries[0].run_id == "run-001"
        assert entries[0].status == "succeeded"

    def test_default_location_under_project_root(self, tmp_path: Path):
        writer = HistoryWriter(project_root=tmp_path)
        assert writer.path == tmp_path / ".state" / "runs.ndjson"

    def test_append_multiple(self, tmp_path: Path):
        writer = HistoryWriter(path=tmp_path / "runs.ndjson")
        for i in range(5):
            writer.write(RunEntry(run_id=f"run-{i:03d}"))

        entries = writer.read_all()
        assert len(entries) == 5
        assert entries[0].run_id == "run-000"
        assert entries[4].run_id == "run-004"

    def test_read_recent(self, tmp_path: Path):
        writer = HistoryWriter(path=tmp_path / "runs.ndjson")
        for i in range(10):
            writer.write(RunEntry(run_id=f"run-{i:03d}"))

        recent = writer.read_recent(3)
        assert [e.run_id for e in recent] == ["run-007", "run-008", "run-009"]
        assert writer.read_recent(0) == []

    def test_entry_count(self, tmp_path: Path):
        writer = HistoryWriter(path=tmp_path / "runs.ndjson")
        assert writer.entry_count() == 0

        for i in range(7):
            writer.write(RunEntry(run_id=f"run-{i}"))
        assert writer.entry_count() == 7

    def test_read_empty_ledger(self, tmp_path: Path):
        writer = HistoryWriter(path=tmp_path / "nonexistent.ndjson")
        assert writer.read_all() == []
        assert writer.entry_count() == 0

    def test_corrupt_lines_skipped(self, tmp_path: Path):
        path = tmp_path / "runs.ndjson"
        path.write_text(
            '{"run_id": "good-1", "status": "failed"}\n'
            "this is not json\n"
            '{"run_id": "bad", "stages_total": "many"}\n'
            '{"run_id": "good-2", "status": "succeeded"}\n'
        )
        entries = HistoryWriter(path=path).read_all()
        assert [e.run_id for e in entries] == ["good-1", "good-2"]

    def test_creates_parent_directories(self, tmp_path: Path):
        writer = HistoryWriter(path=tmp_path / "deep" / "nested" / "runs.ndjson")
        writer.write(RunEntry(run_id="test"))
        assert writer.path.is_file()

    def test_write_error_is_logged(self, tmp_path: Path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        writer = HistoryWriter(path=blocker / "runs.ndjson")

        with caplog.at_level(logging.ERROR, logger="buildgate.core.persistence.history"):
            writer.write(RunEntry(run_id="lost"))

        assert any("Failed to write history entry" in r.message for r in caplog.records)

    def test_ndjson_format(self, tmp_path: Path):
        """Each entry is a single line of valid JSON."""
        path = tmp_path / "runs.ndjson"
        writer = HistoryWriter(path=path)
        writer.write(RunEntry(run_id="run-1", error="line one\nline two"))
        writer.write(RunEntry(run_id="run-2"))

        lines = path.read_text().strip().split("\n")
        assert len(lines) == 2
        for line in lines:
            assert "run_id" in json.loads(line)

    def test_entry_fields_serialized(self, tmp_path: Path):
        writer = HistoryWriter(path=tmp_path / "runs.ndjson")
        writer.write(
            RunEntry(
                run_id="full",
                pipeline="docs",
                status="failed",
                stages_total=4,
                stages_completed=2,
                failed_stage="spellcheck",
                error="'bash ci/spellcheck.sh list' failed",
                duration_ms=1234,
            )
        )

        loaded = writer.read_all()[0]
        assert loaded.failed_stage == "spellcheck"
        assert loaded.failed_tool is None
        assert loaded.duration_ms == 1234
        assert loaded.timestamp
