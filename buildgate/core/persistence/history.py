"""
Run history — append-only ledger of pipeline runs.

Each recorded run appends one JSON line to ``.state/runs.ndjson`` under
the pipeline root. Entries are never modified or deleted.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DIR = ".state"
DEFAULT_HISTORY_FILE = "runs.ndjson"


class RunEntry(BaseModel):
    """One pipeline run."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    run_id: str = ""
    pipeline: str = ""

    status: str = ""               # succeeded, failed
    stages_total: int = 0
    stages_completed: int = 0
    failed_stage: str | None = None
    failed_tool: str | None = None
    error: str | None = None
    duration_ms: int = 0


class HistoryWriter:
    """Append-only run ledger.

    Each call to write() appends a single JSON line. The file and its
    directory are created on first write.
    """

    def __init__(self, path: Path | None = None, project_root: Path | None = None):
        if path is not None:
            self._path = path
        elif project_root is not None:
            self._path = project_root / DEFAULT_HISTORY_DIR / DEFAULT_HISTORY_FILE
        else:
            self._path = Path(DEFAULT_HISTORY_DIR) / DEFAULT_HISTORY_FILE

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: RunEntry) -> None:
        """Append an entry to the ledger. Write errors are logged."""
        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False) + "\n"

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("History entry written: %s (%s)", entry.run_id, entry.status)
        except OSError as e:
            logger.error("Failed to write history entry: %s", e)

    def read_all(self) -> list[RunEntry]:
        """Read all entries, oldest first. Corrupt lines are skipped."""
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(RunEntry.model_validate(json.loads(line)))
                    except (json.JSONDecodeError, ValidationError) as e:
                        logger.warning("Skipping corrupt history entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read run history: %s", e)

        return entries

    def read_recent(self, n: int = 20) -> list[RunEntry]:
        """Read the most recent N entries."""
        if n <= 0:
            return []
        return self.read_all()[-n:]

    def entry_count(self) -> int:
        if not self._path.is_file():
            return 0
        try:
            with self._path.open("r", encoding="utf-8") as f:
                return sum(1 for line in f if line.strip())
        except OSError:
            return 0
