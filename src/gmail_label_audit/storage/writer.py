"""JSON-lines file sink, for dry runs and local analysis."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

from gmail_label_audit.core.exceptions import SinkError

logger = logging.getLogger(__name__)


class JsonlRecordWriter:
    """Append records to a ``.jsonl`` file, one JSON object per line."""

    def __init__(self, output_path: Path) -> None:
        self._output_path = output_path
        self._output_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def output_path(self) -> Path:
        return self._output_path

    def insert(self, rows: list[dict[str, Any]]) -> None:
        """Append rows to the output file.

        Raises:
            SinkError: If the file cannot be written.
        """
        lines = "".join(json.dumps(row) + "\n" for row in rows)
        try:
            with self._lock, self._output_path.open("a", encoding="utf-8") as fh:
                fh.write(lines)
        except OSError as e:
            raise SinkError(f"Failed to write {self._output_path}: {e}") from e
        logger.debug("Wrote %d rows to %s", len(rows), self._output_path)

    def read_all(self) -> list[dict[str, Any]]:
        """Load every record written so far."""
        if not self._output_path.exists():
            return []
        with self._output_path.open(encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
