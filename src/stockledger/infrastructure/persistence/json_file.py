"""A JSON document on disk, rewritten atomically.

Writes go to a uniquely named sibling temporary file which then replaces
the target in one rename, so readers (and a crash mid-write) see either
the previous document or the new one, never half of it.

Read-modify-write cycles run under ``locked()``, an exclusive lock on a
``<name>.lock`` sibling file, so writers in other processes sharing the
same data directory wait for each other instead of overwriting one
another's changes.
"""

from __future__ import annotations

import json
import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any

from filelock import FileLock


class JsonFile:

    def __init__(self, file_path: Path, empty: Any) -> None:
        self._file_path = file_path
        self._empty = empty
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = FileLock(str(file_path.with_name(f"{file_path.name}.lock")))
        self._ensure_file()

    def locked(self) -> FileLock:
        """Exclusive, re-entrant lock around a load-modify-persist cycle."""
        return self._lock

    def load(self) -> Any:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def persist(self, document: Any) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._file_path.parent,
            prefix=f".{self._file_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(document, indent=2) + "\n")
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._file_path.exists():
                self.persist(self._empty)


def decimal_or_none(raw: str | None) -> Decimal | None:
    return Decimal(raw) if raw is not None else None


def str_or_none(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None
