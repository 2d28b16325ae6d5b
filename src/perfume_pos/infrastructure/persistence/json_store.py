"""File helpers shared by the JSON-backed repositories.

Every storage failure surfaces as PersistenceError so callers only ever
see domain exceptions.
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any

from perfume_pos.domain.exceptions import PersistenceError


class JsonFile:

    def __init__(self, file_path: Path, empty: Any) -> None:
        self._file_path = file_path
        self._empty = empty
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._file_path

    def load(self) -> Any:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Cannot read {self._file_path.name}: {exc}") from exc

    def persist(self, data: Any) -> None:
        """Write to a sibling temp file, then swap it in."""
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
            os.replace(tmp_path, self._file_path)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Cannot write {self._file_path.name}: {exc}") from exc

    def _ensure_file(self) -> None:
        if self._file_path.exists():
            return
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(self._empty) + "\n", encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Cannot create {self._file_path}: {exc}") from exc


def next_id(records: list[dict]) -> int:
    if not records:
        return 1
    return max(r["id"] for r in records) + 1


def parse_timestamp(raw: str) -> datetime:
    return datetime.fromisoformat(raw)
