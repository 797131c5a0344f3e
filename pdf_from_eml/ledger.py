"""SQLite-backed record of EML files already processed."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import sqlite_utils

from .models import ExtractionResult


class ExtractionLedger:
    """Store one row per processed EML file, keyed by the file's SHA-256."""

    TABLE = "processed_eml_files"

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db = sqlite_utils.Database(str(db_path))
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        self.db[self.TABLE].create(
            {
                "eml_sha256": str,
                "eml_path": str,
                "extracted_count": int,
                "warning_count": int,
                "output_files": str,
                "processed_at": str,
            },
            pk="eml_sha256",
            if_not_exists=True,
        )

    def seen(self, eml_sha256: str) -> bool:
        table = self.db[self.TABLE]
        return table.count_where("eml_sha256 = ?", [eml_sha256]) > 0

    def record(self, *, eml_path: Path, eml_sha256: str, result: ExtractionResult) -> None:
        table = self.db[self.TABLE]
        table.upsert(
            {
                "eml_sha256": eml_sha256,
                "eml_path": str(eml_path),
                "extracted_count": result.extracted_count,
                "warning_count": len(result.warnings),
                "output_files": [str(item.path) for item in result.files],
                "processed_at": datetime.now(tz=UTC).isoformat(),
            },
            pk="eml_sha256",
        )

    def output_files(self, eml_sha256: str) -> list[str]:
        rows = list(self.db[self.TABLE].rows_where("eml_sha256 = ?", [eml_sha256]))
        if not rows:
            return []
        return json.loads(rows[0]["output_files"] or "[]")
