"""SQLite implementation of the feature cache."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .base import CacheStats, FeatureIdFn, SourceMetadata, age_hours

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS sources (
    source_id TEXT PRIMARY KEY,
    etag TEXT,
    last_modified TEXT,
    last_fetched TEXT NOT NULL,
    record_count INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS features (
    id TEXT NOT NULL,
    source_id TEXT NOT NULL,
    data TEXT NOT NULL,
    fetched_at TEXT NOT NULL,
    PRIMARY KEY (source_id, id),
    FOREIGN KEY (source_id) REFERENCES sources(source_id)
);

CREATE INDEX IF NOT EXISTS idx_features_source ON features(source_id);
"""


class SQLiteFeatureCache:
    """Feature cache backed by a single SQLite file.

    Tracks per-source ETag / Last-Modified / fetch time and stores features
    as JSON keyed by ``(source_id, id)``.
    """

    def __init__(
        self,
        path: Path | str,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.path = Path(path)
        if str(path) != ":memory:":
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._conn = sqlite3.connect(str(path))
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        self._conn.execute("PRAGMA journal_mode = WAL")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def _now(self) -> str:
        return self._clock().isoformat()

    def get_source_metadata(self, source_id: str) -> SourceMetadata | None:
        row = self._conn.execute(
            "SELECT source_id, etag, last_modified, last_fetched, record_count "
            "FROM sources WHERE source_id = ?",
            (source_id,),
        ).fetchone()
        if row is None:
            return None
        return SourceMetadata(
            source_id=row["source_id"],
            etag=row["etag"],
            last_modified=row["last_modified"],
            last_fetched=datetime.fromisoformat(row["last_fetched"]),
            record_count=row["record_count"],
        )

    def update_source_metadata(
        self,
        source_id: str,
        *,
        record_count: int,
        etag: str | None = None,
        last_modified: str | None = None,
    ) -> None:
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO sources (source_id, etag, last_modified, last_fetched, record_count)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(source_id) DO UPDATE SET
                    etag = excluded.etag,
                    last_modified = excluded.last_modified,
                    last_fetched = excluded.last_fetched,
                    record_count = excluded.record_count
                """,
                (source_id, etag, last_modified, self._now(), record_count),
            )

    def upsert_features(
        self, source_id: str, features: Sequence[Any], id_fn: FeatureIdFn
    ) -> None:
        """Insert or replace features in one transaction."""
        now = self._now()
        with self._conn:
            # Source row must exist for the foreign key
            self._conn.execute(
                "INSERT INTO sources (source_id, last_fetched, record_count) VALUES (?, ?, 0) "
                "ON CONFLICT(source_id) DO NOTHING",
                (source_id, now),
            )
            self._conn.executemany(
                """
                INSERT INTO features (id, source_id, data, fetched_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(source_id, id) DO UPDATE SET
                    data = excluded.data,
                    fetched_at = excluded.fetched_at
                """,
                (
                    (id_fn(feature, index), source_id, json.dumps(feature), now)
                    for index, feature in enumerate(features)
                ),
            )
        logger.debug(f"Upserted {len(features)} features for {source_id}")

    def get_features(self, source_id: str) -> list[Any]:
        rows = self._conn.execute(
            "SELECT data FROM features WHERE source_id = ?", (source_id,)
        ).fetchall()
        return [json.loads(row["data"]) for row in rows]

    def get_feature_count(self, source_id: str) -> int:
        row = self._conn.execute(
            "SELECT COUNT(*) AS count FROM features WHERE source_id = ?", (source_id,)
        ).fetchone()
        return row["count"]

    def clear_source(self, source_id: str) -> None:
        """Delete a source and its features (full refresh)."""
        with self._conn:
            self._conn.execute("DELETE FROM features WHERE source_id = ?", (source_id,))
            self._conn.execute("DELETE FROM sources WHERE source_id = ?", (source_id,))

    def get_stats(self) -> CacheStats:
        source_count = self._conn.execute("SELECT COUNT(*) FROM sources").fetchone()[0]
        feature_count = self._conn.execute("SELECT COUNT(*) FROM features").fetchone()[0]
        size_bytes = self._conn.execute(
            "SELECT page_count * page_size FROM pragma_page_count(), pragma_page_size()"
        ).fetchone()[0]
        return CacheStats(
            source_count=source_count, feature_count=feature_count, size_bytes=size_bytes
        )

    def needs_refresh(self, source_id: str, max_age_hours: float = 24) -> bool:
        """True when the source was never fetched or is older than ``max_age_hours``."""
        meta = self.get_source_metadata(source_id)
        if meta is None:
            return True
        return age_hours(meta.last_fetched, self._clock()) > max_age_hours

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SQLiteFeatureCache:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
