"""Persistence layer for teams and the production snapshot."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Protocol, Sequence
from uuid import uuid4

from prodsync.errors import ConfigurationError, StorageFailure
from prodsync.models import ProductionRecord, Team

if TYPE_CHECKING:
    from prodsync.config.settings import Settings

logger = logging.getLogger(__name__)


class ProductionStore(Protocol):
    def list_teams(self) -> List[Team]: ...

    def replace_snapshot(self, records: Sequence[ProductionRecord]) -> int: ...

    def list_production(self) -> List[ProductionRecord]: ...


def team_index(teams: Iterable[Team]) -> Dict[str, str]:
    """Map team names to ids; later duplicates win, as a dict build would."""

    return {team.name: team.id for team in teams}


_UPSERT_PRODUCTION = """
    INSERT INTO production_data (
        id, team_id, date, production_value, created_at, updated_at
    ) VALUES (?, ?, ?, ?, ?, ?)
    ON CONFLICT(team_id, date) DO UPDATE SET
        production_value = excluded.production_value,
        updated_at = excluded.updated_at
"""


class SQLiteProductionStore:
    """SQLite-backed store; the snapshot swap runs in one transaction."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        if isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path: Path | str = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri, isolation_level=None)
        except sqlite3.Error as exc:
            raise StorageFailure(f"Failed to open database {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS teams (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS production_data (
                    id TEXT PRIMARY KEY,
                    team_id TEXT NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
                    date TEXT NOT NULL,
                    production_value REAL NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE(team_id, date)
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_production_data_date ON production_data(date)"
            )

    def save_teams(self, teams: Iterable[Team]) -> int:
        payload = [(team.id, team.name) for team in teams]
        with self._connect() as conn:
            try:
                conn.execute("BEGIN")
                conn.executemany(
                    """
                    INSERT INTO teams (id, name) VALUES (?, ?)
                    ON CONFLICT(id) DO UPDATE SET name = excluded.name
                    """,
                    payload,
                )
                conn.execute("COMMIT")
            except sqlite3.Error as exc:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise StorageFailure(f"Failed to save teams: {exc}") from exc
        return len(payload)

    def list_teams(self) -> List[Team]:
        with self._connect() as conn:
            try:
                rows = conn.execute("SELECT id, name FROM teams ORDER BY name").fetchall()
            except sqlite3.Error as exc:
                raise StorageFailure(f"Failed to fetch teams: {exc}") from exc
        return [Team(id=row["id"], name=row["name"]) for row in rows]

    def replace_snapshot(self, records: Sequence[ProductionRecord]) -> int:
        """Delete every stored row and write ``records`` in the same transaction.

        On any failure the transaction rolls back and the previous snapshot
        stays in place.
        """

        now = datetime.now(timezone.utc).isoformat()
        payload = [
            (uuid4().hex, rec.team_id, rec.date.isoformat(), rec.production_value, now, now)
            for rec in records
        ]
        with self._connect() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as exc:
                raise StorageFailure(f"Failed to start snapshot transaction: {exc}") from exc
            try:
                try:
                    deleted = conn.execute("DELETE FROM production_data").rowcount
                except sqlite3.Error as exc:
                    raise StorageFailure(f"Failed to delete old data: {exc}") from exc
                logger.info("Old data deleted (%d rows)", deleted)
                if payload:
                    try:
                        conn.executemany(_UPSERT_PRODUCTION, payload)
                    except sqlite3.Error as exc:
                        raise StorageFailure(f"Failed to insert data: {exc}") from exc
                try:
                    conn.execute("COMMIT")
                except sqlite3.Error as exc:
                    raise StorageFailure(f"Failed to commit snapshot: {exc}") from exc
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
        return len(payload)

    def list_production(self) -> List[ProductionRecord]:
        with self._connect() as conn:
            try:
                rows = conn.execute(
                    "SELECT team_id, date, production_value FROM production_data "
                    "ORDER BY team_id, date"
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageFailure(f"Failed to read production data: {exc}") from exc
        return [
            ProductionRecord(
                team_id=row["team_id"],
                date=date.fromisoformat(row["date"]),
                production_value=row["production_value"],
            )
            for row in rows
        ]


def build_store(settings: "Settings") -> ProductionStore:
    """Open the store selected by ``settings.backend``."""

    if settings.backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ConfigurationError(
                "Supabase backend selected but SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing"
            )
        from prodsync.persistence.supabase_store import SupabaseProductionStore

        return SupabaseProductionStore.connect(settings.supabase_url, settings.supabase_service_key)
    logger.info("Using SQLite store at %s", settings.db_path)
    return SQLiteProductionStore(settings.db_path)


__all__ = [
    "ProductionStore",
    "SQLiteProductionStore",
    "build_store",
    "team_index",
]
