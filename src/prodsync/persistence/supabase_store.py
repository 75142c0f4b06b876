"""Supabase (PostgREST) store for deployments on the managed backend.

The snapshot swap goes through the ``replace_production_snapshot`` Postgres
function (see ``sql/replace_production_snapshot.sql``). Delete and upsert then
share one transaction on the database side.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from prodsync.errors import StorageFailure
from prodsync.models import ProductionRecord, Team

logger = logging.getLogger(__name__)

TEAMS_TABLE = "teams"
PRODUCTION_TABLE = "production_data"
REPLACE_FUNCTION = "replace_production_snapshot"


def _error_message(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    return str(message or exc)


class SupabaseProductionStore:
    def __init__(self, client: Client) -> None:
        self._client = client

    @classmethod
    def connect(cls, url: str, service_key: str) -> "SupabaseProductionStore":
        logger.debug("Creating Supabase client for %s", url)
        try:
            client = create_client(url, service_key)
        except Exception as exc:
            raise StorageFailure(f"Failed to create Supabase client: {exc}") from exc
        return cls(client)

    def _execute(self, query: Any, action: str) -> Any:
        try:
            return query.execute()
        except (APIError, httpx.HTTPError) as exc:
            message = _error_message(exc)
            logger.error("Supabase error while trying to %s: %s", action, message)
            raise StorageFailure(f"Failed to {action}: {message}") from exc

    def list_teams(self) -> List[Team]:
        response = self._execute(
            self._client.table(TEAMS_TABLE).select("id, name"), "fetch teams"
        )
        return [Team(id=str(row["id"]), name=row["name"]) for row in response.data or []]

    def replace_snapshot(self, records: Sequence[ProductionRecord]) -> int:
        rows = [record.to_row() for record in records]
        response = self._execute(
            self._client.rpc(REPLACE_FUNCTION, {"rows": rows}), "replace production snapshot"
        )
        written = response.data
        if isinstance(written, int):
            return written
        return len(rows)

    def list_production(self) -> List[ProductionRecord]:
        query = (
            self._client.table(PRODUCTION_TABLE)
            .select("team_id, date, production_value")
            .order("team_id")
            .order("date")
        )
        response = self._execute(query, "read production data")
        return [
            ProductionRecord(
                team_id=str(row["team_id"]),
                date=date.fromisoformat(str(row["date"])[:10]),
                production_value=float(row["production_value"]),
            )
            for row in response.data or []
        ]
