"""Run the production sync pipeline for one inbound payload."""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

from prodsync.config.team_codes import TeamCodeMapping, get_team_codes
from prodsync.ingest import aggregate_rows, decode_payload, extract_all_rows
from prodsync.ingest.payload import DEFAULT_MAX_DOCUMENTS
from prodsync.persistence import ProductionStore, team_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    inserted: int
    ignored: int
    total_received: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    success: bool = True

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["timestamp"] = self.timestamp.isoformat()
        return payload


class ProductionSync:
    """Decode, resolve, aggregate and swap in a new production snapshot.

    Runs on one instance are serialized, so two overlapping payloads never
    interleave their store phases. Nothing else is kept between runs; the
    team list is read fresh every time.
    """

    def __init__(
        self,
        store: ProductionStore,
        team_codes: TeamCodeMapping | None = None,
        *,
        max_documents: int = DEFAULT_MAX_DOCUMENTS,
    ) -> None:
        self._store = store
        self._team_codes = team_codes or get_team_codes()
        self._max_documents = max_documents
        self._lock = threading.Lock()

    @property
    def store(self) -> ProductionStore:
        return self._store

    def run(self, body: bytes | str | None) -> SyncResult:
        documents = decode_payload(body, max_documents=self._max_documents)
        rows = extract_all_rows(documents)

        with self._lock:
            teams = self._store.list_teams()
            index = team_index(teams)
            logger.info("Found %d registered teams", len(index))

            aggregation = aggregate_rows(rows, index, self._team_codes)
            if aggregation.aggregated:
                logger.info("Folded %d duplicate rows into existing keys", aggregation.aggregated)
            inserted = self._store.replace_snapshot(aggregation.records)
            logger.info("Inserted %d rows successfully", inserted)

        result = SyncResult(
            inserted=inserted,
            ignored=aggregation.ignored,
            total_received=aggregation.received,
        )
        logger.info("Sync completed: %s", result.to_payload())
        return result


def sync_production(
    body: bytes | str | None,
    store: ProductionStore,
    *,
    team_codes: TeamCodeMapping | None = None,
    max_documents: int = DEFAULT_MAX_DOCUMENTS,
) -> SyncResult:
    return ProductionSync(store, team_codes, max_documents=max_documents).run(body)
