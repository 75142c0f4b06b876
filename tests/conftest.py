from __future__ import annotations

from pathlib import Path

import pytest

from prodsync.config.team_codes import TeamCodeMapping
from prodsync.persistence import SQLiteProductionStore

from .payloads import TEAMS


@pytest.fixture
def team_codes() -> TeamCodeMapping:
    return TeamCodeMapping.bundled()


@pytest.fixture
def store(tmp_path: Path) -> SQLiteProductionStore:
    db = SQLiteProductionStore(tmp_path / "prodsync.sqlite")
    db.save_teams(TEAMS)
    return db
