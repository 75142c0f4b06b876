"""Canonical records shared across ingestion and persistence layers."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Team(BaseModel):
    """Team row owned by the fleet administration tables."""

    id: str = Field(..., min_length=1)
    name: str

    model_config = ConfigDict(frozen=True)


class ProductionRecord(BaseModel):
    """One aggregated production figure for a team on a calendar day."""

    team_id: str = Field(..., min_length=1)
    date: dt.date
    production_value: float

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> tuple[str, dt.date]:
        return (self.team_id, self.date)

    def to_row(self) -> dict[str, object]:
        return {
            "team_id": self.team_id,
            "date": self.date.isoformat(),
            "production_value": self.production_value,
        }
