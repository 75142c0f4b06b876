from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SyncResponse(BaseModel):
    success: bool = True
    inserted: int = Field(..., ge=0)
    ignored: int = Field(..., ge=0)
    total_received: int = Field(..., ge=0)
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
    hint: str | None = None
    success: bool = False
