"""Domain models."""

from .production import ProductionRecord, Team

__all__ = ["ProductionRecord", "Team"]
