"""Production sync pipeline."""

from .service import ProductionSync, SyncResult, sync_production

__all__ = ["ProductionSync", "SyncResult", "sync_production"]
