"""REST API for the production sync endpoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException

from prodsync import __version__
from prodsync.api.schemas import ErrorResponse, SyncResponse
from prodsync.config import Settings, configure_logging, get_team_codes, load_settings
from prodsync.config.team_codes import TeamCodeMapping
from prodsync.errors import SyncError
from prodsync.persistence import ProductionStore, build_store
from prodsync.sync import ProductionSync

logger = logging.getLogger(__name__)

SYNC_PATH = "/sync-production"

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Payload cannot be turned into rows"},
    500: {"model": ErrorResponse, "description": "Data store failure"},
}


class PreflightCORSMiddleware(CORSMiddleware):
    """CORS middleware that answers every preflight with an empty 200."""

    def preflight_response(self, request_headers: Headers) -> Response:
        return Response(status_code=200, headers=dict(self.preflight_headers))


def create_app(
    settings: Settings | None = None,
    *,
    store: ProductionStore | None = None,
    team_codes: TeamCodeMapping | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="prodsync", version=__version__)
    app.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=CORS_ALLOW_HEADERS,
    )

    store = store or build_store(settings)
    team_codes = team_codes or get_team_codes(settings.team_codes_path)
    syncer = ProductionSync(store, team_codes, max_documents=settings.max_documents)
    app.state.settings = settings
    app.state.store = store
    app.state.sync = syncer

    @app.exception_handler(SyncError)
    async def sync_error_handler(request: Request, exc: SyncError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Error in sync-production: %s", exc.message)
        else:
            logger.warning("Rejected payload: %s", exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code != 405:
            return await http_exception_handler(request, exc)
        return JSONResponse(status_code=405, content={"error": "Method not allowed"}, headers=exc.headers)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(SYNC_PATH, response_model=SyncResponse, responses=_ERROR_RESPONSES)
    async def sync_production(request: Request) -> SyncResponse:
        body = await request.body()
        try:
            result = await run_in_threadpool(syncer.run, body)
        except SyncError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error in sync-production")
            raise SyncError(str(exc) or "Unknown error") from exc
        return SyncResponse(**result.to_payload())

    @app.options(SYNC_PATH)
    async def sync_preflight() -> Response:
        return Response(status_code=200)

    return app


__all__ = ["SYNC_PATH", "create_app"]
