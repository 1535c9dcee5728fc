"""
FastAPI application entry point for the parking backend.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException

from parkmaster.config import Settings, get_settings
from parkmaster.dependencies import build_backup_mirror, build_document_store
from parkmaster.mirror import BackupMirror
from parkmaster.routes import router
from parkmaster.store import DocumentStore
from parkmaster.sync import SnapshotSynchronizer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    sync = SnapshotSynchronizer(app.state.document_store, app.state.backup_mirror)
    sync.restore_on_startup()
    logger.info("Using data directory: %s", settings.data_dir)
    if app.state.backup_mirror.enabled:
        logger.info("Remote storage enabled (bucket: %s)", settings.storage_bucket)
    else:
        logger.info("Remote storage not configured")
    yield


async def _error_body(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers
    )


def _mount_frontend(app: FastAPI, static_dir: str) -> None:
    """Serve the built front end for every path the API does not handle."""
    root = os.path.realpath(static_dir)
    index = os.path.join(root, "index.html")
    if not os.path.isfile(index):
        logger.warning("No index.html in %s; front end not served", root)
        return

    @app.get("/{full_path:path}", include_in_schema=False)
    def frontend(full_path: str):
        candidate = os.path.realpath(os.path.join(root, full_path))
        if candidate.startswith(root + os.sep) and os.path.isfile(candidate):
            return FileResponse(candidate)
        return FileResponse(index)


def create_app(
    settings: Settings | None = None,
    *,
    store: DocumentStore | None = None,
    mirror: BackupMirror | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Park Master Backend", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.document_store = store or build_document_store(settings)
    app.state.backup_mirror = mirror or build_backup_mirror(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HTTPException, _error_body)
    app.include_router(router, prefix=settings.api_prefix)
    if settings.static_dir and os.path.isdir(settings.static_dir):
        _mount_frontend(app, settings.static_dir)
    return app

