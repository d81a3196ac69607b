from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from nikki.db import Database
from nikki.db_init import init_db
from nikki.errors import DiaryError
from nikki.logging_config import configure_logging
from nikki.routes import account, auth, entries, images, stats, sync, vent
from nikki.services.crypto import ContentCipher
from nikki.services.image_hosting import ImageHostingClient
from nikki.settings import Settings, get_settings


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    image_client: ImageHostingClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="Nikki Diary API", version="0.1.0")

    app.state.settings = settings
    app.state.database = database or Database(settings.database_url)
    app.state.cipher = ContentCipher(settings.encryption_key)
    app.state.image_client = image_client or ImageHostingClient.from_settings(settings)

    app.include_router(auth.router)
    app.include_router(entries.router)
    app.include_router(stats.router)
    app.include_router(sync.router)
    app.include_router(account.router)
    app.include_router(images.router)
    app.include_router(vent.router)

    @app.on_event("startup")
    async def _startup():
        await init_db(app.state.database)

    @app.on_event("shutdown")
    async def _shutdown():
        await app.state.database.dispose()

    @app.exception_handler(DiaryError)
    async def _diary_error_handler(request: Request, exc: DiaryError):
        if exc.status_code >= 500:
            logging.getLogger("nikki").error("%s on %s: %s", type(exc).__name__, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logging.getLogger("nikki").exception("Unhandled exception: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Internal error"})

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


app = create_app()
