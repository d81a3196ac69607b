from __future__ import annotations

import logging
import threading
from urllib.parse import urlparse, urlunparse, parse_qsl, urlencode

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine

logger = logging.getLogger(__name__)


def normalize_database_url(database_url: str) -> str:
    url = str(database_url or "").strip()
    if not url:
        return url
    if url.startswith("postgres://"):
        url = "postgresql+asyncpg://" + url[len("postgres://") :]
    elif url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://") :]
    elif url.startswith("postgresql+psycopg2://"):
        url = "postgresql+asyncpg://" + url[len("postgresql+psycopg2://") :]
    if not url.startswith("postgresql+asyncpg://"):
        return url
    try:
        parsed = urlparse(url)
        query_items = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True)]
        clean = []
        ssl_requested = False
        for key, value in query_items:
            if key == "sslmode":
                ssl_requested = True
                continue
            if key in {"channel_binding", "ssl"}:
                continue
            clean.append((key, value))
        if ssl_requested:
            clean.append(("ssl", "true"))
        parsed = parsed._replace(query=urlencode(clean))
        url = urlunparse(parsed)
    except ValueError:
        return url
    return url


class Database:
    """Store client: connects once on first use and reuses the engine afterwards."""

    def __init__(self, database_url: str):
        self.url = normalize_database_url(database_url)
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker | None = None
        self._lock = threading.Lock()

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def _create_engine(self) -> AsyncEngine:
        engine_kwargs: dict = {"pool_pre_ping": True}
        if self.is_sqlite:
            return create_async_engine(self.url, **engine_kwargs)
        engine_kwargs.update({"pool_size": 20, "max_overflow": 10})
        connect_args: dict = {}
        parsed = urlparse(self.url)
        host = parsed.hostname or ""
        if host and host not in {"localhost", "127.0.0.1"}:
            connect_args["ssl"] = True
        if connect_args:
            return create_async_engine(self.url, connect_args=connect_args, **engine_kwargs)
        return create_async_engine(self.url, **engine_kwargs)

    def _ensure_initialized(self) -> None:
        if self._engine is not None:
            return
        with self._lock:
            if self._engine is None:
                logger.info("Creating database engine for %s", urlparse(self.url).scheme)
                self._engine = self._create_engine()
                self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    @property
    def engine(self) -> AsyncEngine:
        self._ensure_initialized()
        return self._engine

    def sessionmaker(self) -> async_sessionmaker:
        self._ensure_initialized()
        return self._session_factory

    async def dispose(self) -> None:
        with self._lock:
            engine = self._engine
            self._engine = None
            self._session_factory = None
        if engine is not None:
            await engine.dispose()
