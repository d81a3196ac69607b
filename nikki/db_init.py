from __future__ import annotations

import logging

from sqlalchemy import text as sql_text

from nikki.db import Database

logger = logging.getLogger(__name__)

ENTRIES_TABLE = "diary_entries"
USERS_TABLE = "users"
VENT_TABLE = "vent_words"


async def init_db(database: Database) -> None:
    async with database.engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    theme_color TEXT DEFAULT 'violet',
                    reduced_motion INTEGER DEFAULT 0,
                    profile_image_url TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {ENTRIES_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    day TEXT NOT NULL,
                    content_cipher TEXT NOT NULL,
                    mood_color TEXT NOT NULL,
                    images_json TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE (user_id, day)
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {VENT_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    word TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
        )

    async def ensure_index(index_sql: str) -> None:
        try:
            async with database.engine.begin() as conn:
                await conn.execute(sql_text(index_sql))
        except Exception as exc:
            logger.warning("Index creation skipped: %s", exc)

    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{ENTRIES_TABLE}_user_mood "
        f"ON {ENTRIES_TABLE} (user_id, mood_color)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{VENT_TABLE}_user_created "
        f"ON {VENT_TABLE} (user_id, created_at DESC)"
    )
