from __future__ import annotations

import asyncio
import json
import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Iterable
from uuid import uuid4

from sqlalchemy import text as sql_text, bindparam
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from nikki.daykeys import day_range, format_instant, month_range, parse_day_key
from nikki.db import Database
from nikki.db_init import ENTRIES_TABLE, USERS_TABLE, VENT_TABLE
from nikki.errors import Conflict, StoreUnavailable, ValidationError
from nikki.models import DiaryRecord, UserAccount, VentWord
from nikki.services.crypto import ContentCipher

logger = logging.getLogger(__name__)

ENTRY_SELECT_COLUMNS = [
    "id",
    "user_id",
    "day",
    "content_cipher",
    "mood_color",
    "images_json",
    "created_at",
    "updated_at",
]

USER_SELECT_COLUMNS = [
    "id",
    "name",
    "email",
    "theme_color",
    "reduced_motion",
    "profile_image_url",
    "created_at",
]

VENT_SELECT_COLUMNS = ["id", "user_id", "word", "created_at"]

MAX_VENT_WORD_LENGTH = 50

UPSERT_ENTRY_SQL = f"""
    INSERT INTO {ENTRIES_TABLE} ({', '.join(ENTRY_SELECT_COLUMNS)})
    VALUES (:id, :user_id, :day, :content_cipher, :mood_color, :images_json, :created_at, :updated_at)
    ON CONFLICT (user_id, day) DO UPDATE SET
        content_cipher = EXCLUDED.content_cipher,
        mood_color = EXCLUDED.mood_color,
        images_json = EXCLUDED.images_json,
        updated_at = EXCLUDED.updated_at
"""


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return format_instant(datetime.now(timezone.utc))


def _normalize_images(images) -> list[str]:
    if not images:
        return []
    return [str(url).strip() for url in images if url and str(url).strip()]


def _load_images(raw) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return [str(item) for item in value] if isinstance(value, list) else []


@contextmanager
def _store_call(action: str):
    try:
        yield
    except (SQLAlchemyError, OSError, TimeoutError, asyncio.TimeoutError) as exc:
        logger.exception("Store call failed during %s: %s", action, exc)
        raise StoreUnavailable(f"Storage unavailable while trying to {action}") from exc


class EntryStore:
    """One diary record per (user, day), content encrypted at rest."""

    def __init__(self, database: Database, cipher: ContentCipher, default_mood_color: str = "#8b5cf6"):
        self.database = database
        self.cipher = cipher
        self.default_mood_color = default_mood_color

    def _row_to_record(self, row) -> DiaryRecord:
        payload = dict(row)
        return DiaryRecord(
            id=payload["id"],
            user_id=payload["user_id"],
            day=parse_day_key(payload["day"]),
            content=self.cipher.decrypt(payload.get("content_cipher") or ""),
            mood_color=payload.get("mood_color") or self.default_mood_color,
            images=_load_images(payload.get("images_json")),
            created_at=payload.get("created_at"),
            updated_at=payload.get("updated_at"),
        )

    def _write_params(self, user_id: str, day, content: str, mood_color: str | None, images) -> dict:
        if not user_id:
            raise ValidationError("Missing user")
        if content is None or not str(content).strip():
            raise ValidationError("Please provide some content for your diary entry.")
        now = _now_iso()
        return {
            "id": _new_id(),
            "user_id": user_id,
            "day": day_range(day).start_key,
            "content_cipher": self.cipher.encrypt(str(content)),
            "mood_color": (mood_color or "").strip() or self.default_mood_color,
            "images_json": json.dumps(_normalize_images(images)),
            "created_at": now,
            "updated_at": now,
        }

    async def find_by_day(self, user_id: str, day) -> DiaryRecord | None:
        bounds = day_range(day)
        with _store_call("load entry"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                row = (await session.execute(
                    sql_text(
                        f"SELECT {', '.join(ENTRY_SELECT_COLUMNS)} FROM {ENTRIES_TABLE} "
                        "WHERE user_id = :user_id AND day BETWEEN :start AND :end "
                        "ORDER BY day LIMIT 1"
                    ),
                    {"user_id": user_id, "start": bounds.start_key, "end": bounds.end_key},
                )).mappings().fetchone()
        return self._row_to_record(row) if row else None

    async def find_by_month(self, user_id: str, year: int, month: int) -> list[DiaryRecord]:
        bounds = month_range(year, month)
        with _store_call("load month"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                rows = (await session.execute(
                    sql_text(
                        f"""
                        SELECT {', '.join(ENTRY_SELECT_COLUMNS)}
                        FROM {ENTRIES_TABLE}
                        WHERE user_id = :user_id
                          AND day BETWEEN :start AND :end
                        ORDER BY day
                        """
                    ),
                    {"user_id": user_id, "start": bounds.start_key, "end": bounds.end_key},
                )).mappings().all()
        return [self._row_to_record(row) for row in rows]

    async def upsert(self, user_id: str, day, content: str, mood_color: str | None, images=None) -> DiaryRecord:
        params = self._write_params(user_id, day, content, mood_color, images)
        with _store_call("save entry"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                await session.execute(sql_text(UPSERT_ENTRY_SQL), params)
                row = (await session.execute(
                    sql_text(
                        f"SELECT {', '.join(ENTRY_SELECT_COLUMNS)} FROM {ENTRIES_TABLE} "
                        "WHERE user_id = :user_id AND day = :day"
                    ),
                    {"user_id": user_id, "day": params["day"]},
                )).mappings().fetchone()
                await session.commit()
        return self._row_to_record(row)

    async def upsert_many(self, user_id: str, records: Iterable[dict]) -> int:
        """Write a batch of ``{day, content, mood_color, images}`` dicts in one transaction."""
        batch = [
            self._write_params(user_id, item["day"], item["content"], item.get("mood_color"), item.get("images"))
            for item in records
        ]
        if not batch:
            return 0
        with _store_call("merge entries"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                await session.execute(sql_text(UPSERT_ENTRY_SQL), batch)
                await session.commit()
        return len(batch)

    async def delete(self, user_id: str, day) -> bool:
        bounds = day_range(day)
        with _store_call("delete entry"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                result = await session.execute(
                    sql_text(
                        f"DELETE FROM {ENTRIES_TABLE} "
                        "WHERE user_id = :user_id AND day BETWEEN :start AND :end"
                    ),
                    {"user_id": user_id, "start": bounds.start_key, "end": bounds.end_key},
                )
                await session.commit()
        return bool(result.rowcount and result.rowcount > 0)

    async def count_by_user(self, user_id: str) -> int:
        with _store_call("count entries"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                value = (await session.execute(
                    sql_text(f"SELECT COUNT(*) FROM {ENTRIES_TABLE} WHERE user_id = :user_id"),
                    {"user_id": user_id},
                )).scalar()
        return int(value or 0)

    async def all_days_by_user(self, user_id: str) -> list[date]:
        with _store_call("list entry days"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                rows = (await session.execute(
                    sql_text(f"SELECT day FROM {ENTRIES_TABLE} WHERE user_id = :user_id ORDER BY day DESC"),
                    {"user_id": user_id},
                )).fetchall()
        return [parse_day_key(row[0]) for row in rows]

    async def mood_counts(self, user_id: str) -> list[tuple[str, int]]:
        with _store_call("aggregate moods"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                rows = (await session.execute(
                    sql_text(
                        f"""
                        SELECT mood_color, COUNT(*) AS total
                        FROM {ENTRIES_TABLE}
                        WHERE user_id = :user_id
                        GROUP BY mood_color
                        ORDER BY total DESC, mood_color ASC
                        """
                    ),
                    {"user_id": user_id},
                )).fetchall()
        return [(row[0], int(row[1])) for row in rows]

    async def existing_days(self, user_id: str, day_keys: list[str]) -> set[str]:
        if not day_keys:
            return set()
        with _store_call("check existing days"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                rows = (await session.execute(
                    sql_text(
                        f"SELECT day FROM {ENTRIES_TABLE} WHERE user_id = :user_id AND day IN :days"
                    ).bindparams(bindparam("days", expanding=True)),
                    {"user_id": user_id, "days": list(day_keys)},
                )).fetchall()
        return {row[0] for row in rows}

    async def export_all(self, user_id: str) -> list[DiaryRecord]:
        with _store_call("export entries"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                rows = (await session.execute(
                    sql_text(
                        f"SELECT {', '.join(ENTRY_SELECT_COLUMNS)} FROM {ENTRIES_TABLE} "
                        "WHERE user_id = :user_id ORDER BY day"
                    ),
                    {"user_id": user_id},
                )).mappings().all()
        return [self._row_to_record(row) for row in rows]


class AccountStore:
    def __init__(self, database: Database):
        self.database = database

    @staticmethod
    def _row_to_account(row, with_hash: bool = False) -> UserAccount:
        payload = dict(row)
        return UserAccount(
            id=payload["id"],
            name=payload["name"],
            email=payload["email"],
            theme_color=payload.get("theme_color") or "violet",
            reduced_motion=bool(int(payload.get("reduced_motion") or 0)),
            profile_image_url=payload.get("profile_image_url"),
            password_hash=payload.get("password_hash") if with_hash else None,
            created_at=payload.get("created_at"),
        )

    async def create(self, name: str, email: str, password_hash: str) -> UserAccount:
        now = _now_iso()
        payload = {
            "id": _new_id(),
            "name": name,
            "email": email.strip().lower(),
            "password_hash": password_hash,
            "created_at": now,
            "updated_at": now,
        }
        with _store_call("create account"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                try:
                    await session.execute(
                        sql_text(
                            f"""
                            INSERT INTO {USERS_TABLE} (id, name, email, password_hash, created_at, updated_at)
                            VALUES (:id, :name, :email, :password_hash, :created_at, :updated_at)
                            """
                        ),
                        payload,
                    )
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    raise Conflict("Email already exists")
        return UserAccount(id=payload["id"], name=name, email=payload["email"], created_at=now)

    async def get(self, user_id: str) -> UserAccount | None:
        with _store_call("load account"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                row = (await session.execute(
                    sql_text(f"SELECT {', '.join(USER_SELECT_COLUMNS)} FROM {USERS_TABLE} WHERE id = :id"),
                    {"id": user_id},
                )).mappings().fetchone()
        return self._row_to_account(row) if row else None

    async def get_with_password(self, *, email: str | None = None, user_id: str | None = None) -> UserAccount | None:
        if email:
            clause, params = "email = :email", {"email": email.strip().lower()}
        elif user_id:
            clause, params = "id = :id", {"id": user_id}
        else:
            return None
        with _store_call("load credentials"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                row = (await session.execute(
                    sql_text(
                        f"SELECT {', '.join(USER_SELECT_COLUMNS)}, password_hash FROM {USERS_TABLE} WHERE {clause}"
                    ),
                    params,
                )).mappings().fetchone()
        return self._row_to_account(row, with_hash=True) if row else None

    async def update(self, user_id: str, fields: dict) -> bool:
        allowed = {"name", "password_hash", "theme_color", "reduced_motion", "profile_image_url"}
        updates = {key: value for key, value in fields.items() if key in allowed}
        if not updates:
            return False
        if "reduced_motion" in updates:
            updates["reduced_motion"] = int(bool(updates["reduced_motion"]))
        updates["updated_at"] = _now_iso()
        set_clause = ", ".join([f"{key} = :{key}" for key in updates])
        with _store_call("update account"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                result = await session.execute(
                    sql_text(f"UPDATE {USERS_TABLE} SET {set_clause} WHERE id = :id"),
                    {**updates, "id": user_id},
                )
                await session.commit()
        return bool(result.rowcount and result.rowcount > 0)


class VentStore:
    """Short words a user throws at the vent wall, newest first."""

    def __init__(self, database: Database):
        self.database = database

    async def list_by_user(self, user_id: str) -> list[VentWord]:
        with _store_call("load vent words"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                rows = (await session.execute(
                    sql_text(
                        f"SELECT {', '.join(VENT_SELECT_COLUMNS)} FROM {VENT_TABLE} "
                        "WHERE user_id = :user_id ORDER BY created_at DESC"
                    ),
                    {"user_id": user_id},
                )).mappings().all()
        return [VentWord(**dict(row)) for row in rows]

    async def add(self, user_id: str, word: str, created_at: str | None = None) -> VentWord:
        cleaned = (word or "").strip()
        if not cleaned:
            raise ValidationError("Please type a word first.")
        if len(cleaned) > MAX_VENT_WORD_LENGTH:
            raise ValidationError(f"Words are limited to {MAX_VENT_WORD_LENGTH} characters.")
        record = VentWord(id=_new_id(), user_id=user_id, word=cleaned, created_at=created_at or _now_iso())
        with _store_call("add vent word"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                await session.execute(
                    sql_text(
                        f"INSERT INTO {VENT_TABLE} ({', '.join(VENT_SELECT_COLUMNS)}) "
                        "VALUES (:id, :user_id, :word, :created_at)"
                    ),
                    {"id": record.id, "user_id": user_id, "word": cleaned, "created_at": record.created_at},
                )
                await session.commit()
        return record

    async def clear(self, user_id: str) -> int:
        with _store_call("clear vent words"):
            session_factory = self.database.sessionmaker()
            async with session_factory() as session:
                result = await session.execute(
                    sql_text(f"DELETE FROM {VENT_TABLE} WHERE user_id = :user_id"),
                    {"user_id": user_id},
                )
                await session.commit()
        return int(result.rowcount or 0)
