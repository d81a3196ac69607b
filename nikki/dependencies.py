from __future__ import annotations

from fastapi import Depends, Request

from nikki.db import Database
from nikki.repositories import AccountStore, EntryStore, VentStore
from nikki.services.accounts import AccountService
from nikki.services.crypto import ContentCipher
from nikki.services.diary_service import DiaryService
from nikki.services.guest_sync import GuestSyncMerger
from nikki.services.image_hosting import ImageHostingClient
from nikki.services.stats import StatisticsEngine
from nikki.services.vent import VentService
from nikki.settings import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_cipher(request: Request) -> ContentCipher:
    return request.app.state.cipher


def get_image_client(request: Request) -> ImageHostingClient:
    return request.app.state.image_client


def get_entry_store(
    database: Database = Depends(get_database),
    cipher: ContentCipher = Depends(get_cipher),
    settings: Settings = Depends(get_app_settings),
) -> EntryStore:
    return EntryStore(database, cipher, settings.default_mood_color)


def get_statistics(
    store: EntryStore = Depends(get_entry_store),
    settings: Settings = Depends(get_app_settings),
) -> StatisticsEngine:
    return StatisticsEngine(store, settings.default_mood_color)


def get_diary_service(
    store: EntryStore = Depends(get_entry_store),
    stats: StatisticsEngine = Depends(get_statistics),
) -> DiaryService:
    return DiaryService(store, stats, GuestSyncMerger(store))


def get_account_service(
    database: Database = Depends(get_database),
    stats: StatisticsEngine = Depends(get_statistics),
) -> AccountService:
    return AccountService(AccountStore(database), stats)


def get_vent_service(database: Database = Depends(get_database)) -> VentService:
    return VentService(VentStore(database))
