from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from nikki.auth import hash_password, verify_password
from nikki.errors import InvalidCredentials, NotFound, ValidationError
from nikki.models import UserAccount
from nikki.repositories import AccountStore
from nikki.services.stats import StatisticsEngine

logger = logging.getLogger(__name__)

THEME_COLORS = ("violet", "teal", "orange")
MIN_PASSWORD_LENGTH = 8


class AccountService:
    def __init__(self, accounts: AccountStore, stats: StatisticsEngine):
        self.accounts = accounts
        self.stats = stats

    async def register(self, name: str, email: str, password: str) -> UserAccount:
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise ValidationError("All fields are required")
        if "@" not in email:
            raise ValidationError("Please provide a valid email")
        account = await self.accounts.create(name, email, hash_password(password))
        logger.info("Registered account %s", account.id)
        return account

    async def authenticate(self, email: str, password: str) -> UserAccount:
        if not email or not password:
            raise ValidationError("All fields are required")
        account = await self.accounts.get_with_password(email=email)
        if account is None or not verify_password(password, account.password_hash):
            raise InvalidCredentials()
        account.password_hash = None
        return account

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        account = await self.accounts.get_with_password(user_id=user_id)
        if account is None:
            raise NotFound("Account not found")
        if not verify_password(current_password, account.password_hash):
            raise InvalidCredentials("Current password is incorrect")
        await self.accounts.update(user_id, {"password_hash": hash_password(new_password)})

    async def get_profile(self, user_id: str) -> Dict[str, Any]:
        account = await self.accounts.get(user_id)
        if account is None:
            raise NotFound("Account not found")
        stats = await self.stats.summary(user_id)
        return {**account.to_payload(), "stats": stats.to_payload()}

    async def update_settings(
        self,
        user_id: str,
        theme_color: Optional[str] = None,
        reduced_motion: Optional[bool] = None,
    ) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        if theme_color is not None:
            if theme_color not in THEME_COLORS:
                raise ValidationError(f"Unknown theme color: {theme_color}")
            fields["theme_color"] = theme_color
        if reduced_motion is not None:
            fields["reduced_motion"] = bool(reduced_motion)
        if not fields:
            raise ValidationError("No changes provided")
        if not await self.accounts.update(user_id, fields):
            raise NotFound("Account not found")
        account = await self.accounts.get(user_id)
        return account.to_payload()["settings"]

    async def set_profile_image(self, user_id: str, url: str) -> Dict[str, Any]:
        url = (url or "").strip()
        if not url:
            raise ValidationError("Missing image url")
        if not await self.accounts.update(user_id, {"profile_image_url": url}):
            raise NotFound("Account not found")
        return {"profileImageUrl": url}
