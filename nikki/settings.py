from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")
    encryption_key: str = Field(..., min_length=1, alias="ENCRYPTION_KEY")
    session_secret: str = Field(..., min_length=1, alias="SESSION_SECRET")

    session_ttl_days: int = Field(7, alias="SESSION_TTL_DAYS")
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")

    default_mood_color: str = Field("#8b5cf6", alias="DEFAULT_MOOD_COLOR")

    cloudinary_cloud_name: str | None = Field(None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_upload_preset: str | None = Field(None, alias="CLOUDINARY_UPLOAD_PRESET")
    cloudinary_api_key: str | None = Field(None, alias="CLOUDINARY_API_KEY")

    log_level: str = Field("INFO", alias="NIKKI_LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    @property
    def image_hosting_enabled(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_upload_preset and self.cloudinary_api_key)


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
