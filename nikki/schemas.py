from __future__ import annotations

from typing import Optional, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EntryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str
    mood_color: Optional[str] = Field(None, alias="moodColor")
    images: List[str] = Field(default_factory=list)


class GuestEntryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: str = Field(..., validation_alias=AliasChoices("day", "date"))
    content: str = ""
    mood_color: Optional[str] = Field(None, validation_alias=AliasChoices("moodColor", "mood_color"))
    images: List[str] = Field(default_factory=list)


class GuestSyncPayload(BaseModel):
    entries: List[GuestEntryPayload] = Field(default_factory=list)


class RegisterPayload(BaseModel):
    name: str
    email: str
    password: str


class LoginPayload(BaseModel):
    email: str
    password: str


class SettingsPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    theme_color: Optional[str] = Field(None, alias="themeColor")
    reduced_motion: Optional[bool] = Field(None, alias="reducedMotion")


class PasswordChangePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")


class ProfileImagePayload(BaseModel):
    url: str


class VentWordPayload(BaseModel):
    word: str = ""


class ImageUploadPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data_uri: str = Field(..., alias="dataUri")


class StatsResponse(BaseModel):
    totalEntries: int
    streak: int
    frequentMood: str
    degraded: bool = False


class SyncResponse(BaseModel):
    success: bool
    count: int
    overwritten: List[str] = Field(default_factory=list)
