from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from nikki.daykeys import utc_midnight, format_instant


@dataclass
class DiaryRecord:
    id: str
    user_id: str
    day: date
    content: str
    mood_color: str
    images: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def day_key(self) -> str:
        return format_instant(utc_midnight(self.day))

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "day": self.day_key,
            "content": self.content,
            "moodColor": self.mood_color,
            "images": list(self.images),
        }


@dataclass
class UserAccount:
    id: str
    name: str
    email: str
    theme_color: str = "violet"
    reduced_motion: bool = False
    profile_image_url: Optional[str] = None
    password_hash: Optional[str] = field(default=None, repr=False)
    created_at: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "settings": {"themeColor": self.theme_color, "reducedMotion": self.reduced_motion},
            "profileImageUrl": self.profile_image_url,
        }


@dataclass
class GuestRecord:
    day: str
    content: str
    mood_color: str
    images: List[str] = field(default_factory=list)


@dataclass
class Stats:
    total_entries: int
    streak: int
    frequent_mood: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "totalEntries": self.total_entries,
            "streak": self.streak,
            "frequentMood": self.frequent_mood,
        }


@dataclass
class MergeResult:
    success: bool
    count: int
    overwritten: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {"success": self.success, "count": self.count, "overwritten": list(self.overwritten)}


@dataclass
class VentWord:
    id: str
    user_id: str
    word: str
    created_at: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self.id, "word": self.word, "createdAt": self.created_at}
