import re
from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

_CHAT_ID_RE = re.compile(r"^(-?\d+|@[A-Za-z][A-Za-z0-9_]{4,})$")


class AlertCreate(BaseModel):
    alert_message: str
    sent_to: str = "all"
    report_id: Optional[UUID] = None


class AlertOut(BaseModel):
    id: UUID
    alert_message: str
    sent_to: Optional[str] = None
    sender_id: UUID
    report_id: Optional[UUID] = None
    created_at: datetime
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class AlertMirrorSettings(BaseModel):
    """Зеркалирование новых алертов в Telegram (строка system_settings id=1)."""
    telegram_enabled: bool = True
    telegram_chat_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AlertMirrorSettingsUpdate(BaseModel):
    telegram_enabled: Optional[bool] = None
    # числовой chat_id (группы отрицательные) или @channel; null или пустая строка: брать TELEGRAM_CHAT_ID_ADMIN
    telegram_chat_id: Optional[str] = None

    @field_validator("telegram_chat_id")
    @classmethod
    def _check_chat_id(cls, v):
        if v is None:
            return v
        v = v.strip()
        if v and not _CHAT_ID_RE.match(v):
            raise ValueError("telegram_chat_id must be a numeric chat id or @channel")
        return v or None
