
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Boolean, String, DateTime
from coastwatch.db.session import Base

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

class SystemSettings(Base):
    __tablename__ = "system_settings"
    id = Column(Integer, primary_key=True, default=1)
    telegram_enabled = Column(Boolean, nullable=False, default=True)
    telegram_chat_id = Column(String(255), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc, onupdate=_now_utc)
