import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from coastwatch.db.session import Base

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

class Account(Base):
    """Учётная запись (логин). Роли в user_roles, данные пользователя в profiles."""
    __tablename__ = "accounts"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_now_utc, nullable=False)
