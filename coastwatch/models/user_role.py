import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Enum, ForeignKey, UniqueConstraint, Uuid
from coastwatch.db.session import Base
from coastwatch.models.enums import UserRole

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

class UserRoleGrant(Base):
    __tablename__ = "user_roles"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(UserRole, name="user_role", native_enum=False), nullable=False, default=UserRole.citizen)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc, onupdate=_now_utc)

    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"), )
