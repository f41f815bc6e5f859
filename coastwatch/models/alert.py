import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Boolean, Uuid
from coastwatch.db.session import Base

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

class Alert(Base):
    __tablename__ = "alerts"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    report_id = Column(Uuid(as_uuid=True), ForeignKey("hazard_reports.id", ondelete="SET NULL"), nullable=True, index=True)
    alert_message = Column(Text, nullable=False)
    sent_to = Column(String(64), nullable=True)  # "all" / "nearby" / произвольный критерий
    sender_id = Column(Uuid(as_uuid=True), ForeignKey("accounts.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
