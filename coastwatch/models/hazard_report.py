import uuid
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import (
    Column, String, DateTime, Enum, Float, ForeignKey, Text, Numeric, CheckConstraint, Index, Uuid,
)
from coastwatch.db.session import Base
from coastwatch.models.enums import HazardType, Urgency, ReportStatus, enum_values

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

class HazardReport(Base):
    __tablename__ = "hazard_reports"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    hazard_type = Column(
        Enum(HazardType, name="hazard_type", native_enum=False, values_callable=enum_values),
        nullable=False,
    )
    description = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    contact_number = Column(String(64), nullable=True)
    image_url = Column(Text, nullable=True)
    urgency = Column(
        Enum(Urgency, name="urgency", native_enum=False, values_callable=enum_values),
        nullable=False, default=Urgency.medium,
    )
    status = Column(
        Enum(ReportStatus, name="report_status", native_enum=False, values_callable=enum_values),
        nullable=False, default=ReportStatus.submitted, index=True,
    )
    credibility_score = Column(Numeric(3, 2), nullable=False, default=Decimal("0.50"))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc, onupdate=_now_utc)

    __table_args__ = (
        CheckConstraint("credibility_score >= 0 AND credibility_score <= 1", name="ck_hazard_reports_score_range"),
        Index("ix_hazard_reports_coordinates", "latitude", "longitude"),
    )
