from decimal import Decimal
from typing import Optional, Dict, Any, List, Mapping
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from coastwatch.models.hazard_report import HazardReport
from coastwatch.models.enums import HazardType, Urgency, ReportStatus, UserRole
from coastwatch.schemas.report import ReportOut
from coastwatch.services.credibility import DEFAULT_SCORE
from coastwatch.services.realtime import change_feed, REPORTS_TABLE
from coastwatch.services.roles import role_satisfies


def report_to_dict(report: HazardReport) -> Dict[str, Any]:
    return ReportOut.model_validate(report).model_dump(mode="json")


def create_report(
    db: Session,
    *,
    user_id: UUID,
    hazard_type: HazardType,
    description: str,
    location: str,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    contact_number: Optional[str] = None,
    image_url: Optional[str] = None,
    urgency: Optional[Urgency] = None,
    credibility_score: Optional[Decimal] = None,
) -> HazardReport:
    report = HazardReport(
        user_id=user_id,
        hazard_type=hazard_type,
        description=description,
        location=location,
        latitude=latitude,
        longitude=longitude,
        contact_number=contact_number or None,
        image_url=image_url,
        urgency=urgency or Urgency.medium,
        status=ReportStatus.submitted,
        credibility_score=DEFAULT_SCORE if credibility_score is None else credibility_score,
    )
    db.add(report)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(report)
    change_feed.publish(REPORTS_TABLE, "INSERT", report_to_dict(report))
    return report


def list_reports(db: Session, *, viewer_id: UUID, viewer_role: UserRole) -> List[HazardReport]:
    """authority/admin видят всё, citizen только свои. Новые сверху."""
    q = db.query(HazardReport)
    if not role_satisfies(viewer_role, UserRole.authority):
        q = q.filter(HazardReport.user_id == viewer_id)
    return q.order_by(HazardReport.created_at.desc()).all()


def get_report(db: Session, report_id: UUID) -> Optional[HazardReport]:
    return db.query(HazardReport).filter(HazardReport.id == report_id).first()


def can_view(report: HazardReport, *, viewer_id: UUID, viewer_role: UserRole) -> bool:
    return report.user_id == viewer_id or role_satisfies(viewer_role, UserRole.authority)


def update_report(db: Session, report: HazardReport, fields: Mapping[str, Any]) -> HazardReport:
    """Применяет поля одним коммитом и публикует одно UPDATE."""
    for name, value in fields.items():
        setattr(report, name, value)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(report)
    change_feed.publish(REPORTS_TABLE, "UPDATE", report_to_dict(report))
    return report


def update_report_status(
    db: Session,
    report: HazardReport,
    *,
    status: Optional[ReportStatus] = None,
    urgency: Optional[Urgency] = None,
) -> HazardReport:
    # переходы статусов не ограничены; конкурентные правки: last write wins
    fields: Dict[str, Any] = {}
    if status is not None:
        fields["status"] = status
    if urgency is not None:
        fields["urgency"] = urgency
    return update_report(db, report, fields)


def delete_report(db: Session, report: HazardReport) -> None:
    db.delete(report)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
