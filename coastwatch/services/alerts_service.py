from typing import Optional, Dict, Any, List
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from coastwatch.models.alert import Alert
from coastwatch.models.hazard_report import HazardReport
from coastwatch.schemas.alert import AlertOut
from coastwatch.services.realtime import change_feed, ALERTS_TABLE


class AlertValidationError(Exception):
    pass


def alert_to_dict(alert: Alert) -> Dict[str, Any]:
    return AlertOut.model_validate(alert).model_dump(mode="json")


def create_alert(
    db: Session,
    *,
    sender_id: UUID,
    message: str,
    sent_to: Optional[str] = "all",
    report_id: Optional[UUID] = None,
) -> Alert:
    text = (message or "").strip()
    if not text:
        raise AlertValidationError("Alert message is required")
    if report_id is not None:
        exists = db.query(HazardReport.id).filter(HazardReport.id == report_id).first()
        if not exists:
            raise AlertValidationError("Related report not found")

    alert = Alert(
        alert_message=text,
        sent_to=(sent_to or "all").strip() or "all",
        sender_id=sender_id,
        report_id=report_id,
        is_active=True,
    )
    db.add(alert)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(alert)
    change_feed.publish(ALERTS_TABLE, "INSERT", alert_to_dict(alert))
    return alert


def list_alerts(db: Session, *, include_inactive: bool = False) -> List[Alert]:
    q = db.query(Alert)
    if not include_inactive:
        q = q.filter(Alert.is_active.is_(True))
    return q.order_by(Alert.created_at.desc()).all()


def get_alert(db: Session, alert_id: UUID) -> Optional[Alert]:
    return db.query(Alert).filter(Alert.id == alert_id).first()


def deactivate_alert(db: Session, alert: Alert) -> Alert:
    alert.is_active = False
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(alert)
    return alert
