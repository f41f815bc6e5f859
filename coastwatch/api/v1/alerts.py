from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from coastwatch.db.session import get_db
from coastwatch.core.deps import get_current_user, get_current_role, require_role
from coastwatch.models.account import Account
from coastwatch.models.enums import UserRole
from coastwatch.schemas.alert import AlertCreate, AlertOut
from coastwatch.services import alerts_service
from coastwatch.services.alerts_service import AlertValidationError
from coastwatch.services.notify import send_alert_notification
from coastwatch.services.roles import role_satisfies

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.post("", response_model=AlertOut, status_code=status.HTTP_201_CREATED)
def create_alert(
    payload: AlertCreate,
    user: Account = Depends(require_role(UserRole.authority)),
    db: Session = Depends(get_db),
):
    try:
        alert = alerts_service.create_alert(
            db,
            sender_id=user.id,
            message=payload.alert_message,
            sent_to=payload.sent_to,
            report_id=payload.report_id,
        )
    except AlertValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    send_alert_notification(db, alert)
    return alert


@router.get("", response_model=List[AlertOut])
def list_alerts(
    include_inactive: bool = Query(False, description="authority/admin: include deactivated alerts"),
    _user: Account = Depends(get_current_user),
    role: UserRole = Depends(get_current_role),
    db: Session = Depends(get_db),
):
    # citizen всегда видит только активные
    include_inactive = include_inactive and role_satisfies(role, UserRole.authority)
    return alerts_service.list_alerts(db, include_inactive=include_inactive)


@router.post("/{alert_id}/deactivate", response_model=AlertOut, dependencies=[Depends(require_role(UserRole.authority))])
def deactivate_alert(alert_id: UUID, db: Session = Depends(get_db)):
    alert = alerts_service.get_alert(db, alert_id)
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alerts_service.deactivate_alert(db, alert)
