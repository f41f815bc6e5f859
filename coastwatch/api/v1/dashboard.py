from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from coastwatch.db.session import get_db
from coastwatch.core.deps import require_role
from coastwatch.models.account import Account
from coastwatch.models.enums import UserRole
from coastwatch.schemas.dashboard import DashboardReportsOut, MarkerOut
from coastwatch.services import reports_service
from coastwatch.services.dashboard import DashboardState, band_counts, filter_reports

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _state(db: Session, user: Account) -> DashboardState:
    reports = reports_service.list_reports(db, viewer_id=user.id, viewer_role=UserRole.authority)
    return DashboardState(reports=[reports_service.report_to_dict(r) for r in reports])


@router.get("/reports", response_model=DashboardReportsOut)
def dashboard_reports(
    urgency: str = Query("all"),
    credibility: str = Query("all"),
    user: Account = Depends(require_role(UserRole.authority)),
    db: Session = Depends(get_db),
):
    state = _state(db, user)
    try:
        visible = filter_reports(state.reports, urgency=urgency, credibility=credibility)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return DashboardReportsOut(total=len(visible), bands=band_counts(state.reports), reports=visible)


@router.get("/markers", response_model=List[MarkerOut])
def dashboard_markers(
    urgency: str = Query("all"),
    credibility: str = Query("all"),
    user: Account = Depends(require_role(UserRole.authority)),
    db: Session = Depends(get_db),
):
    state = _state(db, user)
    try:
        state.set_filters(urgency=urgency, credibility=credibility)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return state.markers()
