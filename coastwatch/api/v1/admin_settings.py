from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from coastwatch.db.session import get_db
from coastwatch.core.deps import require_role
from coastwatch.models.enums import UserRole
from coastwatch.schemas.alert import AlertMirrorSettings, AlertMirrorSettingsUpdate
from coastwatch.services.notify import load_system_settings

router = APIRouter(prefix="/admin", tags=["admin-settings"], dependencies=[Depends(require_role(UserRole.admin))])

@router.get("/settings", response_model=AlertMirrorSettings)
def get_settings(db: Session = Depends(get_db)):
    return load_system_settings(db)

@router.put("/settings", response_model=AlertMirrorSettings)
def update_settings(payload: AlertMirrorSettingsUpdate, db: Session = Depends(get_db)):
    st = load_system_settings(db)
    if payload.telegram_enabled is not None:
        st.telegram_enabled = payload.telegram_enabled
    # chat_id меняется, только если передан в запросе
    if "telegram_chat_id" in payload.model_fields_set:
        st.telegram_chat_id = payload.telegram_chat_id
    db.commit(); db.refresh(st)
    return st
