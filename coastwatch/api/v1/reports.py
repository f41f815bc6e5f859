from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from coastwatch.db.session import get_db
from coastwatch.core.deps import get_current_user, get_current_role
from coastwatch.models.account import Account
from coastwatch.models.enums import UserRole
from coastwatch.schemas.report import ReportOut, ReportUpdate
from coastwatch.services import reports_service
from coastwatch.services.intake import (
    ReportSubmission, UploadedImage, ReportValidationError, ImageUploadError, submit_report, prepare_edit,
)
from coastwatch.services.storage import LocalBucket, get_report_images_bucket
from coastwatch.services.roles import role_satisfies

router = APIRouter(prefix="/reports", tags=["reports"])


def _uploaded(image: Optional[UploadFile]) -> Optional[UploadedImage]:
    if image is None or not image.filename:
        return None
    data = image.file.read()
    return UploadedImage(filename=image.filename, content_type=image.content_type, data=data)


@router.post("", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
def create_report(
    hazard_type: str = Form(""),
    description: str = Form(""),
    location: str = Form(""),
    contact_number: Optional[str] = Form(None),
    latitude: Optional[float] = Form(None),
    longitude: Optional[float] = Form(None),
    urgency: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: Account = Depends(get_current_user),
    db: Session = Depends(get_db),
    bucket: LocalBucket = Depends(get_report_images_bucket),
):
    form = ReportSubmission(
        hazard_type=hazard_type,
        description=description,
        location=location,
        contact_number=contact_number,
        latitude=latitude,
        longitude=longitude,
        urgency=urgency,
    )
    try:
        return submit_report(db, bucket, owner_id=user.id, form=form, image=_uploaded(image))
    except ReportValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ImageUploadError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("", response_model=List[ReportOut])
def list_reports(
    user: Account = Depends(get_current_user),
    role: UserRole = Depends(get_current_role),
    db: Session = Depends(get_db),
):
    return reports_service.list_reports(db, viewer_id=user.id, viewer_role=role)


@router.get("/{report_id}", response_model=ReportOut)
def get_report(
    report_id: UUID,
    user: Account = Depends(get_current_user),
    role: UserRole = Depends(get_current_role),
    db: Session = Depends(get_db),
):
    report = reports_service.get_report(db, report_id)
    # чужой отчёт для citizen не существует
    if not report or not reports_service.can_view(report, viewer_id=user.id, viewer_role=role):
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.patch("/{report_id}", response_model=ReportOut)
def update_report(
    report_id: UUID,
    payload: ReportUpdate,
    user: Account = Depends(get_current_user),
    role: UserRole = Depends(get_current_role),
    db: Session = Depends(get_db),
):
    report = reports_service.get_report(db, report_id)
    if not report or not reports_service.can_view(report, viewer_id=user.id, viewer_role=role):
        raise HTTPException(status_code=404, detail="Report not found")

    review = payload.review_changes()
    details = payload.owner_changes()
    if review and not role_satisfies(role, UserRole.authority):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    if details and report.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the author can edit report details")

    fields = dict(review)
    if details:
        try:
            fields.update(prepare_edit(report, details))
        except ReportValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
    return reports_service.update_report(db, report, fields)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_report(
    report_id: UUID,
    user: Account = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    report = reports_service.get_report(db, report_id)
    if not report or report.user_id != user.id:
        raise HTTPException(status_code=404, detail="Report not found")
    reports_service.delete_report(db, report)
    return
