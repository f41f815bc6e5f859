from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from coastwatch.models.enums import HazardType, Urgency, ReportStatus


class ReportOut(BaseModel):
    # типы соответствуют колонкам hazard_reports
    id: UUID
    user_id: UUID
    hazard_type: HazardType
    description: str
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contact_number: Optional[str] = None
    image_url: Optional[str] = None
    urgency: Urgency
    status: ReportStatus
    credibility_score: float
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


OWNER_FIELDS = ("description", "location", "contact_number", "latitude", "longitude")
REVIEW_FIELDS = ("status", "urgency")


class ReportUpdate(BaseModel):
    """
    Правка отчёта. status/urgency меняет сотрудник (любое значение в любой момент),
    остальные поля меняет только автор; учитываются лишь переданные поля.
    """
    status: Optional[ReportStatus] = None
    urgency: Optional[Urgency] = None

    description: Optional[str] = None
    location: Optional[str] = None
    contact_number: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def owner_changes(self) -> dict:
        return {k: getattr(self, k) for k in OWNER_FIELDS if k in self.model_fields_set}

    def review_changes(self) -> dict:
        return {
            k: getattr(self, k) for k in REVIEW_FIELDS
            if k in self.model_fields_set and getattr(self, k) is not None
        }


class CredibilityRequest(BaseModel):
    has_image: bool = False
    has_location: bool = False
    description_length: int = 0
    nearby_reports_count: int = 0


class CredibilityOut(BaseModel):
    score: float
    band: str
