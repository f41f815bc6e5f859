from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from coastwatch.schemas.report import ReportOut


class DashboardReportsOut(BaseModel):
    total: int
    bands: Dict[str, int]
    reports: List[ReportOut]


class MarkerOut(BaseModel):
    report_id: UUID
    lat: float
    lon: float
    color: str
    radius: int
    pulse: bool
    hazard_type: str
    location: str
    urgency: str
    credibility_percent: int
    image_url: Optional[str] = None
