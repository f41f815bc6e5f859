from fastapi import APIRouter, Depends

from coastwatch.core.deps import get_current_user
from coastwatch.schemas.report import CredibilityRequest, CredibilityOut
from coastwatch.services.credibility import calculate_credibility_score, credibility_band

router = APIRouter(prefix="/rpc", tags=["rpc"])


@router.post("/calculate_credibility_score", response_model=CredibilityOut, dependencies=[Depends(get_current_user)])
def calculate_score(payload: CredibilityRequest):
    score = calculate_credibility_score(
        has_image=payload.has_image,
        has_location=payload.has_location,
        description_length=payload.description_length,
        nearby_reports_count=payload.nearby_reports_count,
    )
    return CredibilityOut(score=float(score), band=credibility_band(score))
