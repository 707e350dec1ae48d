from fastapi import APIRouter

from boiler_leads.domain.estimator.estimator import recommend
from boiler_leads.domain.estimator.models import EstimateRequest, EstimateResponse

router = APIRouter()


@router.post("/api/estimate", response_model=EstimateResponse)
async def create_estimate(request: EstimateRequest) -> EstimateResponse:
    return recommend(request)
