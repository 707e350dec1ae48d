from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status

from boiler_leads.dependencies import get_app_settings, get_submission_service
from boiler_leads.domain.inquiries.schemas import RequestMetadata, VisitAccepted
from boiler_leads.domain.inquiries.service import SubmissionService
from boiler_leads.infra.ip import get_client_ip

router = APIRouter()


@router.post("/api/visits", response_model=VisitAccepted, status_code=status.HTTP_201_CREATED)
async def record_visit(
    http_request: Request,
    payload: Any = Body(...),
    service: SubmissionService = Depends(get_submission_service),
    app_settings=Depends(get_app_settings),
) -> VisitAccepted:
    metadata = RequestMetadata(
        user_agent=http_request.headers.get("user-agent"),
        ip=get_client_ip(http_request, trust_proxy_headers=app_settings.trust_proxy_headers),
    )
    await service.submit_visit(payload, metadata)
    return VisitAccepted()
