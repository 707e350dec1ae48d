from typing import Any

from fastapi import APIRouter, Body, Depends, status

from boiler_leads.dependencies import get_submission_service
from boiler_leads.domain.inquiries.schemas import InquiryResponse
from boiler_leads.domain.inquiries.service import SubmissionService

router = APIRouter()


# /api/leads is kept as an alias of /api/inquiries for older landing pages.
@router.post("/api/inquiries", response_model=InquiryResponse, status_code=status.HTTP_201_CREATED)
@router.post("/api/leads", response_model=InquiryResponse, status_code=status.HTTP_201_CREATED)
async def create_inquiry(
    payload: Any = Body(...),
    service: SubmissionService = Depends(get_submission_service),
) -> InquiryResponse:
    return await service.submit_inquiry(payload)
