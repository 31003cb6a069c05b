"""
Treatment API routes.
Handles HTTP endpoints for recording, reviewing and exporting treatment entries.
"""
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from amu_api.core import config
from amu_api.core.dependencies import get_sheets_service, get_treatment_service
from amu_api.models.dto.treatment_dto import (
    ComplianceSummaryResponse,
    SheetExportResponse,
    TreatmentCreateRequest,
    TreatmentListResponse,
    TreatmentResponse,
    TreatmentReviewRequest
)
from amu_api.models.treatment_entry import VetApproval
from amu_api.services.sheets_service import SheetsService, treatment_to_row
from amu_api.services.treatment_service import TreatmentService

router = APIRouter(prefix="/v1/api", tags=["Treatments"])


@router.post("/treatments", response_model=TreatmentResponse, status_code=status.HTTP_201_CREATED)
async def record_treatment(
    request: TreatmentCreateRequest,
    treatment_service: TreatmentService = Depends(get_treatment_service)
):
    """
    Record a treatment entry submitted by a farmer.

    The entry starts in Pending review.
    """
    return treatment_service.record_treatment(request)


@router.get("/treatments", response_model=TreatmentListResponse)
async def list_treatments(
    limit: Optional[int] = Query(default=None, ge=1, le=100, description="Maximum number of items to return"),
    next_token: Optional[str] = Query(default=None, description="Pagination token from previous response"),
    vet_approval: Optional[VetApproval] = Query(default=None, description="Filter by review state"),
    treatment_service: TreatmentService = Depends(get_treatment_service)
):
    """
    List treatment entries with pagination.

    - **limit**: Number of items per page (default from settings, max 100)
    - **next_token**: Token from previous response to get next page
    - **vet_approval**: Pending, Approved or Rejected
    """
    limit = min(limit or config.settings.pagination_default_limit, config.settings.pagination_max_limit)
    response, _ = treatment_service.list_treatments(limit, next_token, vet_approval)
    return response


@router.get("/treatments/summary", response_model=ComplianceSummaryResponse)
async def get_compliance_summary(
    treatment_service: TreatmentService = Depends(get_treatment_service)
):
    """Compliance totals per status and per district."""
    return treatment_service.compliance_summary()


@router.get("/treatments/{entry_id}", response_model=TreatmentResponse)
async def get_treatment(
    entry_id: str,
    treatment_service: TreatmentService = Depends(get_treatment_service)
):
    """Retrieve a treatment entry with its current withdrawal and compliance status."""
    return treatment_service.get_treatment(entry_id)


@router.post("/treatments/{entry_id}/review", response_model=TreatmentResponse)
async def review_treatment(
    entry_id: str,
    request: TreatmentReviewRequest,
    treatment_service: TreatmentService = Depends(get_treatment_service)
):
    """Approve or reject a treatment entry."""
    return treatment_service.review_treatment(entry_id, request.approved, request.notes)


@router.post("/treatments/{entry_id}/export", response_model=SheetExportResponse)
async def export_treatment(
    entry_id: str,
    treatment_service: TreatmentService = Depends(get_treatment_service),
    sheets_service: SheetsService = Depends(get_sheets_service)
):
    """Append the treatment entry as a row in the configured spreadsheet."""
    entry = treatment_service.get_entry(entry_id)
    compliance = treatment_service.compliance_status(entry, datetime.now(timezone.utc))
    sheet_name = config.settings.google_sheets_sheet_name

    result = sheets_service.append_row(sheet_name, treatment_to_row(entry, compliance.value))

    return SheetExportResponse(
        entry_id=entry_id,
        sheet_name=sheet_name,
        updated_range=result.get('updates', {}).get('updatedRange')
    )
