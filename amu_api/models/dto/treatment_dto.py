"""
Data Transfer Objects for Treatment API.
Defines request and response schemas for treatment recording and review.
"""
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator
from amu_api.models.treatment_entry import ComplianceStatus, VetApproval
from amu_api.models.dto.withdrawal_dto import WithdrawalStatusResponse


class TreatmentCreateRequest(BaseModel):
    """Request schema for recording a treatment."""
    farmer_name: str = Field(..., min_length=1, max_length=100, description="Farmer's full name")
    animal_id: str = Field(..., min_length=1, max_length=50, description="Animal tag or identifier")
    medicine: str = Field(..., min_length=1, max_length=100, description="Drug administered")
    treatment_date: str = Field(..., description="YYYY-MM-DD or DD/MM/YYYY")
    farm_name: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    district: Optional[str] = Field(None, max_length=50)
    animal_type: Optional[str] = Field(None, max_length=50, description="Cow, Buffalo, Goat, ...")
    dosage: Optional[str] = Field(None, max_length=100)
    frequency: Optional[str] = Field(None, max_length=50)
    duration: Optional[str] = Field(None, max_length=50)
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator('farmer_name', 'animal_id', 'medicine', 'treatment_date')
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or v.strip() == "":
            raise ValueError("Field cannot be empty")
        return v.strip()


class TreatmentReviewRequest(BaseModel):
    """Request schema for a veterinarian's review decision."""
    approved: bool = Field(..., description="True to approve, False to reject")
    notes: Optional[str] = Field(None, max_length=500, description="Veterinarian notes")


class TreatmentResponse(BaseModel):
    """Response schema for a treatment entry with its derived statuses."""
    entry_id: str
    farmer_name: str
    animal_id: str
    medicine: str
    treatment_date: str
    farm_name: Optional[str] = None
    state: Optional[str] = None
    district: Optional[str] = None
    animal_type: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[str] = None
    reason: Optional[str] = None
    vet_approval: VetApproval
    vet_notes: Optional[str] = None
    created_at: datetime
    reviewed_at: Optional[datetime] = None
    banned_substance: bool = False
    compliance_status: ComplianceStatus
    meat_withdrawal: WithdrawalStatusResponse
    milk_withdrawal: WithdrawalStatusResponse


class TreatmentListResponse(BaseModel):
    """Response schema for listing treatment entries."""
    treatments: List[TreatmentResponse]
    count: int
    next_token: Optional[str] = None


class ComplianceSummaryResponse(BaseModel):
    """Aggregate compliance figures for government monitoring."""
    total_entries: int
    by_status: Dict[str, int]
    by_district: Dict[str, Dict[str, int]]


class SheetExportResponse(BaseModel):
    """Response schema for a spreadsheet export."""
    entry_id: str
    sheet_name: str
    updated_range: Optional[str] = None
