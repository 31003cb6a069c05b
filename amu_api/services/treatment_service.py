"""
Treatment Service for business logic.
Records treatments, applies veterinarian review and derives compliance status.
"""
import logging
import uuid
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Optional, Tuple
from amu_api.core.exceptions import TreatmentNotFoundException
from amu_api.models.treatment_entry import ComplianceStatus, TreatmentEntry, VetApproval
from amu_api.models.withdrawal_rule import ProductType
from amu_api.models.withdrawal_result import WithdrawalStatus
from amu_api.models.dto.treatment_dto import (
    ComplianceSummaryResponse,
    TreatmentCreateRequest,
    TreatmentListResponse,
    TreatmentResponse
)
from amu_api.models.dto.withdrawal_dto import WithdrawalStatusResponse
from amu_api.repositories.treatment_repository import TreatmentRepository
from amu_api.services.withdrawal_calculator import WithdrawalCalculator

logger = logging.getLogger(__name__)

UNKNOWN_DISTRICT = "Unknown"


class TreatmentService:
    """Service for treatment-related business operations."""

    def __init__(
        self,
        treatment_repository: TreatmentRepository,
        withdrawal_calculator: WithdrawalCalculator
    ):
        self.treatment_repository = treatment_repository
        self.withdrawal_calculator = withdrawal_calculator

    def record_treatment(self, request: TreatmentCreateRequest, now: Optional[datetime] = None) -> TreatmentResponse:
        """
        Record a farmer's treatment entry, pending veterinarian review.

        Raises:
            DynamoDBException: If save fails
        """
        now = now or datetime.now(timezone.utc)
        entry = TreatmentEntry(
            entry_id=str(uuid.uuid4()),
            created_at=now,
            vet_approval=VetApproval.PENDING,
            **request.model_dump()
        )
        self.treatment_repository.save(entry)
        logger.info("Recorded treatment %s: %s for animal %s", entry.entry_id, entry.medicine, entry.animal_id)

        return self.to_response(entry, now)

    def review_treatment(
        self,
        entry_id: str,
        approved: bool,
        notes: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> TreatmentResponse:
        """
        Apply a veterinarian's decision to a treatment entry.

        Raises:
            TreatmentNotFoundException: If entry_id is unknown
            DynamoDBException: If update fails
        """
        now = now or datetime.now(timezone.utc)
        entry = self.get_entry(entry_id)

        entry.vet_approval = VetApproval.APPROVED if approved else VetApproval.REJECTED
        entry.reviewed_at = now
        if notes:
            entry.vet_notes = notes

        self.treatment_repository.update_review(entry_id, entry.vet_approval, notes, now)
        logger.info("Treatment %s reviewed: %s", entry_id, entry.vet_approval.value)

        return self.to_response(entry, now)

    def get_treatment(self, entry_id: str, now: Optional[datetime] = None) -> TreatmentResponse:
        """
        Raises:
            TreatmentNotFoundException: If entry_id is unknown
        """
        return self.to_response(self.get_entry(entry_id), now or datetime.now(timezone.utc))

    def list_treatments(
        self,
        limit: int = 10,
        next_token: Optional[str] = None,
        vet_approval: Optional[VetApproval] = None,
        now: Optional[datetime] = None
    ) -> Tuple[TreatmentListResponse, Optional[str]]:
        """
        List treatment entries with pagination.

        Returns:
            Tuple of (TreatmentListResponse, next_token or None)
        """
        now = now or datetime.now(timezone.utc)
        entries, next_token = self.treatment_repository.find_all_paginated(limit, next_token, vet_approval)
        treatments = [self.to_response(entry, now) for entry in entries]

        return TreatmentListResponse(treatments=treatments, count=len(treatments), next_token=next_token), next_token

    def compliance_summary(self, now: Optional[datetime] = None) -> ComplianceSummaryResponse:
        """Count entries per compliance status, overall and per district."""
        now = now or datetime.now(timezone.utc)
        entries = self.treatment_repository.find_all()

        by_status = Counter({status.value: 0 for status in ComplianceStatus})
        by_district = defaultdict(Counter)
        for entry in entries:
            status = self.compliance_status(entry, now).value
            by_status[status] += 1
            by_district[entry.district or UNKNOWN_DISTRICT][status] += 1

        return ComplianceSummaryResponse(
            total_entries=len(entries),
            by_status=dict(by_status),
            by_district={district: dict(counts) for district, counts in by_district.items()}
        )

    def compliance_status(self, entry: TreatmentEntry, now: datetime) -> ComplianceStatus:
        """
        Derive the compliance label for an entry.

        Unknown drugs and unreadable dates are never cleared: an approved
        entry whose withdrawal cannot be computed needs human review.
        """
        meat, milk = self._withdrawal_statuses(entry, now)
        return self._compliance_from(entry, meat, milk)

    def to_response(self, entry: TreatmentEntry, now: datetime) -> TreatmentResponse:
        meat, milk = self._withdrawal_statuses(entry, now)
        return TreatmentResponse(
            entry_id=entry.entry_id,
            farmer_name=entry.farmer_name,
            animal_id=entry.animal_id,
            medicine=entry.medicine,
            treatment_date=entry.treatment_date,
            farm_name=entry.farm_name,
            state=entry.state,
            district=entry.district,
            animal_type=entry.animal_type,
            dosage=entry.dosage,
            frequency=entry.frequency,
            duration=entry.duration,
            reason=entry.reason,
            vet_approval=entry.vet_approval,
            vet_notes=entry.vet_notes,
            created_at=entry.created_at,
            reviewed_at=entry.reviewed_at,
            banned_substance=self._is_banned(entry),
            compliance_status=self._compliance_from(entry, meat, milk),
            meat_withdrawal=WithdrawalStatusResponse.from_status(entry.medicine, ProductType.MEAT, meat),
            milk_withdrawal=WithdrawalStatusResponse.from_status(entry.medicine, ProductType.MILK, milk)
        )

    def _compliance_from(self, entry: TreatmentEntry, meat: WithdrawalStatus, milk: WithdrawalStatus) -> ComplianceStatus:
        if self._is_banned(entry) or entry.vet_approval is VetApproval.REJECTED:
            return ComplianceStatus.NON_COMPLIANT
        if entry.vet_approval is VetApproval.PENDING:
            return ComplianceStatus.PENDING
        if meat.needs_review or milk.needs_review:
            return ComplianceStatus.REVIEW_REQUIRED
        # a milk prohibition has no end date and holds the entry indefinitely
        if meat.restricted or milk.restricted:
            return ComplianceStatus.IN_WITHDRAWAL
        return ComplianceStatus.CLEARED

    def _withdrawal_statuses(self, entry: TreatmentEntry, now: datetime) -> Tuple[WithdrawalStatus, WithdrawalStatus]:
        return (
            self.withdrawal_calculator.evaluate(entry.treatment_date, entry.medicine, ProductType.MEAT, now),
            self.withdrawal_calculator.evaluate(entry.treatment_date, entry.medicine, ProductType.MILK, now)
        )

    def _is_banned(self, entry: TreatmentEntry) -> bool:
        return self.withdrawal_calculator.reference_repository.find_banned(entry.medicine) is not None

    def get_entry(self, entry_id: str) -> TreatmentEntry:
        """Domain entry for collaborators such as the sheet export."""
        entry = self.treatment_repository.get_by_id(entry_id)
        if entry is None:
            raise TreatmentNotFoundException(f"Treatment entry '{entry_id}' not found")
        return entry
