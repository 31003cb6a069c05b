"""
Domain model for a farmer's treatment entry.
Database-agnostic representation of a recorded antimicrobial treatment.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class VetApproval(str, Enum):
    """Veterinarian review state of a treatment entry."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ComplianceStatus(str, Enum):
    """Compliance label derived from review state and withdrawal status."""
    PENDING = "Pending"
    NON_COMPLIANT = "Non-Compliant"
    REVIEW_REQUIRED = "Review Required"
    IN_WITHDRAWAL = "In Withdrawal"
    CLEARED = "Cleared"


class TreatmentEntry:
    """Domain model representing one treatment of one animal."""

    def __init__(
        self,
        entry_id: str,
        farmer_name: str,
        animal_id: str,
        medicine: str,
        treatment_date: str,
        farm_name: Optional[str] = None,
        state: Optional[str] = None,
        district: Optional[str] = None,
        animal_type: Optional[str] = None,
        dosage: Optional[str] = None,
        frequency: Optional[str] = None,
        duration: Optional[str] = None,
        reason: Optional[str] = None,
        vet_approval: VetApproval = VetApproval.PENDING,
        vet_notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
        reviewed_at: Optional[datetime] = None
    ):
        self.entry_id = entry_id
        self.farmer_name = farmer_name
        self.animal_id = animal_id
        self.medicine = medicine
        self.treatment_date = treatment_date
        self.farm_name = farm_name
        self.state = state
        self.district = district
        self.animal_type = animal_type
        self.dosage = dosage
        self.frequency = frequency
        self.duration = duration
        self.reason = reason
        self.vet_approval = VetApproval(vet_approval)
        self.vet_notes = vet_notes
        self.created_at = created_at or datetime.now(timezone.utc)
        self.reviewed_at = reviewed_at

    def __repr__(self):
        return (
            f"TreatmentEntry(entry_id={self.entry_id}, animal_id={self.animal_id}, "
            f"medicine={self.medicine}, vet_approval={self.vet_approval.value})"
        )
