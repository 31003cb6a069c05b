"""
Unit tests for TreatmentService.
Tests compliance derivation with a mocked repository and the real calculator.
"""
from datetime import datetime, timezone
from unittest.mock import Mock
import pytest
from amu_api.core.exceptions import TreatmentNotFoundException
from amu_api.models.dto.treatment_dto import TreatmentCreateRequest, TreatmentResponse
from amu_api.models.treatment_entry import ComplianceStatus, TreatmentEntry, VetApproval
from amu_api.services.treatment_service import TreatmentService

NOW = datetime(2024, 1, 20, tzinfo=timezone.utc)


def make_entry(medicine="Oxytetracycline", treatment_date="2024-01-01", vet_approval=VetApproval.APPROVED, district="Erode"):
    return TreatmentEntry(
        entry_id="entry-1",
        farmer_name="Muthusamy",
        animal_id="TN-ERD-001",
        medicine=medicine,
        treatment_date=treatment_date,
        district=district,
        animal_type="Cow",
        vet_approval=vet_approval,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc)
    )


class TestTreatmentService:
    """Test suite for TreatmentService."""

    @pytest.fixture
    def mock_treatment_repo(self):
        """Mock TreatmentRepository."""
        return Mock()

    @pytest.fixture
    def treatment_service(self, mock_treatment_repo, calculator):
        """Create TreatmentService with mocked repository."""
        return TreatmentService(
            treatment_repository=mock_treatment_repo,
            withdrawal_calculator=calculator
        )

    def test_record_treatment_starts_pending(self, treatment_service, mock_treatment_repo):
        """Test a new entry is saved pending review."""
        request = TreatmentCreateRequest(
            farmer_name="Ramu",
            animal_id="TN-NMK-002",
            medicine="Enrofloxacin",
            treatment_date="02/09/2025",
            district="Namakkal",
            animal_type="Buffalo"
        )

        result = treatment_service.record_treatment(request, now=NOW)

        assert isinstance(result, TreatmentResponse)
        assert result.entry_id
        assert result.vet_approval == VetApproval.PENDING
        assert result.compliance_status == ComplianceStatus.PENDING
        mock_treatment_repo.save.assert_called_once()
        saved = mock_treatment_repo.save.call_args[0][0]
        assert saved.medicine == "Enrofloxacin"
        assert saved.created_at == NOW

    def test_approved_entry_in_withdrawal(self, treatment_service):
        """Test approved Oxytetracycline entry with meat period running."""
        response = treatment_service.to_response(make_entry(), NOW)

        assert response.compliance_status == ComplianceStatus.IN_WITHDRAWAL
        assert response.meat_withdrawal.restricted
        assert response.meat_withdrawal.days_remaining == 9
        assert response.milk_withdrawal.days_remaining == 0
        assert not response.milk_withdrawal.restricted

    def test_approved_entry_cleared_after_periods(self, treatment_service):
        """Test entry clears once meat and milk periods have passed."""
        later = datetime(2024, 2, 1, tzinfo=timezone.utc)

        assert treatment_service.compliance_status(make_entry(), later) == ComplianceStatus.CLEARED

    def test_milk_prohibition_holds_entry_in_withdrawal(self, treatment_service):
        """Test Danofloxacin entry is never cleared once its meat period has passed."""
        later = datetime(2024, 2, 1, tzinfo=timezone.utc)
        response = treatment_service.to_response(make_entry(medicine="Danofloxacin"), later)

        assert response.compliance_status == ComplianceStatus.IN_WITHDRAWAL
        assert not response.meat_withdrawal.restricted
        assert response.milk_withdrawal.outcome == "inapplicable"
        assert response.milk_withdrawal.restricted
        assert response.meat_withdrawal.outcome == "withdrawal_end"

    def test_unknown_drug_requires_review(self, treatment_service):
        """Test an approved entry with no reference data is never cleared."""
        response = treatment_service.to_response(make_entry(medicine="Xylazine"), NOW)

        assert response.compliance_status == ComplianceStatus.REVIEW_REQUIRED
        assert response.meat_withdrawal.outcome == "not_found"

    def test_invalid_date_requires_review(self, treatment_service):
        """Test an unreadable treatment date is flagged for review."""
        status = treatment_service.compliance_status(make_entry(treatment_date="31/02/2024"), NOW)

        assert status == ComplianceStatus.REVIEW_REQUIRED

    def test_rejected_entry_non_compliant(self, treatment_service):
        entry = make_entry(vet_approval=VetApproval.REJECTED)

        assert treatment_service.compliance_status(entry, NOW) == ComplianceStatus.NON_COMPLIANT

    def test_banned_substance_non_compliant_even_when_pending(self, treatment_service):
        response = treatment_service.to_response(
            make_entry(medicine="chloramphenicol", vet_approval=VetApproval.PENDING), NOW
        )

        assert response.banned_substance
        assert response.compliance_status == ComplianceStatus.NON_COMPLIANT

    def test_review_treatment_approve(self, treatment_service, mock_treatment_repo):
        """Test approving a pending entry."""
        mock_treatment_repo.get_by_id.return_value = make_entry(vet_approval=VetApproval.PENDING)

        result = treatment_service.review_treatment("entry-1", approved=True, notes="Dose verified", now=NOW)

        assert result.vet_approval == VetApproval.APPROVED
        assert result.vet_notes == "Dose verified"
        assert result.reviewed_at == NOW
        assert result.compliance_status == ComplianceStatus.IN_WITHDRAWAL
        mock_treatment_repo.update_review.assert_called_once_with("entry-1", VetApproval.APPROVED, "Dose verified", NOW)

    def test_review_treatment_reject(self, treatment_service, mock_treatment_repo):
        mock_treatment_repo.get_by_id.return_value = make_entry(vet_approval=VetApproval.PENDING)

        result = treatment_service.review_treatment("entry-1", approved=False, now=NOW)

        assert result.vet_approval == VetApproval.REJECTED
        assert result.compliance_status == ComplianceStatus.NON_COMPLIANT

    def test_review_treatment_not_found(self, treatment_service, mock_treatment_repo):
        mock_treatment_repo.get_by_id.return_value = None

        with pytest.raises(TreatmentNotFoundException):
            treatment_service.review_treatment("missing", approved=True, now=NOW)

        mock_treatment_repo.update_review.assert_not_called()

    def test_get_treatment_not_found(self, treatment_service, mock_treatment_repo):
        mock_treatment_repo.get_by_id.return_value = None

        with pytest.raises(TreatmentNotFoundException):
            treatment_service.get_treatment("missing")

    def test_list_treatments_passes_filter_and_token(self, treatment_service, mock_treatment_repo):
        mock_treatment_repo.find_all_paginated.return_value = ([make_entry()], "token123")

        response, token = treatment_service.list_treatments(5, "prev", VetApproval.APPROVED, now=NOW)

        assert token == "token123"
        assert response.count == 1
        assert response.next_token == "token123"
        mock_treatment_repo.find_all_paginated.assert_called_once_with(5, "prev", VetApproval.APPROVED)

    def test_compliance_summary(self, treatment_service, mock_treatment_repo):
        """Test totals per status and per district."""
        mock_treatment_repo.find_all.return_value = [
            make_entry(),
            make_entry(vet_approval=VetApproval.PENDING),
            make_entry(vet_approval=VetApproval.REJECTED, district="Salem"),
            make_entry(medicine="Xylazine", district=None)
        ]

        summary = treatment_service.compliance_summary(now=NOW)

        assert summary.total_entries == 4
        assert summary.by_status["In Withdrawal"] == 1
        assert summary.by_status["Pending"] == 1
        assert summary.by_status["Non-Compliant"] == 1
        assert summary.by_status["Review Required"] == 1
        assert summary.by_status["Cleared"] == 0
        assert summary.by_district["Erode"] == {"In Withdrawal": 1, "Pending": 1}
        assert summary.by_district["Salem"] == {"Non-Compliant": 1}
        assert summary.by_district["Unknown"] == {"Review Required": 1}

    def test_milk_forbidden_drugs_never_cleared(self, treatment_service, reference_repository):
        years_later = datetime(2030, 1, 1, tzinfo=timezone.utc)
        forbidden = [rule for rule in reference_repository.find_all() if rule.milk_forbidden]

        assert len(forbidden) == 5
        for rule in forbidden:
            status = treatment_service.compliance_status(make_entry(medicine=rule.drug_name), years_later)
            assert status == ComplianceStatus.IN_WITHDRAWAL

    def test_compliance_summary_survives_out_of_range_date(self, treatment_service, mock_treatment_repo):
        """Test one entry dated at the end of the calendar does not break the summary."""
        mock_treatment_repo.find_all.return_value = [
            make_entry(),
            make_entry(medicine="Gentamicin", treatment_date="20/12/9999")
        ]

        summary = treatment_service.compliance_summary(now=NOW)

        assert summary.total_entries == 2
        assert summary.by_status["In Withdrawal"] == 1
        assert summary.by_status["Review Required"] == 1
