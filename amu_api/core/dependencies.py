"""
Dependency injection container for FastAPI.
Provides singleton-like behavior for services and repositories.

The reference repository is built on first use and cached; it is immutable
afterwards, so every request shares the same instance without locking.
"""
from functools import lru_cache
from amu_api.core import config
from amu_api.repositories.reference_repository import ReferenceRepository, load_reference_data
from amu_api.repositories.treatment_repository import TreatmentRepository
from amu_api.services.sheets_service import SheetsService
from amu_api.services.treatment_service import TreatmentService
from amu_api.services.withdrawal_calculator import WithdrawalCalculator


@lru_cache()
def get_reference_repository() -> ReferenceRepository:
    """Get ReferenceRepository singleton instance loaded from the seed file."""
    return load_reference_data(config.settings.reference_data_path)


@lru_cache()
def get_withdrawal_calculator() -> WithdrawalCalculator:
    """Get WithdrawalCalculator singleton instance."""
    return WithdrawalCalculator(get_reference_repository())


@lru_cache()
def get_treatment_repository() -> TreatmentRepository:
    """Get TreatmentRepository singleton instance."""
    return TreatmentRepository()


@lru_cache()
def get_treatment_service() -> TreatmentService:
    """Get TreatmentService singleton instance with injected dependencies."""
    return TreatmentService(
        treatment_repository=get_treatment_repository(),
        withdrawal_calculator=get_withdrawal_calculator()
    )


@lru_cache()
def get_sheets_service() -> SheetsService:
    """Get SheetsService singleton instance."""
    return SheetsService(
        service_account_json=config.settings.google_service_account,
        spreadsheet_id=config.settings.google_sheets_spreadsheet_id
    )


def clear_caches() -> None:
    """Drop all cached singletons so the next request rebuilds them from settings."""
    for provider in (
        get_reference_repository,
        get_withdrawal_calculator,
        get_treatment_repository,
        get_treatment_service,
        get_sheets_service
    ):
        provider.cache_clear()
