"""
Withdrawal API routes.
Reference table browsing, banned substances and withdrawal status evaluation.
"""
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query
from amu_api.core.dependencies import get_reference_repository, get_withdrawal_calculator
from amu_api.core.exceptions import DrugNotFoundException
from amu_api.models.dto.withdrawal_dto import (
    BannedSubstanceListResponse,
    BannedSubstanceResponse,
    WithdrawalRuleListResponse,
    WithdrawalRuleResponse,
    WithdrawalStatusRequest,
    WithdrawalStatusResponse
)
from amu_api.repositories.reference_repository import ReferenceRepository
from amu_api.services.withdrawal_calculator import WithdrawalCalculator

router = APIRouter(prefix="/v1/api")


@router.get("/withdrawal-rules", tags=["Withdrawal"], response_model=WithdrawalRuleListResponse)
async def list_withdrawal_rules(
    search: Optional[str] = Query(default=None, max_length=100, description="Substring of drug name or class"),
    species: Optional[str] = Query(default=None, max_length=50, description="Only rules documented for this species"),
    reference_repository: ReferenceRepository = Depends(get_reference_repository)
):
    """
    List withdrawal rules.

    - **search**: case-insensitive substring of drug name or pharmacological class
    - **species**: restrict to rules documented for a species
    """
    rules = reference_repository.search(search) if search else reference_repository.find_all()
    if species:
        documented = {rule.drug_name for rule in reference_repository.find_by_species(species)}
        rules = [rule for rule in rules if rule.drug_name in documented]

    return WithdrawalRuleListResponse(
        rules=[WithdrawalRuleResponse.from_rule(rule) for rule in rules],
        count=len(rules)
    )


@router.get("/withdrawal-rules/{drug_name}", tags=["Withdrawal"], response_model=WithdrawalRuleResponse)
async def get_withdrawal_rule(
    drug_name: str,
    reference_repository: ReferenceRepository = Depends(get_reference_repository)
):
    """Retrieve the withdrawal rule for a drug (case-insensitive exact match)."""
    rule = reference_repository.find_by_drug_name(drug_name)
    if rule is None:
        raise DrugNotFoundException(f"No withdrawal data for drug '{drug_name}'")
    return WithdrawalRuleResponse.from_rule(rule)


@router.post("/withdrawal/status", tags=["Withdrawal"], response_model=WithdrawalStatusResponse)
async def evaluate_withdrawal_status(
    request: WithdrawalStatusRequest,
    calculator: WithdrawalCalculator = Depends(get_withdrawal_calculator)
):
    """
    Evaluate whether a product from a treated animal may be sold.

    Unknown drugs and invalid dates are reported through `outcome`
    (not_found / invalid_input) with status 200; they never mean "cleared".
    """
    now = request.now or datetime.now(timezone.utc)
    status = calculator.evaluate(request.treatment_date, request.drug_name, request.product_type, now)
    return WithdrawalStatusResponse.from_status(request.drug_name, request.product_type, status)


@router.get("/banned-substances", tags=["Banned Substances"], response_model=BannedSubstanceListResponse)
async def list_banned_substances(
    reference_repository: ReferenceRepository = Depends(get_reference_repository)
):
    """List antimicrobials prohibited in food-producing animals."""
    substances = reference_repository.find_all_banned()
    return BannedSubstanceListResponse(
        substances=[BannedSubstanceResponse.from_substance(s) for s in substances],
        count=len(substances)
    )


@router.get("/banned-substances/{name}", tags=["Banned Substances"], response_model=BannedSubstanceResponse)
async def get_banned_substance(
    name: str,
    reference_repository: ReferenceRepository = Depends(get_reference_repository)
):
    """Check whether a substance is banned; 404 when it is not on the list."""
    substance = reference_repository.find_banned(name)
    if substance is None:
        raise DrugNotFoundException(f"'{name}' is not on the banned substance list")
    return BannedSubstanceResponse.from_substance(substance)
