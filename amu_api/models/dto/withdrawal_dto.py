"""
Data Transfer Objects for the withdrawal reference and status endpoints.
"""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator
from amu_api.models.withdrawal_rule import BannedSubstance, ProductType, WithdrawalRule
from amu_api.models.withdrawal_result import (
    Inapplicable,
    InvalidInput,
    NotFound,
    WithdrawalEnd,
    WithdrawalStatus
)


class WithdrawalRuleResponse(BaseModel):
    """Response schema for one withdrawal rule."""
    drug_name: str
    pharmacological_class: str
    meat_withdrawal_days: int
    milk_withdrawal_hours: Optional[int] = Field(None, description="None when milk use is forbidden")
    milk_forbidden: bool
    approved_species: List[str]
    dosage_reference: str

    @classmethod
    def from_rule(cls, rule: WithdrawalRule) -> "WithdrawalRuleResponse":
        return cls(
            drug_name=rule.drug_name,
            pharmacological_class=rule.pharmacological_class,
            meat_withdrawal_days=rule.meat_withdrawal_days,
            milk_withdrawal_hours=rule.milk_withdrawal_hours,
            milk_forbidden=rule.milk_forbidden,
            approved_species=sorted(rule.approved_species),
            dosage_reference=rule.dosage_reference
        )


class WithdrawalRuleListResponse(BaseModel):
    """Response schema for listing withdrawal rules."""
    rules: List[WithdrawalRuleResponse]
    count: int


class BannedSubstanceResponse(BaseModel):
    name: str
    category: str
    reason: str
    status: str
    severity: str

    @classmethod
    def from_substance(cls, substance: BannedSubstance) -> "BannedSubstanceResponse":
        return cls(
            name=substance.name,
            category=substance.category,
            reason=substance.reason,
            status=substance.status,
            severity=substance.severity
        )


class BannedSubstanceListResponse(BaseModel):
    substances: List[BannedSubstanceResponse]
    count: int


class WithdrawalStatusRequest(BaseModel):
    """Request schema for evaluating a treatment event."""
    drug_name: str = Field(..., min_length=1, max_length=100, description="Drug administered")
    treatment_date: str = Field(..., description="YYYY-MM-DD or DD/MM/YYYY")
    product_type: ProductType = Field(..., description="meat or milk")
    now: Optional[datetime] = Field(None, description="Evaluation time; defaults to the server clock")

    @field_validator('drug_name')
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or v.strip() == "":
            raise ValueError("Field cannot be empty")
        return v.strip()


class WithdrawalStatusResponse(BaseModel):
    """
    Response schema for a withdrawal evaluation.

    `outcome` must be checked before `restricted`: a not_found or
    invalid_input outcome reports restricted=False but is never "cleared".
    """
    drug_name: str
    product_type: ProductType
    outcome: Literal["withdrawal_end", "inapplicable", "not_found", "invalid_input"]
    restricted: bool
    days_remaining: int
    ends_at: Optional[datetime] = None
    message: str

    @classmethod
    def from_status(cls, drug_name: str, product_type: ProductType, status: WithdrawalStatus) -> "WithdrawalStatusResponse":
        return cls(
            drug_name=drug_name,
            product_type=product_type,
            outcome=status.outcome_name,
            restricted=status.restricted,
            days_remaining=status.days_remaining,
            ends_at=status.ends_at,
            message=describe_status(status, product_type)
        )


def describe_status(status: WithdrawalStatus, product_type: ProductType) -> str:
    """Human-readable summary of a withdrawal evaluation."""
    outcome = status.outcome
    product = product_type.value
    if isinstance(outcome, NotFound):
        return f"Withdrawal data unavailable for '{outcome.drug_name}'; refer to a veterinarian"
    if isinstance(outcome, InvalidInput):
        return f"Invalid input '{outcome.value}': {outcome.reason}"
    if isinstance(outcome, Inapplicable):
        return f"Never sell {product}: {outcome.reason}"
    if isinstance(outcome, WithdrawalEnd) and status.restricted:
        return f"Do not sell {product} until {outcome.ends_at.date().isoformat()} ({status.days_remaining} days remaining)"
    return f"Withdrawal period for {product} has ended"
