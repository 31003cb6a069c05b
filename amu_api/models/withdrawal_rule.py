"""
Domain models for withdrawal reference data.
Immutable records loaded once from the seed file.
"""
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Union


class ProductType(str, Enum):
    """Food product whose sale is governed by a withdrawal period."""
    MEAT = "meat"
    MILK = "milk"


@dataclass(frozen=True)
class MilkHours:
    """Milk may be sold once this many hours have passed since treatment."""
    hours: int


@dataclass(frozen=True)
class MilkForbidden:
    """Milk from a treated animal may never be sold."""
    pass


MilkWithdrawal = Union[MilkHours, MilkForbidden]


def milk_withdrawal_from_hours(hours: int) -> MilkWithdrawal:
    """Convert the seed format, where 0 hours means milk use is disallowed."""
    if hours == 0:
        return MilkForbidden()
    return MilkHours(hours=hours)


@dataclass(frozen=True)
class WithdrawalRule:
    """Withdrawal rule for one drug."""
    drug_name: str
    pharmacological_class: str
    meat_withdrawal_days: int
    milk_withdrawal: MilkWithdrawal
    approved_species: FrozenSet[str] = frozenset()
    dosage_reference: str = ""

    @property
    def milk_forbidden(self) -> bool:
        return isinstance(self.milk_withdrawal, MilkForbidden)

    @property
    def milk_withdrawal_hours(self) -> Optional[int]:
        """Hours of milk withdrawal, or None when milk use is forbidden."""
        if isinstance(self.milk_withdrawal, MilkHours):
            return self.milk_withdrawal.hours
        return None


@dataclass(frozen=True)
class BannedSubstance:
    """Antimicrobial prohibited for use in food-producing animals."""
    name: str
    category: str
    reason: str
    status: str
    severity: str
