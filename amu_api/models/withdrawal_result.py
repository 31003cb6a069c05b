"""
Result variants returned by the withdrawal calculator.

Business conditions are values, not exceptions: callers branch on the
variant type so an unknown drug or a bad date can never be mistaken
for a cleared product.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from amu_api.models.withdrawal_rule import WithdrawalRule


@dataclass(frozen=True)
class WithdrawalEnd:
    """Product is restricted until `ends_at` (which may already be past)."""
    rule: WithdrawalRule
    ends_at: datetime


@dataclass(frozen=True)
class Inapplicable:
    """Product may never be sold from an animal treated with this drug."""
    rule: WithdrawalRule
    reason: str = "Not for use in lactating animals; milk must not be sold"


@dataclass(frozen=True)
class NotFound:
    """Drug is not in the reference table; withdrawal status is unknown."""
    drug_name: str


@dataclass(frozen=True)
class InvalidInput:
    """Treatment date or product type could not be interpreted."""
    value: str
    reason: str


RuleLookup = Union[WithdrawalRule, NotFound]
WithdrawalOutcome = Union[WithdrawalEnd, Inapplicable, NotFound, InvalidInput]


OUTCOME_NAMES = {
    WithdrawalEnd: "withdrawal_end",
    Inapplicable: "inapplicable",
    NotFound: "not_found",
    InvalidInput: "invalid_input",
}


@dataclass(frozen=True)
class WithdrawalStatus:
    """Outcome of a withdrawal evaluation together with its derived values."""
    outcome: WithdrawalOutcome
    restricted: bool
    days_remaining: int

    @property
    def outcome_name(self) -> str:
        return OUTCOME_NAMES[type(self.outcome)]

    @property
    def ends_at(self) -> Optional[datetime]:
        if isinstance(self.outcome, WithdrawalEnd):
            return self.outcome.ends_at
        return None

    @property
    def needs_review(self) -> bool:
        """True when the status is unknown and a human must check it."""
        return isinstance(self.outcome, (NotFound, InvalidInput))
