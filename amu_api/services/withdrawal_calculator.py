"""
Withdrawal Calculator.
Decides whether meat or milk from a treated animal is still restricted from sale.

Every operation is a pure function of the reference rule, the treatment event
and an injected `now`; the calculator never reads the system clock.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union
from amu_api.models.withdrawal_rule import MilkForbidden, ProductType
from amu_api.models.withdrawal_result import (
    Inapplicable,
    InvalidInput,
    NotFound,
    RuleLookup,
    WithdrawalEnd,
    WithdrawalOutcome,
    WithdrawalStatus
)
from amu_api.repositories.reference_repository import ReferenceRepository

DateInput = Union[date, datetime, str]

ONE_DAY = timedelta(days=1)

# ISO first; the day-first forms are what the farmer dashboard stores
DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y")


def parse_treatment_date(value: DateInput) -> Optional[date]:
    """Parse a treatment date to a calendar date, or None if it is not one."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def parse_product_type(value: Union[ProductType, str]) -> Optional[ProductType]:
    if isinstance(value, ProductType):
        return value
    if isinstance(value, str):
        try:
            return ProductType(value.strip().lower())
        except ValueError:
            return None
    return None


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class WithdrawalCalculator:
    """Answers whether a product is still restricted, and for how long."""

    def __init__(self, reference_repository: ReferenceRepository):
        self.reference_repository = reference_repository

    def lookup_rule(self, drug_name: str) -> RuleLookup:
        """
        Find the withdrawal rule for a drug.

        Matching is case-insensitive and exact; a miss returns NotFound,
        which callers must treat as "status unknown".
        """
        rule = self.reference_repository.find_by_drug_name(drug_name)
        if rule is None:
            return NotFound(drug_name=str(drug_name))
        return rule

    def compute_withdrawal_end(
        self,
        treatment_date: DateInput,
        drug_name: str,
        product_type: Union[ProductType, str]
    ) -> WithdrawalOutcome:
        """
        Compute when the withdrawal period for a treatment ends.

        Args:
            treatment_date: Day the treatment was given
            drug_name: Drug administered
            product_type: meat or milk

        Returns:
            WithdrawalEnd with the end timestamp, Inapplicable when milk may
            never be sold, NotFound for an unknown drug, or InvalidInput for
            an unparseable date or product type
        """
        rule = self.lookup_rule(drug_name)
        if isinstance(rule, NotFound):
            return rule

        product = parse_product_type(product_type)
        if product is None:
            return InvalidInput(value=str(product_type), reason="product type must be 'meat' or 'milk'")

        day = parse_treatment_date(treatment_date)
        if day is None:
            return InvalidInput(value=str(treatment_date), reason="treatment date is not a valid calendar date")

        if product is ProductType.MILK and isinstance(rule.milk_withdrawal, MilkForbidden):
            return Inapplicable(rule=rule)

        if product is ProductType.MEAT:
            period = timedelta(days=rule.meat_withdrawal_days)
        else:
            period = timedelta(hours=rule.milk_withdrawal.hours)

        try:
            return WithdrawalEnd(rule=rule, ends_at=start_of_day(day) + period)
        except OverflowError:
            return InvalidInput(value=str(treatment_date), reason="treatment date is out of range")

    def is_restricted(
        self,
        treatment_date: DateInput,
        drug_name: str,
        product_type: Union[ProductType, str],
        now: datetime
    ) -> bool:
        """Boolean view of the outcome. Use evaluate() to tell unknown from cleared."""
        outcome = self.compute_withdrawal_end(treatment_date, drug_name, product_type)
        return self._is_restricted(outcome, now)

    def days_remaining(
        self,
        treatment_date: DateInput,
        drug_name: str,
        product_type: Union[ProductType, str],
        now: datetime
    ) -> int:
        """Whole days until the product clears, rounded up; 0 when not restricted."""
        outcome = self.compute_withdrawal_end(treatment_date, drug_name, product_type)
        return self._days_remaining(outcome, now)

    def evaluate(
        self,
        treatment_date: DateInput,
        drug_name: str,
        product_type: Union[ProductType, str],
        now: datetime
    ) -> WithdrawalStatus:
        """Compute the outcome once and derive restriction and remaining days from it."""
        outcome = self.compute_withdrawal_end(treatment_date, drug_name, product_type)
        return WithdrawalStatus(
            outcome=outcome,
            restricted=self._is_restricted(outcome, now),
            days_remaining=self._days_remaining(outcome, now)
        )

    @staticmethod
    def _is_restricted(outcome: WithdrawalOutcome, now: datetime) -> bool:
        if isinstance(outcome, Inapplicable):
            return True
        if isinstance(outcome, WithdrawalEnd):
            return as_utc(now) < outcome.ends_at
        return False

    @staticmethod
    def _days_remaining(outcome: WithdrawalOutcome, now: datetime) -> int:
        if not isinstance(outcome, WithdrawalEnd):
            return 0
        remaining = outcome.ends_at - as_utc(now)
        if remaining <= timedelta(0):
            return 0
        # ceiling division on timedeltas keeps microsecond precision
        return -(-remaining // ONE_DAY)
