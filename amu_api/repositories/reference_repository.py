"""
Reference Repository for withdrawal rules and banned substances.
Loads the static seed file once and serves read-only, indexed lookups.
"""
import json
import logging
from typing import Dict, Iterable, List, Optional
from amu_api.core.exceptions import ReferenceDataException
from amu_api.models.withdrawal_rule import (
    BannedSubstance,
    WithdrawalRule,
    milk_withdrawal_from_hours
)

logger = logging.getLogger(__name__)

DRUG_FIELDS = (
    'drugName',
    'pharmacologicalClass',
    'meatWithdrawalDays',
    'milkWithdrawalHours',
    'approvedSpecies',
    'dosageReference'
)
BANNED_FIELDS = ('name', 'category', 'reason', 'status', 'severity')


def normalize_name(name: str) -> str:
    """Index key for case-insensitive exact matching."""
    return name.strip().casefold()


class ReferenceRepository:
    """In-memory repository over the immutable reference table."""

    def __init__(self, rules: Iterable[WithdrawalRule], banned: Iterable[BannedSubstance] = ()):
        self._rules = tuple(rules)
        self._banned = tuple(banned)
        self._rule_index = self._build_index(self._rules, lambda rule: rule.drug_name)
        self._banned_index = self._build_index(self._banned, lambda substance: substance.name)

    @staticmethod
    def _build_index(records, key) -> Dict[str, object]:
        index = {}
        for record in records:
            normalized = normalize_name(key(record))
            if not normalized:
                raise ReferenceDataException("Reference record has an empty name")
            if normalized in index:
                raise ReferenceDataException(f"Duplicate reference entry: '{key(record)}'")
            index[normalized] = record
        return index

    def find_by_drug_name(self, drug_name: str) -> Optional[WithdrawalRule]:
        """Case-insensitive exact match. Returns None when not found."""
        if not isinstance(drug_name, str):
            return None
        return self._rule_index.get(normalize_name(drug_name))

    def find_all(self) -> List[WithdrawalRule]:
        """All rules in seed order."""
        return list(self._rules)

    def search(self, term: str) -> List[WithdrawalRule]:
        """Substring match on drug name or pharmacological class, for browsing."""
        needle = normalize_name(term or "")
        if not needle:
            return self.find_all()
        return [
            rule for rule in self._rules
            if needle in rule.drug_name.casefold() or needle in rule.pharmacological_class.casefold()
        ]

    def find_by_species(self, species: str) -> List[WithdrawalRule]:
        wanted = normalize_name(species)
        return [
            rule for rule in self._rules
            if any(normalize_name(s) == wanted for s in rule.approved_species)
        ]

    def find_banned(self, name: str) -> Optional[BannedSubstance]:
        if not isinstance(name, str):
            return None
        return self._banned_index.get(normalize_name(name))

    def find_all_banned(self) -> List[BannedSubstance]:
        return list(self._banned)

    def __len__(self) -> int:
        return len(self._rules)


def load_reference_data(path: str) -> ReferenceRepository:
    """
    Load and validate the reference seed file.

    Args:
        path: Path to the JSON seed file

    Returns:
        ReferenceRepository over the loaded rules

    Raises:
        ReferenceDataException: If the file is missing, unreadable or malformed
    """
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ReferenceDataException(f"Failed to read reference data from {path}: {str(e)}") from e

    if not isinstance(data, dict) or not isinstance(data.get('drugs'), list):
        raise ReferenceDataException("Reference data must contain a 'drugs' list")

    rules = [_record_to_rule(record, position) for position, record in enumerate(data['drugs'])]
    banned = [_record_to_banned(record, position) for position, record in enumerate(data.get('banned_substances', []))]

    repository = ReferenceRepository(rules, banned)
    logger.info("Loaded %d withdrawal rules and %d banned substances from %s", len(rules), len(banned), path)
    return repository


def _record_to_rule(record: dict, position: int) -> WithdrawalRule:
    if not isinstance(record, dict):
        raise ReferenceDataException(f"Drug record {position} must be an object")

    missing = [field for field in DRUG_FIELDS if field not in record]
    if missing:
        raise ReferenceDataException(f"Drug record {position}: missing fields {', '.join(missing)}")

    drug_name = record['drugName']
    if not isinstance(drug_name, str) or not drug_name.strip():
        raise ReferenceDataException(f"Drug record {position}: drugName must be a non-empty string")

    meat_days = _non_negative_int(record['meatWithdrawalDays'], 'meatWithdrawalDays', drug_name)
    milk_hours = _non_negative_int(record['milkWithdrawalHours'], 'milkWithdrawalHours', drug_name)

    species = record['approvedSpecies']
    if not isinstance(species, list) or not all(isinstance(s, str) for s in species):
        raise ReferenceDataException(f"Drug '{drug_name}': approvedSpecies must be a list of strings")

    return WithdrawalRule(
        drug_name=drug_name.strip(),
        pharmacological_class=str(record['pharmacologicalClass']),
        meat_withdrawal_days=meat_days,
        milk_withdrawal=milk_withdrawal_from_hours(milk_hours),
        approved_species=frozenset(species),
        dosage_reference=str(record['dosageReference'])
    )


def _record_to_banned(record: dict, position: int) -> BannedSubstance:
    if not isinstance(record, dict):
        raise ReferenceDataException(f"Banned substance record {position} must be an object")

    missing = [field for field in BANNED_FIELDS if field not in record]
    if missing:
        raise ReferenceDataException(f"Banned substance record {position}: missing fields {', '.join(missing)}")

    return BannedSubstance(**{field: str(record[field]) for field in BANNED_FIELDS})


def _non_negative_int(value, field: str, drug_name: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ReferenceDataException(f"Drug '{drug_name}': {field} must be a non-negative integer, got {value!r}")
    return value
