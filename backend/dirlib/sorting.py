"""
Cascading multi-field sort for employee records.

Criteria are applied in priority order: the first criterion that tells two
records apart decides their order, later ones only break ties. Python's sort
is stable, so records equal under every criterion keep their input order.
"""
import logging
from dataclasses import dataclass, asdict
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

from .comparators import compare_missing, get_comparator
from .errors import InvalidDirectionError, UnknownFieldError

_logger = logging.getLogger(__name__)

ASC = 'asc'
DESC = 'desc'
DIRECTIONS = (ASC, DESC)


@dataclass(frozen=True)
class SortCriterion:
    field: str
    direction: str = ASC

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_value(cls, value: Union['SortCriterion', Mapping[str, Any]]) -> 'SortCriterion':
        """Build a criterion from an instance or a {field, direction} mapping."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Cannot build a sort criterion from {type(value).__name__}")
        return cls(field=value.get('field'), direction=value.get('direction', ASC))


@dataclass(frozen=True)
class SortField:
    key: str
    label: str
    icon: str
    asc_label: str
    desc_label: str

    def direction_label(self, direction: str) -> str:
        return self.asc_label if direction == ASC else self.desc_label


_AZ = ('↑ A-Z', '↓ Z-A')

# Order here is the order offered in the "Add Field" menu.
SORT_FIELDS: Dict[str, SortField] = {
    f.key: f for f in (
        SortField('employee_name', 'Employee Name', 'User', *_AZ),
        SortField('employee_salary', 'Salary', 'DollarSign', '↑ Low to High', '↓ High to Low'),
        SortField('employee_age', 'Age', 'Calendar', '↑ Young to Old', '↓ Old to Young'),
        SortField('employeeType', 'Employee Type', 'Building2', *_AZ),
        SortField('email', 'Email', 'Mail', *_AZ),
        SortField('createdAt', 'Created At', 'Clock', '↑ Newest to Oldest', '↓ Oldest to Newest'),
        SortField('updatedAt', 'Updated At', 'RefreshCw', '↑ Newest to Oldest', '↓ Oldest to Newest'),
    )
}

DEFAULT_SORT_CRITERIA = (
    SortCriterion('employee_name', ASC),
    SortCriterion('createdAt', ASC),
    SortCriterion('employee_salary', DESC),
    SortCriterion('employee_age', ASC),
    SortCriterion('employeeType', ASC),
    SortCriterion('email', ASC),
    SortCriterion('updatedAt', DESC),
)


def get_sort_direction_label(field: str, direction: str) -> str:
    sort_field = SORT_FIELDS.get(field)
    if sort_field is None:
        return '↑ Ascending' if direction == ASC else '↓ Descending'
    return sort_field.direction_label(direction)


def get_field_icon(field: str) -> str:
    sort_field = SORT_FIELDS.get(field)
    return sort_field.icon if sort_field else 'FileText'


def validate_field(field: str) -> str:
    if not isinstance(field, str) or field not in SORT_FIELDS:
        raise UnknownFieldError(f"Unknown sort field: {field!r}")
    return field


def validate_direction(direction: str) -> str:
    if direction not in DIRECTIONS:
        raise InvalidDirectionError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")
    return direction


def compare_records(a: Mapping[str, Any], b: Mapping[str, Any],
                    criteria: Sequence[SortCriterion]) -> int:
    """Composite comparison of two records under an ordered list of criteria."""
    for criterion in criteria:
        missing = compare_missing(criterion.field, a, b)
        if missing:
            return missing
        comparison = get_comparator(criterion.field)(a, b)
        if comparison:
            if criterion.direction == DESC:
                comparison = -comparison
            return 1 if comparison > 0 else -1
    return 0


def sort_employees(records: Sequence[Mapping[str, Any]],
                   criteria: Iterable[Union[SortCriterion, Mapping[str, Any]]]) -> Sequence:
    """Return records ordered by criteria; the input is never mutated.

    With no criteria the input sequence itself is returned.
    """
    rules: List[SortCriterion] = [SortCriterion.from_value(c) for c in (criteria or ())]
    if not rules:
        return records
    unknown = [r.field for r in rules if not isinstance(r.field, str) or r.field not in SORT_FIELDS]
    if unknown:
        _logger.debug("Ignoring unknown sort fields: %s", ", ".join(map(str, unknown)))
    return sorted(records, key=cmp_to_key(lambda a, b: compare_records(a, b, rules)))
