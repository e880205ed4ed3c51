"""
Sort criteria list: pure transitions plus a persisted model.

The transition functions take a tuple of criteria and return a new tuple;
they raise a CriteriaError subclass instead of producing an invalid list
(duplicate fields, bad indexes, unknown directions). SortCriteriaModel holds
the current list and writes it to a key-value store after every successful
mutation.
"""
import json
import logging
from collections import Counter
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import (
    CriteriaError, DuplicateFieldError, InvalidPermutationError, OutOfRangeError,
)
from .sorting import (
    ASC, DEFAULT_SORT_CRITERIA, SORT_FIELDS, SortCriterion, SortField,
    validate_direction, validate_field,
)
from .storage import KeyValueStore, MemoryStore

_logger = logging.getLogger(__name__)

STORAGE_KEY = 'employeeSortCriteria'

Criteria = Tuple[SortCriterion, ...]
CriterionLike = Union[SortCriterion, Mapping[str, Any]]


# ── Pure transitions ────────────────────────────────────────────

def _check_index(criteria: Sequence[SortCriterion], index: Any) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise OutOfRangeError(f"Sort criterion index must be an integer, got {index!r}")
    if not 0 <= index < len(criteria):
        raise OutOfRangeError(
            f"Sort criterion index {index} out of range (0..{len(criteria) - 1})"
        )
    return index


def add_criterion(criteria: Sequence[SortCriterion], field: str) -> Criteria:
    validate_field(field)
    if any(c.field == field for c in criteria):
        raise DuplicateFieldError(f"Field {field!r} is already a sort criterion")
    return tuple(criteria) + (SortCriterion(field, ASC),)


def remove_criterion(criteria: Sequence[SortCriterion], index: int) -> Criteria:
    _check_index(criteria, index)
    return tuple(c for i, c in enumerate(criteria) if i != index)


def set_direction(criteria: Sequence[SortCriterion], index: int, direction: str) -> Criteria:
    _check_index(criteria, index)
    validate_direction(direction)
    updated = list(criteria)
    updated[index] = SortCriterion(updated[index].field, direction)
    return tuple(updated)


def reorder(criteria: Sequence[SortCriterion], new_order: Iterable[CriterionLike]) -> Criteria:
    """Replace criteria with new_order, which must be a permutation of it."""
    try:
        candidate = tuple(SortCriterion.from_value(c) for c in new_order)
        matches = Counter(candidate) == Counter(criteria)
    except TypeError as exc:
        raise InvalidPermutationError(str(exc)) from exc
    if not matches:
        raise InvalidPermutationError("New sort order is not a permutation of the current criteria")
    return candidate


def move(criteria: Sequence[SortCriterion], old_index: int, new_index: int) -> Criteria:
    """Move one entry, shifting the ones in between (drag-and-drop result)."""
    _check_index(criteria, old_index)
    _check_index(criteria, new_index)
    items = list(criteria)
    items.insert(new_index, items.pop(old_index))
    return reorder(criteria, items)


def available_fields(criteria: Sequence[SortCriterion]) -> List[SortField]:
    used = {c.field for c in criteria}
    return [f for key, f in SORT_FIELDS.items() if key not in used]


# ── Serialization ───────────────────────────────────────────────

def serialize(criteria: Sequence[SortCriterion]) -> str:
    return json.dumps([c.to_dict() for c in criteria])


def deserialize(raw: str) -> Criteria:
    """Parse a stored criteria list, rejecting anything that breaks the invariants."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise CriteriaError(f"Stored sort criteria are not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise CriteriaError("Stored sort criteria must be a list")
    result: Criteria = ()
    for item in data:
        if not isinstance(item, Mapping):
            raise CriteriaError(f"Stored sort criterion is not an object: {item!r}")
        result = add_criterion(result, item.get('field'))
        result = set_direction(result, len(result) - 1, item.get('direction'))
    return result


# ── Persisted model ─────────────────────────────────────────────

class SortCriteriaModel:
    """Ordered sort criteria persisted under a fixed storage key."""

    def __init__(self, store: Optional[KeyValueStore] = None,
                 default: Sequence[SortCriterion] = DEFAULT_SORT_CRITERIA,
                 key: str = STORAGE_KEY):
        self.store = store if store is not None else MemoryStore()
        self.key = key
        self.default: Criteria = tuple(default)
        self._criteria: Criteria = self._hydrate()

    def _hydrate(self) -> Criteria:
        raw = self.store.get(self.key)
        if raw is None:
            return self.default
        try:
            return deserialize(raw)
        except CriteriaError as exc:
            _logger.warning("Discarding stored sort criteria under %r: %s", self.key, exc)
            return self.default

    def _commit(self, criteria: Criteria) -> Criteria:
        # Store first: a failed write leaves the current list untouched.
        self.store.set(self.key, serialize(criteria))
        self._criteria = criteria
        return criteria

    @property
    def criteria(self) -> Criteria:
        return self._criteria

    def __len__(self) -> int:
        return len(self._criteria)

    def __iter__(self):
        return iter(self._criteria)

    def to_list(self) -> List[dict]:
        return [c.to_dict() for c in self._criteria]

    def add_criterion(self, field: str) -> Criteria:
        return self._commit(add_criterion(self._criteria, field))

    def remove_criterion(self, index: int) -> Criteria:
        return self._commit(remove_criterion(self._criteria, index))

    def set_direction(self, index: int, direction: str) -> Criteria:
        return self._commit(set_direction(self._criteria, index, direction))

    def reorder(self, new_order: Iterable[CriterionLike]) -> Criteria:
        return self._commit(reorder(self._criteria, new_order))

    def move(self, old_index: int, new_index: int) -> Criteria:
        return self._commit(move(self._criteria, old_index, new_index))

    def clear(self) -> Criteria:
        return self._commit(())

    def reset(self) -> Criteria:
        return self._commit(self.default)

    def available_fields(self) -> List[SortField]:
        return available_fields(self._criteria)
