"""Tab filter, text search and the full directory pipeline."""
from typing import Any, Iterable, List, Mapping, Sequence

from .sorting import sort_employees

ALL_TAB = 'all'

# Tabs offered by the directory, in display order.
TABS = (
    {'value': 'all', 'label': 'All'},
    {'value': 'individual', 'label': 'Individual'},
    {'value': 'company', 'label': 'Company'},
)

SEARCH_FIELDS = ('employee_name', 'email', 'employeeType')


def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ''


def filter_by_tab(records: Iterable[Mapping[str, Any]], tab: str) -> List[Mapping[str, Any]]:
    """Keep records whose employeeType matches tab, ignoring case."""
    if not tab or tab.lower() == ALL_TAB:
        return list(records)
    wanted = tab.lower()
    return [r for r in records if isinstance(r.get('employeeType'), str)
            and r['employeeType'].lower() == wanted]


def matches_search(record: Mapping[str, Any], term: str) -> bool:
    needle = term.lower()
    return any(needle in _lower(record.get(f)) for f in SEARCH_FIELDS)


def filter_by_search(records: Iterable[Mapping[str, Any]], term: str) -> List[Mapping[str, Any]]:
    """Keep records where term occurs in the name, email or type, ignoring case."""
    if not term:
        return list(records)
    return [r for r in records if matches_search(r, term)]


def apply_pipeline(records: Sequence[Mapping[str, Any]], tab: str, term: str,
                   criteria) -> List[Mapping[str, Any]]:
    """Tab filter, then text search, then the cascading sort."""
    filtered = filter_by_tab(records, tab)
    filtered = filter_by_search(filtered, term)
    return list(sort_employees(filtered, criteria))


def active_filters_count(tab: str, search_term: str, criteria: Sequence) -> int:
    count = 0
    if tab and tab.lower() != ALL_TAB:
        count += 1
    if search_term:
        count += 1
    if len(criteria) > 0:
        count += 1
    return count
