"""
Per-field comparison functions for employee records.

Every comparator takes two records and returns a signed number under
ascending semantics: negative if the first sorts before the second, zero if
they tie, positive otherwise. Direction is applied later by the sort engine;
compare_missing places missing ages before the direction is taken into account.
"""
import math
import re
import unicodedata
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

Comparator = Callable[[Mapping[str, Any], Mapping[str, Any]], float]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Fractional seconds of any length; fromisoformat on 3.10 wants 3 or 6 digits.
_FRACTION_RE = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


def _pad_fraction(match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


# ── Value coercion ──────────────────────────────────────────────

def _get(record: Mapping[str, Any], field: str) -> Any:
    if record is None:
        return None
    try:
        return record.get(field)
    except AttributeError:
        return None


def _text(value: Any) -> str:
    """Missing or falsy values become the empty string."""
    if not value:
        return ''
    return value if isinstance(value, str) else str(value)


def _number(value: Any) -> Optional[float]:
    """Return a finite float for value, or None if it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    return num


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or epoch milliseconds) into an aware datetime.

    Naive timestamps are taken as UTC. Returns None when value is missing or
    cannot be parsed.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith(('Z', 'z')):
            raw = raw[:-1] + '+00:00'
        raw = _FRACTION_RE.sub(_pad_fraction, raw, count=1)
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _instant_ms(value: Any) -> float:
    """Milliseconds since the epoch; missing or unparseable values are 0."""
    dt = parse_timestamp(value)
    if dt is None:
        return 0.0
    return (dt - _EPOCH).total_seconds() * 1000.0


# Whitespace and punctuation in CLDR root collation order. They all sort
# before digits, and digits sort before letters.
_VARIABLE_ORDER = '\t\n\x0b\x0c\r _-,;:!?.\'"()[]{}@*/\\&#%`^+<=>|~$'
_VARIABLE_RANK = {c: i for i, c in enumerate(_VARIABLE_ORDER)}


def _primary_weight(char: str) -> tuple:
    rank = _VARIABLE_RANK.get(char)
    if rank is not None:
        return (0, rank)
    if char.isdigit():
        return (1, unicodedata.decimal(char, ord(char)))
    if char.isalpha():
        return (2, ord(char))
    # Other symbols: after the listed punctuation, still before digits
    return (0, len(_VARIABLE_ORDER) + ord(char))


def collation_key(text: str) -> tuple:
    """Sort key approximating a locale-aware collation.

    Base characters are compared first (accents and case ignored) using
    primary weights, then accents, then case with lowercase first. Code points
    break any remaining tie.
    """
    decomposed = unicodedata.normalize('NFKD', text)
    base = ''.join(c for c in decomposed if not unicodedata.combining(c)).casefold()
    primary = tuple(_primary_weight(c) for c in base)
    accented = unicodedata.normalize('NFC', text).casefold()
    return (primary, accented, text.swapcase(), text)


def locale_compare(a: str, b: str) -> int:
    ka, kb = collation_key(a), collation_key(b)
    return (ka > kb) - (ka < kb)


# ── Comparator factories ────────────────────────────────────────

def string_comparator(field: str) -> Comparator:
    def compare(a, b):
        return locale_compare(_text(_get(a, field)), _text(_get(b, field)))
    compare.__name__ = f'compare_{field}'
    return compare


def number_comparator(field: str) -> Comparator:
    def compare(a, b):
        return (_number(_get(a, field)) or 0.0) - (_number(_get(b, field)) or 0.0)
    compare.__name__ = f'compare_{field}'
    return compare


def nullable_number_comparator(field: str) -> Comparator:
    """Missing values sort after present ones; two missing values tie."""
    def compare(a, b):
        va, vb = _number(_get(a, field)), _number(_get(b, field))
        if va is None and vb is None:
            return 0
        if va is None:
            return 1
        if vb is None:
            return -1
        return va - vb
    compare.__name__ = f'compare_{field}'
    return compare


def timestamp_comparator(field: str) -> Comparator:
    def compare(a, b):
        return _instant_ms(_get(a, field)) - _instant_ms(_get(b, field))
    compare.__name__ = f'compare_{field}'
    return compare


def _neutral(a, b):
    return 0


def _is_missing(value: Any) -> bool:
    return _number(value) is None


# ── Registry ────────────────────────────────────────────────────

COMPARATORS: Dict[str, Comparator] = {
    'employee_name': string_comparator('employee_name'),
    'employee_salary': number_comparator('employee_salary'),
    'employee_age': nullable_number_comparator('employee_age'),
    'employeeType': string_comparator('employeeType'),
    'email': string_comparator('email'),
    'createdAt': timestamp_comparator('createdAt'),
    'updatedAt': timestamp_comparator('updatedAt'),
}


# Fields whose missing values sort last whatever the direction.
NULLS_LAST_FIELDS = frozenset({'employee_age'})


def compare_missing(field: str, a: Mapping[str, Any], b: Mapping[str, Any]) -> int:
    """Direction-independent order of missing values: 1 if only a is missing,
    -1 if only b is missing, otherwise 0.
    """
    if not isinstance(field, str) or field not in NULLS_LAST_FIELDS:
        return 0
    missing_a, missing_b = _is_missing(_get(a, field)), _is_missing(_get(b, field))
    if missing_a == missing_b:
        return 0
    return 1 if missing_a else -1


def get_comparator(field: str) -> Comparator:
    """Return the comparator for field; unknown fields never contribute."""
    if not isinstance(field, str):
        return _neutral
    return COMPARATORS.get(field, _neutral)


def compare_field(field: str, a: Mapping[str, Any], b: Mapping[str, Any]) -> float:
    return get_comparator(field)(a, b)
