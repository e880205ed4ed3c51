"""
Read-only access to the employee demo data (a JSON file).
"""
import json
import os
from typing import Any, Dict, List, Optional

from .errors import FetchError

# ── Global cross-request file cache ─────────────────────────────
# Maps path → (mtime, employees)
_GLOBAL_RECORD_CACHE: Dict[str, tuple] = {}


class EmployeeSource:
    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[Dict[str, Any]]:
        """Return all employee records, re-reading the file only when it changed.

        The file holds either ``{"employees": [...]}`` or a bare list. Any
        failure to read or parse it raises FetchError.
        """
        try:
            mtime = os.path.getmtime(self.path)
        except OSError as exc:
            raise FetchError(f"Employee data not found: {self.path}") from exc

        cached = _GLOBAL_RECORD_CACHE.get(self.path)
        if cached is not None and cached[0] == mtime:
            return [dict(r) for r in cached[1]]

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise FetchError(f"Employee data unreadable: {exc}") from exc

        employees = data.get('employees') if isinstance(data, dict) else data
        if not isinstance(employees, list) or not all(isinstance(e, dict) for e in employees):
            raise FetchError("Employee data must be a list of objects")

        _GLOBAL_RECORD_CACHE[self.path] = (mtime, employees)
        return [dict(r) for r in employees]

    def get(self, emp_id: Any) -> Optional[Dict[str, Any]]:
        for e in self.load():
            if str(e.get('id')) == str(emp_id):
                return e
        return None

    def invalidate(self) -> None:
        _GLOBAL_RECORD_CACHE.pop(self.path, None)
