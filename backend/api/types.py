"""Common type aliases for the Employee Directory API."""
from typing import Any

# A single employee as stored in the data file (field_name -> value)
EmployeeRecord = dict[str, Any]

# {"field": ..., "direction": "asc" | "desc"}
SortCriterionDict = dict[str, str]

# List aliases
EmployeeList = list[EmployeeRecord]
SortCriteriaList = list[SortCriterionDict]
