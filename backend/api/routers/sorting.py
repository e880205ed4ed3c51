"""Sort field catalogue router."""
from fastapi import APIRouter

from dirlib.sorting import ASC, DEFAULT_SORT_CRITERIA, DESC, SORT_FIELDS
from ..types import SortCriteriaList

router = APIRouter(prefix="/api/sort", tags=["Sorting"])


@router.get("/fields", summary="Sortable fields", description="Every field the directory can sort by, with its label, icon and direction labels.")
def get_sort_fields():
    return [
        {
            "key": f.key,
            "label": f.label,
            "icon": f.icon,
            "directions": {ASC: f.asc_label, DESC: f.desc_label},
        }
        for f in SORT_FIELDS.values()
    ]


@router.get("/defaults", summary="Default sort criteria")
def get_default_criteria():
    defaults: SortCriteriaList = [c.to_dict() for c in DEFAULT_SORT_CRITERIA]
    return defaults
