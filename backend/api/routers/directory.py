"""Directory view router: tab, search, sort criteria and pagination events."""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import List

from dirlib.filtering import TABS
from ..dependencies import controller_session, limiter, _logger
from ..types import SortCriterionDict

router = APIRouter(prefix="/api/directory", tags=["Directory"])


class TabBody(BaseModel):
    tab: str


class SearchBody(BaseModel):
    term: str = ''
    # Skip the settle delay (e.g. the user pressed Enter)
    immediate: bool = False


class PageBody(BaseModel):
    page: int


class AddCriterionBody(BaseModel):
    field: str


class DirectionBody(BaseModel):
    direction: str


class ReorderBody(BaseModel):
    criteria: List[SortCriterionDict]


class MoveBody(BaseModel):
    old_index: int
    new_index: int


def _render(ctrl):
    view = ctrl.view()
    if view.get('error'):
        return JSONResponse(
            status_code=503,
            content={**view, "retry": "/api/directory/reload"},
        )
    return view


@router.get("", summary="Current directory page", description=(
    "Filtered, searched, sorted and paginated employees plus the active sort criteria. "
    "A pending search term is applied here once its settle delay has elapsed."
))
def get_directory():
    with controller_session() as ctrl:
        return _render(ctrl)


@router.get("/tabs", summary="Directory tabs", description="Tabs offered above the table, in display order.")
def get_tabs():
    return [dict(t) for t in TABS]


@router.post("/reload", summary="Retry loading employees")
@limiter.limit("10/minute")
def reload_directory(request: Request):
    with controller_session() as ctrl:
        ctrl.reload()
        return _render(ctrl)


@router.put("/tab", summary="Change the active tab")
def change_tab(body: TabBody):
    with controller_session() as ctrl:
        ctrl.on_tab_change(body.tab)
        return _render(ctrl)


@router.put("/search", summary="Change the search term")
def change_search(body: SearchBody):
    with controller_session() as ctrl:
        ctrl.on_search(body.term)
        if body.immediate:
            ctrl.flush_search()
        return _render(ctrl)


@router.put("/page", summary="Go to a page")
def change_page(body: PageBody):
    with controller_session() as ctrl:
        ctrl.on_page_change(body.page)
        return _render(ctrl)


# ── Sort criteria ─────────────────────────────────────────────

@router.post("/sort", summary="Add a sort criterion")
def add_sort_criterion(body: AddCriterionBody):
    with controller_session() as ctrl:
        ctrl.on_add_criterion(body.field)
        _logger.info("Sort criterion added: %s", body.field)
        return _render(ctrl)


@router.put("/sort", summary="Reorder sort criteria")
def reorder_sort_criteria(body: ReorderBody):
    with controller_session() as ctrl:
        ctrl.on_sort_criteria_reorder(body.criteria)
        return _render(ctrl)


@router.post("/sort/move", summary="Move one sort criterion")
def move_sort_criterion(body: MoveBody):
    with controller_session() as ctrl:
        ctrl.on_move_sort_criterion(body.old_index, body.new_index)
        return _render(ctrl)


@router.post("/sort/reset", summary="Restore the default sort criteria")
def reset_sort_criteria():
    with controller_session() as ctrl:
        ctrl.on_reset_sorts()
        return _render(ctrl)


@router.delete("/sort", summary="Clear all sort criteria")
def clear_sort_criteria():
    with controller_session() as ctrl:
        ctrl.on_clear_all_sorts()
        return _render(ctrl)


@router.patch("/sort/{index}", summary="Change a criterion's direction")
def change_sort_direction(index: int, body: DirectionBody):
    with controller_session() as ctrl:
        ctrl.on_sort_direction_change(index, body.direction)
        return _render(ctrl)


@router.delete("/sort/{index}", summary="Remove a sort criterion")
def remove_sort_criterion(index: int):
    with controller_session() as ctrl:
        ctrl.on_remove_sort_criterion(index)
        return _render(ctrl)
