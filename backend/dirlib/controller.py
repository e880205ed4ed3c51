"""
Directory controller: the single owner of the directory's UI state.

Holds the loaded records, active tab, debounced search term, sort criteria
and current page. Every event that changes an input of the pipeline
recomputes it synchronously and resets pagination to page 1.
"""
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .criteria import CriterionLike, SortCriteriaModel
from .debounce import Debouncer
from .errors import FetchError
from .formatting import format_date, format_salary
from .filtering import ALL_TAB, active_filters_count, apply_pipeline
from .pagination import PAGE_SIZE, Page, clamp_page, paginate, total_pages
from .records import EmployeeSource
from .sorting import get_field_icon, get_sort_direction_label
from .storage import KeyValueStore

_logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to fetch employees data"
SEARCH_DELAY = 0.3


class DirectoryController:
    def __init__(self, source: EmployeeSource, store: Optional[KeyValueStore] = None,
                 search_delay: float = SEARCH_DELAY, page_size: int = PAGE_SIZE,
                 clock: Callable[[], float] = time.monotonic):
        self.source = source
        self.sort = SortCriteriaModel(store)
        self.page_size = page_size
        self.records: List[Dict[str, Any]] = []
        self.error: Optional[str] = None
        self.loaded = False
        self.active_tab = ALL_TAB
        self.search_term = ''
        self._search = Debouncer('', delay=search_delay, clock=clock)
        self.current_page = 1
        self.results: List[Mapping[str, Any]] = []

    # ── Loading ────────────────────────────────────────────────
    def load(self) -> bool:
        """Fetch records once. On failure the controller stays in the error state."""
        if self.loaded:
            return self.error is None
        self.loaded = True
        try:
            self.records = self.source.load()
        except FetchError as exc:
            _logger.error("Employee fetch failed: %s", exc)
            self.records = []
            self.error = FETCH_ERROR_MESSAGE
            self._recompute()
            return False
        self.error = None
        _logger.info("Loaded %d employees", len(self.records))
        self._recompute()
        return True

    def reload(self) -> bool:
        """Manual retry: drop cached data and fetch again from scratch."""
        self.source.invalidate()
        self.loaded = False
        self.error = None
        return self.load()

    # ── Pipeline ───────────────────────────────────────────────
    @property
    def debounced_search_term(self) -> str:
        return self._search.value

    def _recompute(self) -> None:
        self.results = apply_pipeline(
            self.records, self.active_tab, self._search.value, self.sort.criteria
        )
        self.current_page = 1

    def settle(self) -> bool:
        """Apply a pending search term whose delay has elapsed."""
        if self._search.poll():
            self._recompute()
            return True
        return False

    # ── UI events ──────────────────────────────────────────────
    def on_tab_change(self, tab: str) -> None:
        tab = (tab or ALL_TAB).strip() or ALL_TAB
        if tab == self.active_tab:
            return
        self.active_tab = tab
        self._recompute()

    def on_search(self, term: str) -> None:
        self.search_term = term or ''
        self._search.submit(self.search_term)

    def flush_search(self) -> None:
        if self._search.flush():
            self._recompute()

    def on_sort_direction_change(self, index: int, direction: str) -> None:
        self.sort.set_direction(index, direction)
        self._recompute()

    def on_remove_sort_criterion(self, index: int) -> None:
        self.sort.remove_criterion(index)
        self._recompute()

    def on_clear_all_sorts(self) -> None:
        self.sort.clear()
        self._recompute()

    def on_sort_criteria_reorder(self, new_order: Iterable[CriterionLike]) -> None:
        self.sort.reorder(new_order)
        self._recompute()

    def on_move_sort_criterion(self, old_index: int, new_index: int) -> None:
        self.sort.move(old_index, new_index)
        self._recompute()

    def on_add_criterion(self, field: str) -> None:
        self.sort.add_criterion(field)
        self._recompute()

    def on_reset_sorts(self) -> None:
        self.sort.reset()
        self._recompute()

    def on_page_change(self, page: int) -> int:
        self.current_page = clamp_page(page, total_pages(len(self.results), self.page_size))
        return self.current_page

    # ── Rendering ──────────────────────────────────────────────
    def page(self) -> Page:
        return paginate(self.results, self.current_page, self.page_size)

    @staticmethod
    def display_row(record: Mapping[str, Any]) -> Dict[str, Any]:
        """Copy of record with the formatted salary and created date added."""
        return {
            **record,
            'salary_display': format_salary(record.get('employee_salary') or 0),
            'created_display': format_date(record.get('createdAt')),
        }

    def criteria_view(self) -> List[Dict[str, Any]]:
        return [
            {
                **c.to_dict(),
                'icon': get_field_icon(c.field),
                'label': get_sort_direction_label(c.field, c.direction),
            }
            for c in self.sort.criteria
        ]

    def view(self) -> Dict[str, Any]:
        self.settle()
        if self.error:
            return {'error': self.error, 'loading': False}
        pagination = self.page().to_dict()
        pagination['items'] = [self.display_row(r) for r in pagination['items']]
        return {
            'loading': not self.loaded,
            'error': None,
            'active_tab': self.active_tab,
            'search_term': self.search_term,
            'debounced_search_term': self._search.value,
            'search_pending': self._search.pending,
            'active_filters': active_filters_count(
                self.active_tab, self.search_term, self.sort.criteria
            ),
            'sort_criteria': self.criteria_view(),
            'available_fields': [f.key for f in self.sort.available_fields()],
            'pagination': pagination,
        }
