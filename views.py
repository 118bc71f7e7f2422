# views.py
"""Filtered, sorted and paginated projections of the service log list."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, Optional, Sequence, Union

from models import ServiceLog, ServiceType

SortKey = Literal["provider_id", "service_order", "start_date", "end_date"]
SortDirection = Literal["asc", "desc"]

SORT_KEYS: tuple[SortKey, ...] = ("provider_id", "service_order", "start_date", "end_date")
ROWS_PER_PAGE_OPTIONS = (5, 10, 25)


@dataclass(frozen=True)
class ServiceLogFilters:
    search_text: str = ""
    type: Union[ServiceType, Literal["all"]] = "all"
    start_date_from: str = ""
    start_date_to: str = ""


def filter_service_logs(logs: Sequence[ServiceLog], filters: ServiceLogFilters) -> list[ServiceLog]:
    q = filters.search_text.strip().lower()
    date_from = filters.start_date_from or ""
    date_to = filters.start_date_to or ""
    wanted = "all" if filters.type == "all" else ServiceType(filters.type)

    out: list[ServiceLog] = []
    for log in logs:
        if wanted != "all" and log.type != wanted:
            continue
        # ISO YYYY-MM-DD compares the same lexically and chronologically
        start = log.start_date or ""
        if date_from and start < date_from:
            continue
        if date_to and start > date_to:
            continue
        if q:
            hay = f"{log.provider_id} {log.car_id} {log.service_order}".lower()
            if q not in hay:
                continue
        out.append(log)
    return out


class FilteredLogsSelector:
    """Memoizes the filter stage on the last (logs, filters) pair."""

    def __init__(self) -> None:
        self._last_logs: Optional[Sequence[ServiceLog]] = None
        self._last_filters: Optional[ServiceLogFilters] = None
        self._result: list[ServiceLog] = []
        self.recomputations = 0

    def __call__(self, logs: Sequence[ServiceLog], filters: ServiceLogFilters) -> list[ServiceLog]:
        if logs is self._last_logs and filters == self._last_filters:
            return self._result
        self._result = filter_service_logs(logs, filters)
        self._last_logs = logs
        self._last_filters = filters
        self.recomputations += 1
        return self._result


def sort_service_logs(
    logs: Sequence[ServiceLog], key: SortKey = "start_date", direction: SortDirection = "asc"
) -> list[ServiceLog]:
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key!r}")
    # sorted() is stable in both directions, so ties keep their filtered order
    return sorted(logs, key=lambda log: getattr(log, key) or "", reverse=(direction == "desc"))


def paginate(items: Sequence[ServiceLog], page: int, rows_per_page: int) -> list[ServiceLog]:
    start = max(0, page) * rows_per_page
    return list(items[start : start + rows_per_page])


@dataclass(frozen=True)
class TableView:
    rows: list[ServiceLog]
    total: int
    page: int
    page_count: int


@dataclass
class TableViewState:
    filters: ServiceLogFilters = field(default_factory=ServiceLogFilters)
    sort_key: SortKey = "start_date"
    sort_direction: SortDirection = "asc"
    page: int = 0
    rows_per_page: int = 10

    def toggle_sort(self, key: SortKey) -> None:
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key!r}")
        if self.sort_key == key:
            self.sort_direction = "desc" if self.sort_direction == "asc" else "asc"
        else:
            self.sort_key = key
            self.sort_direction = "asc"

    def set_filters(self, filters: ServiceLogFilters) -> None:
        if filters != self.filters:
            self.filters = filters
            self.page = 0

    def update_filters(self, **changes) -> None:
        self.set_filters(replace(self.filters, **changes))

    def set_page(self, page: int) -> None:
        self.page = max(0, page)

    def set_rows_per_page(self, rows_per_page: int) -> None:
        if rows_per_page <= 0:
            raise ValueError("rows_per_page must be positive")
        self.rows_per_page = rows_per_page
        self.page = 0

    def page_count(self, total: int) -> int:
        return max(1, -(-total // self.rows_per_page))

    def render(
        self, logs: Sequence[ServiceLog], selector: Optional[FilteredLogsSelector] = None
    ) -> TableView:
        filtered = (selector or filter_service_logs)(logs, self.filters)
        ordered = sort_service_logs(filtered, self.sort_key, self.sort_direction)
        pages = self.page_count(len(ordered))
        # a shrinking list (delete, filter elsewhere) must not strand us past the end
        if self.page >= pages:
            self.page = pages - 1
        return TableView(
            rows=paginate(ordered, self.page, self.rows_per_page),
            total=len(ordered),
            page=self.page,
            page_count=pages,
        )
