from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

from alumnisearch.client.lifecycle import RequestLifecycleManager, RequestSequencer
from alumnisearch.core.models import (
    AlumniRecord,
    FilterState,
    FilterValue,
    Option,
    PageEntry,
    SearchResult,
    filter_text,
)
from alumnisearch.core.outcomes import (
    INVALID_PAGE_MESSAGE,
    NO_FILTER_MESSAGE,
    InvalidContentType,
    RequestOutcome,
    Success,
    ValidationError,
    message_for,
)
from alumnisearch.query.builder import MISSING_FIELDS, SEARCH_FIELDS, build_query
from alumnisearch.query.pagination import page_window, total_pages
from alumnisearch.sources.location import LocationResolver
from alumnisearch.utils.text import normalize_base_url

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class SearchState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    POPULATED = "populated"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SearchEndpoint:
    path: str
    fields: tuple[str, ...]
    require_filter: bool = False
    sort_key: str | None = None
    label: str = "search"


NETWORK_ENDPOINT = SearchEndpoint(path="api/search", fields=SEARCH_FIELDS, sort_key="year_of_entry", label="network")
MISSING_ENDPOINT = SearchEndpoint(
    path="api/missing_alumni",
    fields=MISSING_FIELDS,
    require_filter=True,
    label="missing",
)


def sort_rows(rows: list[AlumniRecord], key: str) -> list[AlumniRecord]:
    """Stable ascending sort on ``key``; rows without a value go last."""

    def sort_key(row: AlumniRecord) -> tuple[bool, Any]:
        value = getattr(row, key, None)
        return (value is None, value if value is not None else 0)

    return sorted(rows, key=sort_key)


class SearchController:
    """Holds filter and result state for one search session.

    Every ``search`` call takes a ticket; a response is committed only while
    its ticket is the latest, so an older request finishing late never
    replaces the results of a newer one. Editing a filter while a search is
    loading retires that search's ticket: a committed result always matches
    the current filters.
    """

    def __init__(
        self,
        manager: RequestLifecycleManager,
        base_url: str,
        endpoint: SearchEndpoint = NETWORK_ENDPOINT,
        page_size: int = DEFAULT_PAGE_SIZE,
        resolver: LocationResolver | None = None,
        pagination_radius: int = 2,
    ) -> None:
        self.manager = manager
        self.base_url = normalize_base_url(base_url)
        self.endpoint = endpoint
        self.page_size = page_size
        self.resolver = resolver
        self.pagination_radius = pagination_radius
        self.filters = FilterState()
        self.result = SearchResult()
        self.state = SearchState.IDLE
        self.error: str | None = None
        self._settled_state = SearchState.IDLE
        self._sequencer = RequestSequencer()

    @property
    def url(self) -> str:
        return self.base_url + self.endpoint.path

    @property
    def rows(self) -> list[AlumniRecord]:
        return self.result.rows

    @property
    def current_page(self) -> int:
        return self.result.page

    @property
    def total_pages(self) -> int:
        return total_pages(self.page_size, self.result.total_count)

    def _filter_snapshot(self) -> tuple[str, ...]:
        return tuple(self.filters.text(name) for name in self.endpoint.fields)

    def _supersede(self, reason: str) -> None:
        """Drop any in-flight search and fall back to the last settled state."""
        if self.state is not SearchState.LOADING:
            return
        self._sequencer.next()
        self.state = self._settled_state
        logger.info(
            "search_superseded",
            extra={"extra_fields": {"endpoint": self.endpoint.label, "reason": reason, "latest": self._sequencer.latest}},
        )

    def set_filter(self, name: str, value: FilterValue) -> None:
        previous = self.filters.text("country")
        before = self._filter_snapshot()
        self.filters.set(name, value)
        if self._filter_snapshot() != before:
            self._supersede(f"filter {name} changed")
        if name != "country" or self.resolver is None or self.filters.text("country") == previous:
            return
        if isinstance(value, Option) or value is None:
            self.resolver.select_country(value)
        else:
            text = filter_text(value)
            self.resolver.select_country(Option.of(text) if text else None)

    def _validate(self, page: int) -> None:
        if page < 1:
            raise ValidationError(INVALID_PAGE_MESSAGE)
        if self.endpoint.require_filter and not self.filters.has_any(self.endpoint.fields):
            raise ValidationError(NO_FILTER_MESSAGE)

    async def search(self, page: int = 1) -> SearchState:
        try:
            self._validate(page)
        except ValidationError as exc:
            self._sequencer.next()
            self.result = SearchResult()
            self.error = str(exc)
            self._settle(SearchState.FAILED)
            logger.info("search_rejected", extra={"extra_fields": {"endpoint": self.endpoint.label, "reason": str(exc)}})
            return self.state

        ticket = self._sequencer.next()
        self.state = SearchState.LOADING
        self.error = None
        snapshot = self._filter_snapshot()
        query = build_query(self.filters, page, self.page_size, self.endpoint.fields)
        logger.info(
            "search_started",
            extra={"extra_fields": {"endpoint": self.endpoint.label, "ticket": ticket, "query": query.to_query_string()}},
        )

        outcome = await self.manager.execute("GET", self.url, params=list(query.params))

        if not self._sequencer.is_current(ticket):
            logger.info(
                "stale_response_discarded",
                extra={"extra_fields": {"kind": "search", "ticket": ticket, "latest": self._sequencer.latest}},
            )
            return self.state
        if self._filter_snapshot() != snapshot:
            # filters edited without going through set_filter
            self._supersede("filters changed during search")
            return self.state
        self._commit(outcome, page)
        return self.state

    def _settle(self, state: SearchState) -> None:
        self.state = state
        self._settled_state = state

    def _commit(self, outcome: RequestOutcome, page: int) -> None:
        if isinstance(outcome, Success) and not isinstance(outcome.payload, dict):
            outcome = InvalidContentType(f"Unexpected payload shape: {type(outcome.payload).__name__}")

        if not isinstance(outcome, Success):
            self.error = message_for(outcome)
            self.result = SearchResult(
                rows=[],
                total_count=self.result.total_count,
                has_more=self.result.has_more,
                page=self.result.page,
            )
            self._settle(SearchState.FAILED)
            logger.warning(
                "search_failed",
                extra={"extra_fields": {"endpoint": self.endpoint.label, "outcome": repr(outcome)}},
            )
            return

        payload = outcome.payload
        data = payload.get("data")
        rows = [AlumniRecord.from_payload(entry) for entry in data if isinstance(entry, dict)] if isinstance(data, list) else []
        if self.endpoint.sort_key:
            rows = sort_rows(rows, self.endpoint.sort_key)
        try:
            total = max(0, int(payload.get("totalCount") or 0))
        except (TypeError, ValueError):
            total = 0

        self.result = SearchResult(rows=rows, total_count=total, has_more=bool(payload.get("hasMore")), page=page)
        self.error = None
        self._settle(SearchState.POPULATED if rows else SearchState.EMPTY)
        logger.info(
            "search_committed",
            extra={"extra_fields": {"endpoint": self.endpoint.label, "page": page, "rows": len(rows), "total": total}},
        )

    async def next_page(self) -> SearchState:
        if not self.result.has_more:
            return self.state
        return await self.search(self.result.page + 1)

    async def prev_page(self) -> SearchState:
        if self.result.page <= 1:
            return self.state
        return await self.search(self.result.page - 1)

    def clear(self) -> None:
        self._sequencer.next()
        self.filters.clear()
        if self.resolver is not None:
            self.resolver.clear_cities()
        self.result = SearchResult()
        self.error = None
        self._settle(SearchState.IDLE)

    def window(self) -> list[PageEntry]:
        return page_window(self.result.page, self.page_size, self.result.total_count, self.pagination_radius)
