from __future__ import annotations

from typing import Sequence

from alumnisearch.core.models import FilterState, SearchQuery

SEARCH_FIELDS: tuple[str, ...] = (
    "name",
    "rollNumber",
    "lastOrganization",
    "yearOfEntry",
    "programName",
    "natureOfJob",
    "specialization",
    "country",
    "city",
    "lastPosition",
    "collegeClubs",
)

MISSING_FIELDS: tuple[str, ...] = ("yearOfEntry", "programName", "specialization")

UPPERCASE_FIELDS = frozenset({"country"})


def build_query(
    filters: FilterState,
    page: int,
    page_size: int,
    fields: Sequence[str] = SEARCH_FIELDS,
) -> SearchQuery:
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    params: list[tuple[str, str]] = []
    for name in fields:
        text = filters.text(name)
        if not text:
            continue
        if name in UPPERCASE_FIELDS:
            text = text.upper()
        params.append((name, text))
    params.append(("page", str(page)))
    params.append(("limit", str(page_size)))
    return SearchQuery(params=tuple(params))
