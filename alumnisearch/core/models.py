from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Union
from urllib.parse import urlencode

from alumnisearch.utils.text import ensure_scheme, normalize_whitespace


@dataclass(frozen=True, slots=True)
class Option:
    value: str
    label: str

    @classmethod
    def of(cls, value: str) -> "Option":
        return cls(value=value, label=value)


def sort_options(options: Iterable[Option]) -> list[Option]:
    return sorted(options, key=lambda option: option.label.casefold())


FilterValue = Union[str, int, Option, None]


def filter_text(value: FilterValue) -> str:
    """Text a filter value contributes to a query, trimmed."""
    if value is None:
        return ""
    if isinstance(value, Option):
        return value.value.strip()
    return str(value).strip()


class FilterState:
    """Sparse filter values keyed by field name.

    Fields are independent except country and city: any change to country
    clears the selected city.
    """

    def __init__(self, values: Mapping[str, FilterValue] | None = None) -> None:
        self._values: dict[str, FilterValue] = {}
        for name, value in (values or {}).items():
            self.set(name, value)

    def set(self, name: str, value: FilterValue) -> None:
        if name == "country":
            if filter_text(value) != filter_text(self._values.get("country")):
                self._values.pop("city", None)
        if value is None:
            self._values.pop(name, None)
        else:
            self._values[name] = value

    def get(self, name: str) -> FilterValue:
        return self._values.get(name)

    def text(self, name: str) -> str:
        return filter_text(self._values.get(name))

    def has_any(self, fields: Iterable[str]) -> bool:
        return any(self.text(name) for name in fields)

    def clear(self) -> None:
        self._values.clear()

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"FilterState({self._values!r})"


@dataclass(frozen=True, slots=True)
class SearchQuery:
    params: tuple[tuple[str, str], ...]

    def to_query_string(self) -> str:
        return urlencode(self.params)


@dataclass(slots=True)
class AlumniRecord:
    name: str
    roll_number: str
    year_of_entry: int | None = None
    program_name: str | None = None
    specialization: str | None = None
    department: str | None = None
    batch: str | None = None
    last_organization: str | None = None
    last_position: str | None = None
    nature_of_job: str | None = None
    country: str | None = None
    current_location_india: str | None = None
    current_overseas_location: str | None = None
    email: str | None = None
    linkedin: str | None = None
    photo_link: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AlumniRecord":
        def text(key: str) -> str | None:
            value = payload.get(key)
            if value is None:
                return None
            cleaned = normalize_whitespace(str(value))
            return cleaned or None

        year = payload.get("yearOfEntry")
        try:
            year_of_entry = int(year) if year not in (None, "") else None
        except (TypeError, ValueError):
            year_of_entry = None

        return cls(
            name=text("name") or "",
            roll_number=text("rollNumber") or "",
            year_of_entry=year_of_entry,
            program_name=text("programName"),
            specialization=text("specialization"),
            department=text("department"),
            batch=text("batch"),
            last_organization=text("lastOrganization"),
            last_position=text("lastPosition"),
            nature_of_job=text("natureOfJob"),
            country=text("country"),
            current_location_india=text("currentLocationIndia"),
            current_overseas_location=text("currentOverseasLocation"),
            email=text("email"),
            linkedin=text("linkedIn"),
            photo_link=text("photoLink"),
            raw=dict(payload),
        )

    @property
    def linkedin_url(self) -> str:
        return ensure_scheme(self.linkedin or "")


@dataclass(slots=True)
class SearchResult:
    rows: list[AlumniRecord] = field(default_factory=list)
    total_count: int = 0
    has_more: bool = False
    page: int = 1


class _Ellipsis:
    __slots__ = ()

    def __repr__(self) -> str:
        return "ELLIPSIS"


ELLIPSIS = _Ellipsis()

PageEntry = Union[int, _Ellipsis]
