from __future__ import annotations

from alumnisearch.core.models import Option, sort_options

FIRST_YEAR_OF_ENTRY = 1998
LAST_YEAR_OF_ENTRY = 2026

NATURE_OF_JOB = (
    "ACADEMIA",
    "BANKING",
    "CAREERBREAK",
    "CORPORATE",
    "DECEASED",
    "ENTREPRENEUR",
    "FREELANCE",
    "GLOBAL",
    "GOVERNMENT",
)

PROGRAM_NAMES = ("BCS", "BIT", "MBA", "MTECH", "IPG", "PGDIT", "PGDMIT", "PHD", "DSC")

SPECIALIZATIONS = (
    "AN",
    "BA",
    "BI",
    "CN",
    "DC",
    "ICS",
    "IFS",
    "IMG",
    "IMT",
    "IS",
    "ISM",
    "IT+MBA",
    "ITES",
    "MBA",
    "MTECH",
    "NFSPAM",
    "PAMF",
    "PIT",
    "PMGF",
    "PSM",
    "SE",
    "VLSI",
    "WNC",
)


def year_options(first: int = FIRST_YEAR_OF_ENTRY, last: int = LAST_YEAR_OF_ENTRY) -> list[Option]:
    if last < first:
        raise ValueError(f"last year {last} precedes first year {first}")
    return sort_options(Option.of(str(year)) for year in range(first, last + 1))


def program_options() -> list[Option]:
    return sort_options(Option.of(name) for name in PROGRAM_NAMES)


def specialization_options() -> list[Option]:
    return sort_options(Option.of(name) for name in SPECIALIZATIONS)


def nature_of_job_options() -> list[Option]:
    return sort_options(Option.of(name) for name in NATURE_OF_JOB)


CATALOGS = {
    "yearOfEntry": year_options,
    "programName": program_options,
    "specialization": specialization_options,
    "natureOfJob": nature_of_job_options,
}


def options_for(field: str) -> list[Option]:
    try:
        factory = CATALOGS[field]
    except KeyError:
        raise KeyError(f"No option catalog for field: {field}") from None
    return factory()
