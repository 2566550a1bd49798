from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Sequence

import httpx

from alumnisearch.catalog.options import CATALOGS, options_for, year_options
from alumnisearch.core.controller import SearchController, SearchState
from alumnisearch.core.models import ELLIPSIS, Option, PageEntry
from alumnisearch.core.session import SearchSession
from alumnisearch.utils.config import load_config
from alumnisearch.utils.logging_utils import setup_logging

FILTER_FLAGS = {
    "name": "name",
    "roll": "rollNumber",
    "company": "lastOrganization",
    "year": "yearOfEntry",
    "program": "programName",
    "nature": "natureOfJob",
    "specialization": "specialization",
    "country": "country",
    "city": "city",
    "position": "lastPosition",
    "clubs": "collegeClubs",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="alumnisearch", description="Search the alumni directory")
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument("--verbose", action="store_true", help="Echo debug logging to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Run a filtered directory search")
    for flag in FILTER_FLAGS:
        search.add_argument(f"--{flag}", default=None)
    search.add_argument("--page", type=int, default=1)
    search.add_argument("--missing", action="store_true", help="Search alumni with unknown job status")
    search.add_argument("--json", action="store_true", help="Print rows as JSON")

    sub.add_parser("countries", help="List country options")
    cities = sub.add_parser("cities", help="List city options for a country")
    cities.add_argument("country")
    options = sub.add_parser("options", help="List a static option catalog")
    options.add_argument("field", choices=sorted(CATALOGS))
    return parser


def make_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(follow_redirects=True)


def format_window(window: Sequence[PageEntry]) -> str:
    return " ".join("..." if entry is ELLIPSIS else str(entry) for entry in window)


def print_options(options: Sequence[Option]) -> None:
    for option in options:
        print(option.label if option.value == option.label else f"{option.label} ({option.value})")


def print_results(controller: SearchController, as_json: bool) -> None:
    if controller.state is SearchState.FAILED:
        print(f"Error: {controller.error}", file=sys.stderr)
        return
    rows = controller.rows
    if as_json:
        print(json.dumps([row.raw for row in rows], indent=2))
    else:
        for row in rows:
            year = row.year_of_entry if row.year_of_entry is not None else "-"
            org = row.last_organization or "-"
            print(f"{row.roll_number:<12} {row.name:<32} {year!s:<6} {org}")
    result = controller.result
    print(f"{len(rows)} shown on page {result.page}, {result.total_count} total")
    print(f"Pages: {format_window(controller.window())}")


async def run_command(args: argparse.Namespace, config: dict) -> int:
    if args.command == "options":
        catalog = config["catalog"]
        if args.field == "yearOfEntry":
            print_options(year_options(catalog["first_year"], catalog["last_year"]))
        else:
            print_options(options_for(args.field))
        return 0

    async with make_client() as client:
        session = SearchSession.from_config(config, client)
        if args.command == "countries":
            print_options(await session.locations.load_countries())
            return 0
        if args.command == "cities":
            await session.locations.select_country(Option.of(args.country))
            print_options(session.locations.cities)
            return 0

        controller = session.missing if args.missing else session.network
        # one-shot search: set filters directly so no city lookup is started
        for flag, field in FILTER_FLAGS.items():
            value = getattr(args, flag)
            if value is not None and field in controller.endpoint.fields:
                controller.filters.set(field, value)
        state = await controller.search(args.page)
        print_results(controller, args.json)
        return 1 if state is SearchState.FAILED else 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    setup_logging(config["log_dir"], level=config["log_level"], verbose=args.verbose)
    return asyncio.run(run_command(args, config))


if __name__ == "__main__":
    raise SystemExit(main())
