from __future__ import annotations

import asyncio
import json

import httpx

from alumnisearch.client.lifecycle import RequestLifecycleManager
from alumnisearch.core.controller import SearchController
from alumnisearch.core.models import Option
from alumnisearch.sources.base import CitySource, CountrySource
from alumnisearch.sources.countriesnow import CountriesNowSource
from alumnisearch.sources.location import LocationResolver, StreamState
from alumnisearch.sources.restcountries import RestCountriesSource


class CountingCountrySource(CountrySource):
    name = "counting"

    def __init__(self, countries: list[Option] | None = None, fail: bool = False) -> None:
        self.calls = 0
        self._countries = countries or []
        self.fail = fail

    async def countries(self) -> list[Option]:
        self.calls += 1
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("catalog unavailable")
        return list(self._countries)


class GatedCitySource(CitySource):
    """Each country's lookup blocks until its gate is released."""

    name = "gated"

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []

    def gate(self, label: str) -> asyncio.Event:
        return self.gates.setdefault(label, asyncio.Event())

    async def cities(self, country: Option) -> list[Option]:
        self.calls.append(country.label)
        await self.gate(country.label).wait()
        return [Option.of(f"{country.label} City")]


INDIA = Option(value="IN", label="India")
FRANCE = Option(value="FR", label="France")


def test_restcountries_parsing_drops_unnamed_and_sorts() -> None:
    payload = [
        {"name": {"common": "india"}, "cca2": "IN"},
        {"name": {"common": "Austria"}, "cca2": "AT"},
        {"name": {}, "cca2": "XX"},
        {"cca2": "YY"},
        {"name": {"common": "Kosovo"}},
        "garbage",
    ]
    assert RestCountriesSource.parse(payload) == [
        Option("AT", "Austria"),
        Option("IN", "india"),
        Option("Kosovo", "Kosovo"),
    ]
    assert RestCountriesSource.parse({"message": "not a list"}) == []


def test_countriesnow_parsing_degrades_to_empty() -> None:
    assert CountriesNowSource.parse({"error": False, "msg": "ok", "data": ["pune", "Agra", "", None, "Agra"]}) == [
        Option.of("Agra"),
        Option.of("pune"),
    ]
    assert CountriesNowSource.parse({"error": True, "msg": "country not found"}) == []
    assert CountriesNowSource.parse({"data": "Agra"}) == []
    assert CountriesNowSource.parse(None) == []


def test_countriesnow_posts_country_label() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"error": False, "msg": "ok", "data": ["Mumbai", "Delhi"]})

    async def scenario() -> list[Option]:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            source = CountriesNowSource(RequestLifecycleManager(client), "http://geo.test/cities")
            return await source.cities(INDIA)

    assert asyncio.run(scenario()) == [Option.of("Delhi"), Option.of("Mumbai")]
    assert captured[0].method == "POST"
    assert json.loads(captured[0].content) == {"country": "India"}


def test_city_lookup_http_failure_is_empty() -> None:
    async def scenario() -> list[Option]:
        transport = httpx.MockTransport(lambda request: httpx.Response(503, json={"error": True}))
        async with httpx.AsyncClient(transport=transport) as client:
            return await CountriesNowSource(RequestLifecycleManager(client)).cities(INDIA)

    assert asyncio.run(scenario()) == []


def test_countries_resolve_once() -> None:
    source = CountingCountrySource([INDIA, FRANCE])
    resolver = LocationResolver(source, GatedCitySource())

    async def scenario() -> None:
        first, second = await asyncio.gather(resolver.load_countries(), resolver.load_countries())
        third = await resolver.load_countries()
        assert first == second == third == [INDIA, FRANCE]

    asyncio.run(scenario())
    assert source.calls == 1
    assert resolver.country_state is StreamState.POPULATED
    assert not resolver.loading_countries


def test_country_failure_degrades_to_empty_list() -> None:
    resolver = LocationResolver(CountingCountrySource(fail=True), GatedCitySource())

    assert asyncio.run(resolver.load_countries()) == []
    assert resolver.countries == []
    assert resolver.country_state is StreamState.EMPTY
    assert not resolver.loading_countries


def test_latest_country_selection_wins() -> None:
    cities = GatedCitySource()
    resolver = LocationResolver(CountingCountrySource(), cities)

    async def scenario() -> None:
        india = resolver.select_country(INDIA)
        await asyncio.sleep(0)
        assert resolver.loading_cities
        france = resolver.select_country(FRANCE)
        await asyncio.sleep(0)
        cities.gate("France").set()
        await france
        cities.gate("India").set()
        await asyncio.sleep(0)
        assert india.cancelled()

    asyncio.run(scenario())
    assert resolver.cities == [Option.of("France City")]
    assert resolver.city_state is StreamState.POPULATED
    assert cities.calls == ["India", "France"]


def test_clearing_country_before_lookup_finishes_leaves_no_cities() -> None:
    cities = GatedCitySource()
    resolver = LocationResolver(CountingCountrySource(), cities)
    controller = SearchController(manager=None, base_url="http://api.test", resolver=resolver)  # type: ignore[arg-type]

    async def scenario() -> None:
        controller.set_filter("country", INDIA)
        controller.set_filter("city", "Pune")
        await asyncio.sleep(0)
        assert cities.calls == ["India"]

        controller.set_filter("country", None)
        assert controller.filters.get("city") is None

        cities.gate("India").set()
        await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert resolver.cities == []
    assert resolver.city_state is StreamState.EMPTY
    assert not resolver.loading_cities
    assert controller.filters.get("city") is None


def test_country_lookup_failure_keeps_city_stream_usable() -> None:
    resolver = LocationResolver(CountingCountrySource(fail=True), GatedCitySource())

    async def scenario() -> None:
        await resolver.load_countries()
        task = resolver.select_country(Option(value="", label="  "))
        assert await task == []

    asyncio.run(scenario())
    assert resolver.city_state is StreamState.EMPTY
