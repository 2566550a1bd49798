from __future__ import annotations

import asyncio
import enum
import logging

from alumnisearch.client.lifecycle import RequestSequencer
from alumnisearch.core.models import Option
from alumnisearch.sources.base import CitySource, CountrySource

logger = logging.getLogger(__name__)


class StreamState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    POPULATED = "populated"
    EMPTY = "empty"


class LocationResolver:
    """Country and city option lists for the location filters.

    Countries are fetched once and shared by every caller. Cities follow the
    selected country: each selection cancels the previous fetch and only the
    latest selection may write the list. Lookup failures leave an empty list.
    """

    def __init__(self, country_source: CountrySource, city_source: CitySource) -> None:
        self.country_source = country_source
        self.city_source = city_source
        self.countries: list[Option] = []
        self.cities: list[Option] = []
        self.country_state = StreamState.IDLE
        self.city_state = StreamState.IDLE
        self.selected_country: Option | None = None
        self._countries_task: asyncio.Future[list[Option]] | None = None
        self._city_task: asyncio.Future[list[Option]] | None = None
        self._city_sequencer = RequestSequencer()

    @property
    def loading_countries(self) -> bool:
        return self.country_state is StreamState.LOADING

    @property
    def loading_cities(self) -> bool:
        return self.city_state is StreamState.LOADING

    async def load_countries(self) -> list[Option]:
        if self._countries_task is None:
            self.country_state = StreamState.LOADING
            self._countries_task = asyncio.ensure_future(self._fetch_countries())
        return await asyncio.shield(self._countries_task)

    async def _fetch_countries(self) -> list[Option]:
        try:
            countries = await self.country_source.countries()
        except Exception as exc:  # noqa: BLE001
            logger.warning("countries_failed", extra={"extra_fields": {"source": self.country_source.name, "error": str(exc)}})
            countries = []
        self.countries = countries
        self.country_state = StreamState.POPULATED if countries else StreamState.EMPTY
        return countries

    def select_country(self, country: Option | None) -> asyncio.Future[list[Option]]:
        ticket = self._city_sequencer.next()
        if self._city_task is not None and not self._city_task.done():
            self._city_task.cancel()
        self.selected_country = country

        if country is None or not country.label.strip():
            self.cities = []
            self.city_state = StreamState.EMPTY
        else:
            self.city_state = StreamState.LOADING
        self._city_task = asyncio.ensure_future(self._resolve_cities(country, ticket))
        return self._city_task

    async def _resolve_cities(self, country: Option | None, ticket: int) -> list[Option]:
        if country is None or not country.label.strip():
            return []
        try:
            cities = await self.city_source.cities(country)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "cities_failed",
                extra={"extra_fields": {"source": self.city_source.name, "country": country.label, "error": str(exc)}},
            )
            cities = []

        if not self._city_sequencer.is_current(ticket):
            logger.info("stale_response_discarded", extra={"extra_fields": {"kind": "cities", "country": country.label}})
            return cities
        self.cities = cities
        self.city_state = StreamState.POPULATED if cities else StreamState.EMPTY
        return cities

    def clear_cities(self) -> None:
        self._city_sequencer.next()
        if self._city_task is not None and not self._city_task.done():
            self._city_task.cancel()
        self.selected_country = None
        self.cities = []
        self.city_state = StreamState.EMPTY
