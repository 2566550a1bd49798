from __future__ import annotations

import logging
from typing import Any

from alumnisearch.client.lifecycle import RequestLifecycleManager
from alumnisearch.core.models import Option, sort_options
from alumnisearch.sources.base import CitySource

logger = logging.getLogger(__name__)

DEFAULT_CITY_API_URL = "https://countriesnow.space/api/v0.1/countries/cities"


class CountriesNowSource(CitySource):
    def __init__(self, manager: RequestLifecycleManager, url: str = DEFAULT_CITY_API_URL) -> None:
        self.manager = manager
        self.url = url
        self.name = "CountriesNow"

    async def cities(self, country: Option) -> list[Option]:
        outcome = await self.manager.execute("POST", self.url, json={"country": country.label})
        if not outcome.ok:
            logger.warning(
                "cities_failed",
                extra={"extra_fields": {"country": country.label, "outcome": repr(outcome)}},
            )
            return []
        return self.parse(outcome.payload)

    @staticmethod
    def parse(payload: Any) -> list[Option]:
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            return []
        seen: set[str] = set()
        options: list[Option] = []
        for city in data:
            if not isinstance(city, str) or not city.strip() or city in seen:
                continue
            seen.add(city)
            options.append(Option.of(city))
        return sort_options(options)
