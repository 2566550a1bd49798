from __future__ import annotations

import logging
from typing import Any

from alumnisearch.client.lifecycle import RequestLifecycleManager
from alumnisearch.core.models import Option, sort_options
from alumnisearch.sources.base import CountrySource

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY_API_URL = "https://restcountries.com/v3.1/all"


class RestCountriesSource(CountrySource):
    def __init__(self, manager: RequestLifecycleManager, url: str = DEFAULT_COUNTRY_API_URL) -> None:
        self.manager = manager
        self.url = url
        self.name = "RestCountries"

    async def countries(self) -> list[Option]:
        outcome = await self.manager.execute("GET", self.url, params={"fields": "name,cca2"})
        if not outcome.ok:
            logger.warning("countries_failed", extra={"extra_fields": {"outcome": repr(outcome)}})
            return []
        return self.parse(outcome.payload)

    @staticmethod
    def parse(payload: Any) -> list[Option]:
        if not isinstance(payload, list):
            return []
        options: list[Option] = []
        for entry in payload:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name")
            common = name.get("common") if isinstance(name, dict) else None
            if not isinstance(common, str) or not common.strip():
                continue
            code = entry.get("cca2")
            value = code if isinstance(code, str) and code.strip() else common
            options.append(Option(value=value, label=common))
        return sort_options(options)
