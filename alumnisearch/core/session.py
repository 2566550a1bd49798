from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from alumnisearch.client.lifecycle import RequestLifecycleManager
from alumnisearch.client.update_request import UpdateRequestClient
from alumnisearch.core.controller import MISSING_ENDPOINT, NETWORK_ENDPOINT, SearchController
from alumnisearch.sources.countriesnow import CountriesNowSource
from alumnisearch.sources.location import LocationResolver
from alumnisearch.sources.restcountries import RestCountriesSource


@dataclass(slots=True)
class SearchSession:
    """Collaborators for one directory session, wired from a config mapping."""

    network: SearchController
    missing: SearchController
    locations: LocationResolver
    updates: UpdateRequestClient

    @classmethod
    def from_config(cls, config: dict[str, Any], client: httpx.AsyncClient) -> "SearchSession":
        timeout = config["timeout_seconds"]
        locations_cfg = config["locations"]
        manager = RequestLifecycleManager(client, timeout=timeout)

        resolver = LocationResolver(
            RestCountriesSource(manager, locations_cfg["country_api_url"]),
            CountriesNowSource(manager, locations_cfg["city_api_url"]),
        )
        common = {
            "base_url": config["base_url"],
            "page_size": config["page_size"],
            "pagination_radius": config["pagination_radius"],
        }
        return cls(
            network=SearchController(manager, endpoint=NETWORK_ENDPOINT, resolver=resolver, **common),
            missing=SearchController(manager, endpoint=MISSING_ENDPOINT, **common),
            locations=resolver,
            updates=UpdateRequestClient(manager, config["base_url"]),
        )
