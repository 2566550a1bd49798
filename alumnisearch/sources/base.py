from __future__ import annotations

from abc import ABC, abstractmethod

from alumnisearch.core.models import Option


class CountrySource(ABC):
    name: str

    @abstractmethod
    async def countries(self) -> list[Option]:
        raise NotImplementedError


class CitySource(ABC):
    name: str

    @abstractmethod
    async def cities(self, country: Option) -> list[Option]:
        raise NotImplementedError
