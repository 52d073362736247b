"""
Model discovery and it does:
- Keeps a time-bounded copy of the live model catalog
- Filters to models that can generate content
- Ranks them by a configured list of name substrings

Main purpose:
Pick a working model without hardcoding one name that upstream may retire.
"""


import time
from typing import Callable, Iterable, Optional, Protocol, Sequence

import httpx

from learnpath.core.errors import ConfigurationError, DiscoveryError, UpstreamError
from learnpath.core.logging import get_logger
from learnpath.llm.schemas import ModelDescriptor

log = get_logger("llm.catalog")


class CatalogSource(Protocol):
    async def list_models(self) -> list[ModelDescriptor]: ...


def select_model(models: Iterable[ModelDescriptor], preferences: Sequence[str]) -> ModelDescriptor:
    capable = [m for m in models if m.can_generate]
    if not capable:
        raise DiscoveryError("No generative models available. Please check your API access.")
    for needle in preferences:
        for m in capable:
            if needle and needle in m.name:
                return m
    return capable[0]


class ModelCatalogCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._models: Optional[list[ModelDescriptor]] = None
        self._stored_at = 0.0

    def get(self) -> Optional[list[ModelDescriptor]]:
        if self._models is None:
            return None
        if self.clock() - self._stored_at >= self.ttl_seconds:
            self._models = None
            return None
        return list(self._models)

    def put(self, models: list[ModelDescriptor]) -> None:
        self._models = list(models)
        self._stored_at = self.clock()

    def invalidate(self) -> None:
        self._models = None


class ModelCatalog:
    def __init__(self, source: CatalogSource, cache: ModelCatalogCache, preferences: Sequence[str]):
        self.source = source
        self.cache = cache
        self.preferences = list(preferences)

    async def models(self) -> list[ModelDescriptor]:
        cached = self.cache.get()
        if cached is not None:
            return cached
        try:
            models = await self.source.list_models()
        except ConfigurationError:
            raise
        except (UpstreamError, httpx.HTTPError, ValueError) as e:
            log.error(f"Model catalog fetch failed: {e}")
            raise DiscoveryError("Failed to fetch available models. Please check your API key.") from e
        # an empty catalog is not cached; the next request asks again
        if models:
            self.cache.put(models)
        return models

    async def pick(self) -> ModelDescriptor:
        models = await self.models()
        try:
            chosen = select_model(models, self.preferences)
        except DiscoveryError:
            log.error(f"No content-generation model among {len(models)} catalog entries (configuration problem)")
            raise
        log.info(f"Selected model {chosen.name}")
        return chosen
