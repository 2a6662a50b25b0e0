import logging
from typing import Optional

from .core.enums import QueryView, RefreshDecision
from .core.exceptions import CrateNotFoundError, VersionNotFoundError
from .core.models import Crate, CrateVersion, ResolvedCrate
from .index.base import IndexCache
from .refresh.base import Refresher

logger = logging.getLogger(__name__)


def decide_refresh(view: QueryView, version: Optional[str]) -> RefreshDecision:
    """Decide whether the cache must be refreshed before it is trusted

    Listing versions and picking the highest version are only correct
    against a fresh cache. An exact version is looked up first and only
    refreshed on a miss.
    """
    if view == QueryView.VERSIONS or version is None:
        return RefreshDecision.REFRESH_FIRST
    return RefreshDecision.LOOKUP_FIRST


def select_version(crate: Crate, version: Optional[str]) -> Optional[CrateVersion]:
    if version is None:
        return crate.highest_normal_version()
    return crate.find_version(version)


class Resolver:
    """Resolves a crate version from the index cache, refreshing it when needed"""

    def __init__(self, cache: IndexCache, refresher: Refresher):
        self.cache = cache
        self.refresher = refresher
        self.last_decision: Optional[RefreshDecision] = None

    async def resolve(
        self, name: str, version: Optional[str], view: QueryView
    ) -> ResolvedCrate:
        decision = decide_refresh(view, version)
        self.last_decision = decision
        logger.info(f"Resolving {name} {version or '(highest)'}: {decision.value}")

        if decision == RefreshDecision.LOOKUP_FIRST:
            crate = await self.cache.lookup_crate(name)
            resolved = self._select(crate, version)
            if resolved is not None:
                logger.info(f"Cache hit for {name} {version}")
                return resolved
            logger.info(f"Cache miss for {name} {version}, refreshing")

        await self.refresher.refresh(name)
        crate = await self.cache.lookup_crate(name)
        if crate is None:
            raise CrateNotFoundError(name)
        resolved = self._select(crate, version)
        if resolved is None:
            raise VersionNotFoundError(crate.name, version)
        return resolved

    def _select(
        self, crate: Optional[Crate], version: Optional[str]
    ) -> Optional[ResolvedCrate]:
        if crate is None:
            return None
        record = select_version(crate, version)
        if record is None:
            return None
        return ResolvedCrate(crate=crate, version=record)
