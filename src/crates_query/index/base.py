from typing import Optional, Protocol

from ..core.models import Crate


class IndexCache(Protocol):
    """Protocol for read-only access to a local registry index cache"""

    async def lookup_crate(self, name: str) -> Optional[Crate]:
        """Return the cached crate, or None if the cache has no entry for it"""
        ...
