from typing import Protocol


class Refresher(Protocol):
    """Protocol for forcing the index cache to fetch a crate's latest entry"""

    async def refresh(self, name: str) -> None:
        """Attempt to populate the cache for ``name``"""
        ...
