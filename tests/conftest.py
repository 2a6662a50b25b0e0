import json
import struct
from typing import Dict, List, Optional

import pytest

from crates_query.core.models import Crate, CrateVersion


def index_line(name: str, vers: str, **fields) -> dict:
    """A version record as it appears in the sparse index"""
    record = {
        "name": name,
        "vers": vers,
        "deps": [],
        "cksum": "0" * 64,
        "features": {},
        "yanked": False,
    }
    record.update(fields)
    return record


def make_crate(name: str, versions: List[str], **fields) -> Crate:
    return Crate(
        name=name,
        versions=[
            CrateVersion.model_validate(index_line(name, v, **fields))
            for v in versions
        ],
    )


def cache_entry(
    records: List[dict],
    revision: bytes = b'etag: W/"abc123"',
    cache_version: int = 3,
    index_version: int = 2,
) -> bytes:
    """Encode records the way cargo writes its sparse index cache files"""
    data = bytes([cache_version]) + struct.pack("<I", index_version)
    data += revision + b"\0"
    for record in records:
        data += record["vers"].encode() + b"\0"
        data += json.dumps(record).encode() + b"\0"
    return data


class InMemoryCache:
    """Index cache backed by a dict"""

    def __init__(self, crates: Optional[Dict[str, Crate]] = None):
        self.crates: Dict[str, Crate] = dict(crates or {})
        self.lookups: List[str] = []

    async def lookup_crate(self, name: str) -> Optional[Crate]:
        self.lookups.append(name)
        return self.crates.get(name)


class FakeRefresher:
    """Refresher that publishes pending crates into the cache"""

    def __init__(self, cache: InMemoryCache, upstream: Optional[Dict[str, Crate]] = None):
        self.cache = cache
        self.upstream: Dict[str, Crate] = dict(upstream or {})
        self.calls: List[str] = []

    async def refresh(self, name: str) -> None:
        self.calls.append(name)
        if name in self.upstream:
            self.cache.crates[name] = self.upstream[name]


@pytest.fixture
def left_pad() -> Crate:
    return make_crate("left-pad", ["1.0.0", "1.3.0", "2.0.0-beta.1", "2.0.0"])
