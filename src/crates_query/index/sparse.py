import json
import logging
import os
import struct
from pathlib import Path
from typing import List, Optional

import aiofiles
from pydantic import ValidationError

from ..core.exceptions import IndexCacheError, StaleCacheEntryError
from ..core.models import Crate, CrateVersion, CratesQueryConfig

logger = logging.getLogger(__name__)

CACHE_VERSION = 3
INDEX_FORMAT_VERSIONS = {1, 2}
CRATES_IO_DIR_PREFIX = "index.crates.io-"


def crate_cache_path(name: str) -> Path:
    """Relative location of a crate's file inside the index cache"""
    if not name:
        raise IndexCacheError("Crate name must not be empty")
    name = name.lower()
    if len(name) <= 2:
        return Path(str(len(name))) / name
    if len(name) == 3:
        return Path("3") / name[0] / name
    return Path(name[0:2]) / name[2:4] / name


def default_cargo_home(config: CratesQueryConfig) -> Path:
    if config.cargo_home:
        return config.cargo_home
    env_home = os.environ.get("CARGO_HOME")
    if env_home:
        return Path(env_home)
    return Path.home() / ".cargo"


def parse_cache_file(data: bytes, name: str) -> Crate:
    """Parse cargo's binary cache entry for one crate

    Layout: one byte cache version, a little-endian u32 index format
    version, then NUL separated fields. The first field is the index
    revision the entry was fetched at, followed by (version, JSON) pairs.
    """
    if len(data) < 5:
        raise IndexCacheError(f"Truncated index cache entry for {name}")

    cache_version = data[0]
    if cache_version != CACHE_VERSION:
        raise StaleCacheEntryError(
            f"Unsupported cache version {cache_version} for {name}"
        )
    (index_version,) = struct.unpack("<I", data[1:5])
    if index_version not in INDEX_FORMAT_VERSIONS:
        raise StaleCacheEntryError(
            f"Unsupported index format version {index_version} for {name}"
        )

    fields = data[5:].split(b"\0")
    if fields and fields[-1] == b"":
        fields.pop()
    if not fields:
        raise IndexCacheError(f"Missing index revision in cache entry for {name}")

    revision, pairs = fields[0], fields[1:]
    logger.debug(f"Cache entry for {name} at revision {revision.decode(errors='replace')}")
    if len(pairs) % 2:
        raise IndexCacheError(f"Unpaired version record in cache entry for {name}")

    versions: List[CrateVersion] = []
    for line in pairs[1::2]:
        try:
            versions.append(CrateVersion.model_validate(json.loads(line)))
        except (ValueError, ValidationError) as e:
            raise IndexCacheError(
                f"Malformed version record in cache entry for {name}: {e}"
            ) from e

    crate_name = versions[0].name if versions else name
    return Crate(name=crate_name, versions=versions)


class SparseIndexCache:
    """Reads crates from cargo's local sparse index cache for crates.io"""

    def __init__(self, config: CratesQueryConfig):
        self.config = config

    def candidate_roots(self) -> List[Path]:
        """Directories holding a ``.cache`` tree for crates.io

        The crates.io index directory name carries a hash that changes between
        cargo releases, so several of them may exist side by side.
        """
        if self.config.index_path:
            return [self.config.index_path]

        index_dir = default_cargo_home(self.config) / "registry" / "index"
        if not index_dir.is_dir():
            return []
        return sorted(
            path
            for path in index_dir.glob(f"{CRATES_IO_DIR_PREFIX}*")
            if (path / ".cache").is_dir()
        )

    def entry_path(self, name: str) -> Optional[Path]:
        """Most recently written cache file for ``name`` across all roots"""
        relative = crate_cache_path(name)
        entries = [
            root / ".cache" / relative
            for root in self.candidate_roots()
            if (root / ".cache" / relative).is_file()
        ]
        if not entries:
            return None
        return max(entries, key=lambda path: path.stat().st_mtime)

    async def lookup_crate(self, name: str) -> Optional[Crate]:
        """Load a crate from the cache, returning None if it is not cached

        Entries in a cache format cargo would discard count as not cached.
        """
        path = self.entry_path(name)
        if path is None:
            logger.info(f"No cache entry for {name}")
            return None

        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            raise IndexCacheError(f"Failed to read cache entry {path}: {e}") from e

        try:
            crate = parse_cache_file(data, name)
        except StaleCacheEntryError as e:
            logger.info(f"Ignoring stale cache entry {path}: {e}")
            return None
        logger.info(f"Loaded {len(crate.versions)} versions of {crate.name} from cache")
        return crate


def open_default_cache(config: Optional[CratesQueryConfig] = None) -> SparseIndexCache:
    """Open cargo's default crates.io cache; it is read-only and never closed"""
    return SparseIndexCache(config or CratesQueryConfig())
