from typing import Optional


class CratesQueryError(Exception):
    """Base exception for all crates-query errors"""


class ConfigError(CratesQueryError):
    """Error loading configuration"""


class RefreshError(CratesQueryError):
    """Error while forcing a refresh of the index cache"""


class IndexCacheError(CratesQueryError):
    """Error reading the local index cache"""


class StaleCacheEntryError(IndexCacheError):
    """Cache entry was written in a format cargo no longer reads"""


class NotFoundError(CratesQueryError):
    """Requested crate or version is not in the index cache"""


class CrateNotFoundError(NotFoundError):
    """Crate has no entry in the index cache"""

    def __init__(self, name: str):
        super().__init__(f"Could not find crate {name}")
        self.name = name


class VersionNotFoundError(NotFoundError):
    """Crate exists but no version record matches the selector"""

    def __init__(self, name: str, version: Optional[str] = None):
        if version is None:
            message = f"Could not find a non-prerelease version of {name}"
        else:
            message = f"Could not find version {version} of {name}"
        super().__init__(message)
        self.name = name
        self.version = version


class VersionParseError(CratesQueryError):
    """Version string in the index is not a valid semantic version"""
