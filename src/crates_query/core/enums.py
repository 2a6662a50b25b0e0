from enum import Enum


class QueryView(str, Enum):
    DEPENDENCIES = "dependencies"
    RUST_VERSION = "rust-version"
    FEATURES = "features"
    VERSIONS = "versions"


class DependencyKind(str, Enum):
    NORMAL = "normal"
    DEV = "dev"
    BUILD = "build"


class RefreshDecision(str, Enum):
    """Whether the index cache is refreshed before or after the first lookup"""

    REFRESH_FIRST = "refresh_first"
    LOOKUP_FIRST = "lookup_first"
