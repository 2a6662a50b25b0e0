from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import tomli
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from semver import Version

from .enums import DependencyKind
from .exceptions import ConfigError, VersionParseError


def parse_version(version: str) -> Optional[Version]:
    """Parse a semantic version, returning None if it is not valid"""
    try:
        return Version.parse(version)
    except (TypeError, ValueError):
        return None


class Dependency(BaseModel):
    """A dependency as declared by one published version"""

    model_config = ConfigDict(frozen=True)

    name: str
    req: str
    features: List[str] = Field(default_factory=list)
    optional: bool = False
    default_features: bool = True
    target: Optional[str] = None
    kind: DependencyKind = DependencyKind.NORMAL
    registry: Optional[str] = None
    package: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _default_kind(cls, data: Any) -> Any:
        # Older index lines write "kind": null for normal dependencies
        if isinstance(data, dict) and data.get("kind") is None:
            data = {**data, "kind": DependencyKind.NORMAL}
        return data

    @property
    def crate_name(self) -> str:
        """Name of the crate depended on, following renames"""
        return self.package or self.name


class CrateVersion(BaseModel):
    """One published version of a crate as recorded in the index"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    version: str = Field(alias="vers")
    dependencies: List[Dependency] = Field(default_factory=list, alias="deps")
    features: Dict[str, List[str]] = Field(default_factory=dict)
    rust_version: Optional[str] = None
    yanked: bool = False
    checksum: Optional[str] = Field(default=None, alias="cksum")
    links: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _merge_features2(cls, data: Any) -> Any:
        """Fold the v2 ``features2`` table into ``features``"""
        if isinstance(data, dict) and data.get("features2"):
            features = dict(data.get("features") or {})
            features.update(data["features2"])
            data = {**data, "features": features}
        return data


class Crate(BaseModel):
    """All cached versions of a crate, in index order"""

    model_config = ConfigDict(frozen=True)

    name: str
    versions: List[CrateVersion]

    def find_version(self, version: str) -> Optional[CrateVersion]:
        """Find the version record whose version string is exactly ``version``"""
        for record in self.versions:
            if record.version == version:
                return record
        return None

    def highest_normal_version(self) -> Optional[CrateVersion]:
        """Highest version without a prerelease tag

        Version strings that are not valid semantic versions are ignored.
        """
        best: Optional[CrateVersion] = None
        best_parsed: Optional[Version] = None
        for record in self.versions:
            parsed = parse_version(record.version)
            if parsed is None or parsed.prerelease is not None:
                continue
            if best_parsed is None or parsed > best_parsed:
                best, best_parsed = record, parsed
        return best

    def sorted_version_numbers(self) -> List[str]:
        """All version strings in ascending semantic version order"""
        parsed = []
        for record in self.versions:
            version = parse_version(record.version)
            if version is None:
                raise VersionParseError(
                    f"Invalid version {record.version!r} for crate {self.name}"
                )
            parsed.append((version, record.version))
        return [raw for _, raw in sorted(parsed, key=lambda item: item[0])]


class ResolvedCrate(BaseModel):
    """A crate together with the version record selected from it"""

    model_config = ConfigDict(frozen=True)

    crate: Crate
    version: CrateVersion


class CratesQueryConfig(BaseModel):
    """Configuration for locating cargo and its index cache"""

    cargo_bin: str = "cargo"
    cargo_home: Optional[Path] = None
    index_path: Optional[Path] = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @classmethod
    def from_toml(cls, path: Path) -> "CratesQueryConfig":
        """Load configuration from TOML file"""
        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
            return cls.model_validate(data.get("crates-query", {}))
        except (OSError, tomli.TOMLDecodeError, ValidationError) as e:
            raise ConfigError(f"Failed to load config {path}: {e}") from e
