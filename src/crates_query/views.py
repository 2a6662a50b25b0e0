from typing import List, Optional, Tuple

from .core.enums import QueryView
from .core.models import Crate, CrateVersion, ResolvedCrate

NO_RUST_VERSION = "None"


def dependencies(version: CrateVersion) -> List[Tuple[str, str]]:
    """(crate name, requirement) pairs in declaration order"""
    return [(dep.crate_name, dep.req) for dep in version.dependencies]


def features(version: CrateVersion) -> List[str]:
    return list(version.features.keys())


def rust_version(version: CrateVersion) -> Optional[str]:
    return version.rust_version


def versions(crate: Crate) -> List[str]:
    """All published versions, ascending by semantic version precedence"""
    return crate.sorted_version_numbers()


def render(view: QueryView, resolved: ResolvedCrate) -> List[str]:
    """Render a view as output lines

    The whole view is built before anything is printed, so a failure
    leaves no partial output.
    """
    crate, version = resolved.crate, resolved.version

    if view == QueryView.DEPENDENCIES:
        lines = [f"{version.name} {version.version} dependencies:", ""]
        lines.extend(f"{name} {req}" for name, req in dependencies(version))
    elif view == QueryView.FEATURES:
        lines = [f"{version.name} {version.version} features:", ""]
        lines.extend(features(version))
    elif view == QueryView.RUST_VERSION:
        lines = [f"{version.name} {version.version} rust version:", ""]
        minimum = rust_version(version)
        lines.append(
            f"Minimum Rust Version: {minimum}" if minimum else NO_RUST_VERSION
        )
    elif view == QueryView.VERSIONS:
        lines = [f"{version.name} versions:", ""]
        lines.extend(versions(crate))
    else:
        raise ValueError(f"Unknown view: {view}")

    return lines
