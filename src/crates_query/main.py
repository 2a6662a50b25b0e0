"""Command line tool to query the crates.io index

Subcommands list a crate's dependencies, its minimum Rust version, its
features, or the versions it has published.
"""

import argparse
import asyncio
import logging
import sys
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path
from typing import List, Optional

from .config.logging import setup_logging
from .core.enums import QueryView
from .core.exceptions import CratesQueryError
from .core.models import CratesQueryConfig
from .index.sparse import open_default_cache
from .refresh.cargo import CargoRefresher
from .resolver import Resolver
from .views import render

setup_logging()
logger = logging.getLogger(__name__)

VERBOSITY_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def get_version() -> str:
    try:
        return package_version("crates-query")
    except PackageNotFoundError:
        return "unknown"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="crates-query", description="Query the crates.io index"
    )
    parser.add_argument("--version", action="version", version=get_version())
    parser.add_argument("name", help="Crate name")
    parser.add_argument("--ver", "-v", help="Exact version (default: highest release)")
    parser.add_argument("--config", "-c", type=Path, help="TOML configuration file")
    parser.add_argument(
        "--verbose", action="count", default=0, help="Log progress to stderr"
    )
    parser.add_argument(
        "command",
        type=QueryView,
        choices=list(QueryView),
        metavar="{" + ",".join(view.value for view in QueryView) + "}",
        help="What to show",
    )
    return parser.parse_args(argv)


async def run_query(
    name: str,
    version: Optional[str],
    view: QueryView,
    config: CratesQueryConfig,
) -> List[str]:
    """Resolve the crate and render the requested view"""
    resolver = Resolver(open_default_cache(config), CargoRefresher(config))
    resolved = await resolver.resolve(name, version, view)
    return render(view, resolved)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(VERBOSITY_LEVELS[min(args.verbose, 2)])

    try:
        config = (
            CratesQueryConfig.from_toml(args.config)
            if args.config
            else CratesQueryConfig()
        )
        # --verbose on the command line wins over the configured level
        if not args.verbose:
            setup_logging(config.log_level)

        lines = asyncio.run(run_query(args.name, args.ver, args.command, config))
    except CratesQueryError as e:
        logger.error(str(e))
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
