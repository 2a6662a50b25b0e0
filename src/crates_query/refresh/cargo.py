import asyncio
import logging
import shutil
import tempfile
from pathlib import Path
from typing import List

import aiofiles

from ..core.exceptions import RefreshError
from ..core.models import CratesQueryConfig

logger = logging.getLogger(__name__)

LOG_FILE_NAME = ".log"
SCAFFOLD_NAME = "temp"


class CargoRefresher:
    """Refreshes cargo's sparse index cache for a single crate

    Cargo has no command to update one index entry, so a throwaway project
    is created and the crate is added to it. Resolving that dependency makes
    cargo fetch the crate's current index file into the shared cache.
    """

    def __init__(self, config: CratesQueryConfig):
        self.cargo_bin = config.cargo_bin
        self.refresh_count = 0

    async def refresh(self, name: str) -> None:
        """Ask cargo to fetch the latest index entry for ``name``

        Cargo's exit status is not checked: an unknown crate only shows up
        as a missing cache entry afterwards.
        """
        self.refresh_count += 1
        logger.info(f"Refreshing index cache for {name}")

        try:
            temp_dir = Path(tempfile.mkdtemp(prefix="crates-query-"))
        except OSError as e:
            raise RefreshError(f"Failed to create temporary directory: {e}") from e

        try:
            log_path = temp_dir / LOG_FILE_NAME
            async with aiofiles.open(log_path, "wb") as log:
                stderr = await self._run(["new", SCAFFOLD_NAME], temp_dir)
                await log.write(stderr)
                await log.flush()
                stderr = await self._run(["add", name], temp_dir / SCAFFOLD_NAME)
                await log.write(stderr)
                await log.flush()
        except OSError as e:
            raise RefreshError(f"Failed to refresh index for {name}: {e}") from e
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

    async def _run(self, args: List[str], cwd: Path) -> bytes:
        """Run cargo and return its captured standard error"""
        process = await asyncio.create_subprocess_exec(
            self.cargo_bin,
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await process.communicate()
        logger.debug(f"cargo {' '.join(args)} exited with {process.returncode}")
        return stderr
