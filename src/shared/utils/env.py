"""Load ``.env`` files so CLI defaults can be configured per machine."""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def _discover(start: Path) -> list[Path]:
    """``.env`` files from the filesystem root down to ``start``."""
    directories = [*reversed(start.parents), start]
    return [directory / ".env" for directory in directories if (directory / ".env").is_file()]


def load_env(env_file: Optional[str] = None, override: bool = False) -> list[Path]:
    """Load environment variables from ``.env`` files.

    Args:
        env_file: Explicit file to load. Without it, every ``.env`` between the
            filesystem root and the working directory is loaded, outermost
            first, so closer files win when ``override`` is set.
        override: Replace variables that are already set.

    Returns:
        The files that were loaded.
    """
    if env_file:
        candidates = [Path(env_file)]
        if not candidates[0].is_file():
            logger.warning("Env file not found: %s", env_file)
            return []
    else:
        candidates = _discover(Path.cwd())

    for path in candidates:
        load_dotenv(path, override=override)
        logger.debug("Loaded environment from %s", path)
    if not candidates:
        logger.debug("No .env file found, using system environment")
    return candidates
