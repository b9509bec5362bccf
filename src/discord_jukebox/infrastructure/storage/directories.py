"""Startup bootstrap of the on-disk data directories."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


def required_directories(settings: AudioSettings) -> list[Path]:
    """Parents first, so each entry can be created with a plain mkdir."""
    data_dir = Path(settings.data_dir)
    return [
        data_dir,
        settings.cache_dir,
        settings.media_cache_dir,
        settings.cache_dir / "meta",
    ]


def ensure_directory(path: Path) -> bool:
    """Create *path* if missing; return True when it had to be created.

    Raises ``NotADirectoryError`` when a file is in the way and
    ``PermissionError`` when an existing directory is not writable.
    """
    if path.exists():
        if not path.is_dir():
            raise NotADirectoryError(ErrorMessages.DIRECTORY_IS_FILE.format(path=path))
        if not os.access(path, os.W_OK):
            raise PermissionError(ErrorMessages.DIRECTORY_NOT_WRITABLE.format(path=path))
        logger.debug(LogTemplates.DIRECTORY_OK, path)
        return False

    path.mkdir(parents=True)
    logger.info(LogTemplates.DIRECTORY_CREATED, path)
    return True


def bootstrap_directories(settings: AudioSettings) -> list[Path]:
    """Make sure every data directory exists and is writable; returns the ones created."""
    created = [path for path in required_directories(settings) if ensure_directory(path)]
    logger.info(LogTemplates.DIRECTORIES_READY)
    return created
