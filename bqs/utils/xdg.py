"""XDG Base Directory helpers."""

import os
from pathlib import Path


CACHE_DIR_ENV = "BQS_CACHE_DIR"


def get_xdg_cache_dir() -> Path:
    """Get XDG cache directory for bqs.

    Returns:
        Path to cache directory: $XDG_CACHE_HOME/bqs or ~/.cache/bqs
    """
    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache) / "bqs"
    return Path.home() / ".cache" / "bqs"


def get_cache_dir(create: bool = True) -> Path:
    """Resolve the bqs cache directory.

    ``BQS_CACHE_DIR`` wins over the XDG location.

    Args:
        create: Create the directory if it does not exist

    Returns:
        Path to the cache directory
    """
    override = os.environ.get(CACHE_DIR_ENV)
    cache_dir = Path(override).expanduser() if override else get_xdg_cache_dir()
    if create:
        cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
