"""Filesystem primitives for swapping a freshly built site into the live path.

Directory rename is the only operation used to change what the live path
points at; nothing here ever copies into or deletes from the live tree.
Every function is synchronous and meant to be run through asyncio.to_thread().
"""

from __future__ import annotations

import logging
import os
import shutil

from easel.helpers.dto.rebuild_dto import RebuildPaths, RebuildSettings

logger = logging.getLogger(__name__)


def resolve_paths(settings: RebuildSettings) -> RebuildPaths:
    """Compute the live, staging and backup directories for a build-output root."""
    live = os.path.join(settings.output_root, settings.live_dir_name)
    return RebuildPaths(
        live=live,
        staging=f"{live}{settings.staging_suffix}",
        backup=f"{live}{settings.backup_suffix}",
    )


def path_exists(path: str) -> bool:
    return os.path.isdir(path)


def rename_dir(src: str, dst: str) -> None:
    """Atomically rename a directory. Raises OSError on failure."""
    os.rename(src, dst)


def remove_dir(path: str) -> None:
    """Recursively delete a directory if present."""
    if os.path.isdir(path):
        shutil.rmtree(path)


def remove_dir_quietly(path: str) -> bool:
    """Delete a directory, logging instead of raising.

    Used for the delayed backup cleanup, which runs after the request that
    scheduled it has already returned.

    Returns:
        True if the directory is gone afterwards
    """
    try:
        remove_dir(path)
    except OSError as e:
        logger.warning(f"[Rebuild] Could not remove {path}: {e}")
        return False
    return True
