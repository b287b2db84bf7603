"""Rebuild orchestrator service.

Regenerates the prerendered static site and swaps it into the live path
without taking the site offline.

Pipeline (see helpers.dto.rebuild_dto for the state table):
  1. Build: run the configured commands into the staging directory
     (`<live><staging_suffix>`), then check that the directory exists.
  2. Swap: rename live -> backup (if live exists), then staging -> live.
  3. Cleanup: delete the backup after a grace delay so in-flight reads of
     the old tree can finish.

At every instant the live path is either the old complete tree or the new
complete tree. A failed build never touches it. If the second rename fails
the backup is renamed back; if that fails too, FatalSwapError is raised and
logged CRITICAL, and the backup is left in place for manual recovery.

Architecture Notes:
- One orchestrator per process, constructed in Application.start() and shared
  by reference with the API layer.
- Mutual exclusion is an in-process flag set before the first await, so two
  concurrent trigger() calls on the event loop can never both pass the check.
  A multi-process deployment would need a distributed lock instead.
"""

from __future__ import annotations

import asyncio
import logging
import math
import os
import time
from collections.abc import Callable

from easel.components.platform import build_runner_comp, site_swap_comp
from easel.helpers.dto.rebuild_dto import (
    RebuildPaths,
    RebuildResult,
    RebuildSettings,
    RebuildState,
    RebuildStatus,
)
from easel.helpers.exceptions import BuildFailure, FatalSwapError, SwapFailure
from easel.helpers.time_helper import iso_from_s

logger = logging.getLogger(__name__)

FATAL_SWAP_MESSAGE = "Swap and rollback both failed. Manual intervention may be required."


class RebuildOrchestrator:
    """Serializes rebuild requests and runs the build-and-swap pipeline."""

    def __init__(self, settings: RebuildSettings, clock: Callable[[], float] = time.time) -> None:
        """
        Args:
            settings: Paths, commands and timing for rebuilds
            clock: Seconds-since-epoch source (injected by tests)
        """
        self.settings = settings
        self.paths: RebuildPaths = site_swap_comp.resolve_paths(settings)
        self._clock = clock
        self._state = RebuildState.IDLE
        self._is_rebuilding = False
        self._last_attempt: float | None = None
        self._last_error: str | None = None
        self._cleanup_tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    @property
    def state(self) -> RebuildState:
        return self._state

    def _cooldown_remaining(self) -> float:
        if self._last_attempt is None:
            return 0.0
        return max(0.0, self.settings.cooldown_s - (self._clock() - self._last_attempt))

    def status(self) -> RebuildStatus:
        """Snapshot for polling clients."""
        return RebuildStatus(
            is_rebuilding=self._is_rebuilding,
            last_rebuild_time=iso_from_s(self._last_attempt) if self._last_attempt is not None else None,
            can_rebuild=self.settings.enabled and not self._is_rebuilding and self._cooldown_remaining() <= 0,
            state=self._state,
            last_error=self._last_error,
        )

    # ------------------------------------------------------------------
    # Trigger
    # ------------------------------------------------------------------
    async def trigger(self) -> RebuildResult:
        """
        Run one rebuild if allowed.

        Requests are rejected without side effects when rebuilds are disabled,
        one is already running, or the cooldown since the last attempt
        (successful or not) has not elapsed.

        Returns:
            RebuildResult; build and recovered swap failures are reported
            here, not raised

        Raises:
            FatalSwapError: Swap and rollback both failed
        """
        # Everything up to the first await runs without interleaving
        if not self.settings.enabled:
            return RebuildResult(False, "Rebuilds are disabled on this server.", rejected="disabled")
        if self._is_rebuilding:
            return RebuildResult(False, "A rebuild is already in progress. Please wait.", rejected="in_progress")
        remaining = self._cooldown_remaining()
        if remaining > 0:
            seconds = math.ceil(remaining)
            return RebuildResult(
                False,
                f"Please wait {seconds}s before rebuilding again.",
                rejected="cooldown",
                cooldown_remaining_s=seconds,
            )

        self._is_rebuilding = True
        self._last_attempt = self._clock()
        self._state = RebuildState.BUILDING
        logger.info("[Rebuild] Starting static site rebuild...")
        try:
            await self._build()
            self._state = RebuildState.SWAPPING
            await self._swap()
        except BuildFailure as e:
            logger.error(f"[Rebuild] Build failed, live site untouched: {e}")
            self._last_error = str(e)
            return RebuildResult(False, f"Rebuild failed: {e}")
        except SwapFailure as e:
            logger.error(f"[Rebuild] {e}")
            self._last_error = str(e)
            return RebuildResult(False, f"Rebuild failed: {e}")
        except FatalSwapError as e:
            self._last_error = str(e)
            raise
        finally:
            self._state = RebuildState.IDLE
            self._is_rebuilding = False

        self._last_error = None
        logger.info("[Rebuild] Static site rebuild complete!")
        return RebuildResult(True, "Static site rebuilt successfully. New version is now live!")

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------
    async def _build(self) -> None:
        staging = self.paths.staging
        try:
            await asyncio.to_thread(os.makedirs, self.settings.output_root, exist_ok=True)
            if await asyncio.to_thread(site_swap_comp.path_exists, staging):
                logger.info(f"[Rebuild] Removing leftover staging directory {staging}")
                await asyncio.to_thread(site_swap_comp.remove_dir, staging)
        except OSError as e:
            raise BuildFailure(f"Could not prepare build output: {e}") from e

        logger.info("[Rebuild] Building site...")
        await build_runner_comp.run_build(
            self.settings.commands,
            cwd=self.settings.root_dir,
            output_dir=staging,
            timeout_s=self.settings.command_timeout_s,
        )

        if not await asyncio.to_thread(site_swap_comp.path_exists, staging):
            raise BuildFailure("New build directory not found. Build may have failed.")

    async def _swap(self) -> None:
        live, staging, backup = self.paths.live, self.paths.staging, self.paths.backup
        logger.info("[Rebuild] Swapping to new build...")

        try:
            if await asyncio.to_thread(site_swap_comp.path_exists, backup):
                await asyncio.to_thread(site_swap_comp.remove_dir, backup)
        except OSError as e:
            raise SwapFailure(f"Could not remove old backup {backup}: {e}") from e

        live_existed = await asyncio.to_thread(site_swap_comp.path_exists, live)
        if live_existed:
            try:
                await asyncio.to_thread(site_swap_comp.rename_dir, live, backup)
            except OSError as e:
                # Nothing moved yet; the old site is still live
                raise SwapFailure(f"Swap failed: {e}") from e

        try:
            await asyncio.to_thread(site_swap_comp.rename_dir, staging, live)
        except OSError as e:
            if live_existed:
                await self._rollback(e)
            raise SwapFailure(f"Swap failed, previous version restored: {e}") from e

        if live_existed:
            self._schedule_cleanup(backup)

    async def _rollback(self, cause: OSError) -> None:
        self._state = RebuildState.ROLLING_BACK
        try:
            await asyncio.to_thread(site_swap_comp.rename_dir, self.paths.backup, self.paths.live)
        except OSError as rollback_error:
            logger.critical(
                f"[Rebuild] CRITICAL: Failed to roll back after swap failure ({cause}): {rollback_error}. "
                f"Previous site is at {self.paths.backup}; manual intervention required."
            )
            raise FatalSwapError(FATAL_SWAP_MESSAGE) from rollback_error
        logger.warning("[Rebuild] Swap failed, rolled back to previous version")

    # ------------------------------------------------------------------
    # Delayed cleanup
    # ------------------------------------------------------------------
    def _schedule_cleanup(self, path: str) -> None:
        task = asyncio.create_task(self._cleanup_later(path))
        self._cleanup_tasks.add(task)
        task.add_done_callback(self._cleanup_tasks.discard)

    async def _cleanup_later(self, path: str) -> None:
        await asyncio.sleep(self.settings.cleanup_delay_s)
        if self._is_rebuilding:
            # The next swap clears stale backups itself
            return
        if await asyncio.to_thread(site_swap_comp.remove_dir_quietly, path):
            logger.info("[Rebuild] Cleaned up old build")

    async def drain(self) -> None:
        """Wait for pending backup cleanups (used on shutdown and in tests)."""
        if self._cleanup_tasks:
            await asyncio.gather(*self._cleanup_tasks, return_exceptions=True)
