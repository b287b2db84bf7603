"""Rebuild-related DTOs used across layers.

## Rebuild State Machine

| State        | Entered when                                   | Leaves to                 |
|--------------|------------------------------------------------|---------------------------|
| idle         | startup, or any rebuild attempt finished       | building                  |
| building     | request accepted (not running, cooldown over)  | swapping, idle (failure)  |
| swapping     | build commands succeeded, staging dir present  | idle, rolling_back        |
| rolling_back | rename of staging into live path failed        | idle                      |

A failed build never touches the live directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

RejectReason = Literal["in_progress", "cooldown", "disabled"]


class RebuildState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    SWAPPING = "swapping"
    ROLLING_BACK = "rolling_back"


@dataclass
class RebuildResult:
    """Outcome of one rebuild request."""

    success: bool
    message: str
    rejected: RejectReason | None = None
    """Set when the request never entered the building state."""

    cooldown_remaining_s: int | None = None
    """Seconds until the next attempt is allowed (only for cooldown rejections)."""


@dataclass
class RebuildStatus:
    """Snapshot for polling clients."""

    is_rebuilding: bool
    last_rebuild_time: str | None
    can_rebuild: bool
    state: RebuildState = RebuildState.IDLE
    last_error: str | None = None


@dataclass
class RebuildPaths:
    """Filesystem layout of one build-output root."""

    live: str
    staging: str
    backup: str


@dataclass
class RebuildSettings:
    """Rebuild configuration extracted from the composed config."""

    root_dir: str
    output_root: str
    live_dir_name: str = "public"
    staging_suffix: str = ".new"
    backup_suffix: str = ".old"
    commands: list[str] = field(default_factory=list)
    cooldown_s: float = 10.0
    cleanup_delay_s: float = 5.0
    command_timeout_s: float | None = None
    enabled: bool = True
