"""Rebuild API types - trigger result and status polling."""

from __future__ import annotations

from pydantic import BaseModel, Field

from easel.helpers.dto.rebuild_dto import RebuildResult, RebuildStatus


class RebuildResponse(BaseModel):
    """Response for a rebuild trigger."""

    success: bool
    message: str
    reason: str | None = Field(None, description="in_progress, cooldown or disabled when rejected")
    cooldownRemaining: int | None = Field(None, description="Seconds until the next attempt is allowed")

    @classmethod
    def from_dto(cls, dto: RebuildResult) -> RebuildResponse:
        """Convert RebuildResult DTO to Pydantic response model."""
        return cls(
            success=dto.success,
            message=dto.message,
            reason=dto.rejected,
            cooldownRemaining=dto.cooldown_remaining_s,
        )


class RebuildStatusResponse(BaseModel):
    """Response for rebuild status polling."""

    isRebuilding: bool
    lastRebuildTime: str | None
    canRebuild: bool
    state: str
    lastError: str | None = None

    @classmethod
    def from_dto(cls, dto: RebuildStatus) -> RebuildStatusResponse:
        """Convert RebuildStatus DTO to Pydantic response model."""
        return cls(
            isRebuilding=dto.is_rebuilding,
            lastRebuildTime=dto.last_rebuild_time,
            canRebuild=dto.can_rebuild,
            state=dto.state.value,
            lastError=dto.last_error,
        )
