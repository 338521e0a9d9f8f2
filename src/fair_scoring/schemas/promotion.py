"""Publish/promotion schemas for API validation."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..scoring.records import CompetitionLevel
from .scoring import TieResponse


class PublishRequest(BaseModel):
    """Publishing cannot be undone, so the caller must confirm explicitly."""

    confirm: bool = Field(False, description="Must be true to publish")


class PublishResponse(BaseModel):
    """Outcome of a publish attempt or of a readiness check."""

    success: bool
    message: str
    level: Optional[CompetitionLevel] = None
    next_level: Optional[CompetitionLevel] = None
    promoted_ids: List[UUID] = []
    eliminated_ids: List[UUID] = []
    project_count: int = 0
    unjudged_count: int = 0
    arbitration_count: int = 0
    tied_categories: List[str] = []
    ties: List[TieResponse] = []

    model_config = {"from_attributes": True}
