"""Judge assignment schemas for API validation."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..scoring.records import AssignmentState, AssignmentStatus, Section


class AssignmentCreate(BaseModel):
    """Admin request to assign a judge to a section of a project."""

    project_id: UUID
    judge_id: UUID
    section: Section


class ScoreSubmission(BaseModel):
    """A judge's marks for every criterion of their section."""

    score_breakdown: Dict[int, Decimal] = Field(..., min_length=1)
    comments: Optional[str] = Field(None, max_length=5000)
    recommendations: Optional[str] = Field(None, max_length=5000)


class ArbitrationSubmission(ScoreSubmission):
    """A coordinator's definitive marks for a flagged section."""

    project_id: UUID
    section: Section


class AssignmentResponse(BaseModel):
    """Judge assignment details."""

    id: UUID
    project_id: UUID
    judge_id: UUID
    section: Section
    status: AssignmentStatus
    state: AssignmentState
    score: Optional[Decimal]
    score_breakdown: Optional[Dict[int, Decimal]]
    comments: Optional[str]
    recommendations: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class JudgingDetail(BaseModel):
    """One completed judge's feedback on a project, shown to its patron."""

    judge_name: str
    section: Section
    score: Optional[Decimal]
    score_breakdown: Optional[Dict[int, Decimal]]
    comments: Optional[str]
    recommendations: Optional[str]
