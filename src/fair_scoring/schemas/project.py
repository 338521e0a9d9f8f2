"""Project schemas for API validation."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from ..models.project import ProjectStatus
from ..scoring.records import CompetitionLevel
from ..scoring.rubric import VALID_CATEGORIES


class ProjectCreate(BaseModel):
    """Schema for a patron registering a project."""

    title: str = Field(..., min_length=1, max_length=500)
    category: str = Field(..., description="One of the fixed competition categories")
    students: List[str] = Field(default_factory=list, max_length=3)
    school: str = Field(..., min_length=1, max_length=255)
    zone: str = Field(..., min_length=1, max_length=100)
    sub_county: str = Field(..., min_length=1, max_length=100)
    county: str = Field(..., min_length=1, max_length=100)
    region: str = Field(..., min_length=1, max_length=100)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        for category in VALID_CATEGORIES:
            if category.lower() == v.strip().lower():
                return category
        raise ValueError(f"Invalid category. Must be one of: {', '.join(VALID_CATEGORIES)}")

    @field_validator("students")
    @classmethod
    def validate_students(cls, v: List[str]) -> List[str]:
        return [name.strip() for name in v if name.strip()]


class ProjectResponse(BaseModel):
    """Project details."""

    id: UUID
    title: str
    registration_number: str
    category: str
    students: List[str]
    school: str
    zone: str
    sub_county: str
    county: str
    region: str
    patron_id: Optional[UUID]
    status: ProjectStatus
    current_level: CompetitionLevel
    is_eliminated: bool
    override_score_a: Optional[Decimal]
    created_at: datetime

    model_config = {"from_attributes": True}


class ProjectListResponse(BaseModel):
    """Paginated project list."""

    items: List[ProjectResponse]
    total: int
    page: int
    pages: int
    per_page: int


class TieBreakRequest(BaseModel):
    """Replacement Part A score used to break a tie."""

    score_a: Decimal = Field(..., ge=0, le=30, decimal_places=2)
