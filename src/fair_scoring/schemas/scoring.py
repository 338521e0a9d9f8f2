"""Score, ranking and arbitration schemas for API responses."""

from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from ..scoring.arbitration import ArbitrationReason
from ..scoring.records import CompetitionLevel, Section


class ProjectScoreResponse(BaseModel):
    """Authoritative project score."""

    project_id: UUID
    score_a: Optional[Decimal]
    score_bc: Optional[Decimal]
    total_score: Decimal
    is_fully_judged: bool
    needs_arbitration: bool

    model_config = {"from_attributes": True}


class ProjectScoreBreakdownResponse(ProjectScoreResponse):
    """Project score with Part B & C split into oral and scientific shares."""

    score_b: Optional[Decimal]
    score_c: Optional[Decimal]
    judges_a: int
    judges_bc: int


class RankedProjectResponse(BaseModel):
    """A project's standing within its category."""

    project_id: UUID
    title: str
    category: str
    school: str
    current_level: CompetitionLevel
    total_score: Decimal
    category_rank: int
    points: int

    @classmethod
    def from_ranked(cls, ranked) -> "RankedProjectResponse":
        return cls(
            project_id=ranked.project.id,
            title=ranked.project.title,
            category=ranked.project.category,
            school=ranked.project.school,
            current_level=ranked.project.current_level,
            total_score=ranked.total_score,
            category_rank=ranked.category_rank,
            points=ranked.points,
        )


class RankedEntityResponse(BaseModel):
    """A geographic entity's points and rank."""

    name: str
    total_points: int
    rank: int
    parent: Optional[str] = None

    model_config = {"from_attributes": True}


class RankingResponse(BaseModel):
    """Project ranks plus every geographic rollup."""

    projects_with_points: List[RankedProjectResponse]
    school_ranking: List[RankedEntityResponse]
    zone_ranking: Dict[str, List[RankedEntityResponse]]
    sub_county_ranking: Dict[str, List[RankedEntityResponse]]
    county_ranking: Dict[str, List[RankedEntityResponse]]
    region_ranking: List[RankedEntityResponse]

    @classmethod
    def from_ranking_data(cls, data) -> "RankingResponse":
        def entities(items):
            return [RankedEntityResponse.model_validate(e) for e in items]

        return cls(
            projects_with_points=[
                RankedProjectResponse.from_ranked(p) for p in data.projects_with_points
            ],
            school_ranking=entities(data.school_ranking),
            zone_ranking={k: entities(v) for k, v in data.zone_ranking.items()},
            sub_county_ranking={k: entities(v) for k, v in data.sub_county_ranking.items()},
            county_ranking={k: entities(v) for k, v in data.county_ranking.items()},
            region_ranking=entities(data.region_ranking),
        )


class CategoryStatsResponse(BaseModel):
    """Spread of total scores within a category."""

    category: str
    min: Decimal
    max: Decimal
    average: Decimal
    count: int

    model_config = {"from_attributes": True}


class ArbitrationTaskResponse(BaseModel):
    """An item in a coordinator's arbitration queue."""

    project_id: UUID
    project_title: str
    category: str
    section: Section
    reason: ArbitrationReason
    detail: str

    model_config = {"from_attributes": True}


class TieResponse(BaseModel):
    """Projects tied on a promotion-deciding rank."""

    category: str
    total_score: Decimal
    rank: int
    project_ids: List[UUID]

    model_config = {"from_attributes": True}


class JudgingProgressResponse(BaseModel):
    """Judging progress within an admin's area."""

    total_assignments: int
    completed_assignments: int
    completion_percentage: int
    projects_in_review: int
