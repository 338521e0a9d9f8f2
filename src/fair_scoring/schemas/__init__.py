"""Pydantic schemas for API request/response validation."""

from .user import UserCreate, UserRegistrationResponse, UserResponse
from .project import ProjectCreate, ProjectListResponse, ProjectResponse, TieBreakRequest
from .assignment import (
    ArbitrationSubmission,
    AssignmentCreate,
    AssignmentResponse,
    JudgingDetail,
    ScoreSubmission,
)
from .scoring import (
    ArbitrationTaskResponse,
    CategoryStatsResponse,
    JudgingProgressResponse,
    ProjectScoreBreakdownResponse,
    ProjectScoreResponse,
    RankingResponse,
    TieResponse,
)
from .promotion import PublishRequest, PublishResponse

__all__ = [
    "UserCreate",
    "UserRegistrationResponse",
    "UserResponse",
    "ProjectCreate",
    "ProjectListResponse",
    "ProjectResponse",
    "TieBreakRequest",
    "ArbitrationSubmission",
    "AssignmentCreate",
    "AssignmentResponse",
    "JudgingDetail",
    "ScoreSubmission",
    "ArbitrationTaskResponse",
    "CategoryStatsResponse",
    "JudgingProgressResponse",
    "ProjectScoreBreakdownResponse",
    "ProjectScoreResponse",
    "RankingResponse",
    "TieResponse",
    "PublishRequest",
    "PublishResponse",
]
