"""Project API endpoints."""

import math
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from ..deps import ProjectServiceDep, PromotionServiceDep, ScoringServiceDep
from ...auth.api_keys import AdminUser, CurrentUser
from ...models.project import Project
from ...models.user import User
from ...schemas.assignment import JudgingDetail
from ...schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    TieBreakRequest,
)
from ...schemas.scoring import ProjectScoreBreakdownResponse, ProjectScoreResponse
from ...scoring.exceptions import InvalidScoreError
from ...scoring.records import CompetitionLevel, UserRole
from ...services.project_service import ProjectNotFoundError
from ...services.promotion_service import ProjectNotTiedError, TieOutsideScopeError

router = APIRouter(prefix="/projects", tags=["projects"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Project not found",
    )


def _can_view_feedback(user: User, project: Project) -> bool:
    if user.is_admin or user.is_coordinator:
        return True
    return user.role == UserRole.PATRON and project.patron_id == user.id


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_project(
    data: ProjectCreate,
    user: CurrentUser,
    service: ProjectServiceDep,
):
    """
    Register a project for the competition.

    Projects start at Sub-County level. A registration number is generated.
    """
    if user.role != UserRole.PATRON:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only patrons can register projects",
        )
    return await service.create_project(data, user)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    user: CurrentUser,
    service: ProjectServiceDep,
    category: Optional[str] = Query(None, description="Filter by category"),
    level: Optional[CompetitionLevel] = Query(None, description="Filter by competition level"),
    region: Optional[str] = Query(None),
    county: Optional[str] = Query(None),
    sub_county: Optional[str] = Query(None),
    school: Optional[str] = Query(None),
    include_eliminated: bool = Query(False),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    """
    List projects with optional filters.

    Patrons only ever see their own projects.
    """
    projects, total = await service.list_projects(
        category=category,
        level=level,
        region=region,
        county=county,
        sub_county=sub_county,
        school=school,
        patron_id=user.id if user.role == UserRole.PATRON else None,
        include_eliminated=include_eliminated,
        page=page,
        per_page=per_page,
    )

    return ProjectListResponse(
        items=[ProjectResponse.model_validate(p) for p in projects],
        total=total,
        page=page,
        pages=math.ceil(total / per_page) if total > 0 else 1,
        per_page=per_page,
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    user: CurrentUser,
    service: ProjectServiceDep,
):
    """Get project details."""
    project = await service.get_project_by_id(project_id)
    if not project:
        raise _not_found()
    return project


@router.get("/{project_id}/score", response_model=ProjectScoreResponse)
async def get_project_score(
    project_id: UUID,
    user: CurrentUser,
    scoring: ScoringServiceDep,
):
    """
    Get a project's current score.

    Recomputed from the active judge assignments on every request.
    """
    try:
        score = await scoring.get_project_score(project_id)
    except ProjectNotFoundError:
        raise _not_found()
    return ProjectScoreResponse.model_validate(score)


@router.get("/{project_id}/score/breakdown", response_model=ProjectScoreBreakdownResponse)
async def get_project_score_breakdown(
    project_id: UUID,
    user: CurrentUser,
    scoring: ScoringServiceDep,
):
    """Get a project's score with Part B & C split into oral and scientific shares."""
    try:
        breakdown = await scoring.get_project_score_breakdown(project_id)
    except ProjectNotFoundError:
        raise _not_found()
    return ProjectScoreBreakdownResponse.model_validate(breakdown)


@router.get("/{project_id}/judging-details", response_model=List[JudgingDetail])
async def get_judging_details(
    project_id: UUID,
    user: CurrentUser,
    service: ProjectServiceDep,
    scoring: ScoringServiceDep,
):
    """
    Get the judges' marks and feedback on a project.

    Visible to the project's patron, coordinators and admins.
    """
    project = await service.get_project_by_id(project_id)
    if not project:
        raise _not_found()
    if not _can_view_feedback(user, project):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view this project's judging details",
        )

    details = await scoring.get_judging_details(project_id)
    return [
        JudgingDetail(
            judge_name=judge.name,
            section=assignment.section,
            score=assignment.score,
            score_breakdown=assignment.score_breakdown,
            comments=assignment.comments,
            recommendations=assignment.recommendations,
        )
        for assignment, judge in details
    ]


@router.post("/{project_id}/resolve-tie", response_model=ProjectResponse)
async def resolve_tie(
    project_id: UUID,
    data: TieBreakRequest,
    admin: AdminUser,
    service: PromotionServiceDep,
):
    """
    Break a tie by setting a replacement Part A score (0-30).

    Only the publishing admin of the project's level and area can do this,
    and only for a project tied on a rank that decides promotion. The score
    is used instead of the judges' Part A average from now on.
    """
    try:
        return await service.resolve_tie(project_id, data.score_a, admin)
    except ProjectNotFoundError:
        raise _not_found()
    except TieOutsideScopeError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    except ProjectNotTiedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except InvalidScoreError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
