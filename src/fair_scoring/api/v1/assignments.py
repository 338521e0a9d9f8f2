"""Judge assignment API endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from ..deps import AssignmentServiceDep
from ...auth.api_keys import AdminUser, CoordinatorUser, CurrentUser
from ...schemas.assignment import (
    ArbitrationSubmission,
    AssignmentCreate,
    AssignmentResponse,
    ScoreSubmission,
)
from ...scoring.exceptions import InvalidScoreError
from ...services.assignment_service import (
    AssignmentLockedError,
    AssignmentNotFoundError,
    ConflictOfInterestError,
    JudgeNotFoundError,
    NotAssignedJudgeError,
    NotCoordinatorError,
    SectionNotFlaggedError,
)
from ...services.project_service import ProjectNotFoundError

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("", response_model=List[AssignmentResponse])
async def list_my_assignments(
    user: CurrentUser,
    service: AssignmentServiceDep,
    include_archived: bool = Query(False),
):
    """List the authenticated judge's assignments."""
    return await service.list_for_judge(user.id, include_archived=include_archived)


@router.post(
    "",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_judge(
    data: AssignmentCreate,
    admin: AdminUser,
    service: AssignmentServiceDep,
):
    """
    Assign a judge to a section of a project.

    Assigning the same judge to the same section again archives the earlier
    assignment; its scores stop counting.
    """
    try:
        return await service.assign_judge(data, admin)
    except ProjectNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )
    except JudgeNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.post("/arbitrate", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def submit_arbitration(
    data: ArbitrationSubmission,
    coordinator: CoordinatorUser,
    service: AssignmentServiceDep,
):
    """
    Submit a coordinator's arbitration score for a project section.

    Only sections flagged for a conflict of interest or a score variance
    can be arbitrated. The score replaces every other judge's score for
    that section.
    """
    try:
        return await service.submit_arbitration(coordinator, data)
    except ProjectNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )
    except NotCoordinatorError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    except SectionNotFlaggedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except InvalidScoreError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


@router.post("/{assignment_id}/start", response_model=AssignmentResponse)
async def start_judging(
    assignment_id: UUID,
    user: CurrentUser,
    service: AssignmentServiceDep,
):
    """Mark an assignment as in progress."""
    try:
        return await service.start_judging(assignment_id, user)
    except AssignmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Assignment not found",
        )
    except NotAssignedJudgeError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    except AssignmentLockedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )


@router.post("/{assignment_id}/submit", response_model=AssignmentResponse)
async def submit_scores(
    assignment_id: UUID,
    data: ScoreSubmission,
    user: CurrentUser,
    service: AssignmentServiceDep,
):
    """
    Submit marks for every criterion of the assigned section.

    The section score is the sum of the marks. Submitted scores are final.
    """
    try:
        return await service.submit_scores(assignment_id, user, data)
    except AssignmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Assignment not found",
        )
    except (NotAssignedJudgeError, ConflictOfInterestError) as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    except AssignmentLockedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except InvalidScoreError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
