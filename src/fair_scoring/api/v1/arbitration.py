"""Arbitration API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from ..deps import ScoringServiceDep
from ...auth.api_keys import CurrentUser
from ...schemas.scoring import ArbitrationTaskResponse

router = APIRouter(prefix="/arbitration", tags=["arbitration"])


@router.get("/tasks", response_model=List[ArbitrationTaskResponse])
async def get_arbitration_tasks(
    user: CurrentUser,
    scoring: ScoringServiceDep,
    category: Optional[str] = Query(None, description="Admins only: filter by category"),
):
    """
    Project sections waiting for a coordinator's arbitration score.

    Coordinators see their own category; admins see every category.
    """
    if user.is_coordinator:
        category = user.coordinated_category
    elif not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Coordinator or admin access required",
        )

    tasks = await scoring.get_arbitration_tasks(category)
    return [ArbitrationTaskResponse.model_validate(t) for t in tasks]
