"""Publish/promotion API endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, status

from ..deps import PromotionServiceDep, ScoringServiceDep
from ...auth.api_keys import AdminUser
from ...schemas.promotion import PublishRequest, PublishResponse
from ...schemas.scoring import JudgingProgressResponse
from ...services.promotion_service import PublishNotConfirmedError
from ...services.scoring_service import ProjectFilter

router = APIRouter(prefix="/promotion", tags=["promotion"])


@router.get("/status", response_model=PublishResponse)
async def get_publish_status(
    admin: AdminUser,
    service: PromotionServiceDep,
):
    """
    Check whether the admin's level can be published right now.

    Nothing is changed. A failed check names the blocking condition.
    """
    result = await service.get_status(admin)
    return PublishResponse.model_validate(asdict(result))


@router.post("/publish", response_model=PublishResponse)
async def publish_results(
    data: PublishRequest,
    admin: AdminUser,
    service: PromotionServiceDep,
):
    """
    Publish the admin's level: the top 4 of each category advance, the rest are eliminated.

    This cannot be undone and requires ``confirm: true``. When a project is
    still unjudged, waiting for arbitration or tied for a promotion place,
    the response has ``success: false`` and nothing changes.
    """
    try:
        result = await service.publish_and_promote(admin, confirm=data.confirm)
    except PublishNotConfirmedError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return PublishResponse.model_validate(asdict(result))


@router.get("/progress", response_model=JudgingProgressResponse)
async def get_judging_progress(
    admin: AdminUser,
    scoring: ScoringServiceDep,
):
    """Judging completion and projects awaiting arbitration in the admin's area."""
    progress = await scoring.get_progress(ProjectFilter.for_user(admin))
    return JudgingProgressResponse(**asdict(progress))
