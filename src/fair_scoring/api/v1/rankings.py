"""Ranking API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from ..deps import ScoringServiceDep
from ...auth.api_keys import AdminUser, CurrentUser
from ...schemas.scoring import CategoryStatsResponse, RankingResponse, TieResponse
from ...scoring.records import CompetitionLevel
from ...scoring.rubric import VALID_CATEGORIES
from ...services.scoring_service import ProjectFilter

router = APIRouter(prefix="/rankings", tags=["rankings"])


@router.get("", response_model=RankingResponse)
async def get_rankings(
    user: CurrentUser,
    scoring: ScoringServiceDep,
    category: Optional[str] = Query(None, description="Filter by category"),
    level: Optional[CompetitionLevel] = Query(None, description="Filter by competition level"),
    region: Optional[str] = Query(None),
    county: Optional[str] = Query(None),
    sub_county: Optional[str] = Query(None),
):
    """
    Category ranks, points and the school/zone/sub-county/county/region rollups.

    Only fully judged projects are ranked. Ranks 1-4 earn 10, 8, 6 and 4 points.
    """
    rankings = await scoring.get_rankings(
        ProjectFilter(
            category=category,
            level=level,
            region=region,
            county=county,
            sub_county=sub_county,
        )
    )
    return RankingResponse.from_ranking_data(rankings)


@router.get("/categories/{category}/stats", response_model=CategoryStatsResponse)
async def get_category_stats(
    category: str,
    user: CurrentUser,
    scoring: ScoringServiceDep,
    level: Optional[CompetitionLevel] = Query(None),
):
    """Lowest, highest and average total score in a category."""
    if category not in VALID_CATEGORIES:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Unknown category",
        )

    stats = await scoring.get_category_stats(category, level)
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No fully judged projects in this category yet",
        )
    return CategoryStatsResponse.model_validate(stats)


@router.get("/ties", response_model=List[TieResponse])
async def get_blocking_ties(
    admin: AdminUser,
    scoring: ScoringServiceDep,
    category: Optional[str] = Query(None),
    level: Optional[CompetitionLevel] = Query(None),
):
    """
    Ties that decide a promotion place within the admin's area.

    Each must be resolved with a Part A override before results can be published.
    """
    ties = await scoring.get_blocking_ties(
        ProjectFilter.for_user(admin, category=category, level=level)
    )
    return [TieResponse.model_validate(t) for t in ties]
