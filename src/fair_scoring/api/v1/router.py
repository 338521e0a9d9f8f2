"""Main v1 API router combining all endpoints."""

from fastapi import APIRouter

from . import arbitration, assignments, projects, promotion, rankings, users

router = APIRouter(prefix="/v1")

# Include all endpoint routers
router.include_router(users.router)
router.include_router(projects.router)
router.include_router(assignments.router)
router.include_router(rankings.router)
router.include_router(arbitration.router)
router.include_router(promotion.router)
