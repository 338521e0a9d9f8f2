"""API dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_db
from ..services.assignment_service import AssignmentService
from ..services.project_service import ProjectService
from ..services.promotion_service import PromotionService
from ..services.scoring_service import ScoringService
from ..services.user_service import UserService

# Database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db)]


# Service factory dependencies
def get_user_service(db: DbSession) -> UserService:
    return UserService(db)


def get_project_service(db: DbSession) -> ProjectService:
    return ProjectService(db)


def get_assignment_service(db: DbSession) -> AssignmentService:
    return AssignmentService(db)


def get_scoring_service(db: DbSession) -> ScoringService:
    return ScoringService(db)


def get_promotion_service(db: DbSession) -> PromotionService:
    return PromotionService(db)


# Service type aliases
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
AssignmentServiceDep = Annotated[AssignmentService, Depends(get_assignment_service)]
ScoringServiceDep = Annotated[ScoringService, Depends(get_scoring_service)]
PromotionServiceDep = Annotated[PromotionService, Depends(get_promotion_service)]
