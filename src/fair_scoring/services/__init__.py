"""Business logic services."""

from .user_service import UserService
from .project_service import ProjectService
from .scoring_service import ScoringService
from .assignment_service import AssignmentService
from .promotion_service import PromotionService

__all__ = [
    "UserService",
    "ProjectService",
    "ScoringService",
    "AssignmentService",
    "PromotionService",
]
