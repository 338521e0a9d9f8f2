"""Scoring, ranking and promotion engine.

Everything in this package is synchronous and side-effect free: functions
take a :class:`Snapshot` of projects, assignments and judges and return
plain results.
"""

from .aggregation import (
    ProjectScore,
    ProjectScoreBreakdown,
    compute_project_score,
    compute_project_score_breakdown,
)
from .arbitration import ArbitrationFlag, ArbitrationReason, ArbitrationTask, arbitration_tasks, detect_arbitration
from .exceptions import (
    InvalidScoreError,
    OrphanAssignmentError,
    ScoringError,
    ScoringIntegrityError,
    UnknownJudgeError,
    UnknownProjectError,
)
from .promotion import (
    AdminScope,
    PublishResult,
    Tie,
    find_blocking_ties,
    plan_promotion,
    scope_for_admin,
    validate_override_score,
)
from .ranking import ProjectWithRank, RankedEntity, RankingData, competition_rank, compute_rankings_and_points
from .records import (
    AssignmentRecord,
    AssignmentState,
    AssignmentStatus,
    CompetitionLevel,
    JudgeRecord,
    ProjectRecord,
    Section,
    Snapshot,
    UserRole,
)
from .stats import CategoryStats, category_stats

__all__ = [
    "ProjectScore",
    "ProjectScoreBreakdown",
    "compute_project_score",
    "compute_project_score_breakdown",
    "ArbitrationFlag",
    "ArbitrationReason",
    "ArbitrationTask",
    "arbitration_tasks",
    "detect_arbitration",
    "InvalidScoreError",
    "OrphanAssignmentError",
    "ScoringError",
    "ScoringIntegrityError",
    "UnknownJudgeError",
    "UnknownProjectError",
    "AdminScope",
    "PublishResult",
    "Tie",
    "find_blocking_ties",
    "plan_promotion",
    "scope_for_admin",
    "validate_override_score",
    "ProjectWithRank",
    "RankedEntity",
    "RankingData",
    "competition_rank",
    "compute_rankings_and_points",
    "AssignmentRecord",
    "AssignmentState",
    "AssignmentStatus",
    "CompetitionLevel",
    "JudgeRecord",
    "ProjectRecord",
    "Section",
    "Snapshot",
    "UserRole",
    "CategoryStats",
    "category_stats",
]
