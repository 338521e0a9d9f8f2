"""Scoring service: loads snapshots from the database and runs the scoring core."""

from dataclasses import dataclass
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..models.assignment import JudgeAssignment
from ..models.project import Project
from ..models.user import User
from ..scoring.aggregation import (
    ProjectScore,
    ProjectScoreBreakdown,
    compute_project_score,
    compute_project_score_breakdown,
)
from ..scoring.arbitration import ArbitrationTask, arbitration_tasks
from ..scoring.promotion import Tie, find_blocking_ties
from ..scoring.ranking import RankingData, compute_rankings_and_points
from ..scoring.records import CompetitionLevel, Snapshot
from ..scoring.stats import CategoryStats, category_stats
from .project_service import ProjectNotFoundError

settings = get_settings()


@dataclass
class ProjectFilter:
    """Which projects a ranking or summary covers."""

    category: Optional[str] = None
    level: Optional[CompetitionLevel] = None
    region: Optional[str] = None
    county: Optional[str] = None
    sub_county: Optional[str] = None
    include_eliminated: bool = False

    def apply(self, query):
        if self.category:
            query = query.where(Project.category == self.category)
        if self.level:
            query = query.where(Project.current_level == self.level)
        if self.region:
            query = query.where(Project.region == self.region)
        if self.county:
            query = query.where(Project.county == self.county)
        if self.sub_county:
            query = query.where(Project.sub_county == self.sub_county)
        if not self.include_eliminated:
            query = query.where(Project.is_eliminated.is_(False))
        return query

    @classmethod
    def for_user(cls, user: User, **overrides) -> "ProjectFilter":
        """An admin's own area; wider admins see everything."""
        return cls(
            region=user.region or None,
            county=user.county or None,
            sub_county=user.sub_county or None,
            **overrides,
        )


@dataclass
class JudgingProgress:
    """How far judging has come within an area."""

    total_assignments: int
    completed_assignments: int
    completion_percentage: int
    projects_in_review: int


class ScoringService:
    """Service for score, ranking and arbitration queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_snapshot(
        self,
        project_filter: Optional[ProjectFilter] = None,
        project_ids: Optional[Iterable[UUID]] = None,
    ) -> Snapshot:
        """
        Load projects, their assignments and the judges on them.

        Archived assignments are loaded too; the snapshot drops them.
        """
        query = select(Project)
        if project_filter is not None:
            query = project_filter.apply(query)
        if project_ids is not None:
            query = query.where(Project.id.in_(list(project_ids)))
        projects = list((await self.db.execute(query)).scalars().all())

        if not projects:
            return Snapshot(projects=[], assignments=[], judges=[])

        assignments_result = await self.db.execute(
            select(JudgeAssignment).where(
                JudgeAssignment.project_id.in_([p.id for p in projects])
            )
        )
        assignments = list(assignments_result.scalars().all())

        judge_ids = {a.judge_id for a in assignments}
        judges: List[User] = []
        if judge_ids:
            judges_result = await self.db.execute(select(User).where(User.id.in_(judge_ids)))
            judges = list(judges_result.scalars().all())

        return Snapshot(
            projects=[p.to_record() for p in projects],
            assignments=[a.to_record() for a in assignments],
            judges=[j.to_judge_record() for j in judges],
        )

    async def _project_snapshot(self, project_id: UUID) -> Snapshot:
        snapshot = await self.load_snapshot(project_ids=[project_id])
        if project_id not in snapshot.projects:
            raise ProjectNotFoundError(project_id)
        return snapshot

    async def get_project_score(self, project_id: UUID) -> ProjectScore:
        """
        Current authoritative score of a project.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        snapshot = await self._project_snapshot(project_id)
        return compute_project_score(project_id, snapshot, settings)

    async def get_project_score_breakdown(self, project_id: UUID) -> ProjectScoreBreakdown:
        """Current score of a project with Part B & C split."""
        snapshot = await self._project_snapshot(project_id)
        return compute_project_score_breakdown(project_id, snapshot, settings)

    async def get_rankings(self, project_filter: Optional[ProjectFilter] = None) -> RankingData:
        """Category ranks, points and geographic rollups for the filtered projects."""
        snapshot = await self.load_snapshot(project_filter or ProjectFilter())
        return compute_rankings_and_points(snapshot, settings)

    async def get_blocking_ties(self, project_filter: Optional[ProjectFilter] = None) -> List[Tie]:
        """Ties on a promotion-deciding rank among the filtered projects."""
        rankings = await self.get_rankings(project_filter)
        return find_blocking_ties(rankings.projects_with_points, settings.promotion_slots)

    async def get_arbitration_tasks(self, category: Optional[str] = None) -> List[ArbitrationTask]:
        """Arbitration queue, optionally for one category."""
        snapshot = await self.load_snapshot(ProjectFilter(category=category))
        return arbitration_tasks(snapshot, settings.variance_threshold, category)

    async def get_category_stats(
        self,
        category: str,
        level: Optional[CompetitionLevel] = None,
    ) -> Optional[CategoryStats]:
        """Min/max/average totals of a category, None if nothing is judged yet."""
        snapshot = await self.load_snapshot(ProjectFilter(category=category, level=level))
        return category_stats(category, snapshot, settings)

    async def get_judging_details(self, project_id: UUID) -> list[tuple[JudgeAssignment, User]]:
        """
        Completed, active assignments of a project with their judges.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        # Goes through the snapshot so only assignments that count are shown
        snapshot = await self._project_snapshot(project_id)
        counted = {
            a.id for a in snapshot.active_assignments(project_id) if a.is_completed
        }

        result = await self.db.execute(
            select(JudgeAssignment, User)
            .join(User, JudgeAssignment.judge_id == User.id)
            .where(JudgeAssignment.project_id == project_id)
            .order_by(JudgeAssignment.section, JudgeAssignment.created_at)
        )
        return [
            (assignment, judge)
            for assignment, judge in result.all()
            if assignment.id in counted
        ]

    async def get_progress(self, project_filter: ProjectFilter) -> JudgingProgress:
        """Share of completed active assignments and projects awaiting arbitration."""
        snapshot = await self.load_snapshot(project_filter)
        assignments = snapshot.all_active_assignments()
        completed = sum(1 for a in assignments if a.is_completed)
        in_review = sum(
            1 for pid in snapshot.projects
            if compute_project_score(pid, snapshot, settings).needs_arbitration
        )
        return JudgingProgress(
            total_assignments=len(assignments),
            completed_assignments=completed,
            completion_percentage=round(completed * 100 / len(assignments)) if assignments else 0,
            projects_in_review=in_review,
        )
