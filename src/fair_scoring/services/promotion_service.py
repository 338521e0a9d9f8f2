"""Promotion service: publishing a level's results and moving projects on."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..models.audit_log import AuditAction, AuditLog
from ..models.project import Project
from ..models.user import User
from ..scoring.promotion import (
    AdminScope,
    PublishResult,
    plan_promotion,
    scope_for_admin,
    validate_override_score,
)
from ..utils.logging import get_logger
from .project_service import ProjectNotFoundError
from .scoring_service import ProjectFilter, ScoringService

logger = get_logger(__name__)

settings = get_settings()


class PublishNotConfirmedError(Exception):
    """Raised when publishing is requested without explicit confirmation."""

    pass


class TieOutsideScopeError(Exception):
    """Raised when an admin tries to break a tie outside their level or area."""

    pass


class ProjectNotTiedError(Exception):
    """Raised when a tie-break score is set on a project that is not tied."""

    pass


def _scope_filter(scope: AdminScope) -> ProjectFilter:
    return ProjectFilter(
        level=scope.level,
        region=scope.region,
        county=scope.county,
        sub_county=scope.sub_county,
    )


class PromotionService:
    """Service for publishing results."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def scope_of(admin: User) -> Optional[AdminScope]:
        """The level and area an admin publishes, None if they cannot publish."""
        return scope_for_admin(admin.role, admin.region, admin.county, admin.sub_county)

    async def _plan(self, admin: User) -> PublishResult:
        scope = self.scope_of(admin)
        if scope is None:
            return PublishResult.rejected(
                f"{admin.role.value} accounts cannot publish results; only "
                "Sub-County, County and Regional admins can."
            )

        snapshot = await ScoringService(self.db).load_snapshot(_scope_filter(scope))
        return plan_promotion(scope, snapshot, settings)

    async def get_status(self, admin: User) -> PublishResult:
        """What publishing would do right now, without changing anything."""
        return await self._plan(admin)

    async def publish_and_promote(self, admin: User, confirm: bool = False) -> PublishResult:
        """
        Publish the results of the admin's level within their area.

        Qualifying projects advance one level and the rest are eliminated,
        all in a single commit together with an audit entry. A failed
        precondition is returned as an unsuccessful result and nothing
        changes.

        Raises:
            PublishNotConfirmedError: If ``confirm`` is not set
        """
        if not confirm:
            raise PublishNotConfirmedError(
                "Publishing results cannot be undone; resend with confirm=true."
            )

        result = await self._plan(admin)
        if not result.success:
            logger.info("Publish by %s rejected: %s", admin.id, result.message)
            return result

        affected = result.promoted_ids + result.eliminated_ids
        rows = await self.db.execute(
            select(Project).where(Project.id.in_(affected)).with_for_update()
        )
        projects = {p.id: p for p in rows.scalars().all()}

        try:
            for project_id in result.promoted_ids:
                if result.next_level is not None:
                    projects[project_id].current_level = result.next_level
            for project_id in result.eliminated_ids:
                projects[project_id].is_eliminated = True

            self.db.add(
                AuditLog(
                    action=AuditAction.PUBLISH_RESULTS,
                    performing_user_id=admin.id,
                    target=f"{result.level.value} results",
                    description=result.message,
                    level=result.level.value,
                    region=admin.region,
                    county=admin.county,
                    sub_county=admin.sub_county,
                    details={
                        "next_level": result.next_level.value if result.next_level else None,
                        "promoted": [str(pid) for pid in result.promoted_ids],
                        "eliminated": [str(pid) for pid in result.eliminated_ids],
                    },
                )
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception("Publish by %s failed, nothing was changed", admin.id)
            raise

        logger.info(
            "Results published by %s at %s: %d promoted, %d eliminated",
            admin.id,
            result.level.value,
            len(result.promoted_ids),
            len(result.eliminated_ids),
        )
        return result

    async def resolve_tie(self, project_id: UUID, score: Decimal, admin: User) -> Project:
        """
        Set a manual Part A score that replaces the judges' Part A average.

        Only the admin who publishes the project's level and area may break
        its tie, and only while the project shares a promotion-deciding
        rank. A project that already carries a tie-break score may have it
        amended.

        Raises:
            ProjectNotFoundError: If the project does not exist
            TieOutsideScopeError: If the project is outside the admin's level or area
            InvalidScoreError: If the score is outside 0-30
            ProjectNotTiedError: If the project is not part of a blocking tie
        """
        project = await self.db.get(Project, project_id)
        if not project:
            raise ProjectNotFoundError(project_id)

        scope = self.scope_of(admin)
        if (
            scope is None
            or project.current_level != scope.level
            or not scope.contains(project.to_record())
        ):
            raise TieOutsideScopeError(
                f"{admin.role.value} accounts cannot break ties for this project"
            )

        override = validate_override_score(score, settings.override_score_max)

        previous = project.override_score_a
        if previous is None:
            ties = await ScoringService(self.db).get_blocking_ties(_scope_filter(scope))
            if not any(project.id in tie.project_ids for tie in ties):
                raise ProjectNotTiedError(
                    "This project does not share a rank that decides promotion"
                )

        project.override_score_a = override
        self.db.add(
            AuditLog(
                action=AuditAction.RESOLVE_TIE,
                performing_user_id=admin.id,
                target=project.title,
                description=f"Part A score set to {override} to resolve a tie",
                level=project.current_level.value,
                region=project.region,
                county=project.county,
                sub_county=project.sub_county,
                details={
                    "project_id": str(project.id),
                    "previous": str(previous) if previous is not None else None,
                    "override_score_a": str(override),
                },
            )
        )
        await self.db.commit()
        await self.db.refresh(project)

        logger.info(
            "Tie resolved for project %s by %s: Part A override %s",
            project.id,
            admin.id,
            override,
        )
        return project
