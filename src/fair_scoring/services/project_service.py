"""Project service for business logic."""

from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..models.project import Project
from ..models.user import User
from ..schemas.project import ProjectCreate
from ..scoring.records import CompetitionLevel
from ..scoring.rubric import registration_number
from ..utils.logging import get_logger

logger = get_logger(__name__)

settings = get_settings()


class ProjectNotFoundError(Exception):
    """Raised when a project does not exist."""

    def __init__(self, project_id: UUID):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class ProjectService:
    """Service for project-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_project(self, data: ProjectCreate, patron: User) -> Project:
        """
        Register a new project at Sub-County level.

        The registration number is derived from the category, the
        competition year, the school's initials and how many numbers with
        that prefix were already issued.
        """
        prefix = registration_number(
            data.category, data.school, settings.competition_year, 0
        ).rsplit("-", 1)[0]
        existing_result = await self.db.execute(
            select(func.count(Project.id)).where(
                Project.registration_number.like(f"{prefix}-%")
            )
        )
        sequence = (existing_result.scalar() or 0) + 1

        project = Project(
            title=data.title,
            registration_number=f"{prefix}-{sequence}",
            category=data.category,
            students=data.students,
            school=data.school,
            zone=data.zone,
            sub_county=data.sub_county,
            county=data.county,
            region=data.region,
            patron_id=patron.id,
            current_level=CompetitionLevel.SUB_COUNTY,
        )
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)

        logger.info(
            "Project %s registered as %s by patron %s",
            project.id,
            project.registration_number,
            patron.id,
        )
        return project

    async def get_project_by_id(self, project_id: UUID) -> Optional[Project]:
        """Get project by ID."""
        return await self.db.get(Project, project_id)

    async def list_projects(
        self,
        category: Optional[str] = None,
        level: Optional[CompetitionLevel] = None,
        region: Optional[str] = None,
        county: Optional[str] = None,
        sub_county: Optional[str] = None,
        school: Optional[str] = None,
        patron_id: Optional[UUID] = None,
        include_eliminated: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Project], int]:
        """
        List projects with filters and pagination.

        Returns:
            Tuple of (projects, total_count)
        """
        query = select(Project)

        if category:
            query = query.where(Project.category == category)
        if level:
            query = query.where(Project.current_level == level)
        if region:
            query = query.where(Project.region == region)
        if county:
            query = query.where(Project.county == county)
        if sub_county:
            query = query.where(Project.sub_county == sub_county)
        if school:
            query = query.where(Project.school == school)
        if patron_id:
            query = query.where(Project.patron_id == patron_id)
        if not include_eliminated:
            query = query.where(Project.is_eliminated.is_(False))

        # Count total before pagination
        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(Project.category.asc(), Project.title.asc())
        query = query.limit(per_page).offset((page - 1) * per_page)

        result = await self.db.execute(query)
        return list(result.scalars().all()), total
