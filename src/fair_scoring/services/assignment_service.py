"""Judge assignment service: assigning judges, recording scores and arbitration."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..models.assignment import JudgeAssignment
from ..models.audit_log import AuditAction, AuditLog
from ..models.project import Project, ProjectStatus
from ..models.user import User
from ..schemas.assignment import ArbitrationSubmission, AssignmentCreate, ScoreSubmission
from ..scoring.aggregation import compute_project_score
from ..scoring.arbitration import detect_section_flags, has_coordinator_score
from ..scoring.records import AssignmentState, AssignmentStatus, UserRole
from ..scoring.rubric import validate_breakdown
from ..utils.logging import get_logger
from .project_service import ProjectNotFoundError
from .scoring_service import ScoringService

logger = get_logger(__name__)

settings = get_settings()

# Coordinators never hold regular assignments; they only score through arbitration
JUDGING_ROLES = (UserRole.JUDGE,)


class AssignmentNotFoundError(Exception):
    """Raised when an assignment does not exist."""

    def __init__(self, assignment_id: UUID):
        self.assignment_id = assignment_id
        super().__init__(f"Assignment {assignment_id} not found")


class JudgeNotFoundError(Exception):
    """Raised when the user to assign does not exist or cannot judge."""

    pass


class NotAssignedJudgeError(Exception):
    """Raised when a judge acts on somebody else's assignment."""

    pass


class AssignmentLockedError(Exception):
    """Raised when a completed or archived assignment is changed."""

    pass


class ConflictOfInterestError(Exception):
    """Raised when a judge tries to score a project from their own school."""

    pass


class NotCoordinatorError(Exception):
    """Raised when a user arbitrates outside the category they coordinate."""

    pass


class SectionNotFlaggedError(Exception):
    """Raised when arbitration is submitted for a section that does not need it."""

    pass


def _serialize_breakdown(breakdown) -> dict:
    """JSON keys must be strings; marks are stored as strings to keep them exact."""
    return {str(int(k)): str(v) for k, v in breakdown.items()}


class AssignmentService:
    """Service for the judging workflow."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_assignment_by_id(self, assignment_id: UUID) -> Optional[JudgeAssignment]:
        """Get assignment by ID."""
        return await self.db.get(JudgeAssignment, assignment_id)

    async def list_for_judge(
        self,
        judge_id: UUID,
        include_archived: bool = False,
    ) -> list[JudgeAssignment]:
        """A judge's assignments, oldest first."""
        query = select(JudgeAssignment).where(JudgeAssignment.judge_id == judge_id)
        if not include_archived:
            query = query.where(JudgeAssignment.state == AssignmentState.ACTIVE)
        result = await self.db.execute(query.order_by(JudgeAssignment.created_at))
        return list(result.scalars().all())

    async def assign_judge(self, data: AssignmentCreate, admin: User) -> JudgeAssignment:
        """
        Assign a judge to a section of a project.

        Re-assigning the same judge to the same project section archives the
        previous assignment and starts a fresh one.

        Raises:
            ProjectNotFoundError: If the project does not exist
            JudgeNotFoundError: If the judge does not exist or cannot judge
        """
        project = await self.db.get(Project, data.project_id)
        if not project:
            raise ProjectNotFoundError(data.project_id)

        judge = await self.db.get(User, data.judge_id)
        if not judge or judge.role not in JUDGING_ROLES:
            raise JudgeNotFoundError(f"No judge with id {data.judge_id}")

        previous_result = await self.db.execute(
            select(JudgeAssignment).where(
                JudgeAssignment.project_id == project.id,
                JudgeAssignment.judge_id == judge.id,
                JudgeAssignment.section == data.section,
                JudgeAssignment.state == AssignmentState.ACTIVE,
            )
        )
        previous = list(previous_result.scalars().all())
        for old in previous:
            old.state = AssignmentState.ARCHIVED

        if previous:
            self.db.add(
                AuditLog(
                    action=AuditAction.REASSIGN_JUDGE,
                    performing_user_id=admin.id,
                    target=project.title,
                    description=f"{judge.name} re-assigned to {data.section.value}",
                    level=project.current_level.value,
                    region=project.region,
                    county=project.county,
                    sub_county=project.sub_county,
                    details={"archived": [str(a.id) for a in previous]},
                )
            )

        assignment = JudgeAssignment(
            project_id=project.id,
            judge_id=judge.id,
            section=data.section,
            status=AssignmentStatus.NOT_STARTED,
            state=AssignmentState.ACTIVE,
        )
        self.db.add(assignment)
        await self.db.flush()
        await self._refresh_project_status(project)

        await self.db.commit()
        await self.db.refresh(assignment)
        return assignment

    async def _get_own_assignment(self, assignment_id: UUID, judge: User) -> JudgeAssignment:
        assignment = await self.db.get(JudgeAssignment, assignment_id)
        if not assignment:
            raise AssignmentNotFoundError(assignment_id)
        if assignment.judge_id != judge.id:
            raise NotAssignedJudgeError("This assignment belongs to another judge")
        if assignment.state == AssignmentState.ARCHIVED:
            raise AssignmentLockedError("This assignment has been replaced by a re-assignment")
        if assignment.is_completed:
            raise AssignmentLockedError("Completed assignments cannot be changed")
        return assignment

    async def start_judging(self, assignment_id: UUID, judge: User) -> JudgeAssignment:
        """Move an assignment from Not Started to In Progress."""
        assignment = await self._get_own_assignment(assignment_id, judge)
        if assignment.status == AssignmentStatus.NOT_STARTED:
            assignment.status = AssignmentStatus.IN_PROGRESS
            await self.db.flush()
            project = await self.db.get(Project, assignment.project_id)
            await self._refresh_project_status(project)
            await self.db.commit()
            await self.db.refresh(assignment)
        return assignment

    async def submit_scores(
        self,
        assignment_id: UUID,
        judge: User,
        data: ScoreSubmission,
    ) -> JudgeAssignment:
        """
        Record a judge's marks and complete the assignment.

        The section score is the sum of the per-criterion marks.

        Raises:
            AssignmentNotFoundError: If the assignment does not exist
            NotAssignedJudgeError: If it belongs to another judge
            AssignmentLockedError: If it is completed or archived
            ConflictOfInterestError: If the judge is from the project's school
            InvalidScoreError: If a mark is out of range or off-step
        """
        assignment = await self._get_own_assignment(assignment_id, judge)
        project = await self.db.get(Project, assignment.project_id)

        if judge.school and judge.school == project.school:
            logger.warning(
                "Judge %s blocked from scoring own school's project %s",
                judge.id,
                project.id,
            )
            raise ConflictOfInterestError(
                "Judges cannot score projects from their own school; "
                "a coordinator will arbitrate this section"
            )

        total = validate_breakdown(assignment.section, data.score_breakdown)

        assignment.score = total
        assignment.score_breakdown = _serialize_breakdown(data.score_breakdown)
        assignment.comments = data.comments
        assignment.recommendations = data.recommendations
        assignment.status = AssignmentStatus.COMPLETED
        await self.db.flush()
        await self._refresh_project_status(project)

        await self.db.commit()
        await self.db.refresh(assignment)
        return assignment

    async def submit_arbitration(
        self,
        coordinator: User,
        data: ArbitrationSubmission,
    ) -> JudgeAssignment:
        """
        Record a coordinator's definitive score for a project section.

        A new completed assignment is created with the coordinator as judge;
        once it exists it is the only score that counts for the section.

        Raises:
            ProjectNotFoundError: If the project does not exist
            NotCoordinatorError: If the user does not coordinate the category
            SectionNotFlaggedError: If the section is not flagged for arbitration
            InvalidScoreError: If a mark is out of range or off-step
        """
        project = await self.db.get(Project, data.project_id)
        if not project:
            raise ProjectNotFoundError(data.project_id)

        if not coordinator.is_coordinator or coordinator.coordinated_category != project.category:
            raise NotCoordinatorError(
                f"Only the {project.category} coordinator can arbitrate this project"
            )

        total = validate_breakdown(data.section, data.score_breakdown)

        snapshot = await ScoringService(self.db).load_snapshot(project_ids=[project.id])
        section_assignments = [
            a for a in snapshot.active_assignments(project.id) if a.section == data.section
        ]
        # A coordinator may revise their own arbitration once the flag has cleared
        if not has_coordinator_score(
            project.category, section_assignments, snapshot.judges
        ) and not detect_section_flags(
            snapshot.project(project.id),
            data.section,
            section_assignments,
            snapshot.judges,
            settings.variance_threshold,
        ):
            raise SectionNotFlaggedError(
                f"{data.section.value} of this project is not flagged for arbitration"
            )

        previous_result = await self.db.execute(
            select(JudgeAssignment).where(
                JudgeAssignment.project_id == project.id,
                JudgeAssignment.judge_id == coordinator.id,
                JudgeAssignment.section == data.section,
                JudgeAssignment.state == AssignmentState.ACTIVE,
            )
        )
        for old in previous_result.scalars().all():
            old.state = AssignmentState.ARCHIVED

        assignment = JudgeAssignment(
            project_id=project.id,
            judge_id=coordinator.id,
            section=data.section,
            status=AssignmentStatus.COMPLETED,
            state=AssignmentState.ACTIVE,
            score=total,
            score_breakdown=_serialize_breakdown(data.score_breakdown),
            comments=data.comments,
            recommendations=data.recommendations,
        )
        self.db.add(assignment)

        self.db.add(
            AuditLog(
                action=AuditAction.ARBITRATION_SCORE,
                performing_user_id=coordinator.id,
                target=project.title,
                description=f"Arbitration score {total} for {data.section.value}",
                level=project.current_level.value,
                region=project.region,
                county=project.county,
                sub_county=project.sub_county,
                details={"project_id": str(project.id), "section": data.section.value},
            )
        )
        await self.db.flush()
        await self._refresh_project_status(project)

        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info(
            "Arbitration score %s recorded for %s of project %s by coordinator %s",
            total,
            data.section.value,
            project.id,
            coordinator.id,
        )
        return assignment

    async def _refresh_project_status(self, project: Project) -> None:
        """Derive the patron-facing status from the project's current assignments."""
        snapshot = await ScoringService(self.db).load_snapshot(project_ids=[project.id])
        assignments = snapshot.active_assignments(project.id)
        score = compute_project_score(project.id, snapshot, settings)

        # Sections a coordinator has scored no longer wait on other judges
        settled = {
            a.section for a in assignments
            if a.is_completed and snapshot.judge(a.judge_id).arbitrates(project.category)
        }
        outstanding = [
            a for a in assignments if a.section not in settled and not a.is_completed
        ]

        if not assignments:
            project.status = ProjectStatus.NOT_STARTED
        elif score.needs_arbitration:
            project.status = ProjectStatus.REVIEW_PENDING
        elif score.is_fully_judged and not outstanding:
            project.status = ProjectStatus.COMPLETED
        elif any(a.status != AssignmentStatus.NOT_STARTED for a in assignments):
            project.status = ProjectStatus.IN_PROGRESS
        else:
            project.status = ProjectStatus.WAITING
