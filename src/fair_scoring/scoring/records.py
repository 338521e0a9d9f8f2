"""Plain records the scoring core computes over.

The core never touches the database. Services load ORM rows, convert them
into these records and hand a :class:`Snapshot` to the pure functions in
this package.
"""

import enum
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from ..utils.clock import utcnow
from ..utils.logging import get_logger
from .exceptions import OrphanAssignmentError, UnknownJudgeError, UnknownProjectError

logger = get_logger(__name__)


class UserRole(str, enum.Enum):
    """Roles a portal user can hold."""

    SUPER_ADMIN = "Super Admin"
    NATIONAL_ADMIN = "National Admin"
    REGIONAL_ADMIN = "Regional Admin"
    COUNTY_ADMIN = "County Admin"
    SUB_COUNTY_ADMIN = "Sub-County Admin"
    JUDGE = "Judge"
    COORDINATOR = "Coordinator"
    PATRON = "Patron"


class CompetitionLevel(str, enum.Enum):
    """Competition tiers a project moves through, lowest first."""

    SUB_COUNTY = "Sub-County"
    COUNTY = "County"
    REGIONAL = "Regional"
    NATIONAL = "National"

    def next_level(self) -> Optional["CompetitionLevel"]:
        """The level a promoted project advances to (None after National)."""
        order = list(CompetitionLevel)
        index = order.index(self)
        return order[index + 1] if index + 1 < len(order) else None


class Section(str, enum.Enum):
    """Judging sections a judge can be assigned to."""

    PART_A = "Part A"
    PART_BC = "Part B & C"


class AssignmentStatus(str, enum.Enum):
    """Progress of a single judge assignment."""

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class AssignmentState(str, enum.Enum):
    """Whether an assignment still counts or was superseded by a re-assignment."""

    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class ProjectRecord:
    """A competing project as seen by the scoring core."""

    id: UUID
    title: str
    category: str
    school: str
    region: str
    county: str
    sub_county: str
    zone: str
    current_level: CompetitionLevel = CompetitionLevel.SUB_COUNTY
    is_eliminated: bool = False
    override_score_a: Optional[Decimal] = None


@dataclass(frozen=True)
class AssignmentRecord:
    """One judge's assignment to one section of one project."""

    project_id: UUID
    judge_id: UUID
    section: Section
    status: AssignmentStatus = AssignmentStatus.NOT_STARTED
    score: Optional[Decimal] = None
    score_breakdown: Mapping[int, Decimal] = field(default_factory=dict)
    state: AssignmentState = AssignmentState.ACTIVE
    created_at: datetime = field(default_factory=utcnow)
    id: Optional[UUID] = None

    @property
    def is_active(self) -> bool:
        return self.state == AssignmentState.ACTIVE

    @property
    def is_completed(self) -> bool:
        return self.status == AssignmentStatus.COMPLETED and self.score is not None


@dataclass(frozen=True)
class JudgeRecord:
    """The judge attributes the core cares about."""

    id: UUID
    name: str
    school: Optional[str] = None
    # Set only for coordinators; the one category they may arbitrate
    coordinated_category: Optional[str] = None

    def arbitrates(self, category: str) -> bool:
        """True when this judge is the coordinator of ``category``."""
        return self.coordinated_category == category


class Snapshot:
    """A consistent view of projects, active assignments and judges.

    Archived assignments are dropped here and nowhere else, so every
    computation downstream only ever sees assignments that count.
    """

    def __init__(
        self,
        projects: Iterable[ProjectRecord],
        assignments: Iterable[AssignmentRecord],
        judges: Iterable[JudgeRecord],
    ):
        self.projects: Dict[UUID, ProjectRecord] = {p.id: p for p in projects}
        self.judges: Dict[UUID, JudgeRecord] = {j.id: j for j in judges}

        active = sorted(
            (a for a in assignments if a.is_active),
            key=lambda a: a.created_at,
        )
        self._by_project: Dict[UUID, List[AssignmentRecord]] = defaultdict(list)
        for assignment in active:
            if assignment.project_id not in self.projects:
                logger.error(
                    "Orphan assignment: judge %s on missing project %s",
                    assignment.judge_id,
                    assignment.project_id,
                )
                raise OrphanAssignmentError(assignment.project_id, assignment.judge_id)
            if assignment.judge_id not in self.judges:
                logger.error(
                    "Assignment on project %s references missing judge %s",
                    assignment.project_id,
                    assignment.judge_id,
                )
                raise UnknownJudgeError(assignment.judge_id, assignment.project_id)
            self._by_project[assignment.project_id].append(assignment)

    def project(self, project_id: UUID) -> ProjectRecord:
        """Look up a project, failing loudly if it is not in the snapshot."""
        try:
            return self.projects[project_id]
        except KeyError:
            raise UnknownProjectError(project_id) from None

    def active_assignments(self, project_id: UUID) -> List[AssignmentRecord]:
        """Active assignments of a project, oldest first."""
        return list(self._by_project.get(project_id, ()))

    def all_active_assignments(self) -> List[AssignmentRecord]:
        """Every active assignment in the snapshot, grouped by project."""
        return [a for group in self._by_project.values() for a in group]

    def judge(self, judge_id: UUID) -> JudgeRecord:
        return self.judges[judge_id]

    def restricted_to(self, project_ids: Iterable[UUID]) -> "Snapshot":
        """A sub-snapshot holding only the given projects and their assignments."""
        wanted = set(project_ids)
        return Snapshot(
            projects=[p for pid, p in self.projects.items() if pid in wanted],
            assignments=[
                a for pid, group in self._by_project.items() if pid in wanted for a in group
            ],
            judges=self.judges.values(),
        )
