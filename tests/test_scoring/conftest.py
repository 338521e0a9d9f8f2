"""Fixtures for the scoring core: in-memory snapshots, no database."""

from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from fair_scoring.config import Settings
from fair_scoring.scoring.records import (
    AssignmentRecord,
    AssignmentState,
    AssignmentStatus,
    CompetitionLevel,
    JudgeRecord,
    ProjectRecord,
    Section,
    Snapshot,
)


class SnapshotBuilder:
    """Collects projects, judges and assignments and turns them into a Snapshot."""

    def __init__(self):
        self.projects: dict = {}
        self.judges: list[JudgeRecord] = []
        self.assignments: list[AssignmentRecord] = []
        self._clock = datetime(2026, 5, 4, 8, 0, 0)

    def judge(self, name: str = "Judge", school: str | None = None, coordinates: str | None = None) -> JudgeRecord:
        """A judge; ``coordinates`` makes them the coordinator of that category."""
        judge = JudgeRecord(id=uuid4(), name=name, school=school, coordinated_category=coordinates)
        self.judges.append(judge)
        return judge

    def project(
        self,
        title: str = "Project",
        category: str = "Physics",
        school: str = "Alpha School",
        zone: str = "Karatina",
        sub_county: str = "Mathira",
        county: str = "Nyeri",
        region: str = "Central",
        level: CompetitionLevel = CompetitionLevel.SUB_COUNTY,
        eliminated: bool = False,
        override_score_a: Decimal | None = None,
    ) -> ProjectRecord:
        project = ProjectRecord(
            id=uuid4(),
            title=title,
            category=category,
            school=school,
            region=region,
            county=county,
            sub_county=sub_county,
            zone=zone,
            current_level=level,
            is_eliminated=eliminated,
            override_score_a=override_score_a,
        )
        self.projects[project.id] = project
        return project

    def assign(
        self,
        project: ProjectRecord,
        section: Section,
        score=None,
        judge: JudgeRecord | None = None,
        status: AssignmentStatus | None = None,
        state: AssignmentState = AssignmentState.ACTIVE,
    ) -> AssignmentRecord:
        """Add an assignment; a score means it is completed unless a status is given."""
        if judge is None:
            judge = self.judge(name=f"Judge {len(self.judges) + 1}")
        if status is None:
            status = AssignmentStatus.COMPLETED if score is not None else AssignmentStatus.NOT_STARTED
        self._clock += timedelta(minutes=1)
        assignment = AssignmentRecord(
            id=uuid4(),
            project_id=project.id,
            judge_id=judge.id,
            section=section,
            status=status,
            score=Decimal(str(score)) if score is not None else None,
            state=state,
            created_at=self._clock,
        )
        self.assignments.append(assignment)
        return assignment

    def judged(self, score_a, score_bc, **project_fields) -> ProjectRecord:
        """A project with one completed assignment per section."""
        project = self.project(**project_fields)
        self.assign(project, Section.PART_A, score_a)
        self.assign(project, Section.PART_BC, score_bc)
        return project

    def snapshot(self) -> Snapshot:
        return Snapshot(
            projects=self.projects.values(),
            assignments=self.assignments,
            judges=self.judges,
        )


@pytest.fixture
def builder() -> SnapshotBuilder:
    return SnapshotBuilder()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        variance_threshold=Decimal("5"),
        promotion_slots=4,
        rank_points={1: 10, 2: 8, 3: 6, 4: 4},
    )
