"""Detection of projects that need a coordinator's arbitration score.

A section is flagged when a judge from the project's own school is assigned
to it (conflict of interest) or when the first two regular judges disagree
by more than the variance threshold. A completed assignment by the
coordinator of the project's category clears both conditions; a
coordinator of any other category is treated like a regular judge. Flags are always derived from the
current assignments and never stored.
"""

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Sequence
from uuid import UUID

from .records import AssignmentRecord, JudgeRecord, ProjectRecord, Section, Snapshot


class ArbitrationReason(str, enum.Enum):
    """Why a section was flagged."""

    CONFLICT_OF_INTEREST = "conflict_of_interest"
    SCORE_VARIANCE = "score_variance"


@dataclass(frozen=True)
class ArbitrationFlag:
    """A single reason a project section needs arbitration."""

    project_id: UUID
    section: Section
    reason: ArbitrationReason
    detail: str
    judge_id: Optional[UUID] = None


@dataclass(frozen=True)
class ArbitrationTask:
    """An entry in a coordinator's arbitration queue."""

    project_id: UUID
    project_title: str
    category: str
    section: Section
    reason: ArbitrationReason
    detail: str


def has_coordinator_score(
    category: str,
    assignments: Iterable[AssignmentRecord],
    judges: Mapping[UUID, JudgeRecord],
) -> bool:
    """True when the coordinator of ``category`` has completed one of the assignments."""
    return any(a.is_completed and judges[a.judge_id].arbitrates(category) for a in assignments)


def detect_section_flags(
    project: ProjectRecord,
    section: Section,
    assignments: Sequence[AssignmentRecord],
    judges: Mapping[UUID, JudgeRecord],
    threshold: Decimal,
) -> List[ArbitrationFlag]:
    """Arbitration flags for one section of one project."""
    section_assignments = [a for a in assignments if a.section == section]
    if has_coordinator_score(project.category, section_assignments, judges):
        return []

    flags: List[ArbitrationFlag] = []

    for assignment in section_assignments:
        judge = judges[assignment.judge_id]
        if judge.arbitrates(project.category):
            continue
        if judge.school and project.school and judge.school == project.school:
            flags.append(
                ArbitrationFlag(
                    project_id=project.id,
                    section=section,
                    reason=ArbitrationReason.CONFLICT_OF_INTEREST,
                    detail=f"Conflict of interest: {judge.name}",
                    judge_id=judge.id,
                )
            )
            break

    regular = [
        a for a in section_assignments
        if a.is_completed and not judges[a.judge_id].arbitrates(project.category)
    ]
    if len(regular) >= 2:
        first, second = regular[0].score, regular[1].score
        difference = abs(first - second)
        if difference > threshold:
            flags.append(
                ArbitrationFlag(
                    project_id=project.id,
                    section=section,
                    reason=ArbitrationReason.SCORE_VARIANCE,
                    detail=f"Mark variance of {difference} points (>{threshold})",
                )
            )

    return flags


def detect_arbitration(
    project: ProjectRecord,
    assignments: Sequence[AssignmentRecord],
    judges: Mapping[UUID, JudgeRecord],
    threshold: Decimal,
) -> List[ArbitrationFlag]:
    """All arbitration flags for a project, Part A first."""
    flags: List[ArbitrationFlag] = []
    for section in Section:
        flags.extend(detect_section_flags(project, section, assignments, judges, threshold))
    return flags


def needs_arbitration(
    project: ProjectRecord,
    assignments: Sequence[AssignmentRecord],
    judges: Mapping[UUID, JudgeRecord],
    threshold: Decimal,
) -> bool:
    return bool(detect_arbitration(project, assignments, judges, threshold))


def arbitration_tasks(
    snapshot: Snapshot,
    threshold: Decimal,
    category: Optional[str] = None,
) -> List[ArbitrationTask]:
    """
    Build the coordinator queue: one task per flagged (project, section).

    When a section has both a conflict and a variance, the conflict is
    reported since it is the one the coordinator must act on first.
    """
    tasks: List[ArbitrationTask] = []
    for project in snapshot.projects.values():
        if category is not None and project.category != category:
            continue
        assignments = snapshot.active_assignments(project.id)
        seen: set[Section] = set()
        for flag in detect_arbitration(project, assignments, snapshot.judges, threshold):
            if flag.section in seen:
                continue
            seen.add(flag.section)
            tasks.append(
                ArbitrationTask(
                    project_id=project.id,
                    project_title=project.title,
                    category=project.category,
                    section=flag.section,
                    reason=flag.reason,
                    detail=flag.detail,
                )
            )
    return tasks
