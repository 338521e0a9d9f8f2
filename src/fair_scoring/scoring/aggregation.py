"""Aggregation of judges' section scores into a project score.

Each project is judged in two sections, Part A (out of 30) and Part B & C
(out of 50). The completed scores of a section are averaged; a completed
coordinator score, when present, is the only score that counts for its
section. A tie-break override replaces Part A verbatim.
"""

import statistics
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Mapping, Optional, Sequence
from uuid import UUID

from ..config import Settings, get_settings
from .arbitration import needs_arbitration
from .records import AssignmentRecord, JudgeRecord, Section, Snapshot
from .rubric import quantize, split_bc


@dataclass(frozen=True)
class ProjectScore:
    """Authoritative score of a project."""

    project_id: UUID
    score_a: Optional[Decimal]
    score_bc: Optional[Decimal]
    total_score: Decimal
    is_fully_judged: bool
    needs_arbitration: bool

    @classmethod
    def not_judged(cls, project_id: UUID) -> "ProjectScore":
        return cls(
            project_id=project_id,
            score_a=None,
            score_bc=None,
            total_score=Decimal("0.00"),
            is_fully_judged=False,
            needs_arbitration=False,
        )


@dataclass(frozen=True)
class ProjectScoreBreakdown:
    """Project score with Part B & C split into oral (B) and scientific (C)."""

    project_id: UUID
    score_a: Optional[Decimal]
    score_b: Optional[Decimal]
    score_c: Optional[Decimal]
    score_bc: Optional[Decimal]
    total_score: Decimal
    is_fully_judged: bool
    needs_arbitration: bool
    judges_a: int
    judges_bc: int


def counted_scores(
    category: str,
    section: Section,
    assignments: Sequence[AssignmentRecord],
    judges: Mapping[UUID, JudgeRecord],
) -> List[Decimal]:
    """Completed scores that count for a section.

    A score from the coordinator of the project's category supersedes
    everyone else's once submitted.
    """
    completed = [a for a in assignments if a.section == section and a.is_completed]
    coordinator_scores = [a.score for a in completed if judges[a.judge_id].arbitrates(category)]
    if coordinator_scores:
        return coordinator_scores
    return [a.score for a in completed]


def _mean(values: Sequence[Decimal]) -> Optional[Decimal]:
    if not values:
        return None
    return quantize(statistics.mean(values))


def _total(score_a: Optional[Decimal], score_bc: Optional[Decimal]) -> Decimal:
    return quantize((score_a or Decimal("0")) + (score_bc or Decimal("0")))


def compute_project_score(
    project_id: UUID,
    snapshot: Snapshot,
    settings: Optional[Settings] = None,
) -> ProjectScore:
    """
    Combine a project's completed judge assignments into its score.

    Args:
        project_id: Project to score
        snapshot: Projects, active assignments and judges to compute over
        settings: Supplies the variance threshold (defaults to app settings)

    Returns:
        The project's score. A project without any assignment yields a
        "not judged" score rather than an error.
    """
    settings = settings or get_settings()
    project = snapshot.project(project_id)
    assignments = snapshot.active_assignments(project_id)

    if not assignments:
        return ProjectScore.not_judged(project_id)

    if project.override_score_a is not None:
        score_a = quantize(project.override_score_a)
    else:
        score_a = _mean(counted_scores(project.category, Section.PART_A, assignments, snapshot.judges))
    score_bc = _mean(counted_scores(project.category, Section.PART_BC, assignments, snapshot.judges))

    return ProjectScore(
        project_id=project_id,
        score_a=score_a,
        score_bc=score_bc,
        total_score=_total(score_a, score_bc),
        is_fully_judged=score_a is not None and score_bc is not None,
        needs_arbitration=needs_arbitration(
            project, assignments, snapshot.judges, settings.variance_threshold
        ),
    )


def compute_project_score_breakdown(
    project_id: UUID,
    snapshot: Snapshot,
    settings: Optional[Settings] = None,
) -> ProjectScoreBreakdown:
    """
    Same as :func:`compute_project_score` with Part B & C split 15/35.

    Every counted Part B & C score is split proportionally before averaging,
    so B + C equals the averaged B & C score up to rounding. Used for
    reports only; ranking always uses :func:`compute_project_score`.
    """
    score = compute_project_score(project_id, snapshot, settings)
    project = snapshot.project(project_id)
    assignments = snapshot.active_assignments(project_id)

    bc_scores = counted_scores(project.category, Section.PART_BC, assignments, snapshot.judges)
    splits = [split_bc(s) for s in bc_scores]

    return ProjectScoreBreakdown(
        project_id=project_id,
        score_a=score.score_a,
        score_b=_mean([b for b, _ in splits]),
        score_c=_mean([c for _, c in splits]),
        score_bc=score.score_bc,
        total_score=score.total_score,
        is_fully_judged=score.is_fully_judged,
        needs_arbitration=score.needs_arbitration,
        judges_a=len(counted_scores(project.category, Section.PART_A, assignments, snapshot.judges)),
        judges_bc=len(bc_scores),
    )
