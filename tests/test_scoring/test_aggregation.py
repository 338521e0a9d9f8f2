"""Tests for combining judge assignments into a project score."""

from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

import pytest

from fair_scoring.scoring.aggregation import (
    compute_project_score,
    compute_project_score_breakdown,
)
from fair_scoring.scoring.exceptions import (
    OrphanAssignmentError,
    UnknownJudgeError,
    UnknownProjectError,
)
from fair_scoring.scoring.records import (
    AssignmentRecord,
    AssignmentState,
    AssignmentStatus,
    Section,
    Snapshot,
)


def test_scores_are_averaged_per_section(builder, settings):
    project = builder.project()
    builder.assign(project, Section.PART_A, "20")
    builder.assign(project, Section.PART_A, "22")
    builder.assign(project, Section.PART_BC, "40")
    builder.assign(project, Section.PART_BC, "41")

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a == Decimal("21.00")
    assert score.score_bc == Decimal("40.50")
    assert score.total_score == Decimal("61.50")
    assert score.is_fully_judged is True
    assert score.needs_arbitration is False


def test_single_score_used_as_is(builder, settings):
    project = builder.judged("18.5", "37")

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a == Decimal("18.50")
    assert score.score_bc == Decimal("37.00")
    assert score.total_score == Decimal("55.50")


def test_average_rounded_to_two_places(builder, settings):
    project = builder.project()
    builder.assign(project, Section.PART_A, "20")
    builder.assign(project, Section.PART_A, "21")
    builder.assign(project, Section.PART_A, "21")

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a == Decimal("20.67")


def test_only_completed_assignments_count(builder, settings):
    project = builder.project()
    builder.assign(project, Section.PART_A, "20")
    builder.assign(project, Section.PART_A, status=AssignmentStatus.IN_PROGRESS)
    builder.assign(project, Section.PART_BC)

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a == Decimal("20.00")
    assert score.score_bc is None
    assert score.is_fully_judged is False
    assert score.total_score == Decimal("20.00")


def test_archived_assignments_are_ignored(builder, settings):
    project = builder.project()
    builder.assign(project, Section.PART_A, "5", state=AssignmentState.ARCHIVED)
    builder.assign(project, Section.PART_A, "24")
    builder.assign(project, Section.PART_BC, "45")

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a == Decimal("24.00")
    assert score.total_score == Decimal("69.00")


def test_project_without_assignments_is_not_judged(builder, settings):
    project = builder.project()

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a is None
    assert score.score_bc is None
    assert score.total_score == Decimal("0.00")
    assert score.is_fully_judged is False
    assert score.needs_arbitration is False


def test_override_without_assignments_is_still_not_judged(builder, settings):
    project = builder.project(override_score_a=Decimal("25"))

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a is None
    assert score.is_fully_judged is False


def test_override_replaces_part_a(builder, settings):
    """The override is used verbatim whatever the judges scored."""
    project = builder.project(override_score_a=Decimal("25.55"))
    builder.assign(project, Section.PART_A, "10")
    builder.assign(project, Section.PART_A, "12")
    builder.assign(project, Section.PART_BC, "40")

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a == Decimal("25.55")
    assert score.total_score == Decimal("65.55")


def test_override_alone_completes_part_a(builder, settings):
    project = builder.project(override_score_a=Decimal("0"))
    builder.assign(project, Section.PART_BC, "40")

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a == Decimal("0.00")
    assert score.is_fully_judged is True
    assert score.total_score == Decimal("40.00")


def test_override_changes_total_compared_to_judges(builder, settings):
    project = builder.judged("20", "40")
    before = compute_project_score(project.id, builder.snapshot(), settings)

    builder.projects[project.id] = replace(project, override_score_a=Decimal("21.25"))
    after = compute_project_score(project.id, builder.snapshot(), settings)

    assert before.total_score == Decimal("60.00")
    assert after.score_a == Decimal("21.25")
    assert after.total_score == Decimal("61.25")


def test_compute_is_idempotent(builder, settings):
    project = builder.project()
    builder.assign(project, Section.PART_A, "10")
    builder.assign(project, Section.PART_A, "17")
    builder.assign(project, Section.PART_BC, "33.5")
    snapshot = builder.snapshot()

    first = compute_project_score(project.id, snapshot, settings)
    second = compute_project_score(project.id, snapshot, settings)

    assert first == second


def test_coordinator_score_is_authoritative(builder, settings):
    """Once a coordinator has scored a section, the other judges' scores stop counting."""
    project = builder.project()
    builder.assign(project, Section.PART_A, "10")
    builder.assign(project, Section.PART_A, "20")
    builder.assign(project, Section.PART_A, "18", judge=builder.judge("Coordinator", coordinates="Physics"))
    builder.assign(project, Section.PART_BC, "40")

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a == Decimal("18.00")
    assert score.needs_arbitration is False


def test_coordinator_of_another_category_is_not_authoritative(builder, settings):
    """A Chemistry coordinator's score on a Physics project is averaged like any other."""
    project = builder.project(category="Physics")
    builder.assign(project, Section.PART_A, "20")
    builder.assign(project, Section.PART_A, "22")
    builder.assign(project, Section.PART_A, "5", judge=builder.judge("Chemistry", coordinates="Chemistry"))
    builder.assign(project, Section.PART_BC, "40")

    score = compute_project_score(project.id, builder.snapshot(), settings)

    assert score.score_a == Decimal("15.67")
    assert score.needs_arbitration is False


def test_breakdown_splits_bc(builder, settings):
    project = builder.project()
    builder.assign(project, Section.PART_A, "20")
    builder.assign(project, Section.PART_BC, "40")
    builder.assign(project, Section.PART_BC, "30")

    breakdown = compute_project_score_breakdown(project.id, builder.snapshot(), settings)

    assert breakdown.score_bc == Decimal("35.00")
    assert breakdown.score_b == Decimal("10.50")
    assert breakdown.score_c == Decimal("24.50")
    assert breakdown.total_score == Decimal("55.00")
    assert breakdown.judges_a == 1
    assert breakdown.judges_bc == 2


def test_breakdown_of_unjudged_project(builder, settings):
    project = builder.project()

    breakdown = compute_project_score_breakdown(project.id, builder.snapshot(), settings)

    assert breakdown.score_b is None
    assert breakdown.score_c is None
    assert breakdown.judges_bc == 0


def test_unknown_project_fails_loudly(builder, settings):
    with pytest.raises(UnknownProjectError):
        compute_project_score(uuid4(), builder.snapshot(), settings)


def test_orphan_assignment_fails_loudly(builder):
    judge = builder.judge()
    orphan = AssignmentRecord(
        project_id=uuid4(),
        judge_id=judge.id,
        section=Section.PART_A,
        status=AssignmentStatus.COMPLETED,
        score=Decimal("10"),
    )

    with pytest.raises(OrphanAssignmentError):
        Snapshot(projects=[], assignments=[orphan], judges=[judge])


def test_assignment_with_unknown_judge_fails_loudly(builder):
    project = builder.project()
    stray = AssignmentRecord(
        project_id=project.id,
        judge_id=uuid4(),
        section=Section.PART_A,
    )

    with pytest.raises(UnknownJudgeError):
        Snapshot(projects=[project], assignments=[stray], judges=[])


def test_archived_orphan_is_not_an_integrity_error(builder):
    """Archived assignments never reach the integrity checks."""
    judge = builder.judge()
    archived = AssignmentRecord(
        project_id=uuid4(),
        judge_id=judge.id,
        section=Section.PART_A,
        state=AssignmentState.ARCHIVED,
    )

    snapshot = Snapshot(projects=[], assignments=[archived], judges=[judge])

    assert snapshot.all_active_assignments() == []
