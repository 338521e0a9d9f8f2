"""Tests for the judging workflow: assignments, score submission and arbitration."""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient

from fair_scoring.scoring.records import Section, UserRole
from fair_scoring.scoring.rubric import get_section

PROJECT = {
    "title": "Solar Water Heater",
    "category": "Physics",
    "students": ["Amina Wanjiru"],
    "school": "Alpha School",
    "zone": "Karatina",
    "sub_county": "Mathira",
    "county": "Nyeri",
    "region": "Central",
}


def marks(section: Section, total: int) -> dict:
    """Fill the section's criteria in order until the marks add up to ``total``."""
    remaining = Decimal(total)
    breakdown = {}
    for criterion in get_section(section).criteria:
        if remaining <= 0:
            break
        given = min(criterion.max_score, remaining)
        breakdown[str(criterion.id)] = str(given)
        remaining -= given
    return breakdown


@pytest_asyncio.fixture
async def project(client: AsyncClient, patron) -> dict:
    _, patron_key = patron
    response = await client.post(
        "/api/v1/projects", headers={"X-API-Key": patron_key}, json=PROJECT
    )
    assert response.status_code == 201
    return response.json()


async def assign(client: AsyncClient, admin_key: str, project: dict, judge, section: Section) -> dict:
    response = await client.post(
        "/api/v1/assignments",
        headers={"X-API-Key": admin_key},
        json={"project_id": project["id"], "judge_id": str(judge.id), "section": section.value},
    )
    assert response.status_code == 201, response.text
    return response.json()


async def submit(client: AsyncClient, judge_key: str, assignment: dict, total: int, **extra):
    return await client.post(
        f"/api/v1/assignments/{assignment['id']}/submit",
        headers={"X-API-Key": judge_key},
        json={"score_breakdown": marks(Section(assignment["section"]), total), **extra},
    )


async def project_score(client: AsyncClient, api_key: str, project: dict) -> dict:
    response = await client.get(
        f"/api/v1/projects/{project['id']}/score", headers={"X-API-Key": api_key}
    )
    assert response.status_code == 200
    return response.json()


async def project_status(client: AsyncClient, api_key: str, project: dict) -> str:
    response = await client.get(
        f"/api/v1/projects/{project['id']}", headers={"X-API-Key": api_key}
    )
    return response.json()["status"]


@pytest.mark.asyncio
async def test_judging_workflow(client: AsyncClient, sub_county_admin, patron, judges, project):
    """Test assigning, starting and submitting both sections of a project."""
    _, admin_key = sub_county_admin
    _, patron_key = patron
    (judge_one, key_one), (judge_two, key_two) = judges

    part_a_one = await assign(client, admin_key, project, judge_one, Section.PART_A)
    part_a_two = await assign(client, admin_key, project, judge_two, Section.PART_A)
    part_bc = await assign(client, admin_key, project, judge_one, Section.PART_BC)
    assert part_a_one["status"] == "Not Started"
    assert await project_status(client, patron_key, project) == "Waiting for Judging"

    started = await client.post(
        f"/api/v1/assignments/{part_a_one['id']}/start", headers={"X-API-Key": key_one}
    )
    assert started.json()["status"] == "In Progress"
    assert await project_status(client, patron_key, project) == "In Progress"

    response = await submit(client, key_one, part_a_one, 20, comments="Tidy write-up")
    assert response.status_code == 200
    assert response.json()["score"] == "20.00"
    assert response.json()["status"] == "Completed"

    response = await submit(client, key_two, part_a_two, 23)
    assert response.status_code == 200
    response = await submit(client, key_one, part_bc, 40)
    assert response.status_code == 200

    score = await project_score(client, patron_key, project)
    assert score["score_a"] == "21.50"
    assert score["score_bc"] == "40.00"
    assert score["total_score"] == "61.50"
    assert score["is_fully_judged"] is True
    assert score["needs_arbitration"] is False
    assert await project_status(client, patron_key, project) == "Completed"

    breakdown = await client.get(
        f"/api/v1/projects/{project['id']}/score/breakdown", headers={"X-API-Key": patron_key}
    )
    assert breakdown.json()["score_b"] == "12.00"
    assert breakdown.json()["score_c"] == "28.00"
    assert breakdown.json()["judges_a"] == 2


@pytest.mark.asyncio
async def test_judge_lists_own_assignments(client: AsyncClient, sub_county_admin, judges, project):
    _, admin_key = sub_county_admin
    (judge_one, key_one), (judge_two, _) = judges
    await assign(client, admin_key, project, judge_one, Section.PART_A)
    await assign(client, admin_key, project, judge_two, Section.PART_BC)

    response = await client.get("/api/v1/assignments", headers={"X-API-Key": key_one})

    assert response.status_code == 200
    assert [a["section"] for a in response.json()] == ["Part A"]


@pytest.mark.asyncio
async def test_only_admins_assign(client: AsyncClient, judges, project):
    (judge_one, key_one), _ = judges

    response = await client.post(
        "/api/v1/assignments",
        headers={"X-API-Key": key_one},
        json={"project_id": project["id"], "judge_id": str(judge_one.id), "section": "Part A"},
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_assigning_a_patron_fails(client: AsyncClient, sub_county_admin, patron, project):
    _, admin_key = sub_county_admin
    patron_user, _ = patron

    response = await client.post(
        "/api/v1/assignments",
        headers={"X-API-Key": admin_key},
        json={"project_id": project["id"], "judge_id": str(patron_user.id), "section": "Part A"},
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_completed_assignment_is_locked(client: AsyncClient, sub_county_admin, judges, project):
    _, admin_key = sub_county_admin
    (judge_one, key_one), _ = judges
    assignment = await assign(client, admin_key, project, judge_one, Section.PART_A)

    assert (await submit(client, key_one, assignment, 20)).status_code == 200
    response = await submit(client, key_one, assignment, 25)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_cannot_submit_for_another_judge(client: AsyncClient, sub_county_admin, judges, project):
    _, admin_key = sub_county_admin
    (judge_one, _), (_, key_two) = judges
    assignment = await assign(client, admin_key, project, judge_one, Section.PART_A)

    response = await submit(client, key_two, assignment, 20)

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "breakdown",
    [
        {"1": "2.5"},  # above the criterion maximum
        {"1": "1.25"},  # not a multiple of the step
        {"16": "1"},  # Part B & C criterion on a Part A assignment
        {"99": "1"},  # unknown criterion
    ],
)
async def test_invalid_marks_rejected(
    client: AsyncClient, sub_county_admin, judges, project, breakdown
):
    _, admin_key = sub_county_admin
    (judge_one, key_one), _ = judges
    assignment = await assign(client, admin_key, project, judge_one, Section.PART_A)

    response = await client.post(
        f"/api/v1/assignments/{assignment['id']}/submit",
        headers={"X-API-Key": key_one},
        json={"score_breakdown": breakdown},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_reassigning_archives_previous_assignment(
    client: AsyncClient, sub_county_admin, judges, project
):
    """Test that a re-assignment replaces the judge's earlier score."""
    _, admin_key = sub_county_admin
    (judge_one, key_one), _ = judges
    first = await assign(client, admin_key, project, judge_one, Section.PART_A)
    assert (await submit(client, key_one, first, 10)).status_code == 200

    second = await assign(client, admin_key, project, judge_one, Section.PART_A)

    active = await client.get("/api/v1/assignments", headers={"X-API-Key": key_one})
    every = await client.get(
        "/api/v1/assignments",
        headers={"X-API-Key": key_one},
        params={"include_archived": True},
    )
    assert [a["id"] for a in active.json()] == [second["id"]]
    assert {a["state"] for a in every.json()} == {"active", "archived"}

    score = await project_score(client, key_one, project)
    assert score["score_a"] is None

    assert (await submit(client, key_one, second, 24)).status_code == 200
    score = await project_score(client, key_one, project)
    assert score["score_a"] == "24.00"


@pytest.mark.asyncio
async def test_conflict_of_interest_blocks_submission(
    client: AsyncClient, sub_county_admin, make_user, coordinator, project
):
    """Test that a judge from the project's school cannot score it."""
    _, admin_key = sub_county_admin
    _, coordinator_key = coordinator
    insider, insider_key = await make_user(UserRole.JUDGE, school="Alpha School")
    assignment = await assign(client, admin_key, project, insider, Section.PART_A)

    response = await submit(client, insider_key, assignment, 20)
    assert response.status_code == 403

    score = await project_score(client, admin_key, project)
    assert score["needs_arbitration"] is True

    tasks = await client.get("/api/v1/arbitration/tasks", headers={"X-API-Key": coordinator_key})
    assert [t["reason"] for t in tasks.json()] == ["conflict_of_interest"]


@pytest.mark.asyncio
async def test_variance_resolved_by_coordinator(
    client: AsyncClient, sub_county_admin, patron, judges, coordinator, project
):
    """Test that a coordinator's score replaces two disagreeing judges."""
    _, admin_key = sub_county_admin
    _, patron_key = patron
    _, coordinator_key = coordinator
    (judge_one, key_one), (judge_two, key_two) = judges

    first = await assign(client, admin_key, project, judge_one, Section.PART_A)
    second = await assign(client, admin_key, project, judge_two, Section.PART_A)
    await submit(client, key_one, first, 20)
    await submit(client, key_two, second, 27)

    score = await project_score(client, patron_key, project)
    assert score["needs_arbitration"] is True
    assert await project_status(client, patron_key, project) == "Review Pending"

    tasks = await client.get("/api/v1/arbitration/tasks", headers={"X-API-Key": coordinator_key})
    assert len(tasks.json()) == 1
    assert tasks.json()[0]["reason"] == "score_variance"
    assert tasks.json()[0]["section"] == "Part A"

    response = await client.post(
        "/api/v1/assignments/arbitrate",
        headers={"X-API-Key": coordinator_key},
        json={
            "project_id": project["id"],
            "section": "Part A",
            "score_breakdown": marks(Section.PART_A, 24),
            "comments": "Re-marked the write-up",
        },
    )
    assert response.status_code == 201
    assert response.json()["status"] == "Completed"

    score = await project_score(client, patron_key, project)
    assert score["score_a"] == "24.00"
    assert score["needs_arbitration"] is False

    tasks = await client.get("/api/v1/arbitration/tasks", headers={"X-API-Key": coordinator_key})
    assert tasks.json() == []


@pytest.mark.asyncio
async def test_arbitration_requires_category_coordinator(
    client: AsyncClient, make_user, judges, project
):
    _, chemistry_key = await make_user(UserRole.COORDINATOR, coordinated_category="Chemistry")
    _, judge_key = judges[0]
    payload = {
        "project_id": project["id"],
        "section": "Part A",
        "score_breakdown": marks(Section.PART_A, 20),
    }

    wrong_category = await client.post(
        "/api/v1/assignments/arbitrate", headers={"X-API-Key": chemistry_key}, json=payload
    )
    not_coordinator = await client.post(
        "/api/v1/assignments/arbitrate", headers={"X-API-Key": judge_key}, json=payload
    )

    assert wrong_category.status_code == 403
    assert not_coordinator.status_code == 403


@pytest.mark.asyncio
async def test_arbitration_tasks_forbidden_for_judges(client: AsyncClient, judges):
    _, judge_key = judges[0]

    response = await client.get("/api/v1/arbitration/tasks", headers={"X-API-Key": judge_key})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_patron_sees_judging_details(
    client: AsyncClient, sub_county_admin, patron, make_user, judges, project
):
    _, admin_key = sub_county_admin
    _, patron_key = patron
    _, stranger_key = await make_user(UserRole.PATRON, school="Beta School")
    (judge_one, key_one), _ = judges
    assignment = await assign(client, admin_key, project, judge_one, Section.PART_A)
    await submit(client, key_one, assignment, 18, recommendations="Add a control group")

    response = await client.get(
        f"/api/v1/projects/{project['id']}/judging-details", headers={"X-API-Key": patron_key}
    )
    assert response.status_code == 200
    details = response.json()
    assert len(details) == 1
    assert details[0]["judge_name"] == "Judge One"
    assert details[0]["score"] == "18.00"
    assert details[0]["recommendations"] == "Add a control group"

    response = await client.get(
        f"/api/v1/projects/{project['id']}/judging-details", headers={"X-API-Key": stranger_key}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_coordinator_cannot_be_assigned_as_judge(
    client: AsyncClient, sub_county_admin, patron, judges, make_user, project
):
    """Test that a coordinator cannot override two agreeing judges through a regular assignment."""
    _, admin_key = sub_county_admin
    _, patron_key = patron
    (judge_one, key_one), (judge_two, key_two) = judges
    chemistry, _ = await make_user(UserRole.COORDINATOR, coordinated_category="Chemistry")

    first = await assign(client, admin_key, project, judge_one, Section.PART_A)
    second = await assign(client, admin_key, project, judge_two, Section.PART_A)
    await submit(client, key_one, first, 20)
    await submit(client, key_two, second, 22)

    response = await client.post(
        "/api/v1/assignments",
        headers={"X-API-Key": admin_key},
        json={"project_id": project["id"], "judge_id": str(chemistry.id), "section": "Part A"},
    )

    assert response.status_code == 404
    score = await project_score(client, patron_key, project)
    assert score["score_a"] == "21.00"
    assert score["needs_arbitration"] is False


@pytest.mark.asyncio
async def test_arbitration_requires_flagged_section(
    client: AsyncClient, sub_county_admin, patron, judges, coordinator, project
):
    _, admin_key = sub_county_admin
    _, patron_key = patron
    _, coordinator_key = coordinator
    (judge_one, key_one), (judge_two, key_two) = judges
    first = await assign(client, admin_key, project, judge_one, Section.PART_A)
    second = await assign(client, admin_key, project, judge_two, Section.PART_A)
    await submit(client, key_one, first, 20)
    await submit(client, key_two, second, 22)

    response = await client.post(
        "/api/v1/assignments/arbitrate",
        headers={"X-API-Key": coordinator_key},
        json={
            "project_id": project["id"],
            "section": "Part A",
            "score_breakdown": marks(Section.PART_A, 4),
        },
    )

    assert response.status_code == 409
    score = await project_score(client, patron_key, project)
    assert score["score_a"] == "21.00"


@pytest.mark.asyncio
async def test_coordinator_can_revise_own_arbitration(
    client: AsyncClient, sub_county_admin, judges, coordinator, project
):
    _, admin_key = sub_county_admin
    _, coordinator_key = coordinator
    (judge_one, key_one), (judge_two, key_two) = judges
    first = await assign(client, admin_key, project, judge_one, Section.PART_A)
    second = await assign(client, admin_key, project, judge_two, Section.PART_A)
    await submit(client, key_one, first, 10)
    await submit(client, key_two, second, 20)

    for total in (15, 16):
        response = await client.post(
            "/api/v1/assignments/arbitrate",
            headers={"X-API-Key": coordinator_key},
            json={
                "project_id": project["id"],
                "section": "Part A",
                "score_breakdown": marks(Section.PART_A, total),
            },
        )
        assert response.status_code == 201

    score = await project_score(client, admin_key, project)
    assert score["score_a"] == "16.00"
