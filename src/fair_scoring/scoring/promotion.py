"""Publishing a competition level: promotion of qualifiers, elimination of the rest.

An admin publishes the results of their own level within their own
geographic area. Publishing is only allowed once every active project in
that area is fully judged, none is waiting for arbitration and no tie
decides who takes one of the promotion slots. The top ranks of each
category then move up one level and everybody else is eliminated.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from ..config import Settings, get_settings
from .aggregation import compute_project_score
from .exceptions import InvalidScoreError
from .ranking import ProjectWithRank, compute_rankings_and_points
from .records import CompetitionLevel, ProjectRecord, Snapshot, UserRole
from .rubric import quantize


# Roles allowed to publish and the level each one runs
PUBLISHING_ROLES: Dict[UserRole, CompetitionLevel] = {
    UserRole.SUB_COUNTY_ADMIN: CompetitionLevel.SUB_COUNTY,
    UserRole.COUNTY_ADMIN: CompetitionLevel.COUNTY,
    UserRole.REGIONAL_ADMIN: CompetitionLevel.REGIONAL,
}


@dataclass(frozen=True)
class AdminScope:
    """The level and geographic area an admin is responsible for."""

    level: CompetitionLevel
    region: Optional[str] = None
    county: Optional[str] = None
    sub_county: Optional[str] = None

    def contains(self, project: ProjectRecord) -> bool:
        """True when the project lies inside this admin's area."""
        if self.region is not None and project.region != self.region:
            return False
        if self.county is not None and project.county != self.county:
            return False
        if self.sub_county is not None and project.sub_county != self.sub_county:
            return False
        return True

    def describe(self) -> str:
        area = self.sub_county or self.county or self.region or "all areas"
        return f"{self.level.value} level, {area}"


def scope_for_admin(
    role: UserRole,
    region: Optional[str] = None,
    county: Optional[str] = None,
    sub_county: Optional[str] = None,
) -> Optional[AdminScope]:
    """
    Build the publishing scope of an admin.

    Returns None for roles that cannot publish (national and super admins
    oversee but do not drive promotion).
    """
    level = PUBLISHING_ROLES.get(UserRole(role))
    if level is None:
        return None
    if level == CompetitionLevel.REGIONAL:
        return AdminScope(level=level, region=region)
    if level == CompetitionLevel.COUNTY:
        return AdminScope(level=level, region=region, county=county)
    return AdminScope(level=level, region=region, county=county, sub_county=sub_county)


@dataclass(frozen=True)
class Tie:
    """Projects sharing a score at a rank that decides promotion."""

    category: str
    total_score: Decimal
    rank: int
    project_ids: List[UUID]


@dataclass
class PublishResult:
    """Outcome of a publish attempt (or of a dry run)."""

    success: bool
    message: str
    level: Optional[CompetitionLevel] = None
    next_level: Optional[CompetitionLevel] = None
    promoted_ids: List[UUID] = field(default_factory=list)
    eliminated_ids: List[UUID] = field(default_factory=list)
    project_count: int = 0
    unjudged_count: int = 0
    arbitration_count: int = 0
    tied_categories: List[str] = field(default_factory=list)
    ties: List[Tie] = field(default_factory=list)

    @classmethod
    def rejected(cls, message: str, **kwargs) -> "PublishResult":
        return cls(success=False, message=message, **kwargs)


def find_blocking_ties(
    projects_with_points: Sequence[ProjectWithRank],
    slots: int = 4,
) -> List[Tie]:
    """
    Find ties that decide who takes a promotion slot.

    Projects are grouped by (category, total score); any group of more than
    one project whose shared rank is within ``slots`` is a blocking tie.
    """
    groups: Dict[tuple, List[ProjectWithRank]] = defaultdict(list)
    for ranked in projects_with_points:
        groups[(ranked.category, ranked.total_score)].append(ranked)

    ties: List[Tie] = []
    for (category, total), members in groups.items():
        rank = members[0].category_rank
        if len(members) > 1 and rank <= slots:
            ties.append(
                Tie(
                    category=category,
                    total_score=total,
                    rank=rank,
                    project_ids=[m.id for m in members],
                )
            )
    return sorted(ties, key=lambda t: (t.category, t.rank))


def projects_in_scope(scope: AdminScope, snapshot: Snapshot) -> List[ProjectRecord]:
    """Active (non-eliminated) projects at the scope's level inside its area."""
    return [
        p for p in snapshot.projects.values()
        if p.current_level == scope.level and not p.is_eliminated and scope.contains(p)
    ]


def plan_promotion(
    scope: AdminScope,
    snapshot: Snapshot,
    settings: Optional[Settings] = None,
) -> PublishResult:
    """
    Decide the outcome of publishing ``scope`` without changing anything.

    Preconditions are checked in order and the first failing one is
    reported. On success the result lists which projects advance and which
    are eliminated; applying it is the caller's job.
    """
    settings = settings or get_settings()
    candidates = projects_in_scope(scope, snapshot)
    next_level = scope.level.next_level()
    common = dict(level=scope.level, next_level=next_level, project_count=len(candidates))

    if not candidates:
        return PublishResult.rejected(
            f"No active projects to publish at {scope.describe()}.", **common
        )

    scores = {p.id: compute_project_score(p.id, snapshot, settings) for p in candidates}
    unjudged = [pid for pid, s in scores.items() if not s.is_fully_judged]
    in_arbitration = [pid for pid, s in scores.items() if s.needs_arbitration]

    if unjudged:
        return PublishResult.rejected(
            f"{len(unjudged)} project(s) are not fully judged yet.",
            unjudged_count=len(unjudged),
            arbitration_count=len(in_arbitration),
            **common,
        )
    if in_arbitration:
        return PublishResult.rejected(
            f"{len(in_arbitration)} project(s) are awaiting coordinator arbitration.",
            arbitration_count=len(in_arbitration),
            **common,
        )

    rankings = compute_rankings_and_points(
        snapshot.restricted_to(p.id for p in candidates), settings
    )
    ties = find_blocking_ties(rankings.projects_with_points, settings.promotion_slots)
    if ties:
        categories = sorted({t.category for t in ties})
        return PublishResult.rejected(
            "Unresolved ties for promotion places in: " + ", ".join(categories) + ".",
            tied_categories=categories,
            ties=ties,
            **common,
        )

    promoted = [
        r.id for r in rankings.projects_with_points
        if r.category_rank <= settings.promotion_slots
    ]
    eliminated = [
        r.id for r in rankings.projects_with_points
        if r.category_rank > settings.promotion_slots
    ]

    if next_level is None:
        message = (
            f"Final results published at {scope.describe()}: "
            f"{len(promoted)} finalist(s), {len(eliminated)} eliminated."
        )
    else:
        message = (
            f"Results published at {scope.describe()}: {len(promoted)} project(s) "
            f"promoted to {next_level.value}, {len(eliminated)} eliminated."
        )

    return PublishResult(
        success=True,
        message=message,
        promoted_ids=promoted,
        eliminated_ids=eliminated,
        **common,
    )


def validate_override_score(value: Decimal, maximum: Decimal = Decimal("30")) -> Decimal:
    """
    Validate a tie-break Part A score and round it to two decimals.

    Raises:
        InvalidScoreError: if the value is not a number between 0 and ``maximum``
    """
    try:
        score = Decimal(str(value))
    except ArithmeticError:
        raise InvalidScoreError(f"Score must be a number between 0 and {maximum}.") from None
    if not score.is_finite() or score < 0 or score > maximum:
        raise InvalidScoreError(f"Score must be a number between 0 and {maximum}.")
    return quantize(score)
