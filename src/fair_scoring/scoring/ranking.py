"""Category ranks, competition points and geographic rollups."""

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar
from uuid import UUID

from ..config import Settings, get_settings
from .aggregation import ProjectScore, compute_project_score
from .records import ProjectRecord, Snapshot

T = TypeVar("T")


@dataclass(frozen=True)
class ProjectWithRank:
    """A fully judged project with its category rank and points."""

    project: ProjectRecord
    score: ProjectScore
    category_rank: int
    points: int

    @property
    def id(self) -> UUID:
        return self.project.id

    @property
    def category(self) -> str:
        return self.project.category

    @property
    def total_score(self) -> Decimal:
        return self.score.total_score


@dataclass(frozen=True)
class RankedEntity:
    """A school, zone, sub-county, county or region with its summed points."""

    name: str
    total_points: int
    rank: int
    parent: Optional[str] = None


@dataclass
class RankingData:
    """Everything the dashboards render about standings."""

    projects_with_points: List[ProjectWithRank] = field(default_factory=list)
    school_ranking: List[RankedEntity] = field(default_factory=list)
    zone_ranking: Dict[str, List[RankedEntity]] = field(default_factory=dict)
    sub_county_ranking: Dict[str, List[RankedEntity]] = field(default_factory=dict)
    county_ranking: Dict[str, List[RankedEntity]] = field(default_factory=dict)
    region_ranking: List[RankedEntity] = field(default_factory=list)

    def category(self, category: str) -> List[ProjectWithRank]:
        """Ranked projects of one category, best first."""
        return [p for p in self.projects_with_points if p.category == category]


def competition_rank(
    items: Iterable[T],
    key: Callable[[T], Decimal],
    order_key: Optional[Callable[[T], str]] = None,
) -> List[Tuple[T, int]]:
    """
    Rank items by ``key`` descending using standard competition ranking.

    Equal values share a rank and the next distinct value is ranked by its
    position, so values ``[90, 90, 85, 80]`` get ranks ``[1, 1, 3, 4]``.
    ``order_key`` only orders tied items for display.
    """
    ordered = sorted(
        items,
        key=lambda item: (-key(item), order_key(item) if order_key else ""),
    )
    ranked: List[Tuple[T, int]] = []
    for position, item in enumerate(ordered, 1):
        if ranked and key(item) == key(ranked[-1][0]):
            rank = ranked[-1][1]
        else:
            rank = position
        ranked.append((item, rank))
    return ranked


def rank_projects(
    scored: Iterable[Tuple[ProjectRecord, ProjectScore]],
    settings: Settings,
) -> List[ProjectWithRank]:
    """Rank scored projects within their categories and assign points."""
    by_category: Dict[str, List[Tuple[ProjectRecord, ProjectScore]]] = defaultdict(list)
    for project, score in scored:
        by_category[project.category].append((project, score))

    ranked: List[ProjectWithRank] = []
    for category in sorted(by_category):
        for (project, score), rank in competition_rank(
            by_category[category],
            key=lambda pair: pair[1].total_score,
            order_key=lambda pair: pair[0].title,
        ):
            ranked.append(
                ProjectWithRank(
                    project=project,
                    score=score,
                    category_rank=rank,
                    points=settings.points_for_rank(rank),
                )
            )
    return ranked


def _rank_totals(totals: Dict[str, int], parent: Optional[str] = None) -> List[RankedEntity]:
    return [
        RankedEntity(name=name, total_points=points, rank=rank, parent=parent)
        for (name, points), rank in competition_rank(
            totals.items(),
            key=lambda item: Decimal(item[1]),
            order_key=lambda item: item[0],
        )
    ]


def _rank_grouped(totals: Dict[Tuple[str, str], int]) -> Dict[str, List[RankedEntity]]:
    """Rank child entities among their siblings, keyed by parent name."""
    by_parent: Dict[str, Dict[str, int]] = defaultdict(dict)
    for (parent, name), points in totals.items():
        by_parent[parent][name] = points
    return {
        parent: _rank_totals(children, parent=parent)
        for parent, children in sorted(by_parent.items())
    }


def rollup(projects: Iterable[ProjectWithRank]) -> RankingData:
    """Sum points up the school, zone, sub-county, county, region hierarchy."""
    schools: Dict[str, int] = defaultdict(int)
    zones: Dict[Tuple[str, str], int] = defaultdict(int)
    sub_counties: Dict[Tuple[str, str], int] = defaultdict(int)
    counties: Dict[Tuple[str, str], int] = defaultdict(int)
    regions: Dict[str, int] = defaultdict(int)

    projects = list(projects)
    for ranked in projects:
        p = ranked.project
        schools[p.school] += ranked.points
        zones[(p.sub_county, p.zone)] += ranked.points
        sub_counties[(p.county, p.sub_county)] += ranked.points
        counties[(p.region, p.county)] += ranked.points
        regions[p.region] += ranked.points

    return RankingData(
        projects_with_points=projects,
        school_ranking=_rank_totals(schools),
        zone_ranking=_rank_grouped(zones),
        sub_county_ranking=_rank_grouped(sub_counties),
        county_ranking=_rank_grouped(counties),
        region_ranking=_rank_totals(regions),
    )


def compute_rankings_and_points(
    snapshot: Snapshot,
    settings: Optional[Settings] = None,
) -> RankingData:
    """
    Rank every fully judged project in the snapshot and roll up its points.

    Recomputed from scratch on each call; nothing is cached between calls.
    """
    settings = settings or get_settings()
    scored = []
    for project in snapshot.projects.values():
        score = compute_project_score(project.id, snapshot, settings)
        if score.is_fully_judged:
            scored.append((project, score))
    return rollup(rank_projects(scored, settings))
