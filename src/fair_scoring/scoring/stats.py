"""Category-wide score statistics shown to patrons next to their own results."""

import statistics
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..config import Settings, get_settings
from .aggregation import compute_project_score
from .records import Snapshot
from .rubric import quantize


@dataclass(frozen=True)
class CategoryStats:
    """Spread of total scores among fully judged projects of a category."""

    category: str
    min: Decimal
    max: Decimal
    average: Decimal
    count: int


def category_stats(
    category: str,
    snapshot: Snapshot,
    settings: Optional[Settings] = None,
) -> Optional[CategoryStats]:
    """Min/max/average of a category's total scores, or None if nothing is judged."""
    settings = settings or get_settings()
    totals = []
    for project in snapshot.projects.values():
        if project.category != category:
            continue
        score = compute_project_score(project.id, snapshot, settings)
        if score.is_fully_judged:
            totals.append(score.total_score)

    if not totals:
        return None

    return CategoryStats(
        category=category,
        min=min(totals),
        max=max(totals),
        average=quantize(statistics.mean(totals)),
        count=len(totals),
    )
