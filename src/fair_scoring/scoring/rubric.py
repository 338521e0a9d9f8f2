"""The fixed score sheet judges mark projects against.

Part A (written communication) is worth 30 points. Part B & C is judged as a
single 50-point section, made of oral communication (B, 15 points) and
scientific thought (C, 35 points). The B/C tag on each criterion is only
used to group criteria for display and to split a combined score for
reports.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Mapping, Tuple

from .exceptions import InvalidScoreError
from .records import Section

TWO_PLACES = Decimal("0.01")

PART_B_MAX = Decimal("15")
PART_C_MAX = Decimal("35")


def quantize(value: Decimal) -> Decimal:
    """Round a score to two decimal places."""
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class JudgingCriterion:
    """A single line on the score sheet."""

    id: int
    text: str
    max_score: Decimal
    step: Decimal
    part: str  # "A", "B" or "C"


@dataclass(frozen=True)
class JudgingSection:
    """A block of criteria judged together by one assignment."""

    section: Section
    title: str
    total_max_score: Decimal
    criteria: Tuple[JudgingCriterion, ...]


def _criterion(id: int, text: str, max_score: str, step: str, part: str) -> JudgingCriterion:
    return JudgingCriterion(id, text, Decimal(max_score), Decimal(step), part)


SCORE_SHEET: Dict[Section, JudgingSection] = {
    Section.PART_A: JudgingSection(
        section=Section.PART_A,
        title="Part A: Written communication (write-up and posters)",
        total_max_score=Decimal("30"),
        criteria=(
            _criterion(1, "Write-up neatly and logically organized", "2", "0.5", "A"),
            _criterion(2, "Evidence of background research and introduction", "2", "0.5", "A"),
            _criterion(3, "Written language in write-up and on poster", "2", "0.5", "A"),
            _criterion(4, "Aim, hypothesis and objectives of project", "2", "0.5", "A"),
            _criterion(5, "Methods, materials or technologies used", "2", "0.5", "A"),
            _criterion(6, "Variables identified", "2", "0.5", "A"),
            _criterion(7, "Results", "2", "0.5", "A"),
            _criterion(8, "Analysis of results", "2", "0.5", "A"),
            _criterion(9, "Discussion of results", "2", "0.5", "A"),
            _criterion(10, "Future possibilities of research and recommendations", "2", "0.5", "A"),
            _criterion(11, "Conclusions", "2", "0.5", "A"),
            _criterion(12, "References in write-up", "2", "0.5", "A"),
            _criterion(13, "Acknowledgements", "2", "0.5", "A"),
            _criterion(14, "Display board", "2", "0.5", "A"),
            _criterion(15, "Project data file", "2", "0.5", "A"),
        ),
    ),
    Section.PART_BC: JudgingSection(
        section=Section.PART_BC,
        title="Part B & C: Oral communication and scientific thought",
        total_max_score=Decimal("50"),
        criteria=(
            _criterion(16, "Capture of interest", "1", "0.5", "B"),
            _criterion(17, "Enthusiasm and effort", "1", "0.5", "B"),
            _criterion(18, "Voice and tone", "1", "0.5", "B"),
            _criterion(19, "Self-confidence", "1", "0.5", "B"),
            _criterion(20, "Scientific language", "1", "0.5", "B"),
            _criterion(21, "Response to questions", "2", "0.5", "B"),
            _criterion(22, "Presentation of project", "2", "0.5", "B"),
            _criterion(23, "Limitations, weaknesses and gaps", "2", "0.5", "B"),
            _criterion(24, "Possible suggestions or expanding project", "2", "0.5", "B"),
            _criterion(25, "Authenticity", "2", "0.5", "B"),
            _criterion(26, "Statement of the problem", "2", "0.5", "C"),
            _criterion(27, "Introduction and background information", "2", "0.5", "C"),
            _criterion(28, "Application of scientific concepts to everyday life", "3", "1", "C"),
            _criterion(29, "Subject mastery", "3", "1", "C"),
            _criterion(30, "Literature review", "2", "0.5", "C"),
            _criterion(31, "Data", "3", "1", "C"),
            _criterion(32, "Variables", "2", "0.5", "C"),
            _criterion(33, "Statement of originality", "2", "0.5", "C"),
            _criterion(34, "Logical sequence: apparatus and requirements", "2", "0.5", "C"),
            _criterion(35, "Logical sequence: procedure and method", "2", "0.5", "C"),
            _criterion(36, "Logical sequence: correct illustrations", "3", "1", "C"),
            _criterion(37, "Linkage to emerging issues", "2", "0.5", "C"),
            _criterion(38, "Originality", "3", "1", "C"),
            _criterion(39, "Creativity", "2", "0.5", "C"),
            _criterion(40, "Skill and workmanship of the display", "2", "0.5", "C"),
        ),
    ),
}

_CRITERIA: Dict[int, JudgingCriterion] = {
    c.id: c for s in SCORE_SHEET.values() for c in s.criteria
}


def get_section(section: Section) -> JudgingSection:
    return SCORE_SHEET[Section(section)]


def section_max(section: Section) -> Decimal:
    """Maximum score a judge can award for a section."""
    return get_section(section).total_max_score


def get_criterion(criterion_id: int) -> JudgingCriterion:
    try:
        return _CRITERIA[int(criterion_id)]
    except KeyError:
        raise InvalidScoreError(f"Unknown criterion {criterion_id}", criterion_id) from None


def criteria_by_part(section: Section) -> Dict[str, List[JudgingCriterion]]:
    """Group a section's criteria under their A/B/C heading."""
    grouped: Dict[str, List[JudgingCriterion]] = {}
    for criterion in get_section(section).criteria:
        grouped.setdefault(criterion.part, []).append(criterion)
    return grouped


def validate_breakdown(section: Section, breakdown: Mapping[int, Decimal]) -> Decimal:
    """
    Check a judge's per-criterion marks and return their total.

    Every criterion must belong to the section, be within ``[0, max]`` and be
    a multiple of the criterion's step. Criteria left out count as zero.
    The total is then checked against the section maximum.

    Raises:
        InvalidScoreError: on the first offending criterion
    """
    allowed = {c.id for c in get_section(section).criteria}
    total = Decimal("0")
    for raw_id, raw_score in breakdown.items():
        criterion = get_criterion(raw_id)
        if criterion.id not in allowed:
            raise InvalidScoreError(
                f"Criterion {criterion.id} does not belong to {Section(section).value}",
                criterion.id,
            )
        score = Decimal(str(raw_score))
        if score < 0 or score > criterion.max_score:
            raise InvalidScoreError(
                f"Criterion {criterion.id} score {score} must be between 0 and {criterion.max_score}",
                criterion.id,
            )
        if score % criterion.step != 0:
            raise InvalidScoreError(
                f"Criterion {criterion.id} score {score} must be in steps of {criterion.step}",
                criterion.id,
            )
        total += score
    return validate_section_score(section, total)


def validate_section_score(section: Section, score: Decimal) -> Decimal:
    """Check a section total against the section's maximum."""
    score = Decimal(str(score))
    maximum = section_max(section)
    if score < 0 or score > maximum:
        raise InvalidScoreError(
            f"{Section(section).value} score {score} must be between 0 and {maximum}"
        )
    return quantize(score)


def split_bc(score: Decimal) -> Tuple[Decimal, Decimal]:
    """Split a combined Part B & C score into oral (B) and scientific (C) shares."""
    total = section_max(Section.PART_BC)
    score = Decimal(str(score))
    return score * PART_B_MAX / total, score * PART_C_MAX / total


# Competition categories and their registration-number codes
CATEGORY_CODES: Dict[str, str] = {
    "Agriculture": "AGR",
    "Behavioral Science": "BEH",
    "Biology and Biotechnology": "BIO",
    "Chemistry": "CHM",
    "Computer Science": "CSC",
    "Energy and Transportation": "ENT",
    "Engineering": "ENG",
    "Environmental Science and Management": "EVS",
    "Food Technology, Textiles & Home Economics": "FTH",
    "Mathematical Science": "MTH",
    "Physics": "PHY",
    "Robotics": "RBT",
    "Technology and Applied Technology": "TEC",
}

VALID_CATEGORIES = sorted(CATEGORY_CODES)


def school_initials(school: str) -> str:
    """Initial letters of a school's name, e.g. 'Kenya High School' -> 'KHS'."""
    words = [w for w in school.replace("-", " ").split() if w[:1].isalnum()]
    return "".join(w[0] for w in words).upper() or "SCH"


def registration_number(category: str, school: str, year: int, sequence: int) -> str:
    """Build a project registration number such as ``PHY-2026-KHS-1``."""
    code = CATEGORY_CODES.get(category, "GEN")
    return f"{code}-{year}-{school_initials(school)}-{sequence}"
