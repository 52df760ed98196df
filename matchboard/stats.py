"""
Aggregate series derived from a MatchSet.

All functions are pure: they read the set and return new values.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List

from .schema import experience_of, is_valid_match, score_of, skill_list
from .store import MatchSet

QUALITY_LABELS = ["Excellent (80-100%)", "Good (60-79%)", "Fair (40-59%)", "Poor (<40%)"]
QUALITY_COLORS = ["#2ecc71", "#3498db", "#f1c40f", "#e74c3c"]

EXCELLENT, GOOD, FAIR, POOR = range(4)

# Score a valid pair needs to count towards the success rate
MATCHED_THRESHOLD = 60


@dataclass(frozen=True)
class Series:
    chart_id: str
    labels: List[str]
    values: List[float]


@dataclass(frozen=True)
class Summary:
    total_freelancers: int
    total_projects: int
    matched_pairs: int
    success_rate: float
    valid_matches: int
    total_matches: int


def score_color(score: float) -> str:
    if score >= 80:
        return QUALITY_COLORS[EXCELLENT]
    if score >= 60:
        return QUALITY_COLORS[GOOD]
    if score >= 40:
        return QUALITY_COLORS[FAIR]
    return QUALITY_COLORS[POOR]


def score_opacity(score: float) -> float:
    return max(0.0, min(score / 100, 1.0))


def skill_histogram(match_set: MatchSet) -> Dict[str, int]:
    """Count every skill string across freelancers, compared exactly."""
    counts: Dict[str, int] = {}
    for freelancer in match_set.freelancers:
        for skill in skill_list(freelancer):
            counts[skill] = counts.get(skill, 0) + 1
    return counts


def experience_histogram(match_set: MatchSet) -> Dict[Any, int]:
    counts: Dict[Any, int] = {}
    for freelancer in match_set.freelancers:
        exp = experience_of(freelancer)
        counts[exp] = counts.get(exp, 0) + 1
    return counts


def quality_bucket(assignment: Any) -> int:
    """Bucket index for one assignment; invalid pairs are always Poor."""
    if not is_valid_match(assignment):
        return POOR
    score = score_of(assignment)
    if score >= 80:
        return EXCELLENT
    if score >= 60:
        return GOOD
    if score >= 40:
        return FAIR
    return POOR


def quality_buckets(match_set: MatchSet) -> List[int]:
    """
    Excellent/Good/Fair/Poor counts over every assignment.

    The surplus of entities on the longer side is also charged to Poor,
    even when those entities never appear in an assignment.
    """
    counts = [0, 0, 0, 0]
    for assignment in match_set.assignments:
        counts[quality_bucket(assignment)] += 1
    counts[POOR] += abs(len(match_set.freelancers) - len(match_set.projects))
    return counts


def matched_pairs(match_set: MatchSet) -> int:
    return sum(
        1 for a in match_set.assignments
        if is_valid_match(a) and score_of(a) >= MATCHED_THRESHOLD
    )


def success_rate(match_set: MatchSet) -> float:
    """Matched pairs over the shorter side, as a percentage with one decimal."""
    project_count = len(match_set.projects)
    denominator = min(project_count, len(match_set.freelancers))
    if project_count == 0 or denominator == 0:
        return 0.0
    rate = Decimal(matched_pairs(match_set)) / Decimal(denominator) * 100
    # Ties round up: 12.25 -> 12.3
    return float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def summarize(match_set: MatchSet) -> Summary:
    return Summary(
        total_freelancers=len(match_set.freelancers),
        total_projects=len(match_set.projects),
        matched_pairs=matched_pairs(match_set),
        success_rate=success_rate(match_set),
        valid_matches=match_set.valid_count,
        total_matches=match_set.total,
    )


def chart_series(match_set: MatchSet) -> List[Series]:
    """The three dashboard charts, ready for a sink's set_series."""
    skills = skill_histogram(match_set)
    experience = experience_histogram(match_set)
    return [
        Series("skills", list(skills.keys()), list(skills.values())),
        Series(
            "experience",
            [f"{exp} years" for exp in experience.keys()],
            list(experience.values()),
        ),
        Series("quality", list(QUALITY_LABELS), quality_buckets(match_set)),
    ]
