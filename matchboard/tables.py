from typing import Any, Dict, List, Sequence, Tuple

from .schema import Entity, RawMatch, is_valid_match, score_of, skill_list
from .stats import score_color
from .store import MatchSet

FILTER_MODES = ("all", "matched", "unmatched")

# Score at which the list filter treats a pair as "matched"
FILTER_THRESHOLD = 80


def match_list(match_set: MatchSet) -> List[RawMatch]:
    """Valid assignments in received order."""
    return [a for a in match_set.assignments if is_valid_match(a)]


def matched_rows(match_set: MatchSet) -> List[Tuple[str, str, Any, str, Any]]:
    """Rows of the matched table, best score first."""
    ordered = sorted(match_list(match_set), key=score_of, reverse=True)
    rows = []
    for a in ordered:
        freelancer, project = a["freelancer"], a["project"]
        rows.append((
            freelancer.get("name", ""),
            project.get("name", ""),
            a.get("score", 0),
            ", ".join(skill_list(freelancer)),
            freelancer.get("experience", 0),
        ))
    return rows


def unmatched_freelancers(match_set: MatchSet) -> List[Entity]:
    """Freelancers that appear in no valid assignment."""
    matched_ids = {a["freelancer"]["id"] for a in match_list(match_set)}
    return [f for f in match_set.freelancers if f.get("id") not in matched_ids]


def skills_match(freelancer: Entity, project: Entity) -> Tuple[List[str], List[str]]:
    """
    Split a pair's skills into (matched, missing).

    matched: freelancer skills the project requires
    missing: required skills the freelancer lacks
    """
    have = skill_list(freelancer)
    required = skill_list(project, "required_skills")
    matched = [s for s in have if s in required]
    missing = [s for s in required if s not in have]
    return matched, missing


def _match_text(assignment: RawMatch) -> str:
    freelancer, project = assignment["freelancer"], assignment["project"]
    parts = [
        f"{freelancer.get('name', '')} ↔ {project.get('name', '')}",
        f"Score: {assignment.get('score', 0)}%",
        *skill_list(freelancer),
        *skill_list(project, "required_skills"),
    ]
    return " ".join(str(p) for p in parts).lower()


def search_matches(items: Sequence[RawMatch], term: str) -> List[RawMatch]:
    needle = term.strip().lower()
    if not needle:
        return list(items)
    return [a for a in items if needle in _match_text(a)]


def filter_matches(items: Sequence[RawMatch], mode: str = "all") -> List[RawMatch]:
    if mode not in FILTER_MODES:
        raise ValueError(f"Unknown filter mode: {mode!r}. Use one of {', '.join(FILTER_MODES)}")
    if mode == "matched":
        return [a for a in items if score_of(a) >= FILTER_THRESHOLD]
    if mode == "unmatched":
        return [a for a in items if score_of(a) < FILTER_THRESHOLD]
    return list(items)


def match_details(assignment: RawMatch) -> Dict[str, Any]:
    """Fields shown in the detail panel for one valid assignment."""
    if not is_valid_match(assignment):
        raise ValueError("Details are only available for matches with both sides present")
    freelancer, project = assignment["freelancer"], assignment["project"]
    matched, missing = skills_match(freelancer, project)
    score = score_of(assignment)
    return {
        "freelancer": {
            "name": freelancer.get("name") or "Unnamed",
            "skills": skill_list(freelancer),
            "experience": freelancer.get("experience", 0),
        },
        "project": {
            "name": project.get("name") or "Unnamed",
            "required_skills": skill_list(project, "required_skills"),
            "min_experience": project.get("min_experience", 0),
        },
        "score": score,
        "color": score_color(score),
        "matched_skills": matched,
        "missing_skills": missing,
    }
