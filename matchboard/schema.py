from typing import Any, Dict, List, Optional

from .errors import FormatError

RawMatch = Dict[str, Any]
Entity = Dict[str, Any]


def _is_non_empty_id(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip() != ""
    # The scoring backend sends integer ids; 0 is never a real id
    return isinstance(v, (int, float)) and not isinstance(v, bool) and v != 0


def side(match: Any, name: str) -> Optional[Entity]:
    """Return one side of a raw match if it is an entity-shaped dict."""
    if not isinstance(match, dict):
        return None
    value = match.get(name)
    return value if isinstance(value, dict) else None


def has_identity(entity: Optional[Entity]) -> bool:
    return entity is not None and _is_non_empty_id(entity.get("id"))


def is_valid_match(match: Any) -> bool:
    """Both sides present and identified."""
    return has_identity(side(match, "freelancer")) and has_identity(side(match, "project"))


def score_of(match: Any) -> float:
    """Numeric score of a raw match; anything missing or non-numeric is 0."""
    if not isinstance(match, dict):
        return 0
    score = match.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return 0
    return score


def skill_list(entity: Entity, key: str = "skills") -> List[str]:
    """String entries of a skills field; anything that is not a list counts as no skills."""
    value = entity.get(key)
    if not isinstance(value, list):
        return []
    return [s for s in value if isinstance(s, str)]


def experience_of(entity: Entity) -> float:
    exp = entity.get("experience")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return 0
    return exp


def extract_matches(payload: Any) -> List[RawMatch]:
    """
    Pull the raw match list out of a decoded /matches body.

    Raises FormatError when the body is not an object or has no
    `matches` array. Individual records are not validated here.
    """
    if not isinstance(payload, dict):
        raise FormatError("Invalid data format received from server")
    matches = payload.get("matches")
    if not isinstance(matches, list):
        raise FormatError("Invalid data format received from server")
    return matches


def validate_match(match: Any) -> List[str]:
    """
    Returns a list of validation messages for one raw match.
    Empty list means the match can be rendered.
    """
    errors: List[str] = []
    if not isinstance(match, dict):
        return ["Match must be an object"]

    for name in ("freelancer", "project"):
        entity = side(match, name)
        if entity is None:
            errors.append(f"Missing {name}")
        elif not has_identity(entity):
            errors.append(f"Field '{name}.id' must be a non-empty string")

    if "score" in match and score_of(match) != match["score"]:
        errors.append("Field 'score' must be a number")
    elif not 0 <= score_of(match) <= 100:
        errors.append("Field 'score' must be within 0-100")

    return errors
