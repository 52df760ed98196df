"""
Match store: deduplicated entities plus the valid and raw match lists.

The store is rebuilt wholesale from each successful fetch and swapped in
as one immutable MatchSet, so readers never see a half-built store.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .logger import get_logger
from .schema import Entity, RawMatch, is_valid_match, side, validate_match

logger = get_logger()


@dataclass(frozen=True)
class MatchSet:
    """
    One published snapshot.

    raw holds every record as received; assignments is the valid subset in
    the same order, which is what charts, tables and the animation read.
    """

    freelancers: Tuple[Entity, ...] = ()
    projects: Tuple[Entity, ...] = ()
    assignments: Tuple[RawMatch, ...] = ()
    raw: Tuple[RawMatch, ...] = ()
    generation: int = 0

    @property
    def total(self) -> int:
        return len(self.raw)

    @property
    def valid_count(self) -> int:
        return len(self.assignments)


def _merge(index: Dict[Any, Entity], entity: Optional[Entity]) -> None:
    # Last seen wins; dict keeps the first-seen position of the id
    if entity is not None:
        index[entity.get("id")] = entity


def rebuild(raw_matches: Sequence[Any], generation: int = 0) -> MatchSet:
    """
    Build a fresh MatchSet from the raw /matches list.

    Args:
        raw_matches: Records as decoded from the backend, valid or not
        generation: Load generation this set belongs to

    Returns:
        MatchSet with deduplicated freelancers/projects, valid assignments
        and every raw record
    """
    freelancers: Dict[Any, Entity] = {}
    projects: Dict[Any, Entity] = {}
    raw: List[RawMatch] = []

    for match in raw_matches:
        _merge(freelancers, side(match, "freelancer"))
        _merge(projects, side(match, "project"))
        raw.append(match if isinstance(match, dict) else {"freelancer": None, "project": None})
        if not is_valid_match(match):
            logger.debug("Excluding invalid match", errors=validate_match(match))

    match_set = MatchSet(
        freelancers=tuple(freelancers.values()),
        projects=tuple(projects.values()),
        assignments=tuple(m for m in raw if is_valid_match(m)),
        raw=tuple(raw),
        generation=generation,
    )

    logger.info(
        f"Found {match_set.valid_count} valid matches out of {match_set.total} total",
        freelancers=len(match_set.freelancers),
        projects=len(match_set.projects),
        generation=generation,
    )
    return match_set


class MatchStore:
    """
    Owner of the current MatchSet.

    Loads take a generation token up front; a set built from an older
    token than the one already published is rejected.
    """

    def __init__(self):
        self._current = MatchSet()
        self._issued = 0
        self._listeners: List[Callable[[MatchSet], None]] = []

    @property
    def current(self) -> MatchSet:
        return self._current

    @property
    def generation(self) -> int:
        return self._current.generation

    def next_generation(self) -> int:
        self._issued += 1
        return self._issued

    def subscribe(self, callback: Callable[[MatchSet], None]) -> None:
        self._listeners.append(callback)

    def publish(self, match_set: MatchSet) -> bool:
        """Swap in a rebuilt set. Returns False for a stale generation."""
        if match_set.generation < self._current.generation:
            logger.warning(
                "Discarding stale match set",
                generation=match_set.generation,
                current=self._current.generation,
            )
            return False
        self._current = match_set
        for callback in list(self._listeners):
            callback(match_set)
        return True
