"""
Dashboard orchestration.

Ties the fetcher, the match store, the statistics and the animation
controller to one presentation sink:

    refresh() -> fetch with retry -> rebuild -> publish -> charts on the sink

A newer refresh() cancels an older in-flight one, and the store rejects any
set built under an older generation token, so a slow superseded load can
never overwrite a newer result.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .animation import DEFAULT_DWELL, AnimationController
from .errors import FetchError, LoadFailure, classify_failure
from .fetcher import MatchFetcher
from .logger import get_logger
from .retry import RetryError
from .sink import PresentationSink
from .stats import chart_series, summarize
from .store import MatchSet, MatchStore, rebuild

logger = get_logger()

EMPTY_QUERY = "empty_query"
FOUND = "found"
NOT_FOUND = "not_found"
LOOKUP_ERROR = "error"


@dataclass
class SkillLookup:
    state: str
    skill: str
    freelancers: List[dict] = field(default_factory=list)
    message: str = ""


class Dashboard:
    def __init__(
        self,
        fetcher: MatchFetcher,
        sink: PresentationSink,
        store: Optional[MatchStore] = None,
        dwell: float = DEFAULT_DWELL,
        animation_sleep=None,
    ):
        self.fetcher = fetcher
        self.sink = sink
        self.store = store or MatchStore()
        self.animation = AnimationController(self.store, sink, dwell=dwell, sleep=animation_sleep)
        self.last_failure: Optional[LoadFailure] = None
        self._load_task: Optional[asyncio.Task] = None
        self.store.subscribe(self._render)

    @property
    def match_set(self) -> MatchSet:
        return self.store.current

    def _render(self, match_set: MatchSet) -> None:
        layout = getattr(self.sink, "layout", None)
        if layout is not None:
            layout(match_set)
        for series in chart_series(match_set):
            self.sink.set_series(series.chart_id, series.labels, series.values)
        summary = summarize(match_set)
        logger.info(
            "Processed data",
            freelancers=summary.total_freelancers,
            projects=summary.total_projects,
            assignments=summary.total_matches,
            success_rate=summary.success_rate,
        )

    async def refresh(self) -> Union[MatchSet, LoadFailure, None]:
        """
        Load matches and publish them.

        Returns the published MatchSet, a LoadFailure once retries are
        exhausted, or None when a newer refresh superseded this one.
        """
        if self._load_task is not None and not self._load_task.done():
            logger.info("Superseding in-flight load")
            self._load_task.cancel()

        generation = self.store.next_generation()
        task = asyncio.get_running_loop().create_task(self._load(generation))
        self._load_task = task
        try:
            return await task
        except asyncio.CancelledError:
            if task is not self._load_task:
                return None
            raise

    async def _load(self, generation: int) -> Union[MatchSet, LoadFailure]:
        logger.info("Starting data load...", generation=generation)
        try:
            raw = await self.fetcher.load_with_retry()
        except RetryError as e:
            failure = classify_failure(e.last_exception, e.attempts)
            self.last_failure = failure
            logger.error(
                "Error loading data",
                kind=failure.kind,
                attempts=failure.attempts,
                error=str(e.last_exception),
            )
            return failure

        match_set = rebuild(raw, generation=generation)
        if self.store.publish(match_set):
            self.last_failure = None
            logger.record_fetch_success(match_set.total, match_set.valid_count)
        return match_set

    def resize(self) -> None:
        """Viewport changed: a running animation starts over."""
        self.animation.restart()

    def toggle_animation(self) -> bool:
        return self.animation.toggle()

    async def search_skill(self, skill: str) -> SkillLookup:
        """Skill lookup pass-through; failures are reported, never retried."""
        skill = skill.strip()
        if not skill:
            return SkillLookup(EMPTY_QUERY, skill, message="Please enter a skill.")
        try:
            freelancers = await self.fetcher.lookup_skill_async(skill)
        except FetchError as e:
            logger.warning("Skill lookup failed", skill=skill, error=str(e))
            return SkillLookup(LOOKUP_ERROR, skill, message="Error searching for skill.")
        if not freelancers:
            return SkillLookup(NOT_FOUND, skill, message=f'No freelancers found with skill "{skill}".')
        return SkillLookup(
            FOUND,
            skill,
            freelancers=freelancers,
            message=f'Found {len(freelancers)} freelancer(s) with skill "{skill}".',
        )
