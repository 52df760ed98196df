"""
Animated walk over the valid matches.

States:
- IDLE: nothing scheduled
- RUNNING: sequence computed, task scheduled
- HIGHLIGHTING: a pair is lit and its connection drawn, dwell pending
- SETTLING: highlight removed, about to advance
- DONE: sequence exhausted

reset() returns to IDLE from any state, synchronously.
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional, Set, Tuple

from .errors import RenderTargetMissing
from .logger import get_logger
from .schema import RawMatch, is_valid_match, score_of
from .sink import FREELANCER, PROJECT, Point, PresentationSink, element_id
from .store import MatchStore

logger = get_logger()

DEFAULT_DWELL = 0.8


class State(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    HIGHLIGHTING = "highlighting"
    SETTLING = "settling"
    DONE = "done"


ACTIVE_STATES = {State.RUNNING, State.HIGHLIGHTING, State.SETTLING}


def animation_sequence(assignments) -> List[RawMatch]:
    """Valid pairs with a positive score, in input order."""
    return [a for a in assignments if is_valid_match(a) and score_of(a) > 0]


class AnimationController:
    """
    Start/stop controller for the pair-by-pair animation.

    Only one run exists at a time. start() while a run is active stops it
    instead (start/stop button), and restart() is what a viewport resize
    calls.
    """

    def __init__(
        self,
        store: MatchStore,
        sink: PresentationSink,
        dwell: float = DEFAULT_DWELL,
        sleep: Optional[Callable] = None,
    ):
        self.store = store
        self.sink = sink
        self.dwell = dwell
        self._sleep = sleep or asyncio.sleep
        self._state = State.IDLE
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._lit: Set[str] = set()
        self.sequence: List[RawMatch] = []
        self.step_index = -1

    @property
    def state(self) -> State:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state in ACTIVE_STATES

    def start(self) -> bool:
        """
        Begin a run, or stop the current one if a run is active.

        Returns True when a new run was scheduled.
        """
        if self.is_active:
            self.reset()
            return False

        self.reset()
        self.sequence = animation_sequence(self.store.current.assignments)
        self.step_index = -1
        self._running = True
        self._state = State.RUNNING
        logger.info("Starting visualization", matches=len(self.sequence))
        self._task = asyncio.get_running_loop().create_task(self._run())
        return True

    toggle = start

    def restart(self) -> None:
        """Rerun from the beginning if a run is active; otherwise do nothing."""
        if self.is_active:
            self.reset()
            self.start()

    def reset(self) -> None:
        """Cancel any pending step, drop highlights and clear the surface."""
        self._running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        for eid in list(self._lit):
            self.sink.set_highlight(eid, False)
        self._lit.clear()
        self.sink.clear_surface()
        self._state = State.IDLE

    async def wait(self) -> None:
        """Wait for the current run to finish or be cancelled."""
        if self._task is not None:
            await asyncio.wait({self._task})

    def _targets(self, match: RawMatch) -> Tuple[str, str, Point, Point]:
        f_id = element_id(FREELANCER, match["freelancer"]["id"])
        p_id = element_id(PROJECT, match["project"]["id"])
        start = self.sink.locate(f_id)
        if start is None:
            raise RenderTargetMissing(f_id)
        end = self.sink.locate(p_id)
        if end is None:
            raise RenderTargetMissing(p_id)
        return f_id, p_id, start, end

    def _highlight(self, ids, on: bool) -> None:
        for eid in ids:
            self.sink.set_highlight(eid, on)
            if on:
                self._lit.add(eid)
            else:
                self._lit.discard(eid)

    async def _run(self) -> None:
        for index, match in enumerate(self.sequence):
            if not self._running:
                return
            self.step_index = index

            try:
                f_id, p_id, start, end = self._targets(match)
            except RenderTargetMissing as e:
                logger.debug("Skipping match - elements not found", element=e.element_id)
                logger.record_animation_step(skipped=True)
                continue

            self._state = State.HIGHLIGHTING
            self._highlight((f_id, p_id), True)
            self.sink.draw_connection(start, end, score_of(match))
            logger.record_animation_step()

            await self._sleep(self.dwell)
            if not self._running:
                return

            self._state = State.SETTLING
            self._highlight((f_id, p_id), False)

        self._running = False
        self._state = State.DONE
        logger.debug("Visualization finished", steps=len(self.sequence))
