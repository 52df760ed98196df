"""
Presentation sink: where computed series and draw commands go.

The engine only talks to this interface. RecordingSink keeps everything in
memory; ConsoleSink does the same and also logs each command.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence, Set, Tuple

from .logger import get_logger
from .stats import score_color, score_opacity
from .store import MatchSet

logger = get_logger()

FREELANCER = "freelancer"
PROJECT = "project"

# Column spacing used by the default layout
COLUMN_GAP = 400.0
ROW_GAP = 60.0


@dataclass(frozen=True)
class Point:
    x: float
    y: float


def element_id(kind: str, entity_id) -> str:
    return f"{kind}:{entity_id}"


class PresentationSink(Protocol):
    def set_series(self, chart_id: str, labels: Sequence[str], values: Sequence[float]) -> None:
        ...

    def draw_connection(self, start: Point, end: Point, score: float) -> None:
        ...

    def set_highlight(self, element_id: str, on: bool) -> None:
        ...

    def clear_surface(self) -> None:
        ...

    def locate(self, element_id: str) -> Optional[Point]:
        ...


class RecordingSink:
    """In-memory sink holding the latest state of every chart and the canvas."""

    def __init__(self):
        self.series: Dict[str, Tuple[List[str], List[float]]] = {}
        self.connections: List[Tuple[Point, Point, float]] = []
        self.highlighted: Set[str] = set()
        self.targets: Dict[str, Point] = {}
        self.clear_count = 0

    def set_series(self, chart_id, labels, values):
        self.series[chart_id] = (list(labels), list(values))

    def draw_connection(self, start, end, score):
        self.connections.append((start, end, score))

    def set_highlight(self, element_id, on):
        if on:
            self.highlighted.add(element_id)
        else:
            self.highlighted.discard(element_id)

    def clear_surface(self):
        self.connections.clear()
        self.clear_count += 1

    def locate(self, element_id):
        return self.targets.get(element_id)

    def place(self, element_id: str, point: Point) -> None:
        self.targets[element_id] = point

    def remove(self, element_id: str) -> None:
        self.targets.pop(element_id, None)

    def layout(self, match_set: MatchSet) -> None:
        """Freelancers in the left column, projects in the right, one row each."""
        self.targets.clear()
        for row, freelancer in enumerate(match_set.freelancers):
            self.place(element_id(FREELANCER, freelancer.get("id")), Point(0.0, row * ROW_GAP))
        for row, project in enumerate(match_set.projects):
            self.place(element_id(PROJECT, project.get("id")), Point(COLUMN_GAP, row * ROW_GAP))


class ConsoleSink(RecordingSink):
    """RecordingSink that also reports every draw command through the logger."""

    def set_series(self, chart_id, labels, values):
        super().set_series(chart_id, labels, values)
        pairs = ", ".join(f"{label}={value}" for label, value in zip(labels, values))
        logger.info(f"[chart:{chart_id}] {pairs or '(empty)'}")

    def draw_connection(self, start, end, score):
        super().draw_connection(start, end, score)
        logger.info(
            f"[draw] ({start.x:g},{start.y:g}) -> ({end.x:g},{end.y:g})",
            score=score,
            color=score_color(score),
            opacity=score_opacity(score),
        )

    def set_highlight(self, element_id, on):
        super().set_highlight(element_id, on)
        logger.debug(f"[highlight] {element_id} {'on' if on else 'off'}")

    def clear_surface(self):
        super().clear_surface()
        logger.debug("[clear] surface cleared")
