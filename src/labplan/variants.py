"""
Variant enumeration by re-execution.

Explores every combination of discrete decisions made inside a single-pass
computation, even when which decisions exist depends on earlier ones, and
without suspending or resuming the computation.

The computation is a callback taking ``decide``. It is simply run again,
end to end, once per combination. ``decide(name, limit)`` returns the value
in ``range(limit)`` the current run should take at that decision point.
Between runs a VariantTracker advances its decision list like a
mixed-radix odometer whose depth changes as branches come and go:

    decide("a", 2); decide("b", 3)
    -> [0, 0], [0, 1], [0, 2], [1, 0], [1, 1], [1, 2]

    a = decide("a", 2); if a == 1: decide("b", 2)
    -> [0], [1, 0], [1, 1]

The computation must be a pure function of its decisions: each run has to
ask for the known points in the same order with the same limits.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Tuple, TypeVar

from labplan.exceptions import DecisionProtocolError

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")
Decide = Callable[[str, int], int]


@dataclass
class DecisionPoint:
    name: str
    limit: int
    value: int = 0


class VariantTracker:
    """Decision state carried across runs of one enumeration. Not shareable."""

    def __init__(self):
        self.points: List[DecisionPoint] = []
        self.cursor = 0

    def decide(self, name: str, limit: int) -> int:
        if limit < 1:
            raise DecisionProtocolError(f"Decision point {name!r} has no options (limit {limit})")

        if self.cursor >= len(self.points):
            self.points.append(DecisionPoint(name=name, limit=limit))
            self.cursor = len(self.points)
            return 0

        point = self.points[self.cursor]
        if point.name != name:
            raise DecisionProtocolError(f"Variant decision point name mismatch ({name} != {point.name})")
        if point.limit != limit:
            raise DecisionProtocolError(
                f"Variant decision point limit mismatch for {name} ({limit} != {point.limit})"
            )
        self.cursor += 1
        return point.value

    def finalize(self) -> Tuple[List[int], bool]:
        """
        Close the current run and advance to the next combination.

        Returns:
            (decision values of the run just finished, whether enumeration is done)

        Raises:
            DecisionProtocolError: If the run skipped known decision points
        """
        if self.cursor != len(self.points):
            raise DecisionProtocolError(
                f"Not all decision points were evaluated ({self.cursor} of {len(self.points)})"
            )
        self.cursor = 0
        result = [p.value for p in self.points]

        # Borrow leftward: drop exhausted trailing digits, then bump the new last one
        while self.points and self.points[-1].value + 1 >= self.points[-1].limit:
            self.points.pop()
        if self.points:
            self.points[-1].value += 1
        return result, not self.points


def eval_variants(inner: Callable[[Decide], ResultT]) -> Iterator[Tuple[List[int], ResultT]]:
    """
    Run ``inner`` once per reachable decision combination.

    Yields ``(decisions, result)`` pairs lazily, in lexicographic order of
    the decision vectors. Stop iterating to abandon the search; nothing needs
    releasing.
    """
    tracker = VariantTracker()
    runs = 0
    while True:
        result = inner(tracker.decide)
        decisions, done = tracker.finalize()
        runs += 1
        yield decisions, result
        if done:
            logger.debug(f"Enumerated {runs} variants")
            return
