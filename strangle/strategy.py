"""Iterative deepening under a wall-clock budget, and the public entry point."""

from __future__ import annotations

import logging
import time
from typing import Callable, Mapping, Optional

from . import config
from .brain import Brain, BrainResult, MemoCache
from .errors import DeadlineExceeded, SearchTimeoutError
from .game import Game, GameType
from .snapshot import Snapshot
from .types import Direction

logger = logging.getLogger(__name__)


def depth_cap(game_type: GameType, table: Optional[Mapping[int, int]] = None) -> int:
    """Deepest search worth attempting for a game type.

    A calibrated ``table`` (snake count -> depth) overrides the configured caps.
    """
    if game_type is GameType.TOO_MANY:
        return int(config.DEPTH_CAP_TOO_MANY)
    caps = dict(config.DEPTH_CAPS)
    if table:
        caps.update({int(k): int(v) for k, v in table.items()})
    return max(1, int(caps.get(game_type.value, config.DEPTH_CAP_TOO_MANY)))


def iterative_deepening(
    game: Game,
    deadline: float,
    max_depth: int,
    cache: Optional[MemoCache] = None,
    clock: Callable[[], float] = time.monotonic,
) -> BrainResult:
    """Search depth 1, 2, ... ``max_depth`` until ``deadline``; return the deepest completed result.

    An attempt interrupted by the deadline is discarded. Raises SearchTimeoutError when
    not even depth 1 completes.
    """
    cache = cache if cache is not None else MemoCache()
    best: Optional[BrainResult] = None

    for depth in range(1, max(1, int(max_depth)) + 1):
        brain = Brain(cache=cache, deadline=deadline, clock=clock)
        try:
            result = brain.search(game, depth)
        except DeadlineExceeded:
            logger.debug("depth %d ran out of time after %d nodes; discarded", depth, brain.nodes)
            break

        best = result
        logger.debug(
            "depth %d complete: %s (nodes=%d, memo=%d, hits=%d)",
            depth,
            result.direction,
            brain.nodes,
            len(cache),
            cache.hits,
        )
        if result.depth < depth:
            logger.debug("search bottomed out at depth %d; deeper search can't change it", result.depth)
            break

    if best is None:
        raise SearchTimeoutError("no search depth completed before the deadline")
    return best


class StrangleStrategy:
    """Picks a move for every incoming snapshot.

    ``depth_table`` is an optional calibrated snake-count -> depth mapping (see
    ``strangle.bench``).
    """

    def __init__(
        self,
        depth_table: Optional[Mapping[int, int]] = None,
        budget: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.depth_table = dict(depth_table) if depth_table else {}
        self.budget = float(config.MOVE_BUDGET_SECONDS if budget is None else budget)
        self.clock = clock
        self.last_result: Optional[BrainResult] = None

    def get_movement(self, snapshot: Snapshot, max_depth: Optional[int] = None) -> Direction:
        start = self.clock()
        deadline = start + self.budget

        game = Game.from_snapshot(snapshot)
        if max_depth is None:
            max_depth = depth_cap(game.game_type(), self.depth_table)

        cache = MemoCache()
        result = iterative_deepening(game, deadline, max_depth, cache=cache, clock=self.clock)
        self.last_result = result

        logger.info(
            "%s for %d snakes: depth %d/%d, memo %d (hits=%d) in %.1f ms",
            result.direction,
            len(game.snakes),
            result.depth,
            max_depth,
            len(cache),
            cache.hits,
            (self.clock() - start) * 1000.0,
        )
        if result.direction is None:
            raise RuntimeError("the root search did not pick a direction")
        return result.direction


def choose_direction(
    snapshot: Snapshot,
    budget: Optional[float] = None,
    max_depth: Optional[int] = None,
    depth_table: Optional[Mapping[int, int]] = None,
) -> Direction:
    """Return the move for ``snapshot.you``.

    Raises MalformedSnapshotError for unusable input and SearchTimeoutError if the
    budget is too small to finish even a one-turn search.
    """
    return StrangleStrategy(depth_table=depth_table, budget=budget).get_movement(snapshot, max_depth=max_depth)
