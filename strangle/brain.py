"""Multi-snake best-response tree search.

Every snake, at its own decision node, picks the direction that maximises its own
score; self (slot 0) does not assume the others play against it. One ply collects a
move from every living snake in slot order, then the turn is simulated.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Hashable, Mapping, Optional

from . import config
from .errors import DeadlineExceeded
from .game import ME, Death, Game
from .score_factors import ScoreFactors, evaluate
from .types import Direction

logger = logging.getLogger(__name__)

Scores = Dict[int, int]


class BrainResult:
    __slots__ = ("direction", "scores", "depth")

    def __init__(self, scores: Scores, direction: Optional[Direction] = None, depth: int = 0) -> None:
        self.scores = scores
        self.direction = direction
        self.depth = depth

    def __repr__(self) -> str:
        return f"BrainResult(direction={self.direction}, depth={self.depth}, scores={self.scores})"


class MemoCache:
    """Terminal score factors of survivors, keyed by ``Game.fingerprint()``.

    Not thread-safe; one cache serves one decision.
    """

    def __init__(self) -> None:
        self._entries: Dict[Hashable, Dict[int, ScoreFactors]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def factors(self, game: Game) -> Dict[int, ScoreFactors]:
        key = game.fingerprint()
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        cached = {snake.slot: evaluate(game, snake) for snake in game.snakes}
        self._entries[key] = cached
        return cached

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0


def _indent(depth: int, index: int) -> str:
    return "█" * (depth * 4 + index) + "▶ "


class Brain:
    """Runs one depth-limited search. ``deadline`` is in ``clock`` units."""

    def __init__(
        self,
        cache: Optional[MemoCache] = None,
        deadline: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cache = cache if cache is not None else MemoCache()
        self.deadline = deadline
        self.clock = clock
        self.nodes = 0
        self.deepest = 0
        self.trace = config.TRACE_SEARCH

    def search(self, game: Game, max_depth: int) -> BrainResult:
        """Search ``max_depth`` turns ahead from ``game`` for the snake in slot 0.

        ``result.depth`` is the deepest turn any branch reached; it is below
        ``max_depth`` only when every branch ended early (self dead or game decided).
        Raises DeadlineExceeded if the deadline passes mid-search.
        """
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self.nodes = 0
        self.deepest = 0
        result = self._search(game, 0, 0, max_depth, {})
        result.depth = self.deepest
        return result

    def _terminal_scores(self, game: Game, deaths: Mapping[int, Death], depth: int) -> Scores:
        factors = dict(self.cache.factors(game))
        for slot, death in deaths.items():
            factors[slot] = ScoreFactors.dead_snake(slot, death)
        if self.trace:
            for f in factors.values():
                logger.debug("%s  * %s", _indent(depth, 0), f.describe(depth))
        return {slot: f.calculate(depth) for slot, f in factors.items()}

    def _search(
        self,
        game: Game,
        index: int,
        depth: int,
        max_depth: int,
        moves: Dict[int, Direction],
    ) -> BrainResult:
        if self.deadline is not None and self.clock() >= self.deadline:
            raise DeadlineExceeded()
        self.nodes += 1
        align = _indent(depth, index) if self.trace else ""

        if index == ME and depth > 0:
            game, deaths = game.step(moves)
            moves = {}

            reason = None
            if not game.is_alive(ME):
                reason = "this has killed our snake"
            elif game.multisnake and len(game.snakes) <= 1:
                reason = "not enough snakes to continue multisnake game"
            elif depth >= max_depth:
                reason = f"search depth {max_depth} reached"

            if reason is not None:
                if self.trace:
                    logger.debug("%s%s, propagating up", align, reason)
                self.deepest = max(self.deepest, depth)
                return BrainResult(self._terminal_scores(game, deaths, depth))

        snake = game.snakes[index]
        if self.trace:
            logger.debug(
                "%ssnake #%d deciding on depth %d/%d (snakes: %s, pending moves: %s)",
                align,
                snake.slot,
                depth,
                max_depth,
                [s.slot for s in game.snakes],
                {slot: str(d) for slot, d in moves.items()},
            )

        next_index = (index + 1) % len(game.snakes)
        next_depth = depth + 1 if next_index == ME else depth

        best_scores: Optional[Scores] = None
        best_direction: Optional[Direction] = None
        for direction in snake.possible_directions(game.board):
            ply = dict(moves)
            ply[snake.slot] = direction
            result = self._search(game, next_index, next_depth, max_depth, ply)

            scores = result.scores
            if snake.slot not in scores:
                scores = dict(scores)
                scores[snake.slot] = ScoreFactors.dead_snake(snake.slot).calculate(depth)
            own = scores[snake.slot]

            if best_scores is None or own > best_scores[snake.slot]:
                if self.trace:
                    logger.debug("%ssnake #%d prefers %s (%d)", align, snake.slot, direction, own)
                best_scores = scores
                best_direction = direction

        if best_scores is None:
            raise RuntimeError(f"snake #{snake.slot} had no direction to try")
        return BrainResult(best_scores, best_direction)
