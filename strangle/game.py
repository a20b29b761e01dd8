"""Game state and the one-turn simulator."""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from itertools import combinations
from typing import Deque, Dict, FrozenSet, Hashable, Iterable, List, Mapping, Optional, Set, Tuple

from . import config
from .errors import MalformedSnapshotError, MissingMoveError
from .rules import legal_directions
from .snapshot import Snapshot
from .types import Board, Coord, Direction

logger = logging.getLogger(__name__)

ME = 0


class Death(Enum):
    NORMAL = "normal"
    # Self lost an equal-length head-on; the rival is assumed to survive.
    SACRIFICE = "sacrifice"


class GameType(Enum):
    SOLO = 1
    DUEL = 2
    TRIPLE = 3
    QUADRUPLE = 4
    TOO_MANY = 5


class Snake:
    """One competitor. ``slot`` is positional and stable for the life of a search."""

    __slots__ = ("slot", "body", "health")

    def __init__(self, slot: int, body: Iterable[Coord], health: int) -> None:
        self.slot = slot
        self.body: Deque[Coord] = deque(body)
        self.health = int(health)

    @property
    def head(self) -> Coord:
        return self.body[0]

    @property
    def tail(self) -> Coord:
        return self.body[-1]

    @property
    def length(self) -> int:
        return len(self.body)

    def possible_directions(self, board: Board) -> List[Direction]:
        return legal_directions(self.body, board)

    def copy(self) -> "Snake":
        return Snake(self.slot, self.body, self.health)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snake):
            return NotImplemented
        return self.slot == other.slot

    def __hash__(self) -> int:
        return hash(self.slot)

    def __repr__(self) -> str:
        return f"Snake(slot={self.slot}, health={self.health}, body={list(self.body)})"


class Game:
    """Everything the simulator needs about one turn.

    ``previous_snakes`` / ``previous_food`` keep the pre-step state of the turn that
    produced this game (empty for a game built from a snapshot).
    """

    def __init__(
        self,
        snakes: List[Snake],
        food: Iterable[Coord],
        board: Board,
        hazards: Iterable[Coord] = (),
        multisnake: Optional[bool] = None,
    ) -> None:
        self.snakes = snakes
        self.food: FrozenSet[Coord] = frozenset(food)
        self.hazards: FrozenSet[Coord] = frozenset(hazards)
        self.board = board
        self.multisnake = len(snakes) > 1 if multisnake is None else bool(multisnake)
        self.previous_snakes: List[Snake] = []
        self.previous_food: FrozenSet[Coord] = frozenset()

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "Game":
        """Build the search state, moving ``snapshot.you`` into slot 0."""
        width, height = int(snapshot.width), int(snapshot.height)
        if width <= 0 or height <= 0:
            raise MalformedSnapshotError(f"board must be at least 1x1, got {width}x{height}")
        if width > config.MAX_BOARD_DIMENSION or height > config.MAX_BOARD_DIMENSION:
            raise MalformedSnapshotError(
                f"board {width}x{height} exceeds the {config.MAX_BOARD_DIMENSION} cell limit"
            )

        states = list(snapshot.snakes)
        you_idx = next((i for i, s in enumerate(states) if s.id == snapshot.you), None)
        if you_idx is None:
            raise MalformedSnapshotError(f"you ({snapshot.you!r}) don't seem to be in the snapshot")
        for state in states:
            if not state.body:
                raise MalformedSnapshotError(f"snake {state.id!r} has an empty body")

        states[ME], states[you_idx] = states[you_idx], states[ME]
        snakes = [Snake(slot, state.body, state.health) for slot, state in enumerate(states)]
        return cls(snakes, snapshot.food, Board(width, height), snapshot.hazards)

    # ----------------------------
    # Queries
    # ----------------------------
    def snake(self, slot: int) -> Optional[Snake]:
        for snake in self.snakes:
            if snake.slot == slot:
                return snake
        return None

    def is_alive(self, slot: int) -> bool:
        return self.snake(slot) is not None

    def game_type(self) -> GameType:
        if not self.snakes:
            raise RuntimeError("no game can have zero snakes")
        count = len(self.snakes)
        if count >= GameType.TOO_MANY.value:
            return GameType.TOO_MANY
        return GameType(count)

    def occupied(self) -> Set[Coord]:
        """Cells that a head may not enter: every body segment plus every hazard."""
        cells: Set[Coord] = set(self.hazards)
        for snake in self.snakes:
            cells.update(snake.body)
        return cells

    def fingerprint(self) -> Hashable:
        """Canonical content key for the memo cache."""
        return (
            tuple((s.slot, s.health, tuple(s.body)) for s in self.snakes),
            self.food,
            self.hazards,
        )

    def render(self) -> str:
        """ASCII view, top row first: heads are digits, bodies '#', food '*', hazards '~'."""
        cells: Dict[Coord, str] = {c: "~" for c in self.hazards}
        cells.update({c: "*" for c in self.food})
        for snake in self.snakes:
            for c in snake.body:
                cells[c] = "#"
        for snake in self.snakes:
            cells[snake.head] = str(snake.slot % 10)
        rows = []
        for y in reversed(range(self.board.height)):
            rows.append("".join(cells.get(Coord(x, y), ".") for x in range(self.board.width)))
        return "\n".join(rows)

    def __str__(self) -> str:
        return self.render()

    # ----------------------------
    # Simulation
    # ----------------------------
    def step(
        self, moves: Mapping[int, Direction], risk_averse: bool = True
    ) -> Tuple["Game", Dict[int, Death]]:
        """Advance every snake by one synchronized turn.

        Returns the resulting game and the classification of every snake eliminated
        during the turn. Raises MissingMoveError if a living snake has no move.

        With ``risk_averse`` (the search default) slot 0 always loses an equal-length
        head-on and the rival survives. Without it both die, as in a real game.
        """
        trace = config.TRACE_SIM
        for snake in self.snakes:
            if snake.slot not in moves:
                raise MissingMoveError(snake.slot)

        if trace:
            logger.debug(
                "simulating moves: %s",
                ", ".join(f"#{s.slot} {moves[s.slot]}" for s in self.snakes),
            )

        moved = [s.copy() for s in self.snakes]
        deaths: Dict[int, Death] = {}

        # 1. move
        for snake in moved:
            snake.body.appendleft(snake.head.neighbour(moves[snake.slot]))
            snake.body.pop()
            snake.health -= 1

        # 2. free space
        occupied: Set[Coord] = set(self.hazards)
        for snake in moved:
            occupied.update(snake.body[i] for i in range(1, len(snake.body)))

        # 3. starvation, walls, bodies and hazards
        survivors: List[Snake] = []
        for snake in moved:
            reason = None
            if snake.health <= 0:
                reason = f"starved at {snake.health} hp"
            elif not self.board.contains(snake.head):
                reason = f"went out of bounds at {snake.head}"
            elif snake.head in occupied:
                reason = f"ran into an occupied cell at {snake.head}"
            if reason is None:
                survivors.append(snake)
                continue
            deaths[snake.slot] = Death.NORMAL
            if trace:
                logger.debug("snake #%d %s", snake.slot, reason)

        # 4. head-to-head
        head_on: Dict[int, Death] = {}
        for a, b in combinations(survivors, 2):
            if a.head != b.head:
                continue
            if a.length != b.length:
                loser = a if a.length < b.length else b
                head_on[loser.slot] = Death.NORMAL
                if trace:
                    logger.debug("snake #%d lost a head-on against a longer snake", loser.slot)
            elif risk_averse and ME in (a.slot, b.slot):
                head_on.setdefault(ME, Death.SACRIFICE)
                if trace:
                    logger.debug("snake #%d gives up an equal head-on at %s", ME, a.head)
            else:
                head_on[a.slot] = Death.NORMAL
                head_on[b.slot] = Death.NORMAL
                if trace:
                    logger.debug("snakes #%d and #%d die in an equal head-on", a.slot, b.slot)
        deaths.update(head_on)
        survivors = [s for s in survivors if s.slot not in head_on]

        # 5. food
        food = set(self.food)
        for snake in survivors:
            if snake.head in food:
                food.discard(snake.head)
                snake.health = config.MAX_HEALTH
                snake.body.append(snake.tail)
                if trace:
                    logger.debug("snake #%d eats at %s", snake.slot, snake.head)

        # 6. food never spawns here; hazards stay put
        result = Game(survivors, food, self.board, self.hazards, multisnake=self.multisnake)
        result.previous_snakes = self.snakes
        result.previous_food = self.food

        if trace:
            logger.debug("turn done: %d -> %d snakes, %d food\n%s", len(self.snakes), len(survivors), len(food), result)
        return result, deaths
