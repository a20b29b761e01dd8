from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Optional, Tuple


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    def __str__(self) -> str:
        return self.value

    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @staticmethod
    def between(start: "Coord", end: "Coord") -> Optional["Direction"]:
        """Classify the displacement start -> end by its dominant axis.

        Exact diagonals favour the vertical axis; identical coords give None.
        """
        dx = end.x - start.x
        dy = end.y - start.y
        if abs(dx) > abs(dy):
            return Direction.RIGHT if dx > 0 else Direction.LEFT
        if dy > 0:
            return Direction.UP
        if dy < 0:
            return Direction.DOWN
        return None


# Exploration order.
DIRECTIONS: Tuple[Direction, ...] = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)

_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_DELTAS = {
    Direction.UP: (0, 1),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


class Coord(NamedTuple):
    x: int
    y: int

    def neighbour(self, direction: Direction) -> "Coord":
        dx, dy = _DELTAS[direction]
        return Coord(self.x + dx, self.y + dy)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class Board(NamedTuple):
    width: int
    height: int

    def contains(self, coord: Coord) -> bool:
        return 0 <= coord.x < self.width and 0 <= coord.y < self.height

    def center(self) -> Coord:
        return Coord(self.width // 2, self.height // 2)
