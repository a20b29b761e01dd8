from __future__ import annotations

from typing import Optional, Sequence

from .types import DIRECTIONS, Board, Coord, Direction


def facing(body: Sequence[Coord]) -> Optional[Direction]:
    """Direction the snake travelled last turn, inferred from its neck."""
    if len(body) < 2:
        return None
    return Direction.between(body[1], body[0])


def reverse_move(direction: Direction, current: Optional[Direction]) -> bool:
    return current is not None and direction == current.opposite()


def legal_directions(body: Sequence[Coord], board: Board) -> list[Direction]:
    """Return the directions worth exploring for a snake.

    Excludes the reverse into the neck and anything leaving the board. Other collisions
    are left to the simulator. If every forward direction leaves the board they are all
    returned anyway, so the search still records the (inevitable) death.
    """
    if not body:
        return []

    head = body[0]
    current = facing(body)

    forward = [d for d in DIRECTIONS if not reverse_move(d, current)]
    directions = [d for d in forward if board.contains(head.neighbour(d))]
    return directions or forward
