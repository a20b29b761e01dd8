from __future__ import annotations

from collections import deque
from typing import AbstractSet, Iterable, Optional

from .types import DIRECTIONS, Board, Coord


def manhattan_distance(a: Coord, b: Coord) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def closest_distance(origin: Coord, targets: Iterable[Coord]) -> Optional[int]:
    """Return the Manhattan distance to the nearest target, or None if there are none."""
    return min((manhattan_distance(origin, t) for t in targets), default=None)


def flood_fill(board: Board, blocked: AbstractSet[Coord], seed: Coord) -> int:
    """Count the cells reachable from ``seed`` through free 4-connected neighbours.

    The seed itself is always counted, even when it is blocked (it is usually a head).
    """
    q: deque[Coord] = deque([seed])
    seen = {seed}
    count = 0
    while q:
        cur = q.popleft()
        count += 1
        for direction in DIRECTIONS:
            nxt = cur.neighbour(direction)
            if nxt in seen or nxt in blocked or not board.contains(nxt):
                continue
            seen.add(nxt)
            q.append(nxt)
    return count
