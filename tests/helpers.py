from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from strangle.game import Game, Snake
from strangle.snapshot import SnakeState, Snapshot
from strangle.types import Board, Coord

Cells = Sequence[Tuple[int, int]]


def coords(cells: Iterable[Tuple[int, int]]) -> list[Coord]:
    return [Coord(x, y) for x, y in cells]


def make_game(
    bodies: Sequence[Cells],
    healths: Sequence[int] | None = None,
    food: Cells = (),
    hazards: Cells = (),
    width: int = 11,
    height: int = 11,
) -> Game:
    healths = list(healths) if healths is not None else [90] * len(bodies)
    snakes = [Snake(slot, coords(body), health) for slot, (body, health) in enumerate(zip(bodies, healths))]
    return Game(snakes, coords(food), Board(width, height), coords(hazards))


def make_snapshot(
    bodies: Sequence[Cells],
    healths: Sequence[int] | None = None,
    food: Cells = (),
    hazards: Cells = (),
    width: int = 11,
    height: int = 11,
    you: str = "snake-0",
) -> Snapshot:
    healths = list(healths) if healths is not None else [90] * len(bodies)
    return Snapshot(
        width=width,
        height=height,
        snakes=tuple(
            SnakeState(f"snake-{i}", tuple(coords(body)), health)
            for i, (body, health) in enumerate(zip(bodies, healths))
        ),
        you=you,
        food=frozenset(coords(food)),
        hazards=frozenset(coords(hazards)),
    )


class CountingClock:
    """Fake monotonic clock: every call returns the next integer (1, 2, 3, ...)."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        return float(self.calls)
