"""Heuristic evaluation of a simulated turn from one snake's point of view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import config
from .game import Death, Game, Snake
from .utils import closest_distance, flood_fill, manhattan_distance


@dataclass(frozen=True)
class ScoreFactors:
    slot: int
    dead: bool = False
    death: Optional[Death] = None
    health: int = 0
    length: int = 0
    center_distance: int = 0
    opponents: int = 0
    reachable: int = 0
    closest_food: int = 0
    multisnake: bool = False

    @classmethod
    def dead_snake(cls, slot: int, death: Death = Death.NORMAL) -> "ScoreFactors":
        return cls(slot=slot, dead=True, death=death)

    def calculate(self, depth: int) -> int:
        if self.dead:
            base = config.SACRIFICE_SCORE if self.death is Death.SACRIFICE else config.DEAD_SCORE
            # dying later beats dying sooner
            return base + depth * config.DEPTH_WEIGHT
        if self.multisnake and self.opponents == 0:
            # winning sooner beats winning later
            return config.WIN_SCORE - depth * config.DEPTH_WEIGHT
        return (
            self.health * config.HEALTH_WEIGHT
            + self.length * config.LENGTH_WEIGHT
            - self.center_distance * config.CENTER_DISTANCE_WEIGHT
            - self.opponents * config.OPPONENT_WEIGHT
            + self.reachable * config.REACHABLE_WEIGHT
            - self.closest_food * config.FOOD_DISTANCE_WEIGHT
            + depth * config.DEPTH_WEIGHT
        )

    def describe(self, depth: int) -> str:
        if self.dead:
            kind = "sacrificed" if self.death is Death.SACRIFICE else "dead"
            return f"{self.calculate(depth)} (snake {self.slot} is {kind})"
        return (
            f"{self.calculate(depth)} (snake {self.slot} @ {self.health} health, length {self.length}, "
            f"{self.center_distance} from center, {self.closest_food} to nearest food, "
            f"{self.reachable} reachable, {self.opponents} remaining opponents)"
        )


def evaluate(game: Game, snake: Snake, death: Optional[Death] = None) -> ScoreFactors:
    """Collect the score inputs for ``snake`` in the post-turn ``game``.

    A snake missing from ``game.snakes`` is scored as dead with ``death`` (NORMAL if
    not given).
    """
    current = game.snake(snake.slot)
    if current is None:
        return ScoreFactors.dead_snake(snake.slot, death or Death.NORMAL)

    head = current.head
    reachable = 0
    if len(game.snakes) <= config.REACHABLE_MAX_SNAKES:
        reachable = flood_fill(game.board, game.occupied(), head)

    return ScoreFactors(
        slot=current.slot,
        health=current.health,
        length=current.length,
        center_distance=manhattan_distance(head, game.board.center()),
        opponents=len(game.snakes) - 1,
        reachable=reachable,
        closest_food=closest_distance(head, game.food) or 0,
        multisnake=game.multisnake,
    )
