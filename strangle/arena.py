"""Local arena: full games between search-driven snakes, with optional pygame rendering."""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set

from . import config
from .errors import SearchTimeoutError
from .game import Game, Snake
from .snapshot import SnakeState, Snapshot
from .strategy import StrangleStrategy
from .types import Board, Coord, Direction

logger = logging.getLogger(__name__)

SNAKE_COLORS = [
    (171, 67, 119),
    (66, 135, 245),
    (245, 176, 66),
    (92, 201, 110),
    (200, 200, 200),
    (150, 90, 220),
]


def _import_pygame():
    import os
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    import pygame  # type: ignore
    return pygame


def snake_name(slot: int) -> str:
    return f"snake-{slot}"


class Arena:
    """Plays games where every living snake runs its own search each turn.

    The arena owns the real world: it applies everyone's move with the symmetric
    head-on rule and spawns food (which the search never predicts).
    """

    def __init__(
        self,
        players: int = 2,
        width: int = 11,
        height: int = 11,
        seed: Optional[int] = None,
        budget: Optional[float] = None,
        depth_table: Optional[Mapping[int, int]] = None,
        render_enabled: bool = False,
    ) -> None:
        if players < 1:
            raise ValueError("an arena needs at least one snake")
        self.players = int(players)
        self.board = Board(int(width), int(height))
        self.seed = seed
        self.rng = random.Random(seed)
        self.strategies = [
            StrangleStrategy(depth_table=depth_table, budget=budget) for _ in range(self.players)
        ]

        self.render_enabled = bool(render_enabled)
        self.pygame = None
        self.screen = None
        self.clock = None
        if self.render_enabled:
            self.pygame = _import_pygame()
            self.pygame.init()
            self.screen = self.pygame.display.set_mode(
                (self.board.width * config.GRID_SIZE, self.board.height * config.GRID_SIZE)
            )
            self.pygame.display.set_caption("strangle arena")
            self.clock = self.pygame.time.Clock()

        self.reset()

    # ----------------------------
    # Setup
    # ----------------------------
    def reset(self) -> None:
        self.turn = 0
        self.timeouts = 0
        self.eliminated: List[int] = []
        self.game_over = False
        self.quit_requested = False

        snakes = [self._spawn_snake(slot) for slot in range(self.players)]
        self.world = Game(snakes, (), self.board)
        food: Set[Coord] = set()
        for _ in range(config.ARENA_START_FOOD):
            cell = self._random_free_cell(food)
            if cell is not None:
                food.add(cell)
        self.world.food = frozenset(food)

    def _spawn_snake(self, slot: int) -> Snake:
        # Evenly spaced columns, stacked body like a fresh Battlesnake game.
        spacing = max(1, self.board.width // self.players)
        x = min(self.board.width - 1, spacing // 2 + spacing * slot)
        y = self.board.height // 2 if slot % 2 == 0 else max(0, self.board.height // 2 - 2)
        return Snake(slot, [Coord(x, y)] * config.ARENA_START_LENGTH, config.MAX_HEALTH)

    def _random_free_cell(self, extra: Set[Coord] = frozenset()) -> Optional[Coord]:
        taken = self.world.occupied() | set(self.world.food) | set(extra)
        free = [
            Coord(x, y)
            for x in range(self.board.width)
            for y in range(self.board.height)
            if Coord(x, y) not in taken
        ]
        if not free:
            return None
        return self.rng.choice(free)

    # ----------------------------
    # Turns
    # ----------------------------
    def snapshot_for(self, slot: int) -> Snapshot:
        return Snapshot(
            width=self.board.width,
            height=self.board.height,
            snakes=tuple(
                SnakeState(snake_name(s.slot), tuple(s.body), s.health) for s in self.world.snakes
            ),
            you=snake_name(slot),
            food=self.world.food,
            hazards=self.world.hazards,
        )

    def _decide(self, snake: Snake) -> Direction:
        try:
            return self.strategies[snake.slot].get_movement(self.snapshot_for(snake.slot))
        except SearchTimeoutError:
            # Same fallback a server would use: any move that stays on the board.
            self.timeouts += 1
            fallback = snake.possible_directions(self.board)[0]
            logger.warning("snake #%d timed out; falling back to %s", snake.slot, fallback)
            return fallback

    def _spawn_food(self) -> None:
        if len(self.world.food) >= config.ARENA_MIN_FOOD and self.rng.random() >= config.ARENA_FOOD_SPAWN_CHANCE:
            return
        cell = self._random_free_cell()
        if cell is not None:
            self.world.food = self.world.food | {cell}

    def play_turn(self) -> Dict[int, Direction]:
        moves = {snake.slot: self._decide(snake) for snake in self.world.snakes}
        self.world, deaths = self.world.step(moves, risk_averse=False)
        self.turn += 1
        for slot in sorted(deaths):
            self.eliminated.append(slot)
            logger.info("turn %d: %s eliminated", self.turn, snake_name(slot))
        self._spawn_food()

        alive = len(self.world.snakes)
        if alive == 0 or (self.players > 1 and alive <= 1) or self.turn >= config.ARENA_MAX_TURNS:
            self.game_over = True
        return moves

    def play(self, max_turns: Optional[int] = None) -> Dict[str, Any]:
        """Play until the game is decided (or the turn cap) and return a summary row."""
        limit = int(config.ARENA_MAX_TURNS if max_turns is None else max_turns)
        while not self.game_over and self.turn < limit:
            if self.render_enabled:
                self.handle_pygame_events()
                if self.quit_requested:
                    break
            self.play_turn()
            if self.render_enabled:
                self.render()
        return self.summary()

    def summary(self) -> Dict[str, Any]:
        survivors = [s.slot for s in self.world.snakes]
        winner = None
        if self.players > 1 and len(survivors) == 1:
            winner = snake_name(survivors[0])
        return {
            "turns": self.turn,
            "players": self.players,
            "board": [self.board.width, self.board.height],
            "seed": self.seed,
            "survivors": [snake_name(s) for s in survivors],
            "eliminated": [snake_name(s) for s in self.eliminated],
            "winner": winner,
            "lengths": {snake_name(s.slot): s.length for s in self.world.snakes},
            "timeouts": self.timeouts,
        }

    def save_snapshot(self, path: str | Path, slot: int = 0) -> bool:
        """Write the current turn, seen by ``slot``, as a JSON request body."""
        if not self.world.is_alive(slot):
            return False
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", encoding="utf-8") as f:
            json.dump(self.snapshot_for(slot).to_dict(), f, indent=2)
        return True

    # ----------------------------
    # Rendering
    # ----------------------------
    def handle_pygame_events(self) -> None:
        if self.pygame is None:
            return
        for event in self.pygame.event.get():
            if event.type == self.pygame.QUIT:
                self.quit_requested = True

    def render(self) -> None:
        if self.pygame is None or self.screen is None:
            return
        pg = self.pygame
        size = config.GRID_SIZE
        height = self.board.height

        def rect(c: Coord):
            # pygame's origin is top-left; the board's is bottom-left
            return pg.Rect(c.x * size, (height - 1 - c.y) * size, size, size)

        self.screen.fill((24, 24, 32))
        for c in self.world.hazards:
            pg.draw.rect(self.screen, (70, 40, 40), rect(c))
        for c in self.world.food:
            pg.draw.ellipse(self.screen, (230, 60, 60), rect(c).inflate(-size // 3, -size // 3))
        for snake in self.world.snakes:
            color = SNAKE_COLORS[snake.slot % len(SNAKE_COLORS)]
            for c in snake.body:
                pg.draw.rect(self.screen, color, rect(c).inflate(-2, -2))
            pg.draw.rect(self.screen, (255, 255, 255), rect(snake.head).inflate(-size // 2, -size // 2))
        pg.display.flip()
        if self.clock is not None:
            self.clock.tick(config.FPS)

    def close(self) -> None:
        if self.pygame is not None:
            self.pygame.quit()
            self.pygame = None
            self.screen = None
