"""Decoded per-turn input handed to the search.

``Snapshot.from_dict`` understands the Battlesnake request layout (``board`` / ``you``),
which is what the CLI and the arena's saved turns use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Tuple

from .errors import MalformedSnapshotError
from .types import Coord


def _coord(raw: Any) -> Coord:
    try:
        if isinstance(raw, Mapping):
            return Coord(int(raw["x"]), int(raw["y"]))
        x, y = raw
        return Coord(int(x), int(y))
    except (KeyError, TypeError, ValueError, OverflowError) as e:
        raise MalformedSnapshotError(f"invalid coordinate: {raw!r}") from e


@dataclass(frozen=True)
class SnakeState:
    id: str
    body: Tuple[Coord, ...]
    health: int

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SnakeState":
        try:
            return cls(
                id=str(raw["id"]),
                body=tuple(_coord(c) for c in raw["body"]),
                health=int(raw["health"]),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise MalformedSnapshotError(f"invalid snake: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "health": self.health,
            "body": [{"x": c.x, "y": c.y} for c in self.body],
        }


@dataclass(frozen=True)
class Snapshot:
    width: int
    height: int
    snakes: Tuple[SnakeState, ...]
    you: str
    food: FrozenSet[Coord] = field(default_factory=frozenset)
    hazards: FrozenSet[Coord] = field(default_factory=frozenset)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Snapshot":
        try:
            board = raw["board"]
            you = raw["you"]
            you_id = you["id"] if isinstance(you, Mapping) else you
            return cls(
                width=int(board["width"]),
                height=int(board["height"]),
                snakes=tuple(SnakeState.from_dict(s) for s in board["snakes"]),
                you=str(you_id),
                food=frozenset(_coord(c) for c in board.get("food", ())),
                hazards=frozenset(_coord(c) for c in board.get("hazards", ())),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            if isinstance(e, MalformedSnapshotError):
                raise
            raise MalformedSnapshotError(f"invalid snapshot: {e!r}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "board": {
                "width": self.width,
                "height": self.height,
                "food": [{"x": c.x, "y": c.y} for c in sorted(self.food)],
                "hazards": [{"x": c.x, "y": c.y} for c in sorted(self.hazards)],
                "snakes": [s.to_dict() for s in self.snakes],
            },
            "you": {"id": self.you},
        }
