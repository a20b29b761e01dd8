from __future__ import annotations

import json
import unittest

from helpers import coords, make_snapshot

from strangle import config
from strangle.errors import MalformedSnapshotError
from strangle.game import Game, GameType
from strangle.snapshot import SnakeState, Snapshot
from strangle.strategy import choose_direction, depth_cap
from strangle.types import Board, Coord

REQUEST = {
    "game": {"id": "abc", "timeout": 500},
    "turn": 12,
    "board": {
        "width": 11,
        "height": 11,
        "food": [{"x": 5, "y": 5}],
        "hazards": [{"x": 0, "y": 10}],
        "snakes": [
            {"id": "rival", "name": "r", "health": 70, "body": [{"x": 1, "y": 1}, {"x": 1, "y": 0}]},
            {"id": "me", "name": "m", "health": 88, "body": [{"x": 8, "y": 8}, {"x": 8, "y": 7}, {"x": 8, "y": 6}]},
        ],
    },
    "you": {"id": "me", "health": 88},
}


class SnapshotDecodeTest(unittest.TestCase):
    def test_from_dict(self):
        snapshot = Snapshot.from_dict(REQUEST)
        self.assertEqual((snapshot.width, snapshot.height), (11, 11))
        self.assertEqual(snapshot.you, "me")
        self.assertEqual(snapshot.food, frozenset([Coord(5, 5)]))
        self.assertEqual(snapshot.hazards, frozenset([Coord(0, 10)]))
        self.assertEqual(snapshot.snakes[1].body[0], Coord(8, 8))

    def test_to_dict_is_readable_back(self):
        snapshot = Snapshot.from_dict(REQUEST)
        self.assertEqual(Snapshot.from_dict(snapshot.to_dict()), snapshot)

    def test_bad_coordinate(self):
        with self.assertRaises(MalformedSnapshotError):
            SnakeState.from_dict({"id": "x", "health": 3, "body": [{"x": 1}]})

    def test_infinite_numbers(self):
        raw = json.loads(json.dumps(REQUEST))
        raw["board"]["width"] = float("inf")
        with self.assertRaises(MalformedSnapshotError):
            Snapshot.from_dict(raw)

        raw = json.loads('{"board": {"width": 11, "height": 11, "snakes": [], "food": [{"x": 1e999, "y": 0}]}, "you": {"id": "me"}}')
        with self.assertRaises(MalformedSnapshotError):
            Snapshot.from_dict(raw)

    def test_missing_board(self):
        with self.assertRaises(MalformedSnapshotError):
            Snapshot.from_dict({"you": {"id": "me"}})


class GameFromSnapshotTest(unittest.TestCase):
    def test_self_is_moved_to_slot_zero(self):
        game = Game.from_snapshot(Snapshot.from_dict(REQUEST))
        self.assertEqual([s.slot for s in game.snakes], [0, 1])
        self.assertEqual(game.snakes[0].head, Coord(8, 8))
        self.assertEqual(game.snakes[0].health, 88)
        self.assertEqual(game.snakes[1].head, Coord(1, 1))
        self.assertTrue(game.multisnake)
        self.assertEqual(game.board, Board(11, 11))

    def test_swap_keeps_other_snakes_in_place(self):
        snapshot = make_snapshot(
            [[(0, 0)], [(2, 2)], [(4, 4)]],
            you="snake-2",
        )
        game = Game.from_snapshot(snapshot)
        self.assertEqual([s.head for s in game.snakes], coords([(4, 4), (2, 2), (0, 0)]))

    def test_solo_is_not_multisnake(self):
        game = Game.from_snapshot(make_snapshot([[(3, 3), (3, 2)]]))
        self.assertFalse(game.multisnake)
        self.assertEqual(game.game_type(), GameType.SOLO)

    def test_missing_self(self):
        with self.assertRaises(MalformedSnapshotError):
            Game.from_snapshot(make_snapshot([[(3, 3)]], you="nobody"))

    def test_empty_body(self):
        snapshot = Snapshot(
            width=11,
            height=11,
            snakes=(SnakeState("me", (), 50),),
            you="me",
        )
        with self.assertRaises(MalformedSnapshotError):
            Game.from_snapshot(snapshot)

    def test_bad_dimensions(self):
        for width, height in ((0, 11), (11, -1), (config.MAX_BOARD_DIMENSION + 1, 11)):
            with self.assertRaises(MalformedSnapshotError):
                Game.from_snapshot(make_snapshot([[(0, 0)]], width=width, height=height))

    def test_choose_direction_reports_input_errors(self):
        with self.assertRaises(MalformedSnapshotError):
            choose_direction(make_snapshot([[(3, 3)]], you="nobody"), budget=5.0)


class GameTypeTest(unittest.TestCase):
    def test_game_types(self):
        for count, expected in ((1, GameType.SOLO), (2, GameType.DUEL), (4, GameType.QUADRUPLE), (7, GameType.TOO_MANY)):
            snapshot = make_snapshot([[(x, 0)] for x in range(count)])
            self.assertEqual(Game.from_snapshot(snapshot).game_type(), expected)

    def test_empty_game_has_no_type(self):
        with self.assertRaises(RuntimeError):
            Game([], (), Board(11, 11)).game_type()

    def test_depth_cap(self):
        self.assertEqual(depth_cap(GameType.DUEL), config.DEPTH_CAPS[2])
        self.assertEqual(depth_cap(GameType.DUEL, {2: 4}), 4)
        self.assertEqual(depth_cap(GameType.TOO_MANY, {5: 9}), config.DEPTH_CAP_TOO_MANY)


if __name__ == "__main__":
    unittest.main()
