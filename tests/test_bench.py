from __future__ import annotations

import os
import shutil
import unittest
import uuid

import msgpack

from strangle import config
from strangle.bench import DEPTH_TABLE_VERSION, calibrate, load_depth_table, make_game, save_depth_table


class DepthTablePersistenceTest(unittest.TestCase):
    def setUp(self):
        self._original_state_dir = config.STATE_DIR
        self._original_save = config.SAVE_DEPTH_TABLE
        self._tmpdir = os.path.abspath(
            os.path.join(os.getcwd(), f"tmp-bench-{uuid.uuid4().hex}")
        )
        os.makedirs(self._tmpdir, exist_ok=True)
        config.set_state_dir(self._tmpdir)

    def tearDown(self):
        config.set_state_dir(self._original_state_dir)
        config.SAVE_DEPTH_TABLE = self._original_save
        shutil.rmtree(self._tmpdir, ignore_errors=True)

    def test_roundtrip_preserves_table(self):
        table = {1: 9, 2: 4, 3: 2, 4: 1}
        self.assertTrue(save_depth_table(table))
        self.assertEqual(load_depth_table(), table)
        self.assertFalse(os.path.exists(config.DEPTH_TABLE_FILE + ".tmp"))

    def test_missing_file_gives_empty_table(self):
        self.assertEqual(load_depth_table(), {})

    def test_corrupt_file_falls_back_to_backup(self):
        save_depth_table({1: 5})
        save_depth_table({1: 6})
        self.assertTrue(os.path.exists(config.DEPTH_TABLE_FILE + ".bak"))
        with open(config.DEPTH_TABLE_FILE, "wb") as fh:
            fh.write(b"\xc1not msgpack")
        self.assertEqual(load_depth_table(), {1: 5})

    def test_unknown_version_is_ignored(self):
        with open(config.DEPTH_TABLE_FILE, "wb") as fh:
            fh.write(msgpack.packb({"v": DEPTH_TABLE_VERSION + 1, "depths": [[1, 3]]}, use_bin_type=True))
        self.assertEqual(load_depth_table(), {})

    def test_bad_entries_are_skipped(self):
        payload = {"v": DEPTH_TABLE_VERSION, "depths": [[1, 3], [2, 0], "junk", [3, "x"]]}
        with open(config.DEPTH_TABLE_FILE, "wb") as fh:
            fh.write(msgpack.packb(payload, use_bin_type=True))
        self.assertEqual(load_depth_table(), {1: 3})

    def test_save_disabled(self):
        config.SAVE_DEPTH_TABLE = False
        self.assertFalse(save_depth_table({1: 2}))
        self.assertFalse(os.path.exists(config.DEPTH_TABLE_FILE))


class CalibrationTest(unittest.TestCase):
    def test_make_game_places_snakes_on_board(self):
        game = make_game(4, 19, 19)
        self.assertEqual(len(game.snakes), 4)
        heads = {s.head for s in game.snakes}
        self.assertEqual(len(heads), 4)
        for snake in game.snakes:
            self.assertTrue(all(game.board.contains(c) for c in snake.body))

    def test_zero_limit_settles_on_depth_one(self):
        self.assertEqual(calibrate(player_counts=(1, 2), limit_ms=0.0, runs=1, seed=3), {1: 1, 2: 1})

    def test_generous_limit_hits_cap(self):
        original = dict(config.DEPTH_CAPS)
        config.DEPTH_CAPS[1] = 2
        try:
            self.assertEqual(calibrate(player_counts=(1,), limit_ms=1e9, runs=1, board=(7, 7), seed=3), {1: 2})
        finally:
            config.DEPTH_CAPS.clear()
            config.DEPTH_CAPS.update(original)


if __name__ == "__main__":
    unittest.main()
