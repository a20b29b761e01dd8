"""Depth calibration: how deep can we search per snake count on this machine?

The calibrated table is stored as msgpack in the state directory:
- robust persistence (backup + atomic write, tolerant decoding);
- the payload is versioned so future formats can be told apart.
"""

from __future__ import annotations

import errno
import logging
import os
import random
import shutil
import time
from typing import Any, Dict, Iterable, Optional, Sequence

import msgpack

from . import config
from .brain import Brain
from .game import Game, Snake
from .types import Board, Coord

logger = logging.getLogger(__name__)

# On-disk format version for the msgpack payload.
DEPTH_TABLE_VERSION = 1


def make_snake(slot: int, width: int, height: int, players: int) -> Snake:
    """A vertical snake in its own column, head at the top."""
    spacing = max(1, width // players)
    x = min(width - 1, spacing // 2 + spacing * slot)
    body = [Coord(x, y) for y in range(height - 3, 1, -1)] or [Coord(x, height // 2)]
    return Snake(slot, body, config.MAX_HEALTH)


def make_game(players: int, width: int, height: int, rng: Optional[random.Random] = None) -> Game:
    rng = rng or random.Random()
    snakes = [make_snake(slot, width, height, players) for slot in range(players)]
    food = {Coord(rng.randrange(width), rng.randrange(height)) for _ in range(rng.randint(0, 5))}
    return Game(snakes, food, Board(width, height))


def time_depth(game: Game, depth: int, runs: int) -> float:
    """Average wall time of a full ``depth`` search, in milliseconds."""
    total = 0.0
    for _ in range(max(1, runs)):
        t0 = time.perf_counter()
        Brain().search(game, depth)
        total += time.perf_counter() - t0
    return 1000.0 * total / max(1, runs)


def calibrate_players(
    players: int,
    width: int,
    height: int,
    limit_ms: float,
    runs: int,
    max_depth: int,
    seed: Optional[int] = None,
) -> int:
    game = make_game(players, width, height, random.Random(seed))
    logger.info("measuring a %d player game with %d runs per depth...", players, runs)
    for depth in range(1, max_depth + 1):
        millis = time_depth(game, depth, runs)
        if millis >= limit_ms:
            chosen = max(1, depth - 1)
            logger.info(
                "reached the limit of %.0f ms at depth %d (took %.1f ms); going with %d",
                limit_ms,
                depth,
                millis,
                chosen,
            )
            return chosen
    logger.info("all %d depths finished under %.0f ms", max_depth, limit_ms)
    return max_depth


def calibrate(
    player_counts: Iterable[int] = (1, 2, 3, 4),
    limit_ms: Optional[float] = None,
    runs: Optional[int] = None,
    board: Optional[Sequence[int]] = None,
    seed: Optional[int] = None,
) -> Dict[int, int]:
    """Return a snake-count -> depth table, each entry capped by ``config.DEPTH_CAPS``."""
    limit = float(config.CALIBRATION_LIMIT_MS if limit_ms is None else limit_ms)
    runs = int(config.CALIBRATION_RUNS if runs is None else runs)
    width, height = board or config.CALIBRATION_BOARD

    table: Dict[int, int] = {}
    for players in player_counts:
        cap = int(config.DEPTH_CAPS.get(players, config.DEPTH_CAP_TOO_MANY))
        table[int(players)] = calibrate_players(
            int(players), int(width), int(height), limit, runs, min(cap, config.CALIBRATION_MAX_DEPTH), seed
        )
    return table


# ----------------------------
# Persistence
# ----------------------------
def _decode_payload(blob: bytes) -> Dict[int, int]:
    obj = msgpack.unpackb(blob, raw=False, strict_map_key=False)
    if not isinstance(obj, dict) or "depths" not in obj:
        raise ValueError("Unsupported depth table payload")
    version = int(obj.get("v", 0) or 0)
    if version != DEPTH_TABLE_VERSION:
        raise ValueError(f"Unsupported depth table version {version}")

    table: Dict[int, int] = {}
    depths: Any = obj["depths"]
    if isinstance(depths, dict):
        depths = depths.items()
    for pair in depths:
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            continue
        players, depth = pair
        try:
            players, depth = int(players), int(depth)
        except (TypeError, ValueError):
            continue
        if players >= 1 and depth >= 1:
            table[players] = depth
    return table


def load_depth_table(path: Optional[str] = None) -> Dict[int, int]:
    """Load the calibrated table; missing or unreadable files give an empty table."""
    path = path or config.DEPTH_TABLE_FILE
    if not os.path.exists(path):
        logger.info("No depth table at %s; using configured caps", path)
        return {}

    def _try_load(p: str) -> Dict[int, int]:
        with open(p, "rb") as f:
            return _decode_payload(f.read())

    try:
        table = _try_load(path)
    except Exception as e:
        logger.error("Load failed: %s", e)
        backup = path + ".bak"
        if not os.path.exists(backup):
            logger.warning("No backup available; using configured caps")
            return {}
        try:
            table = _try_load(backup)
            logger.warning("Loaded depth table from backup")
        except Exception as bak_e:
            logger.error("Backup load failed: %s", bak_e)
            return {}

    logger.info("Loaded depth table %s from %s", table, path)
    return table


def save_depth_table(table: Dict[int, int], path: Optional[str] = None) -> bool:
    """Write the table (atomic replace, previous file kept as ``.bak``)."""
    if not config.SAVE_DEPTH_TABLE:
        return False
    path = path or config.DEPTH_TABLE_FILE
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    if os.path.exists(path):
        try:
            shutil.copy(path, path + ".bak")
        except OSError as e:
            logger.error("Backup failed: %s", e)

    payload = {
        "v": DEPTH_TABLE_VERSION,
        "created": time.time(),
        # list of pairs avoids any map-key restrictions
        "depths": [[int(k), int(v)] for k, v in sorted(table.items())],
    }
    blob = msgpack.packb(payload, use_bin_type=True)
    tmp_path = path + ".tmp"

    def _write_blob(p: str) -> None:
        with open(p, "wb") as f:
            f.write(blob)
            f.flush()
            os.fsync(f.fileno())

    try:
        _write_blob(tmp_path)
        os.replace(tmp_path, path)
    except OSError as exc:
        if exc.errno not in {errno.EACCES, errno.EPERM}:
            raise
        logger.warning("Atomic replace denied (%s); falling back to overwrite", exc)
        _write_blob(path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

    logger.info("Saved depth table %s to %s", table, path)
    return True
