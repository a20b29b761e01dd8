"""Central configuration for the move search."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

# Logging
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)-16s - %(levelname)-8s - %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging if the host application has not done so already.

    This keeps the package library-friendly (it will not override an existing logging setup),
    while preserving CLI ergonomics.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=level, format=DEFAULT_LOG_FORMAT, stream=sys.stdout)


logger = logging.getLogger("strangle")

# Verbose traces of every search node / simulated turn (DEBUG level).
TRACE_SEARCH = False
TRACE_SIM = False


# ----------------------------
# Paths / persistence
# ----------------------------
REPO_ROOT = Path(__file__).resolve().parents[1]


def _default_state_dir() -> Path:
    """Resolve the state directory (supports env override)."""
    raw = os.environ.get("STRANGLE_STATE_DIR")
    if raw:
        return Path(raw).expanduser().resolve()
    return REPO_ROOT / "state"


STATE_DIR = _default_state_dir()
DEPTH_TABLE_FILE = str(STATE_DIR / "depth_table.msgpack")

# If False, calibration results are not written to disk.
SAVE_DEPTH_TABLE = True


def set_state_dir(state_dir: str | Path) -> None:
    """Update the state directory and derived file paths at runtime."""
    global STATE_DIR, DEPTH_TABLE_FILE
    STATE_DIR = Path(state_dir).expanduser().resolve()
    DEPTH_TABLE_FILE = str(STATE_DIR / "depth_table.msgpack")


# ----------------------------
# Game rules
# ----------------------------
MAX_HEALTH = 100
# Coordinates are plain ints, but anything bigger than this is a broken request.
MAX_BOARD_DIMENSION = 1 << 15

# ----------------------------
# Search
# ----------------------------
MOVE_BUDGET_SECONDS = 0.35

# Depth caps per game type (keyed by snake count; anything larger uses DEPTH_CAP_TOO_MANY).
DEPTH_CAPS = {1: 15, 2: 6, 3: 3, 4: 2}
DEPTH_CAP_TOO_MANY = 1

# Calibration
CALIBRATION_LIMIT_MS = 250.0
CALIBRATION_RUNS = 5
CALIBRATION_MAX_DEPTH = 20
CALIBRATION_BOARD = (11, 11)

# ----------------------------
# Scoring
# ----------------------------
DEAD_SCORE = -1_000_000
# Losing a contested equal-length head-on is still a loss, just a less certain one.
SACRIFICE_SCORE = -900_000
WIN_SCORE = 1_000_000

DEPTH_WEIGHT = 1000
HEALTH_WEIGHT = 100
LENGTH_WEIGHT = 500
CENTER_DISTANCE_WEIGHT = 25
OPPONENT_WEIGHT = 10_000
REACHABLE_WEIGHT = 20
FOOD_DISTANCE_WEIGHT = 10

# Flood fill is only worth its cost in small games.
REACHABLE_MAX_SNAKES = 4


# ----------------------------
# Arena
# ----------------------------
ARENA_MAX_TURNS = 500
ARENA_START_LENGTH = 3
ARENA_START_FOOD = 3
ARENA_FOOD_SPAWN_CHANCE = 0.15
ARENA_MIN_FOOD = 1
GRID_SIZE = 32
FPS = 8


def validate_config() -> None:
    """Basic sanity checks."""
    ok = True
    if MOVE_BUDGET_SECONDS <= 0:
        logger.error("MOVE_BUDGET_SECONDS must be > 0")
        ok = False
    if MAX_HEALTH <= 0:
        logger.error("MAX_HEALTH must be > 0")
        ok = False
    if any(int(cap) < 1 for cap in DEPTH_CAPS.values()) or DEPTH_CAP_TOO_MANY < 1:
        logger.error("depth caps must be >= 1")
        ok = False
    if SACRIFICE_SCORE <= DEAD_SCORE:
        logger.error("SACRIFICE_SCORE must be less severe than DEAD_SCORE")
        ok = False
    if not 0.0 <= ARENA_FOOD_SPAWN_CHANCE <= 1.0:
        logger.error("ARENA_FOOD_SPAWN_CHANCE must be within [0, 1]")
        ok = False
    if not ok:
        raise SystemExit(1)
