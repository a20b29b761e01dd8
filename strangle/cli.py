"""Command-line interface: local arena runs, one-off moves, depth calibration."""

from __future__ import annotations

import argparse
import cProfile
import json
import logging
import os
import pstats
import time
from pathlib import Path
from typing import Optional

from . import config
from .arena import Arena
from .bench import calibrate, load_depth_table, save_depth_table
from .errors import MalformedSnapshotError, SearchTimeoutError
from .snapshot import Snapshot
from .strategy import choose_direction

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MALFORMED = 1
EXIT_TIMEOUT = 2
EXIT_INTERRUPTED = 130


def _open_jsonl(path: Optional[str]):
    if not path:
        return None
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p.open("a", encoding="utf-8")


def run(
    num_games: int,
    players: int = 2,
    width: int = 11,
    height: int = 11,
    render: bool = False,
    seed: Optional[int] = None,
    budget: Optional[float] = None,
    max_turns: Optional[int] = None,
    log_jsonl: Optional[str] = None,
    state_dir: Optional[str] = None,
    save_snapshot: Optional[str] = None,
) -> int:
    """Play ``num_games`` arena games and log a summary per game."""
    config_snapshot = {
        "STATE_DIR": config.STATE_DIR,
        "DEPTH_TABLE_FILE": config.DEPTH_TABLE_FILE,
    }
    if state_dir:
        config.set_state_dir(state_dir)
    config.validate_config()

    depth_table = load_depth_table()
    jsonl_f = _open_jsonl(log_jsonl)
    turns: list[int] = []
    wins: dict[str, int] = {}
    arena: Optional[Arena] = None
    t0 = time.time()

    try:
        for i in range(num_games):
            game_seed = None if seed is None else seed + i
            arena = Arena(
                players=players,
                width=width,
                height=height,
                seed=game_seed,
                budget=budget,
                depth_table=depth_table,
                render_enabled=render,
            )
            start_game_time = time.time()
            row = arena.play(max_turns=max_turns)
            if save_snapshot:
                arena.save_snapshot(save_snapshot)
            arena.close()

            turns.append(row["turns"])
            if row["winner"]:
                wins[row["winner"]] = wins.get(row["winner"], 0) + 1
            logger.info(
                "Game %d/%d: turns=%d survivors=%s winner=%s timeouts=%d (%.2fs)",
                i + 1,
                num_games,
                row["turns"],
                ",".join(row["survivors"]) or "-",
                row["winner"] or "-",
                row["timeouts"],
                time.time() - start_game_time,
            )
            if jsonl_f is not None:
                row.update({"ts": time.time(), "game": i + 1, "budget": budget})
                jsonl_f.write(json.dumps(row) + "\n")
                jsonl_f.flush()

        if turns:
            logger.info(
                "Session: avg turns=%.1f max=%d games=%d wins=%s (%.2fs)",
                sum(turns) / len(turns),
                max(turns),
                len(turns),
                wins,
                time.time() - t0,
            )
        return EXIT_OK
    except KeyboardInterrupt:
        logger.info("Interrupted")
        if arena is not None:
            arena.close()
        return EXIT_INTERRUPTED
    finally:
        if jsonl_f is not None:
            jsonl_f.close()
        for attr, value in config_snapshot.items():
            setattr(config, attr, value)


def decide(snapshot_path: str, budget: Optional[float] = None, max_depth: Optional[int] = None) -> int:
    """Print the move for a saved request body."""
    try:
        with open(snapshot_path, encoding="utf-8") as f:
            raw = json.load(f)
        snapshot = Snapshot.from_dict(raw)
        direction = choose_direction(snapshot, budget=budget, max_depth=max_depth, depth_table=load_depth_table())
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, MalformedSnapshotError) as exc:
        logger.error("Unusable snapshot %s: %s", snapshot_path, exc)
        return EXIT_MALFORMED
    except SearchTimeoutError as exc:
        logger.error("%s", exc)
        return EXIT_TIMEOUT
    print(direction)
    return EXIT_OK


def run_calibration(limit_ms: Optional[float] = None, runs: Optional[int] = None, seed: Optional[int] = None) -> int:
    table = calibrate(limit_ms=limit_ms, runs=runs, seed=seed)
    save_depth_table(table)
    for players, depth in sorted(table.items()):
        print(f"{players} snake(s): depth {depth}")
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

    parser = argparse.ArgumentParser(description="strangle move search")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level")
    parser.add_argument("--trace", action="store_true", help="Trace every search node (very noisy)")
    parser.add_argument("--trace-sim", action="store_true", help="Trace every simulated turn (very noisy)")
    parser.add_argument("--profile", action="store_true", help="Enable profiling output")
    parser.add_argument(
        "--state-dir",
        type=str,
        default=None,
        help="Override state directory (default: state/). Holds the calibrated depth table.",
    )
    sub = parser.add_subparsers(dest="command")

    arena_p = sub.add_parser("arena", help="Play local games between search-driven snakes")
    arena_p.add_argument("--num-games", "--games", type=int, default=1, help="Number of games to run")
    arena_p.add_argument("--snakes", type=int, default=2, help="Snakes per game")
    arena_p.add_argument("--width", type=int, default=11)
    arena_p.add_argument("--height", type=int, default=11)
    arena_p.add_argument("--seed", type=int, default=None, help="Random seed for food placement")
    arena_p.add_argument("--budget", type=float, default=None, help="Seconds per move (default: config)")
    arena_p.add_argument("--max-turns", type=int, default=None, help="Per-game turn cap")
    arena_p.add_argument("--render", action="store_true", help="Show the game in a pygame window")
    arena_p.add_argument(
        "--log-jsonl",
        type=str,
        default=None,
        help="Append per-game summaries to a JSONL file (e.g. runs/arena.jsonl)",
    )
    arena_p.add_argument(
        "--save-snapshot",
        type=str,
        default=None,
        help="Write snake-0's last turn as a JSON request body",
    )

    move_p = sub.add_parser("move", help="Decide one move for a saved request body")
    move_p.add_argument("snapshot", type=str)
    move_p.add_argument("--budget", type=float, default=None, help="Seconds for the search")
    move_p.add_argument("--max-depth", type=int, default=None, help="Override the depth cap")

    cal_p = sub.add_parser("calibrate", help="Measure how deep the search can go per snake count")
    cal_p.add_argument("--limit-ms", type=float, default=None)
    cal_p.add_argument("--runs", type=int, default=None)
    cal_p.add_argument("--seed", type=int, default=None)

    args = parser.parse_args(argv)

    config.configure_logging(logging.DEBUG if (args.verbose or args.trace or args.trace_sim) else logging.INFO)
    config.TRACE_SEARCH = bool(args.trace)
    config.TRACE_SIM = bool(args.trace_sim)
    if args.state_dir:
        config.set_state_dir(args.state_dir)

    def dispatch() -> int:
        if args.command == "move":
            return decide(args.snapshot, budget=args.budget, max_depth=args.max_depth)
        if args.command == "calibrate":
            return run_calibration(limit_ms=args.limit_ms, runs=args.runs, seed=args.seed)
        if args.command == "arena":
            return run(
                num_games=args.num_games,
                players=args.snakes,
                width=args.width,
                height=args.height,
                render=args.render,
                seed=args.seed,
                budget=args.budget,
                max_turns=args.max_turns,
                log_jsonl=args.log_jsonl,
                save_snapshot=args.save_snapshot,
            )
        parser.print_help()
        return EXIT_OK

    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        rc = dispatch()
        profiler.disable()
        stats = pstats.Stats(profiler).sort_stats("cumulative")
        print("\n=== Profiling Results ===")
        stats.print_stats(30)
        return rc

    return dispatch()
