import argparse
import subprocess
import sys
from pathlib import Path

import pandas as pd


def run_command(cmd: list[str]) -> None:
    print(f">> {' '.join(cmd)}")
    subprocess.run(cmd, check=True)


def describe_jsonl(path: Path, label: str) -> None:
    if not path.exists():
        print(f"warning: {path} does not exist")
        return
    df = pd.read_json(path, lines=True)
    print(f"\n--- {label} ({path.name}) ---")
    print(df[["turns", "timeouts"]].describe())
    print(df["winner"].fillna("draw").value_counts().to_string())


def main() -> None:
    parser = argparse.ArgumentParser(description="Calibrate search depth, then play arena games at two budgets")
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed to fix during the benchmark",
    )
    parser.add_argument("--games", type=int, default=20, help="Arena games per budget")
    parser.add_argument("--snakes", type=int, default=2, help="Snakes per game")
    parser.add_argument(
        "--budgets",
        type=float,
        nargs=2,
        default=(0.1, 0.35),
        help="Per-move budgets in seconds for the two runs",
    )
    parser.add_argument(
        "--state-dir",
        type=Path,
        default=Path("state/benchmark"),
        help="State directory holding the calibrated depth table",
    )
    parser.add_argument(
        "--runs-dir",
        type=Path,
        default=Path("runs"),
        help="Where to emit JSONL telemetry files",
    )
    parser.add_argument("--skip-calibration", action="store_true")

    args = parser.parse_args()
    args.state_dir.mkdir(parents=True, exist_ok=True)
    args.runs_dir.mkdir(exist_ok=True)

    base = [sys.executable, "-m", "strangle", "--state-dir", str(args.state_dir)]
    if not args.skip_calibration:
        run_command(base + ["calibrate", "--seed", str(args.seed)])

    logs = []
    for budget in args.budgets:
        log = args.runs_dir / f"arena_seed{args.seed}_budget{budget:g}.jsonl"
        run_command(
            base
            + [
                "arena",
                "--num-games",
                str(args.games),
                "--snakes",
                str(args.snakes),
                "--seed",
                str(args.seed),
                "--budget",
                str(budget),
                "--log-jsonl",
                str(log),
            ]
        )
        logs.append((budget, log))

    for budget, log in logs:
        describe_jsonl(log, f"budget {budget:g}s")


if __name__ == "__main__":
    main()
