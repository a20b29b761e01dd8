from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd


def describe(path: Path, label: str) -> None:
    if not path.exists():
        print(f"warning: {path} not found")
        return
    df = pd.read_json(path, lines=True)
    df["survivor_count"] = df["survivors"].apply(len)
    df["longest"] = df["lengths"].apply(lambda lengths: max(lengths.values()) if lengths else 0)
    cols = ["turns", "survivor_count", "longest", "timeouts"]
    print(f"\n--- {label} ({path.name}) ---")
    print(df[cols].describe())
    wins = df["winner"].fillna("draw").value_counts()
    print("\nwinners:")
    print(wins.to_string())
    total_timeouts = df["timeouts"].sum()
    total_turns = df["turns"].sum()
    if total_turns:
        rate = 100.0 * total_timeouts / total_turns
        print(f"session timeout rate: {rate:.2f}% ({total_timeouts} timeouts / {total_turns} turns)")


def main() -> None:
    parser = argparse.ArgumentParser(description="Describe JSONL arena runs")
    parser.add_argument(
        "--baseline",
        type=Path,
        default=Path("runs/arena_baseline.jsonl"),
        help="First arena log to summarize",
    )
    parser.add_argument(
        "--candidate",
        type=Path,
        default=Path("runs/arena_candidate.jsonl"),
        help="Second arena log to summarize",
    )
    args = parser.parse_args()

    describe(args.baseline, "baseline")
    describe(args.candidate, "candidate")


if __name__ == "__main__":
    main()
