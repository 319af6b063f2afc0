from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from engine.Topics import DIFFICULTIES
from solver.analyzer import SearchLimits, analyze_deal

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Batch deal mining for the topic solitaire solver.")
    parser.add_argument("--difficulty", choices=DIFFICULTIES, required=True, help="Topic tier.")
    parser.add_argument("--start-seed", type=int, required=True, help="Start seed (inclusive).")
    parser.add_argument("--count", type=int, required=True, help="How many seeds to scan.")
    parser.add_argument("--max-seconds", type=float, default=5.0, help="Per-seed solver time limit.")
    parser.add_argument("--max-nodes", type=int, default=200_000, help="Per-seed node limit.")
    parser.add_argument("--max-frontier", type=int, default=1_000_000, help="Per-seed frontier limit.")
    parser.add_argument("--target-solved", type=int, default=1, help="Stop early after this many solved seeds.")
    parser.add_argument("--jsonl", type=str, default="", help="Optional output jsonl path.")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    limits = SearchLimits(max_nodes=args.max_nodes, max_seconds=args.max_seconds, max_frontier=args.max_frontier)

    out_path = Path(args.jsonl).expanduser() if args.jsonl else None
    if out_path is not None:
        out_path.parent.mkdir(parents=True, exist_ok=True)

    solved = 0
    unknown = 0
    started = time.perf_counter()

    for i in range(args.count):
        seed = args.start_seed + i
        t0 = time.perf_counter()
        result = analyze_deal(seed=seed, difficulty=args.difficulty, limits=limits)
        wall_ms = (time.perf_counter() - t0) * 1000.0

        payload = result.to_dict()
        payload["wall_ms"] = round(wall_ms, 3)

        if out_path is not None:
            with out_path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(payload, ensure_ascii=False) + "\n")

        if result.status == "solved":
            solved += 1
        else:
            unknown += 1

        metrics = result.metrics
        print(
            f"seed={seed} status={result.status} reason={metrics.get('reason')} "
            f"wall_ms={wall_ms:.1f} solver_ms={metrics['elapsed_ms']} "
            f"expanded={metrics['expanded_nodes']} unique={metrics['unique_states']} "
            f"cards={result.card_count} budget={result.move_budget} len={metrics.get('solution_len')}"
        )

        if solved >= args.target_solved:
            break

    total_ms = (time.perf_counter() - started) * 1000.0
    logger.info("mining finished in %.1f ms", total_ms)
    print(
        f"summary difficulty={args.difficulty} scanned={solved + unknown} solved={solved} "
        f"unknown={unknown} total_ms={total_ms:.1f}"
    )


if __name__ == "__main__":
    main()
