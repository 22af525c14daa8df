"""
PieceRoute — Synthetic Solve Script
Cuts a gradient picture into a jigsaw, shuffles and turns the pieces,
solves it and prints the recovered layout next to the true one.
Run: python scripts/solve_synthetic.py --rows 3 --cols 4 --seed 7
"""

import argparse
import sys
import time

from pieceroute import Settings, solve_puzzle
from pieceroute.models.layout import LayoutResult, format_layout
from pieceroute.utils.logger import configure_logging
from pieceroute.utils.synthetic import generate_puzzle


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Solve a synthetic jigsaw puzzle.")
    parser.add_argument("--rows", type=int, default=3)
    parser.add_argument("--cols", type=int, default=3)
    parser.add_argument("--piece-px", type=int, default=120)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--no-rotate", action="store_true", help="Keep pieces upright")
    parser.add_argument("--workers", type=int, default=1, help="Matcher threads")
    parser.add_argument("--time-budget", type=float, default=None, help="Route search seconds")
    parser.add_argument("--debug", action="store_true", help="Console logs at DEBUG")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = Settings(
        matcher_workers=args.workers,
        time_budget_s=args.time_budget,
        log_level="DEBUG" if args.debug else "WARNING",
        log_json=not args.debug,
    )
    configure_logging(settings)

    print("\n🧩 PieceRoute — Synthetic Solve\n" + "─" * 40)
    puzzle = generate_puzzle(
        rows=args.rows,
        cols=args.cols,
        piece_px=args.piece_px,
        seed=args.seed,
        rotate=not args.no_rotate,
    )
    print(f"Pieces: {len(puzzle.pieces)} ({args.rows} x {args.cols})\n")

    started = time.monotonic()
    layout = solve_puzzle(puzzle.pieces, settings)
    elapsed = time.monotonic() - started

    print("[ Solution ]")
    print(format_layout(LayoutResult(rows=puzzle.rows, cols=puzzle.cols, grid=puzzle.solution)))
    print("\n[ Recovered ]")
    print(format_layout(layout))

    print("\n" + "─" * 40)
    if not layout.solved:
        print(f"✗ No complete border found ({elapsed:.2f}s)\n")
        sys.exit(1)
    print(
        f"✅ Solved {layout.rows} x {layout.cols} in {elapsed:.2f}s, "
        f"score {layout.score:.3f}, unfilled cells {len(layout.unfilled_cells)}\n"
    )


if __name__ == "__main__":
    main()
