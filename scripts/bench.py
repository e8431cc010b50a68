#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import platform
import sys
import time
from typing import Any, Dict, List

# Ensure src/ is importable when running directly
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC_PATH = os.path.join(REPO_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from bbchess.engine.board import Board


# Ruy Lopez, Breyer line: 40 plies covering castling and file disambiguation
SAN_MOVES: List[str] = [
    "e4", "e5", "Nf3", "Nc6", "Bb5", "a6", "Ba4", "Nf6", "O-O", "Be7",
    "Re1", "b5", "Bb3", "d6", "c3", "O-O", "h3", "Nb8", "d4", "Nbd7",
    "Nbd2", "Bb7", "Bc2", "Re8", "Nf1", "Bf8", "Ng3", "g6", "a4", "c5",
    "d5", "c4", "Bg5", "h6", "Be3", "Nc5", "Qd2", "h5", "Bg5", "Be7",
]


def replay_once(moves: List[str]) -> int:
    board = Board.startpos()
    key_sum = 0
    for san in moves:
        if not board.make_move_san(san):
            raise SystemExit(f"replay failed at {san!r} in position {board.to_fen()}")
        key_sum ^= board.zobrist_key
    return key_sum


def run(iterations: int, moves: List[str]) -> Dict[str, Any]:
    start = time.perf_counter()
    key_sum = 0
    for _ in range(iterations):
        key_sum = replay_once(moves)
    dt = max(time.perf_counter() - start, 1e-9)
    total = iterations * len(moves)
    return {
        "iterations": iterations,
        "plies": len(moves),
        "time_ms": int(dt * 1000),
        "moves_per_s": int(total / dt),
        "final_key": f"{key_sum:016x}",
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay a SAN game repeatedly: make_move_san + zobrist_key per ply")
    parser.add_argument("--iterations", type=int, default=1000, help="Number of replays (default: 1000)")
    parser.add_argument("--json", action="store_true", help="Emit a JSON report")
    args = parser.parse_args()

    report = run(args.iterations, SAN_MOVES)
    report["python"] = platform.python_version()
    if args.json:
        print(json.dumps(report, indent=2))
    else:
        print(
            f"plies={report['plies']} iterations={report['iterations']} time_ms={report['time_ms']} "
            f"moves/s={report['moves_per_s']} key={report['final_key']}"
        )


if __name__ == "__main__":
    main()
