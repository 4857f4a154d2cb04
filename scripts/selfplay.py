#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import random
import sys
import time
from typing import Callable, Dict

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from src.config import EngineConfig
from src.engine.board import STARTPOS_FEN
from src.players import (
    ChooseMove,
    advancing_player,
    alpha_beta_player,
    attacking_player,
    random_player,
)
from src.players.match import DEFAULT_MAX_PLIES, run_match


def _factories(config: EngineConfig, rng: random.Random) -> Dict[str, Callable[[], ChooseMove]]:
    return {
        "random": lambda: random_player(rng),
        "advancing": lambda: advancing_player(rng),
        "attacking": lambda: attacking_player(rng),
        "alphabeta": lambda: alpha_beta_player(
            config.search_depth, config.max_extension_plies, config.claim_draws
        ),
    }


def main() -> None:
    config = EngineConfig.from_env()
    names = sorted(_factories(config, random.Random()))
    parser = argparse.ArgumentParser(description="Play a match between two move choosers")
    parser.add_argument("player1", choices=names)
    parser.add_argument("player2", choices=names)
    parser.add_argument("--games", type=int, default=2, help="number of games (default: 2)")
    parser.add_argument("--fen", type=str, default=STARTPOS_FEN, help="start position")
    parser.add_argument("--max-plies", type=int, default=DEFAULT_MAX_PLIES)
    parser.add_argument("--seed", type=int, default=None, help="seed for randomized players")
    args = parser.parse_args()

    config.configure_logging()
    factories = _factories(config, random.Random(args.seed))
    start = time.perf_counter()
    result = run_match(
        factories[args.player1](),
        factories[args.player2](),
        args.games,
        fen=args.fen,
        max_plies=args.max_plies,
        claim_draws=config.claim_draws,
    )
    dt = time.perf_counter() - start
    for i, record in enumerate(result.records, 1):
        res = record.outcome.describe() if record.outcome is not None else "unfinished"
        print(f"game {i}: {record.plies} plies, {res}")
    p1, p2 = result.points
    print(
        f"{args.player1} {p1:g} - {p2:g} {args.player2} "
        f"games={result.games} unfinished={result.unfinished} time_s={dt:.1f}"
    )


if __name__ == "__main__":
    main()
