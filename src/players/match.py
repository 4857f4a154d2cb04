from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from src.engine.board import STARTPOS_FEN
from src.engine.game import Game
from src.engine.outcome import Outcome
from src.engine.pieces import Color

from . import ChooseMove


logger = logging.getLogger(__name__)

DEFAULT_MAX_PLIES = 400


@dataclass
class GameRecord:
    """Result of one played game.

    ``outcome`` is None when the game was cut off at ``max_plies``.
    """

    start_fen: str
    moves: List[str]
    outcome: Optional[Outcome]
    final_fen: str

    @property
    def plies(self) -> int:
        return len(self.moves)

    def score(self, color: Color) -> float:
        if self.outcome is None:
            return 0.0
        return self.outcome.score(color)


@dataclass
class MatchResult:
    points: Tuple[float, float] = (0.0, 0.0)
    unfinished: int = 0
    records: List[GameRecord] = field(default_factory=list)

    @property
    def games(self) -> int:
        return len(self.records)


def play_game(
    white: ChooseMove,
    black: ChooseMove,
    fen: str = STARTPOS_FEN,
    max_plies: int = DEFAULT_MAX_PLIES,
    claim_draws: bool = True,
) -> GameRecord:
    """Play ``white`` against ``black`` from ``fen`` until the game ends.

    Each chosen move is validated through :class:`Game`, so a player handing
    back an illegal move raises ``ValueError``.
    """
    if max_plies < 0:
        raise ValueError("max_plies must be >= 0")
    game = Game.from_fen(fen, claim_draws=claim_draws)
    players = {Color.WHITE: white, Color.BLACK: black}
    while not game.is_over() and len(game.move_stack) < max_plies:
        move = players[game.mover](game.board.copy())
        game.apply_move(move)
    outcome = game.outcome()
    record = GameRecord(
        start_fen=fen,
        moves=game.move_history_notation(),
        outcome=outcome,
        final_fen=game.to_fen(),
    )
    logger.debug(
        "game over after %d plies: %s",
        record.plies,
        outcome.describe() if outcome is not None else "unfinished",
    )
    return record


def run_match(
    player1: ChooseMove,
    player2: ChooseMove,
    games: int,
    fen: str = STARTPOS_FEN,
    max_plies: int = DEFAULT_MAX_PLIES,
    claim_draws: bool = True,
) -> MatchResult:
    """Play ``games`` games, alternating colors; ``player1`` is White first."""
    if games < 0:
        raise ValueError("games must be >= 0")
    p1 = p2 = 0.0
    result = MatchResult()
    for i in range(games):
        p1_white = i % 2 == 0
        white, black = (player1, player2) if p1_white else (player2, player1)
        record = play_game(white, black, fen=fen, max_plies=max_plies, claim_draws=claim_draws)
        result.records.append(record)
        if record.outcome is None:
            result.unfinished += 1
        p1_color = Color.WHITE if p1_white else Color.BLACK
        p1 += record.score(p1_color)
        p2 += record.score(p1_color.opponent)
        logger.info(
            "game %d/%d %s (%d plies) score %.2f-%.2f",
            i + 1,
            games,
            record.outcome.score_string() if record.outcome is not None else "*",
            record.plies,
            p1,
            p2,
        )
    result.points = (p1, p2)
    return result
