from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ...engine.game import Game


@dataclass
class GameSession:
    """A game plus the lock serializing moves and searches on it."""

    game: Game
    lock: threading.RLock = field(default_factory=threading.RLock)


class InMemorySessionStore:
    """Thread-safe in-memory store of hex chess games keyed by ``game_id``.

    The store lock guards the mapping only. Work on one game takes that
    session's own lock, so a long search does not block other games.
    """

    def __init__(self, claim_draws: bool = True) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, GameSession] = {}
        self.claim_draws = claim_draws

    def create(self, game: Optional[Game] = None) -> str:
        gid = uuid.uuid4().hex
        if game is None:
            game = Game.new(claim_draws=self.claim_draws)
        with self._lock:
            self._sessions[gid] = GameSession(game)
        return gid

    def session(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(game_id)

    def get(self, game_id: str) -> Optional[Game]:
        s = self.session(game_id)
        return s.game if s is not None else None

    def set(self, game_id: str, game: Game) -> None:
        """Replace the game of an existing session.

        Raises:
            KeyError: If ``game_id`` is unknown.
        """
        with self._lock:
            s = self._sessions[game_id]
        with s.lock:
            s.game = game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
