from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    value_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore
from ...config import EngineConfig
from ...engine.board import Board
from ...engine.game import Game
from ...engine.perft import perft as perft_nodes
from ...engine.pieces import Color
from ...search.service import SearchService


logger = logging.getLogger(__name__)

# Perft grows by roughly 50x per ply; keep requests bounded.
MAX_PERFT_DEPTH = 4


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(
        default=None, description="Start position; default is the initial position"
    )


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="Hex FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Move notation, e.g. PF5-F6 or PE6xD6ep")


class ResignRequest(BaseModel):
    color: Optional[str] = Field(
        default=None, pattern="^[wb]$", description="Resigning side; default is the mover"
    )


class SearchRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1, le=8)
    movetime_ms: Optional[int] = Field(default=None, ge=1)


class SearchResponse(BaseModel):
    best_move: Optional[str]
    score: int
    nodes: int
    depth: int
    time_ms: int
    extensions: int
    iterations: List[Tuple[int, int, Optional[str]]]


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


class PerftResponse(BaseModel):
    nodes: int
    depth: int


class OutcomeModel(BaseModel):
    termination: str
    description: str
    winner: Optional[str]
    score: str
    claimable: bool


class GameState(BaseModel):
    game_id: str
    fen: str
    mover: str
    legal_moves: List[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    draw: bool
    outcome: Optional[OutcomeModel]
    last_move: Optional[str]
    move_history: List[str]
    zobrist: str
    board: str


def create_app(config: Optional[EngineConfig] = None) -> FastAPI:
    config = config or EngineConfig.from_env()
    app = FastAPI(title="Hex Chess Engine API", version="0.1.0")

    config.configure_logging()

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore(claim_draws=config.claim_draws)
    search_service = SearchService(max_extension_plies=config.max_extension_plies)
    app.state.config = config
    app.state.store = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        game = None
        if req is not None and req.fen:
            game = Game.from_fen(req.fen, claim_draws=config.claim_draws)
        game_id = store.create(game)
        created = _require_session(store, game_id).game
        logger.info("created game %s", game_id)
        return CreateGameResponse(game_id=game_id, fen=created.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    def get_state(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        with session.lock:
            return _state(game_id, session.game)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        session = _require_session(store, game_id)
        game = Game.from_fen(req.fen, claim_draws=config.claim_draws)
        with session.lock:
            session.game = game
            return _state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    def make_move(game_id: str, req: MoveRequest) -> GameState:
        session = _require_session(store, game_id)
        with session.lock:
            session.game.apply_notation(req.move)
            return _state(game_id, session.game)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    def undo(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        with session.lock:
            session.game.undo_move()
            return _state(game_id, session.game)

    @app.post("/api/games/{game_id}/resign", response_model=GameState)
    def resign(game_id: str, req: Optional[ResignRequest] = None) -> GameState:
        session = _require_session(store, game_id)
        color = Color.from_fen_char(req.color) if req is not None and req.color else None
        with session.lock:
            session.game.resign(color)
            return _state(game_id, session.game)

    @app.post("/api/games/{game_id}/search", response_model=SearchResponse)
    def search(game_id: str, req: SearchRequest) -> SearchResponse:
        session = _require_session(store, game_id)
        with session.lock:
            res = search_service.search(
                session.game,
                depth=req.depth or config.search_depth,
                movetime_ms=req.movetime_ms,
            )
            geometry = session.game.board.geometry
        return SearchResponse(
            best_move=res.best_move.to_notation(geometry) if res.best_move else None,
            score=res.score,
            nodes=res.nodes,
            depth=res.depth,
            time_ms=res.time_ms,
            extensions=res.extensions,
            iterations=res.iters,
        )

    @app.post("/api/perft", response_model=PerftResponse)
    def perft(req: PerftRequest) -> PerftResponse:
        board = Board.from_fen(req.fen)
        return PerftResponse(nodes=perft_nodes(board, req.depth), depth=req.depth)

    return app


def _require_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = store.session(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _state(game_id: str, game: Game) -> GameState:
    board = game.board
    history = game.move_history_notation()
    outcome = game.outcome()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        mover=board.mover.fen_char(),
        legal_moves=[m.to_notation(board.geometry) for m in game.legal_moves()],
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        draw=game.is_draw(),
        outcome=(
            OutcomeModel(
                termination=outcome.termination.name,
                description=outcome.describe(),
                winner=outcome.winner.fen_char() if outcome.winner is not None else None,
                score=outcome.score_string(),
                claimable=outcome.termination.is_claimable,
            )
            if outcome is not None
            else None
        ),
        last_move=history[-1] if history else None,
        move_history=history,
        zobrist=f"{board.zobrist_hash:016x}",
        board=board.board_string(),
    )
