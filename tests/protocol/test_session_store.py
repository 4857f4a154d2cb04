from __future__ import annotations

import threading

import pytest

from src.engine.board import STARTPOS_FEN
from src.engine.game import Game
from src.protocol.http.session import InMemorySessionStore


def test_create_get_set_delete() -> None:
    store = InMemorySessionStore()
    gid = store.create()
    game = store.get(gid)
    assert game is not None and game.to_fen() == STARTPOS_FEN
    assert len(store) == 1

    replacement = Game.new()
    replacement.apply_notation("PF5-F6")
    store.set(gid, replacement)
    assert store.get(gid) is replacement

    assert store.delete(gid)
    assert store.get(gid) is None
    assert not store.delete(gid)
    assert len(store) == 0


def test_set_unknown_id_raises() -> None:
    with pytest.raises(KeyError):
        InMemorySessionStore().set("missing", Game.new())


def test_claim_draws_applies_to_new_games() -> None:
    store = InMemorySessionStore(claim_draws=False)
    game = store.get(store.create())
    assert game is not None and game.claim_draws is False


def test_concurrent_creates_get_unique_ids() -> None:
    store = InMemorySessionStore()
    ids: list = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(20):
            gid = store.create(Game.new())
            with lock:
                ids.append(gid)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(set(ids)) == 80
    assert len(store) == 80
