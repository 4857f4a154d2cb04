from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from src.search.service import MAX_EXTENSION_PLIES, MIN_SEARCH_DEPTH


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class EngineConfig:
    """Runtime settings shared by the server, scripts, and players.

    Replaces process-wide verbosity flags: verbosity is ``log_level`` and is
    applied by entry points through :meth:`configure_logging`.
    """

    search_depth: int = MIN_SEARCH_DEPTH
    max_extension_plies: int = MAX_EXTENSION_PLIES
    claim_draws: bool = True
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    def __post_init__(self) -> None:
        if self.search_depth < 1:
            raise ValueError("search_depth must be >= 1")
        if self.max_extension_plies < 0:
            raise ValueError("max_extension_plies must be >= 0")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"unknown log level: {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build a config from ``HEXCHESS_*`` environment variables.

        Raises:
            ValueError: If a variable holds an unparseable value.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            search_depth=_int(env, "HEXCHESS_SEARCH_DEPTH", defaults.search_depth),
            max_extension_plies=_int(env, "HEXCHESS_MAX_EXTENSION", defaults.max_extension_plies),
            claim_draws=_bool(env, "HEXCHESS_CLAIM_DRAWS", defaults.claim_draws),
            log_level=env.get("HEXCHESS_LOG_LEVEL", defaults.log_level).upper(),
            host=env.get("HEXCHESS_HOST", defaults.host),
            port=_int(env, "HEXCHESS_PORT", defaults.port),
        )

    def configure_logging(self) -> None:
        logging.basicConfig(level=self.log_level.upper())


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")
